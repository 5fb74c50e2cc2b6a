"""
Error types raised by the navigation engine.

A route that cannot be found is not an error; see RoutePath.none().
"""


class NavigationError(ValueError):
    """Base class for all navigation engine errors."""


class MalformedFloorPlanError(NavigationError):
    """Raised when a floor plan cannot be routed (e.g. it has no named nodes)."""


class EmptyObstacleSetError(NavigationError):
    """Raised when a graph build has nothing to build from."""


class InvalidNodeError(NavigationError):
    """Raised when a plan is requested for a node that is not in the graph."""
