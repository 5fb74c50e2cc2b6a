"""
Indoor navigation engine: obstacle-aware routing over venue floor plans.
"""

from .core import (
    FloorPlan,
    NamedNode,
    ObstacleGraph,
    GraphStrategy,
    PathPlanner,
    RoutePath,
    NavigationSession,
    build_obstacle_graph,
    plan
)
from .cfg import NavigationConfig

__version__ = '0.1.0'

__all__ = [
    'FloorPlan',
    'NamedNode',
    'ObstacleGraph',
    'GraphStrategy',
    'PathPlanner',
    'RoutePath',
    'NavigationSession',
    'build_obstacle_graph',
    'plan',
    'NavigationConfig'
]
