"""
Core navigation engine.

This module provides:
- geometry: Points, polygons and planar predicates
- FloorPlan: Classified polygons and named nodes of one venue level
- ObstacleGraph: Visibility graph built from obstacle geometry
- PathPlanner: A* search producing RoutePath results
- NavigationSession: Stateful start/end selection with replanning
- LocationFeed: Process-wide user location updates
"""

from .errors import NavigationError, MalformedFloorPlanError, EmptyObstacleSetError, InvalidNodeError
from .geometry import (
    Point,
    Polygon,
    BoundingBox,
    bounding_box,
    segments_intersect,
    distance,
    point_in_polygon,
    segment_blocked,
    segment_crosses_polygon,
    inflate
)
from .coordinates import LocalProjection
from .floor_plan import PolygonKind, ClassifiedPolygon, NamedNode, FloorPlanRecord, FloorPlan
from .graph import GraphStrategy, ObstacleGraph, QueryScope, build_obstacle_graph
from .planning import RoutePath, PathPlanner, plan, plan_route
from .session import SessionState, WatchedValue, NavigationSession
from .location import LocationFeed, get_location_feed

__all__ = [
    # Errors
    'NavigationError',
    'MalformedFloorPlanError',
    'EmptyObstacleSetError',
    'InvalidNodeError',

    # Geometry
    'Point',
    'Polygon',
    'BoundingBox',
    'bounding_box',
    'segments_intersect',
    'distance',
    'point_in_polygon',
    'segment_blocked',
    'segment_crosses_polygon',
    'inflate',
    'LocalProjection',

    # Floor plan
    'PolygonKind',
    'ClassifiedPolygon',
    'NamedNode',
    'FloorPlanRecord',
    'FloorPlan',

    # Graph and planning
    'GraphStrategy',
    'ObstacleGraph',
    'QueryScope',
    'build_obstacle_graph',
    'RoutePath',
    'PathPlanner',
    'plan',
    'plan_route',

    # Session
    'SessionState',
    'WatchedValue',
    'NavigationSession',
    'LocationFeed',
    'get_location_feed'
]
