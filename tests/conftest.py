"""
Pytest configuration and fixtures for navigation engine tests.

Fixtures provide common floor plans:
- A single square wall with nodes west, east and north of it
- An open plan without obstacles
- A records list in the JSON input format
"""

import pytest

from indoor_nav.core import ClassifiedPolygon, FloorPlan, NamedNode, Polygon, PolygonKind


def square(x0, y0, x1, y1):
    return Polygon(((x0, y0), (x0, y1), (x1, y1), (x1, y0)))


# =============================================================================
# Floor Plan Fixtures
# =============================================================================

@pytest.fixture
def west():
    return NamedNode((-5, 5), 'West Entrance', category='entrance', location='Hall A', handle='west')


@pytest.fixture
def east():
    return NamedNode((15, 5), 'East Booth', category='booth', location='Hall A', handle='east')


@pytest.fixture
def north():
    return NamedNode((5, 15), 'North Waypoint', handle='north')


@pytest.fixture
def wall():
    return ClassifiedPolygon(square(0, 0, 10, 10), PolygonKind.WALL, {'name': 'Wall'})


@pytest.fixture
def building():
    return ClassifiedPolygon(square(-20, -20, 30, 30), PolygonKind.BUILDING, {'name': 'Building'})


@pytest.fixture
def wall_plan(west, east, north, wall, building):
    """Square wall between west and east, a detour waypoint to the north, inside a building."""
    return FloorPlan([west, east, north], [building, wall])


@pytest.fixture
def blocked_plan(west, east, wall):
    """West and east with the wall between them and no way around."""
    return FloorPlan([west, east], [wall])


@pytest.fixture
def open_plan():
    return FloorPlan([NamedNode((0, 0), 'Lab', handle='lab'), NamedNode((3, 4), 'Pantry', handle='pantry')])


@pytest.fixture
def venue_records():
    """Floor plan records as they appear in a JSON input file."""
    return [
        {'kind': 'building', 'properties': {'name': 'Building'},
         'geometry': {'type': 'Polygon', 'coordinates': [[[-20, -20], [-20, 30], [30, 30], [30, -20], [-20, -20]]]}},
        {'kind': 'wall', 'properties': {'name': 'Wall'},
         'geometry': {'type': 'Polygon', 'coordinates': [[[0, 0], [0, 10], [10, 10], [10, 0], [0, 0]]]}},
        {'kind': 'point', 'properties': {'name': 'West Entrance', 'id': 'west', 'location': 'Hall A'},
         'geometry': {'type': 'Point', 'coordinates': [-5, 5]}},
        {'kind': 'point', 'properties': {'name': 'East Booth', 'id': 'east', 'booth_type': 'booth'},
         'geometry': {'type': 'Point', 'coordinates': [15, 5]}},
        {'kind': 'point', 'properties': {'name': 'North Waypoint', 'id': 'north'},
         'geometry': {'type': 'Point', 'coordinates': [5, 15]}},
        {'kind': 'route', 'properties': {'name': 'Corridor'},
         'geometry': {'type': 'LineString', 'coordinates': [[0, 20], [10, 20]]}},
    ]
