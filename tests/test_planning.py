"""Tests for A* route planning over obstacle graphs."""

import math
import random

import networkx as nx
import pytest

from indoor_nav.core import (
    ClassifiedPolygon,
    FloorPlan,
    GraphStrategy,
    InvalidNodeError,
    NamedNode,
    ObstacleGraph,
    PathPlanner,
    PolygonKind,
    RoutePath,
    build_obstacle_graph,
    plan,
    plan_route,
)
from indoor_nav.core.geometry import point_in_polygon

from conftest import square


@pytest.fixture
def planner():
    return PathPlanner()


def route_length(route):
    return route.length if route.found else math.inf


class TestRoutePath:

    def test_none_is_falsy_and_empty(self):
        route = RoutePath.none()
        assert not route
        assert len(route) == 0
        assert list(route) == []
        assert route.reversed() is route

    def test_length(self):
        route = RoutePath(points=((0, 0), (3, 4), (3, 10)), vertices=(0, 1, 2), nodes=(None, None, None))
        assert route
        assert route.length == pytest.approx(11.0)
        assert route.reversed().points == ((3, 10), (3, 4), (0, 0))


class TestEndToEnd:

    def test_waypoint_detour(self, wall_plan, west, east, north, planner):
        graph = build_obstacle_graph(wall_plan, strategy=GraphStrategy.WAYPOINT)
        route = planner.route(graph, west, east)
        assert route.nodes == (west, north, east)
        assert route.points == (west.position, north.position, east.position)
        assert route.length == pytest.approx(2 * math.sqrt(200))

    def test_obstacle_vertex_hugs_the_wall(self, wall_plan, west, east, planner):
        graph = build_obstacle_graph(wall_plan, strategy=GraphStrategy.OBSTACLE_VERTEX)
        route = planner.route(graph, west, east)
        assert route.length == pytest.approx(10 + 2 * math.sqrt(50))
        assert len(route) == 4
        assert route.nodes[0] is west and route.nodes[-1] is east
        assert route.nodes[1] is None and route.nodes[2] is None

    def test_buffer_keeps_clearance(self, wall_plan, west, east, planner):
        graph = build_obstacle_graph(wall_plan, buffer_radius=1.0, strategy=GraphStrategy.OBSTACLE_VERTEX)
        route = planner.route(graph, west, east)
        assert route.length == pytest.approx(12 + 2 * math.sqrt(52))
        for a, b in zip(route.points, route.points[1:]):
            assert graph.is_visible(a, b)

    def test_open_plan_is_a_straight_line(self, open_plan):
        graph = build_obstacle_graph(open_plan)
        lab, pantry = open_plan.nodes()
        route = plan(graph, lab, pantry)
        assert route.points == (lab.position, pantry.position)
        assert route.length == pytest.approx(5.0)

    def test_start_equals_end(self, wall_plan, west):
        graph = build_obstacle_graph(wall_plan)
        route = plan_route(graph, west, west)
        assert route.found
        assert route.points == (west.position,)
        assert route.length == 0


class TestUnreachable:

    def test_blocked_line_of_sight(self, blocked_plan, west, east, planner):
        graph = build_obstacle_graph(blocked_plan, strategy=GraphStrategy.WAYPOINT)
        route = planner.route(graph, west, east)
        assert route == RoutePath.none()
        assert not route

    def test_moving_the_endpoints_clears_the_wall(self, blocked_plan, planner):
        graph = build_obstacle_graph(blocked_plan, strategy=GraphStrategy.WAYPOINT)
        start = NamedNode((-5, 12), 'Upper West')
        end = NamedNode((15, 12), 'Upper East')
        route = planner.route(graph, start, end)
        assert route.points == (start.position, end.position)
        assert route.length == pytest.approx(20.0)

    def test_buffer_closing_the_gap(self, wall_plan, west, east, planner):
        graph = build_obstacle_graph(wall_plan, buffer_radius=0.5, strategy=GraphStrategy.WAYPOINT)
        assert not planner.route(graph, west, east)

    def test_endpoint_inside_inflated_obstacle_is_isolated(self, wall_plan, west, planner):
        graph = build_obstacle_graph(wall_plan, buffer_radius=0.5, strategy=GraphStrategy.OBSTACLE_VERTEX)
        hugging = NamedNode((10.2, 5), 'Against The Wall')
        assert not planner.route(graph, west, hugging)

    def test_seam_between_touching_walls_is_solid(self, planner):
        south = NamedNode((5, -5), 'South', handle='south')
        north = NamedNode((5, 15), 'North', handle='north')
        halves = [ClassifiedPolygon(square(0, 0, 5, 10), PolygonKind.WALL),
                  ClassifiedPolygon(square(5, 0, 10, 10), PolygonKind.WALL)]
        floor_plan = FloorPlan([south, north], halves)

        waypoint = build_obstacle_graph(floor_plan, strategy=GraphStrategy.WAYPOINT)
        assert not planner.route(waypoint, south, north)

        corners = build_obstacle_graph(floor_plan, strategy=GraphStrategy.OBSTACLE_VERTEX)
        route = planner.route(corners, south, north)
        assert route.length == pytest.approx(10 + 2 * math.sqrt(50))
        assert all(p.x != 5 for p in route.points[1:-1])

    def test_plan_rejects_nodes_outside_the_graph(self, wall_plan, west, planner):
        graph = build_obstacle_graph(wall_plan)
        with pytest.raises(InvalidNodeError):
            planner.plan(graph, west, NamedNode((20, 20), 'Corner Office'))


class TestProperties:

    def test_deterministic(self, wall_plan, west, east, planner):
        graph = build_obstacle_graph(wall_plan, buffer_radius=0.5, strategy=GraphStrategy.OBSTACLE_VERTEX)
        first = planner.route(graph, west, east)
        assert all(planner.route(graph, west, east) == first for _ in range(3))

    def test_symmetric(self, wall_plan, west, east, planner):
        graph = build_obstacle_graph(wall_plan, strategy=GraphStrategy.WAYPOINT)
        there = planner.route(graph, west, east)
        back = planner.route(graph, east, west)
        assert back.points == there.reversed().points
        assert back.length == pytest.approx(there.length)

    def test_repeated_queries_leave_the_graph_untouched(self, wall_plan, planner):
        graph = build_obstacle_graph(wall_plan, strategy=GraphStrategy.OBSTACLE_VERTEX)
        vertices, edges = graph.vertex_count, graph.edge_list()
        for i in range(5):
            planner.route(graph, NamedNode((-5, -5 - i), f'Visitor {i}'), NamedNode((20, 20 + i), 'Exit'))
        assert graph.vertex_count == vertices
        assert graph.edge_list() == edges

    def test_larger_buffer_never_shortens_the_route(self, wall_plan, west, east, planner):
        lengths = []
        for radius in (0.0, 0.5, 1.0, 2.0):
            graph = build_obstacle_graph(wall_plan, buffer_radius=radius, strategy=GraphStrategy.OBSTACLE_VERTEX)
            lengths.append(route_length(planner.route(graph, west, east)))
        assert lengths == sorted(lengths)

    def test_matches_dijkstra_on_random_layout(self, planner):
        rng = random.Random(7)
        obstacles = []
        for i in range(3):
            for j in range(3):
                half = rng.uniform(1.0, 3.5)
                cx, cy = 10 * i + 5, 10 * j + 5
                obstacles.append(square(cx - half, cy - half, cx + half, cy + half))

        nodes = []
        while len(nodes) < 8:
            p = (rng.uniform(-2, 32), rng.uniform(-2, 32))
            if not any(point_in_polygon(p, o) for o in obstacles):
                nodes.append(NamedNode(p, f'Node {len(nodes)}'))

        graph = ObstacleGraph.from_geometry(nodes, obstacles, strategy=GraphStrategy.OBSTACLE_VERTEX)
        reference = graph.to_networkx()
        for a in range(len(nodes)):
            for b in range(a + 1, len(nodes)):
                route = planner.plan(graph, nodes[a], nodes[b])
                try:
                    expected = nx.dijkstra_path_length(reference, a, b, weight='weight')
                except nx.NetworkXNoPath:
                    assert not route
                    continue
                assert route.length == pytest.approx(expected)
                for p, q in zip(route.points, route.points[1:]):
                    assert graph.is_visible(p, q)

    def test_route_on_plan_built_from_records(self, venue_records, planner):
        floor_plan = FloorPlan.from_records(venue_records)
        graph = build_obstacle_graph(floor_plan, strategy=GraphStrategy.WAYPOINT)
        route = planner.route(graph, floor_plan.node_named('west'), floor_plan.node_named('east'))
        assert [n.handle for n in route.nodes] == ['west', 'north', 'east']
