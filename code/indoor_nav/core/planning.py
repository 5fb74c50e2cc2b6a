import heapq
import itertools
import logging
from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Tuple, Union

from .floor_plan import NamedNode
from .geometry import Point, distance
from .graph import ObstacleGraph, QueryScope, VertexHandle


GraphView = Union[ObstacleGraph, QueryScope]


@dataclass(frozen=True)
class RoutePath:
    """
    An ordered route, or the explicit "no path found" result.

    nodes holds the named node behind each point, or None for obstacle corners.
    A not-found route is falsy and empty.
    """
    points: Tuple[Point, ...] = ()
    vertices: Tuple[VertexHandle, ...] = ()
    nodes: Tuple[Optional[NamedNode], ...] = ()
    found: bool = True

    @classmethod
    def none(cls) -> 'RoutePath':
        return cls(found=False)

    def __bool__(self) -> bool:
        return self.found

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self.points)

    @property
    def length(self) -> float:
        """Total travelled distance along the route"""
        return sum(distance(a, b) for a, b in zip(self.points, self.points[1:]))

    def reversed(self) -> 'RoutePath':
        if not self.found:
            return self
        return RoutePath(self.points[::-1], self.vertices[::-1], self.nodes[::-1], True)


class PathPlanner:
    """
    This class computes lowest-cost routes over an obstacle graph with A*.
    """
    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    def plan(self, graph: GraphView,
             start: Union[NamedNode, VertexHandle],
             end: Union[NamedNode, VertexHandle]) -> RoutePath:
        """
        Run A* from start to end over graph (an ObstacleGraph or a QueryScope).

        Open-set ties on f-cost go to the earliest insertion. Returns RoutePath.none()
        when end is unreachable; raises InvalidNodeError if start or end is not in graph.
        """
        start_vid = graph.vertex_of(start)
        end_vid = graph.vertex_of(end)
        end_point = graph.point_of(end_vid)

        g_cost: Dict[VertexHandle, float] = {start_vid: 0.0}
        parent: Dict[VertexHandle, VertexHandle] = {}
        closed = set()
        counter = itertools.count()
        open_heap = [(distance(graph.point_of(start_vid), end_point), next(counter), start_vid)]

        while open_heap:
            f, _, current = heapq.heappop(open_heap)
            if current in closed:
                continue
            closed.add(current)

            if current == end_vid:
                route = self._reconstruct(graph, parent, start_vid, end_vid)
                self.logger.debug(f"Route found: {len(route)} points, length {route.length:.3f}, "
                                  f"{len(closed)} vertices expanded")
                return route

            for neighbor, weight in graph.neighbors(current):
                if neighbor in closed:
                    continue
                candidate = g_cost[current] + weight
                if neighbor not in g_cost or candidate < g_cost[neighbor]:
                    g_cost[neighbor] = candidate
                    parent[neighbor] = current
                    h = distance(graph.point_of(neighbor), end_point)
                    heapq.heappush(open_heap, (candidate + h, next(counter), neighbor))

        self.logger.debug(f"No route between vertices {start_vid} and {end_vid} ({len(closed)} expanded)")
        return RoutePath.none()

    @staticmethod
    def _reconstruct(graph: GraphView, parent: Dict[VertexHandle, VertexHandle],
                     start_vid: VertexHandle, end_vid: VertexHandle) -> RoutePath:
        vids = [end_vid]
        while vids[-1] != start_vid:
            vids.append(parent[vids[-1]])
        vids.reverse()
        return RoutePath(
            points=tuple(graph.point_of(v) for v in vids),
            vertices=tuple(vids),
            nodes=tuple(graph.node_of(v) for v in vids),
            found=True
        )

    def route(self, graph: ObstacleGraph, start: NamedNode, end: NamedNode) -> RoutePath:
        """Splice start/end into a private query scope, plan, and drop the temporaries."""
        with graph.scratch() as scope:
            scope.ensure_vertex(start)
            scope.ensure_vertex(end)
            return self.plan(scope, start, end)


_default_planner = PathPlanner()


def plan(graph: GraphView, start: Union[NamedNode, VertexHandle], end: Union[NamedNode, VertexHandle]) -> RoutePath:
    """Shortest obstacle-avoiding route between two vertices of graph."""
    return _default_planner.plan(graph, start, end)


def plan_route(graph: ObstacleGraph, start: NamedNode, end: NamedNode) -> RoutePath:
    """Shortest route between two nodes, splicing them in as temporaries when needed."""
    return _default_planner.route(graph, start, end)
