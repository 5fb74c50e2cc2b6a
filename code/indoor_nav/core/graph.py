import logging
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import networkx as nx
from igraph import Graph
from joblib import Parallel, delayed

from .errors import EmptyObstacleSetError, InvalidNodeError
from .floor_plan import ClassifiedPolygon, FloorPlan, NamedNode
from .geometry import SIDE_OFFSET, BoundingBox, Point, Polygon, distance, inflate, point_strictly_inside, segment_blocked


VertexHandle = int
Neighbor = Tuple[VertexHandle, float]


class GraphStrategy(str, Enum):
    """How permanent graph vertices are chosen."""
    WAYPOINT = 'waypoint'
    OBSTACLE_VERTEX = 'obstacle_vertex'


def is_segment_clear(a: Point, b: Point, obstacles: Sequence[Polygon]) -> bool:
    """
    True if segment a-b passes through no obstacle interior.

    Obstacles near the segment are tested together, so a wall split into
    touching pieces still blocks a segment running along the seam.
    """
    segment_box = BoundingBox.from_points((a, b))
    nearby = [p for p in obstacles if segment_box.intersects(p.bounding_box, margin=2 * SIDE_OFFSET)]
    return not nearby or not segment_blocked(a, b, nearby)


def _visible_from(index: int, points: Sequence[Point], obstacles: Sequence[Polygon]) -> List[Tuple[int, int, float]]:
    """Edges from points[index] to every later point it can see."""
    origin = points[index]
    edges = []
    for other in range(index + 1, len(points)):
        if is_segment_clear(origin, points[other], obstacles):
            edges.append((index, other, distance(origin, points[other])))
    return edges


class ObstacleGraph:
    """
    This class holds the permanent visibility graph built from a floor plan's obstacles.

    The permanent part lives in an undirected igraph Graph and is read-only after
    construction. Per-query start/end vertices are spliced in through a QueryScope
    (see scratch()), which keeps its own temporary vertices and edges so queries
    never touch shared state.
    """
    def __init__(self,
                 nodes: Sequence[NamedNode],
                 obstacles: Sequence[ClassifiedPolygon],
                 buffer_radius: float = 0.0,
                 strategy: GraphStrategy = GraphStrategy.WAYPOINT,
                 n_jobs: int = 1):
        self.logger = logging.getLogger(self.__class__.__name__)
        if buffer_radius < 0:
            raise ValueError(f"buffer_radius must be non-negative, got {buffer_radius}")
        strategy = GraphStrategy(strategy)
        if strategy == GraphStrategy.OBSTACLE_VERTEX and not obstacles and not nodes:
            raise EmptyObstacleSetError("Obstacle-vertex graph requested with no obstacles and no nodes")

        self.buffer_radius = buffer_radius
        self.strategy = strategy
        self.n_jobs = n_jobs
        # Non-owning reference; rebuilding the floor plan invalidates this graph
        self.source_obstacles = tuple(obstacles)
        self.obstacles = tuple(inflate(o.polygon, buffer_radius) for o in self.source_obstacles)

        self.igraph = None
        self.node_to_vid: Dict[NamedNode, VertexHandle] = {}
        self.vid_to_point: Dict[VertexHandle, Point] = {}
        self._incident: List[List[Neighbor]] = []
        self._create_graph(nodes)

    @classmethod
    def build(cls, floor_plan: FloorPlan, buffer_radius: float = 0.0,
              strategy: GraphStrategy = GraphStrategy.WAYPOINT, n_jobs: int = 1) -> 'ObstacleGraph':
        """Build the graph for a floor plan's nodes and obstacle polygons."""
        return cls(floor_plan.nodes(), floor_plan.obstacle_polygons(), buffer_radius, strategy, n_jobs)

    @classmethod
    def from_geometry(cls, nodes: Iterable[NamedNode], obstacles: Iterable[Union[ClassifiedPolygon, Polygon]],
                      buffer_radius: float = 0.0, strategy: GraphStrategy = GraphStrategy.WAYPOINT,
                      n_jobs: int = 1) -> 'ObstacleGraph':
        """Build from a raw node set and obstacle polygons (no floor plan)."""
        classified = [o if isinstance(o, ClassifiedPolygon) else ClassifiedPolygon(o) for o in obstacles]
        return cls(list(nodes), classified, buffer_radius, strategy, n_jobs)

    @classmethod
    def from_config(cls, floor_plan: FloorPlan, graph_config) -> 'ObstacleGraph':
        """Build using a cfg.GraphConfig section"""
        return cls.build(floor_plan, graph_config.buffer_radius, GraphStrategy(graph_config.strategy),
                         graph_config.n_jobs)

    def _create_graph(self, nodes: Sequence[NamedNode]) -> None:
        """Create the igraph representation: vertices first, then visibility edges."""
        self.igraph = Graph(directed=False)

        all_vertices_to_add = []
        for node in nodes:
            if node in self.node_to_vid:
                self.logger.warning(f"Node {node.name!r} listed twice; keeping the first")
                continue
            self.node_to_vid[node] = len(all_vertices_to_add)
            all_vertices_to_add.append({'coords': node.position, 'node': node, 'is_corner': False})

        if self.strategy == GraphStrategy.OBSTACLE_VERTEX:
            seen_corners = set()
            for polygon in self.obstacles:
                for corner in polygon.convex_vertices():
                    if corner in seen_corners:
                        continue
                    seen_corners.add(corner)
                    if any(point_strictly_inside(corner, other) for other in self.obstacles if other is not polygon):
                        continue
                    all_vertices_to_add.append({'coords': corner, 'node': None, 'is_corner': True})

        # Batch add vertices
        self.igraph.add_vertices(len(all_vertices_to_add))
        for i, attrs in enumerate(all_vertices_to_add):
            self.igraph.vs[i]['coords'] = attrs['coords']
            self.igraph.vs[i]['node'] = attrs['node']
            self.igraph.vs[i]['is_corner'] = attrs['is_corner']
            self.vid_to_point[i] = attrs['coords']

        # Batch add edges; row order is kept so the edge list is deterministic
        points = [attrs['coords'] for attrs in all_vertices_to_add]
        rows = Parallel(n_jobs=self.n_jobs)(
            delayed(_visible_from)(i, points, self.obstacles) for i in range(len(points))
        )
        edges = [edge for row in rows for edge in row]
        if edges:
            self.igraph.add_edges([(u, v) for u, v, _ in edges])
            self.igraph.es['weight'] = [w for _, _, w in edges]

        self._incident = self._read_incidence()

        self.logger.info(f"Built {self.strategy.value} graph: {self.vertex_count} vertices, "
                         f"{self.edge_count} edges, {len(self.obstacles)} obstacles "
                         f"(buffer {self.buffer_radius})")

    def _read_incidence(self) -> List[List[Neighbor]]:
        """Per-vertex (neighbor, weight) lists read from the igraph incidence list, sorted by neighbor."""
        endpoints = self.igraph.get_edgelist()
        weights = self.igraph.es['weight'] if self.igraph.ecount() else []
        incident = []
        for vid, eids in enumerate(self.igraph.get_inclist()):
            neighbors = []
            for eid in eids:
                source, target = endpoints[eid]
                neighbors.append((target if source == vid else source, weights[eid]))
            neighbors.sort()
            incident.append(neighbors)
        return incident

    # Graph statistics
    @property
    def vertex_count(self) -> int:
        return self.igraph.vcount()

    @property
    def edge_count(self) -> int:
        return self.igraph.ecount()

    def edge_list(self) -> List[Tuple[VertexHandle, VertexHandle, float]]:
        """Permanent edges as (u, v, weight) with u < v"""
        return [(e.source, e.target, e['weight']) for e in self.igraph.es]

    def to_networkx(self) -> nx.Graph:
        """Export the permanent graph; vertex ids are kept as node keys."""
        graph = nx.Graph()
        for vid in range(self.vertex_count):
            vertex = self.igraph.vs[vid]
            graph.add_node(vid, coords=vertex['coords'], node=vertex['node'], is_corner=vertex['is_corner'])
        graph.add_weighted_edges_from(self.edge_list())
        return graph

    def is_visible(self, a: Point, b: Point) -> bool:
        """Check line of sight between two points against the (inflated) obstacles"""
        return is_segment_clear(a, b, self.obstacles)

    # Vertex queries used by the planner
    def has_vertex(self, vid: VertexHandle) -> bool:
        return 0 <= vid < self.vertex_count

    def vertex_of(self, node: Union[NamedNode, VertexHandle]) -> VertexHandle:
        if isinstance(node, NamedNode):
            vid = self.node_to_vid.get(node)
            if vid is None:
                raise InvalidNodeError(f"Node {node.name!r} is not in the graph")
            return vid
        if not self.has_vertex(node):
            raise InvalidNodeError(f"Vertex {node} is not in the graph")
        return node

    def point_of(self, vid: VertexHandle) -> Point:
        return self.vid_to_point[vid]

    def node_of(self, vid: VertexHandle) -> Optional[NamedNode]:
        return self.igraph.vs[vid]['node']

    def neighbors(self, vid: VertexHandle) -> List[Neighbor]:
        return self._incident[vid]

    def scratch(self) -> 'QueryScope':
        """Open a per-query scope for temporary vertices."""
        return QueryScope(self)


class QueryScope:
    """
    This class holds the temporary vertices and edges of a single query.

    Temporary vertex handles continue after the permanent ones. Nothing here is
    written back to the permanent graph; leaving the context removes whatever
    temporaries are still present.
    """
    def __init__(self, graph: ObstacleGraph):
        self.graph = graph
        self.logger = logging.getLogger(self.__class__.__name__)
        self._next_vid = graph.vertex_count
        self._points: Dict[VertexHandle, Point] = {}
        self._nodes: Dict[VertexHandle, NamedNode] = {}
        self._node_to_vid: Dict[NamedNode, VertexHandle] = {}
        self._extra_edges: Dict[VertexHandle, Dict[VertexHandle, float]] = {}

    def __enter__(self) -> 'QueryScope':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        for vid in list(self._points):
            self.remove_temporary(vid)

    @property
    def temporary_count(self) -> int:
        return len(self._points)

    def add_temporary(self, node: NamedNode) -> VertexHandle:
        """Add a temporary, unconnected vertex for a node."""
        if node in self._node_to_vid:
            return self._node_to_vid[node]
        vid = self._next_vid
        self._next_vid += 1
        self._points[vid] = node.position
        self._nodes[vid] = node
        self._node_to_vid[node] = vid
        self._extra_edges[vid] = {}
        return vid

    def connect_temporary(self, vid: VertexHandle) -> int:
        """Link a temporary vertex to every vertex it can see; returns the number of new edges."""
        if vid not in self._points:
            raise InvalidNodeError(f"Vertex {vid} is not a temporary vertex of this query")
        origin = self._points[vid]
        candidates = list(range(self.graph.vertex_count)) + [t for t in self._points if t != vid]
        added = 0
        for other in candidates:
            if other in self._extra_edges[vid]:
                continue
            target = self.point_of(other)
            if self.graph.is_visible(origin, target):
                weight = distance(origin, target)
                self._extra_edges[vid][other] = weight
                self._extra_edges.setdefault(other, {})[vid] = weight
                added += 1
        self.logger.debug(f"Connected temporary vertex {vid} with {added} edges")
        return added

    def remove_temporary(self, vid: VertexHandle) -> None:
        """Remove a temporary vertex and all its edges."""
        if vid not in self._points:
            raise InvalidNodeError(f"Vertex {vid} is not a temporary vertex of this query")
        for other in self._extra_edges.pop(vid):
            links = self._extra_edges.get(other)
            if links is not None:
                links.pop(vid, None)
                if not links and other not in self._points:
                    del self._extra_edges[other]
        node = self._nodes.pop(vid)
        del self._node_to_vid[node]
        del self._points[vid]

    def ensure_vertex(self, node: NamedNode) -> VertexHandle:
        """Return the node's permanent vertex, or splice it in as a connected temporary."""
        vid = self.graph.node_to_vid.get(node)
        if vid is not None:
            return vid
        if node in self._node_to_vid:
            return self._node_to_vid[node]
        vid = self.add_temporary(node)
        self.connect_temporary(vid)
        return vid

    # Same vertex interface as ObstacleGraph
    def has_vertex(self, vid: VertexHandle) -> bool:
        return vid in self._points or self.graph.has_vertex(vid)

    def vertex_of(self, node: Union[NamedNode, VertexHandle]) -> VertexHandle:
        if isinstance(node, NamedNode):
            vid = self._node_to_vid.get(node)
            if vid is None:
                vid = self.graph.node_to_vid.get(node)
            if vid is None:
                raise InvalidNodeError(f"Node {node.name!r} is not in the graph or its temporaries")
            return vid
        if not self.has_vertex(node):
            raise InvalidNodeError(f"Vertex {node} is not in the graph or its temporaries")
        return node

    def point_of(self, vid: VertexHandle) -> Point:
        if vid in self._points:
            return self._points[vid]
        return self.graph.point_of(vid)

    def node_of(self, vid: VertexHandle) -> Optional[NamedNode]:
        if vid in self._nodes:
            return self._nodes[vid]
        return self.graph.node_of(vid)

    def neighbors(self, vid: VertexHandle) -> List[Neighbor]:
        extra = self._extra_edges.get(vid)
        if vid in self._points:
            return sorted(extra.items())
        base = self.graph.neighbors(vid)
        if not extra:
            return base
        return sorted(base + list(extra.items()))


def build_obstacle_graph(floor_plan: FloorPlan,
                         buffer_radius: float = 0.0,
                         strategy: GraphStrategy = GraphStrategy.WAYPOINT,
                         n_jobs: int = 1) -> ObstacleGraph:
    """
    Build a reusable obstacle graph for a floor plan.

    Deterministic for identical inputs: vertices are numbered nodes-first in plan
    order, then obstacle corners in obstacle order.
    """
    return ObstacleGraph.build(floor_plan, buffer_radius, strategy, n_jobs)
