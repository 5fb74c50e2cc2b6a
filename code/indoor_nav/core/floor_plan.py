import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .coordinates import LocalProjection
from .errors import MalformedFloorPlanError
from .geometry import Point, Polygon, distance


class PolygonKind(str, Enum):
    """Classification of floor-plan polygons."""
    BUILDING = 'building'
    ROOM = 'room'
    WALL = 'wall'
    PILLAR = 'pillar'
    TABLE = 'table'
    OBSTACLE = 'obstacle'
    LOCKER = 'locker'
    UNKNOWN = 'unknown'

    @classmethod
    def from_label(cls, label: Optional[str]) -> 'PolygonKind':
        if not label:
            return cls.UNKNOWN
        try:
            return cls(label.strip().lower())
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class ClassifiedPolygon:
    """A polygon tagged with its kind plus the remaining feature properties."""
    polygon: Polygon
    kind: PolygonKind = PolygonKind.UNKNOWN
    properties: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def is_obstacle(self) -> bool:
        return self.kind != PolygonKind.BUILDING

    @property
    def name(self) -> Optional[str]:
        return self.properties.get('name')


@dataclass(frozen=True)
class NamedNode:
    """
    A point of interest (booth, facility, waypoint).

    Equality and hashing use the stable handle only, so two nodes at the same
    position are still distinct graph vertices.
    """
    position: Point = field(compare=False)
    name: str = field(compare=False)
    category: Optional[str] = field(default=None, compare=False)
    location: Optional[str] = field(default=None, compare=False)
    handle: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self):
        object.__setattr__(self, 'position', Point(float(self.position[0]), float(self.position[1])))


@dataclass(frozen=True)
class FloorPlanRecord:
    """One input record: a kind label, a geometry mapping and free-form properties."""
    kind: str
    geometry: Mapping[str, Any]
    properties: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'FloorPlanRecord':
        if not isinstance(data, Mapping):
            raise MalformedFloorPlanError(f"Record must be an object, got {data!r}")
        if not isinstance(data.get('geometry'), Mapping):
            raise MalformedFloorPlanError(f"Record has no 'geometry' object: {data}")
        if not isinstance(data.get('properties') or {}, Mapping):
            raise MalformedFloorPlanError(f"Record 'properties' must be an object: {data}")
        properties = dict(data.get('properties') or {})
        for key in ('name', 'category', 'location', 'id'):
            if key in data and key not in properties:
                properties[key] = data[key]
        kind = data.get('kind') or properties.get('object_type') or 'unknown'
        return cls(kind=kind, geometry=data['geometry'], properties=properties)


def exterior_ring(coordinates: Sequence[Any]) -> Sequence[Any]:
    """Outer ring of Polygon coordinates given either as [ring, *holes] or as a bare ring."""
    if not coordinates:
        raise ValueError("Polygon has no coordinates")
    first = coordinates[0]
    if isinstance(first, (list, tuple)) and first and isinstance(first[0], (list, tuple)):
        return first
    return coordinates


class FloorPlan:
    """
    This class holds the immutable classified geometry and named nodes of one venue level.
    """
    def __init__(self, nodes: Iterable[NamedNode], polygons: Iterable[ClassifiedPolygon] = ()):
        self._nodes = tuple(nodes)
        self._all_polygons = tuple(polygons)
        self._obstacles = tuple(p for p in self._all_polygons if p.is_obstacle)
        self.logger = logging.getLogger(self.__class__.__name__)

        if not self._nodes:
            raise MalformedFloorPlanError("Floor plan has no named nodes to route between")

        self._by_handle = {}
        for node in self._nodes:
            if node.handle in self._by_handle:
                raise MalformedFloorPlanError(f"Duplicate node handle {node.handle!r}")
            self._by_handle[node.handle] = node

        self.logger.debug(f"Floor plan with {len(self._nodes)} nodes, {len(self._all_polygons)} polygons "
                          f"({len(self._obstacles)} obstacles)")

    @classmethod
    def from_records(cls, records: Iterable[Union[FloorPlanRecord, Mapping[str, Any]]],
                     projection: Optional[LocalProjection] = None) -> 'FloorPlan':
        """
        Build a floor plan from (kind, geometry) records.

        Point geometries become named nodes, polygon geometries (exterior ring only)
        become classified polygons. With a projection, coordinates are read as
        (lon, lat) and projected to local metres.
        """
        logger = logging.getLogger(__name__)
        nodes = []
        polygons = []

        def to_point(coord: Sequence[float]) -> Point:
            if projection is not None:
                return projection.to_local(coord[0], coord[1])
            return Point(float(coord[0]), float(coord[1]))

        for index, record in enumerate(records):
            if not isinstance(record, FloorPlanRecord):
                try:
                    record = FloorPlanRecord.from_dict(record)
                except MalformedFloorPlanError as e:
                    raise MalformedFloorPlanError(f"Record {index}: {e}") from e
            geometry_type = record.geometry.get('type')
            coordinates = record.geometry.get('coordinates')
            properties = dict(record.properties)

            if geometry_type == 'Point':
                try:
                    position = to_point(coordinates)
                except (TypeError, IndexError, KeyError, ValueError) as e:
                    raise MalformedFloorPlanError(
                        f"Record {index} has invalid Point coordinates {coordinates!r}") from e
                handle = properties.get('handle') or properties.get('id') or f"node-{index}"
                nodes.append(NamedNode(
                    position=position,
                    name=properties.get('name') or str(handle),
                    category=properties.get('category') or properties.get('booth_type'),
                    location=properties.get('location'),
                    handle=str(handle)
                ))
            elif geometry_type == 'Polygon':
                try:
                    ring = exterior_ring(coordinates)
                    points = tuple(to_point(c) for c in ring)
                except (TypeError, IndexError, KeyError, ValueError) as e:
                    raise MalformedFloorPlanError(
                        f"Record {index} has invalid Polygon coordinates {coordinates!r}") from e
                try:
                    polygon = Polygon(points)
                except ValueError as e:
                    logger.warning(f"Skipping degenerate polygon record {index}: {e}")
                    continue
                polygons.append(ClassifiedPolygon(polygon, PolygonKind.from_label(record.kind), properties))
            else:
                logger.debug(f"Skipping record {index} with unsupported geometry {geometry_type!r}")

        return cls(nodes, polygons)

    def obstacle_polygons(self) -> Tuple[ClassifiedPolygon, ...]:
        """The routing-relevant polygons (everything except the building footprint)."""
        return self._obstacles

    def all_polygons(self) -> Tuple[ClassifiedPolygon, ...]:
        return self._all_polygons

    def nodes(self) -> Tuple[NamedNode, ...]:
        return self._nodes

    def node_by_handle(self, handle: str) -> Optional[NamedNode]:
        return self._by_handle.get(handle)

    def node_named(self, name: str) -> Optional[NamedNode]:
        """Look up a node by name: exact (case-insensitive) match first, then substring."""
        wanted = name.strip().lower()
        for node in self._nodes:
            if node.name.lower() == wanted:
                return node
        matches = self.search(name)
        return matches[0] if matches else None

    def search(self, query: str) -> List[NamedNode]:
        """Case-insensitive substring search over node names"""
        wanted = query.strip().lower()
        return [node for node in self._nodes if wanted in node.name.lower()]

    def nearest_node(self, point: Tuple[float, float]) -> NamedNode:
        """Closest node to a position; first in plan order on ties"""
        return min(self._nodes, key=lambda node: distance(node.position, point))
