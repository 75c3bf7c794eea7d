"""Scene graph: nodes, walls and fixtures addressed by opaque identifiers."""

from __future__ import annotations

import logging
import numbers
import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Collection, Dict, Iterator, List, Mapping, Optional, Tuple

import numpy as np
from scipy.spatial import cKDTree

from .config import MIN_WALL_DIMENSION_MM
from .vec import Point

logger = logging.getLogger(__name__)

NodeId = str
WallId = str
FixtureId = str


class SceneValidationError(ValueError):
    """Raised when scene data handed to the core is malformed."""


@dataclass(frozen=True)
class Node:
    id: NodeId
    x: float
    y: float
    locked: bool = False

    @property
    def position(self) -> Point:
        return (self.x, self.y)

    def moved_to(self, position: Point) -> "Node":
        return replace(self, x=float(position[0]), y=float(position[1]))


@dataclass(frozen=True)
class Wall:
    """Thick segment between two nodes; dimensions are in millimetres."""

    id: WallId
    node_a_id: NodeId
    node_b_id: NodeId
    thickness_mm: float
    height_mm: float
    raise_from_floor_mm: float = 0.0

    @property
    def node_ids(self) -> Tuple[NodeId, NodeId]:
        return (self.node_a_id, self.node_b_id)

    def other_node_id(self, node_id: NodeId) -> NodeId:
        if node_id == self.node_a_id:
            return self.node_b_id
        if node_id == self.node_b_id:
            return self.node_a_id
        raise KeyError(f"Node '{node_id}' is not an endpoint of wall '{self.id}'")


@dataclass(frozen=True)
class Fixture:
    """Placeable item; only its position matters to the interaction core."""

    id: FixtureId
    schema_id: str
    position: Point
    rotation_rad: float = 0.0
    params: Dict[str, Any] = field(default_factory=dict, compare=False)

    def moved_to(self, position: Point) -> "Fixture":
        return replace(self, position=(float(position[0]), float(position[1])))


class NodeIndex:
    """Spatial index over node positions used for snap and merge queries."""

    def __init__(self, nodes: Mapping[NodeId, Node]):
        self.ids: List[NodeId] = list(nodes)
        if self.ids:
            self.coords = np.array([[node.x, node.y] for node in nodes.values()], dtype=float)
            self._tree: Optional[cKDTree] = cKDTree(self.coords)
        else:
            self.coords = np.zeros((0, 2), dtype=float)
            self._tree = None

    def __len__(self) -> int:
        return len(self.ids)

    def query_radius(
        self,
        point: Point,
        radius: float,
        exclude: Collection[str] = (),
    ) -> List[Tuple[NodeId, float]]:
        """Return ``(node_id, distance)`` pairs within ``radius`` (inclusive), nearest first."""

        if self._tree is None or radius < 0.0:
            return []
        query = np.asarray(point, dtype=float)
        hits = self._tree.query_ball_point(query, radius)
        found: List[Tuple[NodeId, float]] = []
        for idx in hits:
            node_id = self.ids[idx]
            if node_id in exclude:
                continue
            dist = float(np.linalg.norm(self.coords[idx] - query))
            found.append((node_id, dist))
        found.sort(key=lambda item: (item[1], item[0]))
        return found

    def nearest(
        self,
        point: Point,
        max_distance: float,
        exclude: Collection[str] = (),
    ) -> Optional[Tuple[NodeId, float]]:
        hits = self.query_radius(point, max_distance, exclude)
        return hits[0] if hits else None


@dataclass
class Scene:
    """Arena of nodes, walls and fixtures.

    Helpers that change geometry return a new ``Scene``. Callers may still edit
    the mappings in place; the node index notices and is rebuilt. Iteration
    order of the mappings carries no meaning.
    """

    nodes: Dict[NodeId, Node] = field(default_factory=dict)
    walls: Dict[WallId, Wall] = field(default_factory=dict)
    fixtures: Dict[FixtureId, Fixture] = field(default_factory=dict)
    _node_index: Optional[NodeIndex] = field(default=None, init=False, repr=False, compare=False)
    _indexed_nodes: Optional[Dict[NodeId, Node]] = field(default=None, init=False, repr=False, compare=False)

    def node(self, node_id: NodeId) -> Node:
        try:
            return self.nodes[node_id]
        except KeyError as exc:
            raise KeyError(f"Unknown node '{node_id}' in scene") from exc

    def wall(self, wall_id: WallId) -> Wall:
        try:
            return self.walls[wall_id]
        except KeyError as exc:
            raise KeyError(f"Unknown wall '{wall_id}' in scene") from exc

    def fixture(self, fixture_id: FixtureId) -> Fixture:
        try:
            return self.fixtures[fixture_id]
        except KeyError as exc:
            raise KeyError(f"Unknown fixture '{fixture_id}' in scene") from exc

    def get_node(self, node_id: NodeId) -> Optional[Node]:
        return self.nodes.get(node_id)

    def get_wall(self, wall_id: WallId) -> Optional[Wall]:
        return self.walls.get(wall_id)

    def wall_endpoints(self, wall: Wall) -> Optional[Tuple[Point, Point]]:
        """Return the endpoint positions, or ``None`` when the wall is dangling."""

        node_a = self.nodes.get(wall.node_a_id)
        node_b = self.nodes.get(wall.node_b_id)
        if node_a is None or node_b is None:
            return None
        return node_a.position, node_b.position

    def valid_walls(self) -> Iterator[Wall]:
        for wall in self.walls.values():
            if wall.node_a_id in self.nodes and wall.node_b_id in self.nodes:
                yield wall

    def walls_at_node(self, node_id: NodeId) -> List[WallId]:
        return [
            wall.id
            for wall in self.walls.values()
            if wall.node_a_id == node_id or wall.node_b_id == node_id
        ]

    def other_walls_at_node(self, node_id: NodeId, wall_id: WallId) -> List[WallId]:
        return [other for other in self.walls_at_node(node_id) if other != wall_id]

    def node_index(self) -> NodeIndex:
        if self._node_index is None or self._indexed_nodes != self.nodes:
            self._node_index = NodeIndex(self.nodes)
            self._indexed_nodes = dict(self.nodes)
        return self._node_index

    def with_node_positions(self, positions: Mapping[NodeId, Point]) -> "Scene":
        nodes = dict(self.nodes)
        for node_id, position in positions.items():
            node = nodes.get(node_id)
            if node is None:
                logger.debug("Skipping position for unknown node %s", node_id)
                continue
            nodes[node_id] = node.moved_to(position)
        return Scene(nodes=nodes, walls=dict(self.walls), fixtures=dict(self.fixtures))

    def with_fixture_position(self, fixture_id: FixtureId, position: Point) -> "Scene":
        fixtures = dict(self.fixtures)
        fixture = fixtures.get(fixture_id)
        if fixture is not None:
            fixtures[fixture_id] = fixture.moved_to(position)
        return Scene(nodes=dict(self.nodes), walls=dict(self.walls), fixtures=fixtures)

    def snapshot(self) -> "Scene":
        return Scene(nodes=dict(self.nodes), walls=dict(self.walls), fixtures=dict(self.fixtures))


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def _coerce_number(value: object, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise SceneValidationError(f"{what} must be a number (got {value!r})")
    return float(value)


def normalize_wall_dimensions(
    thickness_mm: object, height_mm: object, raise_from_floor_mm: object = 0.0
) -> Tuple[float, float, float]:
    """Clamp user-entered wall dimensions to the smallest values the core accepts."""

    thickness = _coerce_number(thickness_mm, "thickness")
    height = _coerce_number(height_mm, "height")
    raise_mm = _coerce_number(raise_from_floor_mm, "raise from floor")
    return (
        max(thickness, MIN_WALL_DIMENSION_MM),
        max(height, MIN_WALL_DIMENSION_MM),
        max(raise_mm, 0.0),
    )


def _require(entry: Mapping[str, Any], key: str, kind: str) -> Any:
    try:
        return entry[key]
    except KeyError as exc:
        raise SceneValidationError(f"{kind} entry is missing '{key}': {dict(entry)!r}") from exc


def scene_from_dict(data: Mapping[str, Any]) -> Scene:
    """Build a scene from its JSON-friendly form, normalising wall dimensions."""

    nodes: Dict[NodeId, Node] = {}
    for entry in data.get("nodes", []):
        node_id = str(_require(entry, "id", "node"))
        if node_id in nodes:
            raise SceneValidationError(f"duplicate node id '{node_id}'")
        nodes[node_id] = Node(
            node_id,
            _coerce_number(_require(entry, "x", "node"), f"node '{node_id}' x"),
            _coerce_number(_require(entry, "y", "node"), f"node '{node_id}' y"),
            bool(entry.get("locked", False)),
        )

    walls: Dict[WallId, Wall] = {}
    for entry in data.get("walls", []):
        wall_id = str(_require(entry, "id", "wall"))
        if wall_id in walls:
            raise SceneValidationError(f"duplicate wall id '{wall_id}'")
        thickness, height, raise_mm = normalize_wall_dimensions(
            _require(entry, "thicknessMm", "wall"),
            _require(entry, "heightMm", "wall"),
            entry.get("raiseFromFloorMm", 0.0),
        )
        walls[wall_id] = Wall(
            wall_id,
            str(_require(entry, "nodeAId", "wall")),
            str(_require(entry, "nodeBId", "wall")),
            thickness,
            height,
            raise_mm,
        )

    fixtures: Dict[FixtureId, Fixture] = {}
    for entry in data.get("fixtures", []):
        fixture_id = str(_require(entry, "id", "fixture"))
        if fixture_id in fixtures:
            raise SceneValidationError(f"duplicate fixture id '{fixture_id}'")
        position = _require(entry, "position", "fixture")
        fixtures[fixture_id] = Fixture(
            fixture_id,
            str(entry.get("schemaId", "")),
            (
                _coerce_number(_require(position, "x", "fixture position"), "fixture x"),
                _coerce_number(_require(position, "y", "fixture position"), "fixture y"),
            ),
            _coerce_number(entry.get("rotation", 0.0), "fixture rotation"),
            dict(entry.get("params", {})),
        )

    logger.info(
        "Loaded scene with %d nodes, %d walls, %d fixtures", len(nodes), len(walls), len(fixtures)
    )
    return Scene(nodes=nodes, walls=walls, fixtures=fixtures)


def scene_to_dict(scene: Scene) -> Dict[str, Any]:
    return {
        "nodes": [
            {"id": node.id, "x": node.x, "y": node.y, **({"locked": True} if node.locked else {})}
            for node in scene.nodes.values()
        ],
        "walls": [
            {
                "id": wall.id,
                "nodeAId": wall.node_a_id,
                "nodeBId": wall.node_b_id,
                "thicknessMm": wall.thickness_mm,
                "heightMm": wall.height_mm,
                "raiseFromFloorMm": wall.raise_from_floor_mm,
            }
            for wall in scene.walls.values()
        ],
        "fixtures": [
            {
                "id": fixture.id,
                "schemaId": fixture.schema_id,
                "position": {"x": fixture.position[0], "y": fixture.position[1]},
                "rotation": fixture.rotation_rad,
                "params": dict(fixture.params),
            }
            for fixture in scene.fixtures.values()
        ],
    }


__all__ = [
    "Fixture",
    "FixtureId",
    "Node",
    "NodeId",
    "NodeIndex",
    "Scene",
    "SceneValidationError",
    "Wall",
    "WallId",
    "new_id",
    "normalize_wall_dimensions",
    "scene_from_dict",
    "scene_to_dict",
]
