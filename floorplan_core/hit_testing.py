"""Pointer hit tests against walls, nodes and fixtures in world space."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Collection, Optional

from . import vec
from .config import EditorTolerances, resolve_tolerances
from .polygon import build_wall_polygon, polygon_contains_point
from .scene import FixtureId, NodeId, Scene, WallId
from .vec import Point
from .viewport import Viewport, px_to_mm, screen_to_world

logger = logging.getLogger(__name__)

HIT_KINDS = ("empty", "wall", "node-a", "node-b", "fixture")


@dataclass(frozen=True)
class HitInfo:
    """What lies under the pointer when it goes down."""

    kind: str = "empty"
    wall_id: Optional[WallId] = None
    fixture_id: Optional[FixtureId] = None

    def __post_init__(self) -> None:
        if self.kind not in HIT_KINDS:
            raise ValueError(f"Unknown hit kind '{self.kind}'")

    @property
    def is_empty(self) -> bool:
        return self.kind == "empty"

    @property
    def is_handle(self) -> bool:
        return self.kind in ("node-a", "node-b")


EMPTY_HIT = HitInfo()


def hit_test_walls(point: Point, scene: Scene, radius_mm: float) -> Optional[WallId]:
    """Return the wall nearest to ``point`` whose body or hit band contains it."""

    best_id: Optional[WallId] = None
    best_distance = float("inf")
    for wall in scene.valid_walls():
        node_a, node_b = scene.wall_endpoints(wall)
        if node_a == node_b:
            continue
        foot, _ = vec.project_point_to_segment(point, node_a, node_b)
        dist = vec.distance(point, foot)
        inside = dist <= wall.thickness_mm * 0.5 + radius_mm
        if not inside:
            inside = polygon_contains_point(build_wall_polygon(wall, scene), point)
        if inside and (dist < best_distance or (dist == best_distance and wall.id < best_id)):
            best_id = wall.id
            best_distance = dist
    return best_id


def hit_test_nodes(
    point: Point,
    scene: Scene,
    radius_mm: float,
    exclude: Collection[NodeId] = (),
) -> Optional[NodeId]:
    hit = scene.node_index().nearest(point, radius_mm, exclude)
    return hit[0] if hit else None


def hit_test_wall_node(point: Point, wall_id: WallId, scene: Scene, radius_mm: float) -> Optional[str]:
    """Return ``"node-a"``/``"node-b"`` when ``point`` is on one of the wall's handles."""

    wall = scene.get_wall(wall_id)
    if wall is None:
        return None
    endpoints = scene.wall_endpoints(wall)
    if endpoints is None:
        return None
    dist_a = vec.distance(point, endpoints[0])
    dist_b = vec.distance(point, endpoints[1])
    if dist_a <= radius_mm and dist_a <= dist_b:
        return "node-a"
    if dist_b <= radius_mm:
        return "node-b"
    return None


def hit_test_fixtures(point: Point, scene: Scene, radius_mm: float) -> Optional[FixtureId]:
    best_id: Optional[FixtureId] = None
    best_distance = radius_mm
    for fixture in sorted(scene.fixtures.values(), key=lambda item: item.id):
        dist = vec.distance(point, fixture.position)
        if dist <= best_distance and (best_id is None or dist < best_distance):
            best_id = fixture.id
            best_distance = dist
    return best_id


def resolve_hit(
    screen_point: Point,
    scene: Scene,
    viewport: Viewport,
    selected_wall_ids: Collection[WallId] = (),
    tolerances: Optional[EditorTolerances] = None,
) -> HitInfo:
    """Classify a pointer-down position.

    Fixtures win over walls, handles of already-selected walls win over wall
    bodies, and a body hit close to one of its own endpoints is reported as
    that handle.
    """

    tol = resolve_tolerances(tolerances)
    world = screen_to_world(screen_point, viewport)
    handle_radius = tol.node_handle_radius_mm

    fixture_id = hit_test_fixtures(world, scene, handle_radius)
    if fixture_id is not None:
        return HitInfo("fixture", fixture_id=fixture_id)

    for wall_id in sorted(selected_wall_ids):
        handle = hit_test_wall_node(world, wall_id, scene, handle_radius)
        if handle is not None:
            return HitInfo(handle, wall_id=wall_id)

    wall_id = hit_test_walls(world, scene, px_to_mm(tol.wall_hit_radius_px, viewport))
    if wall_id is None:
        return EMPTY_HIT
    handle = hit_test_wall_node(world, wall_id, scene, handle_radius)
    if handle is not None:
        return HitInfo(handle, wall_id=wall_id)
    return HitInfo("wall", wall_id=wall_id)


__all__ = [
    "EMPTY_HIT",
    "HIT_KINDS",
    "HitInfo",
    "hit_test_fixtures",
    "hit_test_nodes",
    "hit_test_wall_node",
    "hit_test_walls",
    "resolve_hit",
]
