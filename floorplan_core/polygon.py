"""Outline polygons for walls, with mitered joints where exactly two walls meet."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from . import vec
from .config import EditorTolerances, resolve_tolerances
from .logging_utils import apply_debug_logging
from .scene import NodeId, Scene, Wall, WallId
from .vec import Point

logger = logging.getLogger(__name__)

Polygon = List[Point]


@dataclass(frozen=True)
class JointCorners:
    """Joint vertices of a wall at a shared node, in the wall's outward frame.

    ``left``/``right`` are taken looking from the node along the wall, away from
    the node. ``apex`` is the shared node itself.
    """

    left: Point
    right: Point
    apex: Point


def _outward_direction(wall: Wall, node_id: NodeId, scene: Scene) -> Optional[Point]:
    endpoints = scene.wall_endpoints(wall)
    if endpoints is None:
        return None
    here = scene.node(node_id).position
    there = scene.node(wall.other_node_id(node_id)).position
    direction = vec.normalize(vec.sub(there, here))
    if direction == (0.0, 0.0):
        return None
    return direction


def compute_joint(
    wall: Wall,
    node_id: NodeId,
    scene: Scene,
    tolerances: Optional[EditorTolerances] = None,
) -> Optional[JointCorners]:
    """Return mitered corners for ``wall`` at ``node_id`` or ``None`` for a flat cap."""

    tol = resolve_tolerances(tolerances)
    others = [
        scene.walls[other_id]
        for other_id in scene.other_walls_at_node(node_id, wall.id)
        if scene.wall_endpoints(scene.walls[other_id]) is not None
    ]
    if len(others) != 1:
        if len(others) > 1:
            logger.debug("Wall %s: %d walls share node %s, using flat cap", wall.id, len(others) + 1, node_id)
        return None
    neighbour = others[0]
    if neighbour.other_node_id(node_id) == wall.other_node_id(node_id):
        # both walls span the same two nodes
        return None

    u = _outward_direction(wall, node_id, scene)
    v = _outward_direction(neighbour, node_id, scene)
    if u is None or v is None:
        return None
    if abs(vec.cross(u, v)) <= tol.epsilon:
        logger.debug("Wall %s: parallel joint with %s at node %s", wall.id, neighbour.id, node_id)
        return None

    node = scene.node(node_id).position
    h_self = wall.thickness_mm * 0.5
    h_other = neighbour.thickness_mm * 0.5
    perp_u = vec.perpendicular(u)
    perp_v = vec.perpendicular(v)

    # our left boundary meets the neighbour's right boundary and vice versa
    left = vec.intersect_lines(
        vec.add(node, vec.scale(perp_u, h_self)),
        u,
        vec.sub(node, vec.scale(perp_v, h_other)),
        v,
        eps=tol.epsilon,
    )
    right = vec.intersect_lines(
        vec.sub(node, vec.scale(perp_u, h_self)),
        u,
        vec.add(node, vec.scale(perp_v, h_other)),
        v,
        eps=tol.epsilon,
    )
    if left is None or right is None:
        return None

    miter_limit = tol.max_miter_length_ratio * 0.5 * (wall.thickness_mm + neighbour.thickness_mm)
    # both walls are checked so the two sides of a joint always agree
    arms = (
        (u, vec.distance(node, scene.node(wall.other_node_id(node_id)).position)),
        (v, vec.distance(node, scene.node(neighbour.other_node_id(node_id)).position)),
    )
    for corner in (left, right):
        if vec.distance(corner, node) > miter_limit:
            logger.debug("Wall %s: miter at node %s exceeds limit %.1f", wall.id, node_id, miter_limit)
            return None
        offset = vec.sub(corner, node)
        if any(vec.dot(offset, direction) >= arm_length for direction, arm_length in arms):
            logger.debug("Wall %s: miter at node %s overruns a far end", wall.id, node_id)
            return None

    return JointCorners(left=left, right=right, apex=node)


def build_wall_polygon(
    wall: Wall,
    scene: Scene,
    tolerances: Optional[EditorTolerances] = None,
) -> Polygon:
    """Build the outline of ``wall`` in world millimetres.

    Vertices run ``[A_left, (A_apex), A_right, B_right, (B_apex), B_left]``,
    counter-clockwise for a y-up world. Ends shared with exactly one other wall
    are mitered and include the shared node as an apex; every other end is a
    flat cap. A wall with a missing node yields an empty list.
    """

    endpoints = scene.wall_endpoints(wall)
    if endpoints is None:
        logger.debug("Wall %s references a missing node; no polygon", wall.id)
        return []
    node_a, node_b = endpoints

    direction = vec.normalize(vec.sub(node_b, node_a))
    offset = vec.scale(vec.perpendicular(direction), wall.thickness_mm * 0.5)

    a_left = vec.add(node_a, offset)
    a_right = vec.sub(node_a, offset)
    b_left = vec.add(node_b, offset)
    b_right = vec.sub(node_b, offset)
    a_apex: Optional[Point] = None
    b_apex: Optional[Point] = None

    joint_a = compute_joint(wall, wall.node_a_id, scene, tolerances)
    if joint_a is not None:
        a_left, a_right, a_apex = joint_a.left, joint_a.right, joint_a.apex

    joint_b = compute_joint(wall, wall.node_b_id, scene, tolerances)
    if joint_b is not None:
        # the outward frame at B faces the other way, so its sides swap
        b_left, b_right, b_apex = joint_b.right, joint_b.left, joint_b.apex

    polygon: Polygon = [a_left]
    if a_apex is not None:
        polygon.append(a_apex)
    polygon.append(a_right)
    polygon.append(b_right)
    if b_apex is not None:
        polygon.append(b_apex)
    polygon.append(b_left)
    return polygon


def build_scene_polygons(
    scene: Scene,
    tolerances: Optional[EditorTolerances] = None,
) -> Dict[WallId, Polygon]:
    polygons: Dict[WallId, Polygon] = {}
    for wall in scene.walls.values():
        polygon = build_wall_polygon(wall, scene, tolerances)
        if polygon:
            polygons[wall.id] = polygon
    logger.info("Built %d wall polygons (%d walls in scene)", len(polygons), len(scene.walls))
    return polygons


def polygon_area(polygon: Sequence[Point]) -> float:
    """Signed shoelace area; positive for counter-clockwise vertex order."""

    total = 0.0
    count = len(polygon)
    for idx in range(count):
        total += vec.cross(polygon[idx], polygon[(idx + 1) % count])
    return 0.5 * total


def _on_segment(point: Point, a: Point, b: Point, eps: float) -> bool:
    foot, _ = vec.project_point_to_segment(point, a, b)
    return vec.distance(point, foot) <= eps


def polygon_contains_point(polygon: Sequence[Point], point: Point, eps: float = 1e-9) -> bool:
    """Even-odd containment test; points on the boundary count as inside."""

    count = len(polygon)
    if count < 3:
        return False
    inside = False
    px, py = point
    for idx in range(count):
        a = polygon[idx]
        b = polygon[(idx + 1) % count]
        if _on_segment(point, a, b, eps):
            return True
        if (a[1] > py) != (b[1] > py):
            x_cross = a[0] + (py - a[1]) * (b[0] - a[0]) / (b[1] - a[1])
            if px < x_cross:
                inside = not inside
    return inside


__all__ = [
    "JointCorners",
    "Polygon",
    "build_scene_polygons",
    "build_wall_polygon",
    "compute_joint",
    "polygon_area",
    "polygon_contains_point",
]


apply_debug_logging(globals(), logger=logger, skip={"polygon_contains_point", "polygon_area"})
