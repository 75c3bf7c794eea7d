"""Snap target search for interactive edits.

Every query here is read-only: candidates describe where a moving point could
land, callers decide whether to use them.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Collection, Dict, List, Mapping, Optional, Sequence, Set, Tuple

import numpy as np

from . import vec
from .config import EditorTolerances, resolve_tolerances
from .scene import NodeId, Scene, WallId
from .vec import Point
from .viewport import Viewport, px_to_mm

logger = logging.getLogger(__name__)

SNAP_PRIORITIES: Dict[str, int] = {
    "node": 9,
    "guideline-intersection": 8,
    "midpoint": 7,
    "edge": 6,
    "grid": 5,
    "guideline": 4,
    "angle": 3,
}

# edge snaps near the ends are left to node snapping
_EDGE_T_MIN = 0.05
_EDGE_T_MAX = 0.95
_GUIDELINE_REDUNDANCY_MM = 1.0

# candidates lying on the angle line outrank every free candidate
ANGLE_LINE_PRIORITY_BOOST = 10
_ANGLE_LINE_TOLERANCE_MM = 1.0
_MIN_ANGLE_ARM_MM = 1.0


@dataclass(frozen=True)
class Guideline:
    """Horizontal or vertical alignment line through a node."""

    kind: str
    value: float
    node_id: NodeId
    origin: Point

    def project(self, point: Point) -> Point:
        if self.kind == "horizontal":
            return (point[0], self.value)
        return (self.value, point[1])

    def distance_to(self, point: Point) -> float:
        if self.kind == "horizontal":
            return abs(point[1] - self.value)
        return abs(point[0] - self.value)

    def intersect_ray(self, origin: Point, direction: Point, eps: float = 1e-9) -> Optional[Point]:
        """Where the ray from ``origin`` along ``direction`` crosses this line, if ahead of it."""

        if self.kind == "horizontal":
            if abs(direction[1]) < eps:
                return None
            t = (self.value - origin[1]) / direction[1]
            if t < 0.0:
                return None
            return (origin[0] + t * direction[0], self.value)
        if abs(direction[0]) < eps:
            return None
        t = (self.value - origin[0]) / direction[0]
        if t < 0.0:
            return None
        return (self.value, origin[1] + t * direction[1])


@dataclass(frozen=True)
class SnapCandidate:
    point: Point
    kind: str
    entity_id: Optional[str]
    distance: float
    priority: int
    guidelines: Tuple[Guideline, ...] = field(default=(), compare=False)


@dataclass(frozen=True)
class SnapOptions:
    nodes: bool = True
    edges: bool = True
    midpoints: bool = False
    grid: bool = False
    guidelines: bool = False
    guideline_origin: Optional[Point] = None
    angles: bool = False
    angle_origin: Optional[Point] = None


@dataclass(frozen=True)
class RigidSnapResult:
    """Outcome of a rigid-body snap search for a group of moving nodes."""

    delta: Point
    positions: Dict[NodeId, Point]
    snapped: Dict[NodeId, SnapCandidate]


def snap_tolerance_mm(viewport: Viewport, tolerances: Optional[EditorTolerances] = None) -> float:
    tol = resolve_tolerances(tolerances)
    return px_to_mm(tol.snap_radius_px, viewport)


def _candidate(
    point: Point, kind: str, entity_id: Optional[str], origin: Point, boost: int = 0, **extra
) -> SnapCandidate:
    return SnapCandidate(
        point=(float(point[0]), float(point[1])),
        kind=kind,
        entity_id=entity_id,
        distance=vec.distance(origin, point),
        priority=SNAP_PRIORITIES[kind] + boost,
        **extra,
    )


def _sort_key(candidate: SnapCandidate):
    return (candidate.distance, -candidate.priority, candidate.kind, candidate.entity_id or "")


def excluded_wall_ids(scene: Scene, excluded: Collection[str]) -> Set[WallId]:
    """Walls named in ``excluded`` plus every wall attached to an excluded node."""

    excluded_set = set(excluded)
    walls = {wall_id for wall_id in excluded_set if wall_id in scene.walls}
    for wall in scene.walls.values():
        if wall.node_a_id in excluded_set or wall.node_b_id in excluded_set:
            walls.add(wall.id)
    return walls


def _wall_segment_arrays(scene: Scene, skip: Set[WallId]) -> Tuple[List[WallId], np.ndarray, np.ndarray]:
    ids: List[WallId] = []
    starts: List[Point] = []
    ends: List[Point] = []
    for wall in scene.valid_walls():
        if wall.id in skip:
            continue
        a, b = scene.wall_endpoints(wall)
        ids.append(wall.id)
        starts.append(a)
        ends.append(b)
    if not ids:
        empty = np.zeros((0, 2), dtype=float)
        return ids, empty, empty
    return ids, np.asarray(starts, dtype=float), np.asarray(ends, dtype=float)


def _edge_candidates(
    point: Point, ids: List[WallId], starts: np.ndarray, ends: np.ndarray, tolerance: float
) -> List[SnapCandidate]:
    if not ids:
        return []
    query = np.asarray(point, dtype=float)
    ab = ends - starts
    denom = np.einsum("ij,ij->i", ab, ab)
    valid = denom > 0.0
    safe = np.where(valid, denom, 1.0)
    t = np.einsum("ij,ij->i", query - starts, ab) / safe
    feet = starts + t[:, None] * ab
    dist = np.linalg.norm(feet - query, axis=1)
    mask = valid & (t > _EDGE_T_MIN) & (t < _EDGE_T_MAX) & (dist <= tolerance)
    return [
        _candidate((feet[idx, 0], feet[idx, 1]), "edge", ids[idx], point)
        for idx in np.flatnonzero(mask)
    ]


def _midpoint_candidates(
    point: Point, ids: List[WallId], starts: np.ndarray, ends: np.ndarray, tolerance: float
) -> List[SnapCandidate]:
    if not ids:
        return []
    mids = (starts + ends) * 0.5
    dist = np.linalg.norm(mids - np.asarray(point, dtype=float), axis=1)
    return [
        _candidate((mids[idx, 0], mids[idx, 1]), "midpoint", ids[idx], point)
        for idx in np.flatnonzero(dist <= tolerance)
    ]


def _grid_candidate(point: Point, spacing: float, tolerance: float) -> Optional[SnapCandidate]:
    if spacing <= 0.0:
        return None
    grid_point = (round(point[0] / spacing) * spacing, round(point[1] / spacing) * spacing)
    if vec.distance(point, grid_point) > tolerance:
        return None
    return _candidate(grid_point, "grid", None, point)


def generate_guidelines(
    scene: Scene,
    excluded: Collection[str] = (),
    origin: Optional[Point] = None,
) -> List[Guideline]:
    """One horizontal and one vertical guideline per non-excluded node.

    With an ``origin`` the guidelines that would coincide with the origin's own
    axes (within 1 mm) are skipped.
    """

    guidelines: List[Guideline] = []
    for node in sorted(scene.nodes.values(), key=lambda item: item.id):
        if node.id in excluded:
            continue
        same_x = origin is not None and abs(node.x - origin[0]) < _GUIDELINE_REDUNDANCY_MM
        same_y = origin is not None and abs(node.y - origin[1]) < _GUIDELINE_REDUNDANCY_MM
        if not same_y:
            guidelines.append(Guideline("horizontal", node.y, node.id, node.position))
        if not same_x:
            guidelines.append(Guideline("vertical", node.x, node.id, node.position))
    return guidelines


def closest_guideline(
    point: Point, guidelines: Sequence[Guideline], tolerance: float
) -> Optional[Tuple[Guideline, Point]]:
    best: Optional[Guideline] = None
    best_distance = float("inf")
    for guideline in guidelines:
        dist = guideline.distance_to(point)
        if dist <= tolerance and dist < best_distance:
            best = guideline
            best_distance = dist
    if best is None:
        return None
    return best, best.project(point)


def _guideline_candidates(
    point: Point, scene: Scene, excluded: Collection[str], origin: Optional[Point], tolerance: float
) -> List[SnapCandidate]:
    guidelines = generate_guidelines(scene, excluded, origin)
    found: List[SnapCandidate] = []
    horizontal = [g for g in guidelines if g.kind == "horizontal"]
    vertical = [g for g in guidelines if g.kind == "vertical"]
    for h_line in horizontal:
        for v_line in vertical:
            crossing = (v_line.value, h_line.value)
            if vec.distance(point, crossing) <= tolerance:
                found.append(
                    _candidate(
                        crossing,
                        "guideline-intersection",
                        f"{h_line.node_id}-{v_line.node_id}",
                        point,
                        guidelines=(h_line, v_line),
                    )
                )
    single = closest_guideline(point, guidelines, tolerance)
    if single is not None:
        guideline, snap_point = single
        found.append(_candidate(snap_point, "guideline", guideline.node_id, point, guidelines=(guideline,)))
    return found


def snap_angle_direction(point: Point, origin: Point, increment_deg: float) -> Optional[Point]:
    """Unit direction from ``origin`` towards ``point`` rounded to ``increment_deg`` steps.

    Returns ``None`` when the point sits on the origin and no angle is defined.
    """

    delta = vec.sub(point, origin)
    if vec.length(delta) < _MIN_ANGLE_ARM_MM or increment_deg <= 0.0:
        return None
    step = math.radians(increment_deg)
    angle = round(math.atan2(delta[1], delta[0]) / step) * step
    return (math.cos(angle), math.sin(angle))


def _ray_segment_intersection(
    origin: Point, direction: Point, a: Point, b: Point, eps: float
) -> Optional[Point]:
    segment = vec.sub(b, a)
    denom = vec.cross(direction, segment)
    if vec.length(segment) < eps or abs(denom) < eps:
        return None
    offset = vec.sub(a, origin)
    t = vec.cross(offset, segment) / denom
    s = vec.cross(offset, direction) / denom
    if t < 0.0 or s < 0.0 or s > 1.0:
        return None
    return vec.add(origin, vec.scale(direction, t))


def _guideline_on_angle_line(
    point: Point,
    scene: Scene,
    excluded: Collection[str],
    opts: SnapOptions,
    direction: Point,
    tol: EditorTolerances,
) -> Optional[SnapCandidate]:
    origin = opts.angle_origin
    crossings: List[Tuple[Point, Guideline]] = []
    for guideline in generate_guidelines(scene, excluded, opts.guideline_origin):
        if guideline.distance_to(point) > tol.guideline_tolerance_mm:
            continue
        crossing = guideline.intersect_ray(origin, direction, tol.epsilon)
        if crossing is not None:
            crossings.append((crossing, guideline))

    # two guidelines meeting on the angle line beat any single one
    for i, (first, first_line) in enumerate(crossings):
        for second, second_line in crossings[i + 1:]:
            if vec.distance(first, second) < tol.same_position_tolerance_mm:
                return _candidate(
                    first,
                    "guideline-intersection",
                    f"{first_line.node_id}-{second_line.node_id}",
                    point,
                    ANGLE_LINE_PRIORITY_BOOST,
                    guidelines=(first_line, second_line),
                )
    if not crossings:
        return None
    crossing, guideline = min(crossings, key=lambda item: vec.distance(point, item[0]))
    return _candidate(
        crossing, "guideline", guideline.node_id, point, ANGLE_LINE_PRIORITY_BOOST, guidelines=(guideline,)
    )


def _constrain_to_angle(
    point: Point,
    candidates: List[SnapCandidate],
    scene: Scene,
    excluded: Collection[str],
    opts: SnapOptions,
    direction: Point,
    tol: EditorTolerances,
) -> List[SnapCandidate]:
    """Keep only targets on the angle line, or fall back to the cursor projected onto it."""

    origin = opts.angle_origin
    if opts.guidelines:
        on_guideline = _guideline_on_angle_line(point, scene, excluded, opts, direction, tol)
        if on_guideline is not None:
            return [on_guideline]

    on_line: List[SnapCandidate] = []
    for candidate in candidates:
        if candidate.kind in ("guideline", "guideline-intersection"):
            continue
        if candidate.kind == "edge":
            wall = scene.get_wall(candidate.entity_id)
            endpoints = scene.wall_endpoints(wall) if wall is not None else None
            if endpoints is None:
                continue
            crossing = _ray_segment_intersection(origin, direction, endpoints[0], endpoints[1], tol.epsilon)
            if crossing is not None:
                on_line.append(_candidate(crossing, "edge", candidate.entity_id, point, ANGLE_LINE_PRIORITY_BOOST))
            continue
        if abs(vec.cross(vec.sub(candidate.point, origin), direction)) < _ANGLE_LINE_TOLERANCE_MM:
            on_line.append(
                _candidate(candidate.point, candidate.kind, candidate.entity_id, point, ANGLE_LINE_PRIORITY_BOOST)
            )
    if on_line:
        on_line.sort(key=_sort_key)
        return on_line

    arm = vec.distance(point, origin)
    constrained = vec.add(origin, vec.scale(direction, arm))
    return [_candidate(constrained, "angle", None, point, ANGLE_LINE_PRIORITY_BOOST)]


def find_snap_candidates(
    point: Point,
    scene: Scene,
    excluded: Collection[str] = (),
    tolerance: Optional[float] = None,
    options: Optional[SnapOptions] = None,
    tolerances: Optional[EditorTolerances] = None,
) -> List[SnapCandidate]:
    """Return every snap target near ``point``, best first.

    ``excluded`` may hold node and wall ids; walls attached to an excluded node
    are skipped as well. ``tolerance`` is in millimetres and defaults to the
    snap radius taken at a scale of one pixel per millimetre.

    With ``options.angles`` and an ``angle_origin`` the result is restricted
    to targets on the line from the origin at the nearest angle step; when none
    lie on it the cursor projected onto that line is returned as an ``angle``
    candidate.
    """

    tol = resolve_tolerances(tolerances)
    opts = options or SnapOptions()
    radius = tol.snap_radius_px if tolerance is None else tolerance
    excluded_set = set(excluded)

    candidates: List[SnapCandidate] = []
    if opts.nodes:
        for node_id, dist in scene.node_index().query_radius(point, radius, excluded_set):
            candidates.append(_candidate(scene.nodes[node_id].position, "node", node_id, point))

    if opts.edges or opts.midpoints:
        ids, starts, ends = _wall_segment_arrays(scene, excluded_wall_ids(scene, excluded_set))
        if opts.edges:
            candidates.extend(_edge_candidates(point, ids, starts, ends, radius))
        if opts.midpoints:
            candidates.extend(_midpoint_candidates(point, ids, starts, ends, radius))

    if opts.grid:
        grid = _grid_candidate(point, tol.grid_spacing_mm, radius)
        if grid is not None:
            candidates.append(grid)

    if opts.guidelines:
        candidates.extend(
            _guideline_candidates(point, scene, excluded_set, opts.guideline_origin, tol.guideline_tolerance_mm)
        )

    candidates.sort(key=_sort_key)

    if opts.angles and opts.angle_origin is not None:
        direction = snap_angle_direction(point, opts.angle_origin, tol.angle_snap_increment_deg)
        if direction is not None:
            candidates = _constrain_to_angle(point, candidates, scene, excluded_set, opts, direction, tol)

    if candidates:
        logger.debug("%d snap candidates near (%.1f, %.1f)", len(candidates), point[0], point[1])
    return candidates


def best_snap(
    point: Point,
    scene: Scene,
    excluded: Collection[str] = (),
    tolerance: Optional[float] = None,
    options: Optional[SnapOptions] = None,
    tolerances: Optional[EditorTolerances] = None,
) -> Optional[SnapCandidate]:
    candidates = find_snap_candidates(point, scene, excluded, tolerance, options, tolerances)
    return candidates[0] if candidates else None


def filter_candidates_for_display(
    candidates: Sequence[SnapCandidate],
    tolerances: Optional[EditorTolerances] = None,
) -> List[SnapCandidate]:
    """Keep the highest-priority candidate out of each cluster of coincident ones."""

    tol = resolve_tolerances(tolerances)
    groups: List[List[SnapCandidate]] = []
    for candidate in candidates:
        for group in groups:
            if vec.distance(candidate.point, group[0].point) < tol.same_position_tolerance_mm:
                group.append(candidate)
                break
        else:
            groups.append([candidate])
    return [max(group, key=lambda item: item.priority) for group in groups]


def validate_rigid_body_positions(
    original: Mapping[NodeId, Point],
    final: Mapping[NodeId, Point],
    delta: Point,
    tolerance: float,
) -> bool:
    """Check that every node sits within ``tolerance`` of its rigidly translated spot."""

    for node_id, start in original.items():
        end = final.get(node_id)
        if end is None:
            return False
        if vec.distance(end, vec.add(start, delta)) > tolerance:
            return False
    return True


def find_rigid_body_snap(
    original_positions: Mapping[NodeId, Point],
    base_delta: Point,
    targets: Mapping[NodeId, Sequence[SnapCandidate]],
    tolerances: Optional[EditorTolerances] = None,
) -> RigidSnapResult:
    """Pick a single translation for a group of nodes from their snap targets.

    The nearest target of any node fixes the translation. Other nodes are then
    pulled onto one of their own targets only when that correction is within
    the rigid-body tolerance, so the group keeps its shape.
    """

    tol = resolve_tolerances(tolerances)
    limit = tol.rigid_body_snap_tolerance_mm

    options: List[Tuple[Tuple, NodeId, SnapCandidate]] = []
    for node_id, node_targets in targets.items():
        if node_id not in original_positions:
            continue
        for candidate in node_targets:
            options.append((_sort_key(candidate) + (node_id,), node_id, candidate))
    options.sort(key=lambda item: item[0])

    if not options:
        positions = {node_id: vec.add(start, base_delta) for node_id, start in original_positions.items()}
        return RigidSnapResult(delta=base_delta, positions=positions, snapped={})

    _, lead_id, lead = options[0]
    delta = vec.sub(lead.point, original_positions[lead_id])
    positions = {node_id: vec.add(start, delta) for node_id, start in original_positions.items()}
    positions[lead_id] = lead.point
    snapped: Dict[NodeId, SnapCandidate] = {lead_id: lead}

    for node_id, node_targets in targets.items():
        if node_id == lead_id or node_id not in positions:
            continue
        translated = positions[node_id]
        for candidate in sorted(node_targets, key=lambda item: vec.distance(translated, item.point)):
            if vec.distance(translated, candidate.point) <= limit:
                positions[node_id] = candidate.point
                snapped[node_id] = candidate
            break

    logger.debug("Rigid snap via %s on %s, %d nodes corrected", lead.kind, lead_id, len(snapped))
    return RigidSnapResult(delta=delta, positions=positions, snapped=snapped)


def find_merge_targets(
    final_positions: Mapping[NodeId, Point],
    scene: Scene,
    moving_ids: Collection[NodeId],
    tolerance: Optional[float] = None,
    tolerances: Optional[EditorTolerances] = None,
) -> Dict[NodeId, NodeId]:
    """Map each moved node to the nearest stationary node strictly within ``tolerance``.

    Locked nodes are never merged away, though they may be targets.
    """

    tol = resolve_tolerances(tolerances)
    radius = tol.same_position_tolerance_mm if tolerance is None else tolerance
    moving = set(moving_ids) | set(final_positions)
    index = scene.node_index()
    merges: Dict[NodeId, NodeId] = {}
    for node_id in sorted(final_positions):
        node = scene.get_node(node_id)
        if node is not None and node.locked:
            continue
        for other_id, dist in index.query_radius(final_positions[node_id], radius, moving):
            if dist < radius:
                merges[node_id] = other_id
            break
    if merges:
        logger.debug("Merge targets: %s", merges)
    return merges


__all__ = [
    "ANGLE_LINE_PRIORITY_BOOST",
    "Guideline",
    "RigidSnapResult",
    "SNAP_PRIORITIES",
    "SnapCandidate",
    "SnapOptions",
    "best_snap",
    "closest_guideline",
    "excluded_wall_ids",
    "filter_candidates_for_display",
    "find_merge_targets",
    "find_rigid_body_snap",
    "find_snap_candidates",
    "generate_guidelines",
    "snap_angle_direction",
    "snap_tolerance_mm",
    "validate_rigid_body_positions",
]
