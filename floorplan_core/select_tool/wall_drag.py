"""Rigid multi-wall drags and single-endpoint drags."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Collection, Dict, List, Optional, Set, Tuple

from .. import vec
from ..config import EditorTolerances, resolve_tolerances
from ..scene import NodeId, Scene, Wall, WallId
from ..snapping import (
    SnapCandidate,
    SnapOptions,
    excluded_wall_ids,
    filter_candidates_for_display,
    find_merge_targets,
    find_rigid_body_snap,
    find_snap_candidates,
)
from ..vec import Point
from .types import DragCommitted, DragSession, NodeMove

logger = logging.getLogger(__name__)

DRAG_SNAP_OPTIONS = SnapOptions(nodes=True, edges=True, midpoints=True, grid=True, guidelines=True)


@dataclass(frozen=True)
class DragFrame:
    """Ghost geometry for one pointer position; never written to the scene."""

    positions: Dict[NodeId, Point]
    snap_candidates: Tuple[SnapCandidate, ...] = ()
    active_snaps: Dict[NodeId, str] = field(default_factory=dict)


def excluded_node_ids(scene: Scene, wall_ids: Collection[WallId]) -> Set[NodeId]:
    excluded: Set[NodeId] = set()
    for wall_id in wall_ids:
        wall = scene.get_wall(wall_id)
        if wall is not None:
            excluded.update(wall.node_ids)
    return excluded


def excluded_ids(scene: Scene, wall_ids: Collection[WallId]) -> Set[str]:
    """Node and wall ids that must not act as snap targets while ``wall_ids`` move."""

    nodes = excluded_node_ids(scene, wall_ids)
    return nodes | excluded_wall_ids(scene, nodes | set(wall_ids))


def start_rigid_drag(
    scene: Scene,
    wall_ids: Collection[WallId],
    screen: Point,
    world: Point,
) -> Optional[DragSession]:
    """Capture a rigid drag of ``wall_ids``, or ``None`` when a locked node pins the group."""

    originals: Dict[NodeId, Point] = {}
    kept: List[WallId] = []
    for wall_id in sorted(wall_ids):
        wall = scene.get_wall(wall_id)
        if wall is None or scene.wall_endpoints(wall) is None:
            logger.debug("Skipping wall %s in drag: missing geometry", wall_id)
            continue
        kept.append(wall_id)
        for node_id in wall.node_ids:
            node = scene.node(node_id)
            if node.locked:
                logger.debug("Wall %s has locked node %s; group stays put", wall_id, node_id)
                return None
            originals.setdefault(node_id, node.position)
    offsets = {node_id: vec.sub(position, world) for node_id, position in originals.items()}
    return DragSession(
        start_screen=screen,
        start_world=world,
        current_screen=screen,
        original_positions=originals,
        anchor_offsets=offsets,
        moving_node_ids=frozenset(originals),
        wall_ids=tuple(kept),
        snapshot=scene.snapshot(),
    )


def start_node_drag(
    scene: Scene,
    wall: Wall,
    mode: str,
    screen: Point,
    world: Point,
    constrain_angle: bool = False,
) -> Optional[DragSession]:
    if scene.wall_endpoints(wall) is None:
        return None
    drag_id = wall.node_a_id if mode == "node-a" else wall.node_b_id
    anchor_id = wall.other_node_id(drag_id)
    if scene.node(drag_id).locked:
        logger.debug("Node %s is locked; no drag", drag_id)
        return None
    originals = {
        drag_id: scene.node(drag_id).position,
        anchor_id: scene.node(anchor_id).position,
    }
    return DragSession(
        start_screen=screen,
        start_world=world,
        current_screen=screen,
        original_positions=originals,
        moving_node_ids=frozenset([drag_id]),
        wall_ids=(wall.id,),
        snapshot=scene.snapshot(),
        drag_node_id=drag_id,
        anchor_node_id=anchor_id,
        constrain_angle=constrain_angle,
    )


def rigid_drag_frame(
    session: DragSession,
    world: Point,
    scene: Scene,
    snap_tolerance: float,
    tolerances: Optional[EditorTolerances] = None,
    options: SnapOptions = DRAG_SNAP_OPTIONS,
) -> DragFrame:
    """Translate the dragged group and let snapping nudge it as a whole."""

    tol = resolve_tolerances(tolerances)
    base_delta = vec.sub(world, session.start_world)
    excluded = excluded_ids(scene, session.wall_ids)
    options = replace(options, angles=False, angle_origin=None)

    targets: Dict[NodeId, List[SnapCandidate]] = {}
    for node_id, offset in session.anchor_offsets.items():
        tentative = vec.add(world, offset)
        found = find_snap_candidates(tentative, scene, excluded, snap_tolerance, options, tol)
        if found:
            targets[node_id] = found

    result = find_rigid_body_snap(session.original_positions, base_delta, targets, tol)
    active = {
        node_id: candidate.entity_id
        for node_id, candidate in result.snapped.items()
        if candidate.kind == "node" and candidate.entity_id is not None
    }
    shown = filter_candidates_for_display(list(result.snapped.values()), tol)
    return DragFrame(positions=result.positions, snap_candidates=tuple(shown), active_snaps=active)


def node_drag_frame(
    session: DragSession,
    world: Point,
    scene: Scene,
    snap_tolerance: float,
    tolerances: Optional[EditorTolerances] = None,
    options: SnapOptions = DRAG_SNAP_OPTIONS,
) -> DragFrame:
    """Move the dragged endpoint to the pointer, snapped; the other end stays put.

    Guidelines are filtered against the fixed end. With ``constrain_angle`` on
    the session the endpoint is held to angle steps around the fixed end.
    """

    tol = resolve_tolerances(tolerances)
    drag_id = session.drag_node_id
    anchor_id = session.anchor_node_id
    anchor_position = session.original_positions[anchor_id]

    # neither end of the dragged wall, nor any wall touching them, is a target
    excluded = {drag_id, anchor_id} | excluded_wall_ids(scene, {drag_id, anchor_id})
    node_options = replace(
        options,
        guideline_origin=anchor_position,
        angles=session.constrain_angle,
        angle_origin=anchor_position if session.constrain_angle else None,
    )
    found = find_snap_candidates(world, scene, excluded, snap_tolerance, node_options, tol)
    final = found[0].point if found else world

    active: Dict[NodeId, str] = {}
    if found and found[0].kind == "node" and found[0].entity_id is not None:
        active[drag_id] = found[0].entity_id
    return DragFrame(
        positions={drag_id: final, anchor_id: anchor_position},
        snap_candidates=tuple(filter_candidates_for_display(found, tol)),
        active_snaps=active,
    )


def drag_frame(
    mode: str,
    session: DragSession,
    world: Point,
    scene: Scene,
    snap_tolerance: float,
    tolerances: Optional[EditorTolerances] = None,
    options: SnapOptions = DRAG_SNAP_OPTIONS,
) -> DragFrame:
    if mode in ("node-a", "node-b") and session.drag_node_id is not None:
        return node_drag_frame(session, world, scene, snap_tolerance, tolerances, options)
    return rigid_drag_frame(session, world, scene, snap_tolerance, tolerances, options)


def commit_drag(
    session: DragSession,
    frame: DragFrame,
    scene: Scene,
    tolerances: Optional[EditorTolerances] = None,
) -> Optional[DragCommitted]:
    """Describe the finished drag, or ``None`` when nothing moved.

    Merge targets are looked up only here, against nodes that did not take part
    in the drag.
    """

    tol = resolve_tolerances(tolerances)
    moves = {
        node_id: NodeMove(original, frame.positions.get(node_id, original))
        for node_id, original in session.original_positions.items()
    }
    moved = {node_id: move.final for node_id, move in moves.items() if move.final != move.original}
    if not moved:
        logger.debug("Drag ended without movement; nothing to commit")
        return None

    merges = find_merge_targets(
        moved,
        scene,
        set(session.original_positions),
        tol.same_position_tolerance_mm,
        tol,
    )
    logger.info("Drag committed: %d nodes, %d merge targets", len(moves), len(merges))
    return DragCommitted(wall_ids=session.wall_ids, node_positions=moves, merge_targets=merges)


__all__ = [
    "DRAG_SNAP_OPTIONS",
    "DragFrame",
    "commit_drag",
    "drag_frame",
    "excluded_ids",
    "excluded_node_ids",
    "node_drag_frame",
    "rigid_drag_frame",
    "start_node_drag",
    "start_rigid_drag",
]
