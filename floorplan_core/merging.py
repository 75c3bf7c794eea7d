"""Apply node merges, splits and drag commits to a scene.

The select tool only describes mutations; these helpers are the reference
applier for those descriptions. Every function returns a new ``Scene``.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Collection, Dict, Iterable, Mapping, Optional, Tuple

from . import vec
from .config import resolve_tolerances
from .logging_utils import apply_debug_logging
from .scene import Node, NodeId, Scene, Wall, WallId, new_id
from .vec import Point

logger = logging.getLogger(__name__)


def should_merge_nodes(a: Node, b: Node, tolerance: Optional[float] = None) -> bool:
    if tolerance is None:
        tolerance = resolve_tolerances(None).same_position_tolerance_mm
    return vec.distance(a.position, b.position) < tolerance


def find_node_at_position(
    point: Point,
    scene: Scene,
    exclude: Collection[NodeId] = (),
    tolerance: Optional[float] = None,
) -> Optional[NodeId]:
    if tolerance is None:
        tolerance = resolve_tolerances(None).same_position_tolerance_mm
    for node_id, dist in scene.node_index().query_radius(point, tolerance, exclude):
        if dist < tolerance:
            return node_id
        break
    return None


def _rewire(wall: Wall, from_id: NodeId, to_id: NodeId) -> Wall:
    node_a = to_id if wall.node_a_id == from_id else wall.node_a_id
    node_b = to_id if wall.node_b_id == from_id else wall.node_b_id
    return replace(wall, node_a_id=node_a, node_b_id=node_b)


def merge_nodes(from_id: NodeId, to_id: NodeId, scene: Scene) -> Scene:
    """Fold ``from_id`` into ``to_id``.

    Walls that referenced ``from_id`` now reference ``to_id``; a wall whose two
    ends become the same node is removed.
    """

    if from_id == to_id:
        return scene
    if to_id not in scene.nodes:
        logger.warning("Cannot merge %s into missing node %s", from_id, to_id)
        return scene

    nodes = dict(scene.nodes)
    nodes.pop(from_id, None)
    walls: Dict[WallId, Wall] = {}
    dropped = []
    for wall_id, wall in scene.walls.items():
        if from_id not in wall.node_ids:
            walls[wall_id] = wall
            continue
        rewired = _rewire(wall, from_id, to_id)
        if rewired.node_a_id == rewired.node_b_id:
            dropped.append(wall_id)
            continue
        walls[wall_id] = rewired
    if dropped:
        logger.info("Merge %s -> %s removed degenerate walls %s", from_id, to_id, dropped)
    return Scene(nodes=nodes, walls=walls, fixtures=dict(scene.fixtures))


def split_node(node_id: NodeId, wall_ids: Iterable[WallId], scene: Scene) -> Tuple[Scene, NodeId]:
    """Detach ``wall_ids`` from ``node_id`` onto a fresh node at the same spot."""

    node = scene.get_node(node_id)
    if node is None:
        return scene, node_id
    fresh_id = new_id("node")
    nodes = dict(scene.nodes)
    nodes[fresh_id] = Node(fresh_id, node.x, node.y)
    walls = dict(scene.walls)
    for wall_id in wall_ids:
        wall = walls.get(wall_id)
        if wall is None or node_id not in wall.node_ids:
            continue
        walls[wall_id] = _rewire(wall, node_id, fresh_id)
    return Scene(nodes=nodes, walls=walls, fixtures=dict(scene.fixtures)), fresh_id


def remove_orphan_nodes(scene: Scene) -> Scene:
    referenced = set()
    for wall in scene.walls.values():
        referenced.update(wall.node_ids)
    nodes = {node_id: node for node_id, node in scene.nodes.items() if node_id in referenced}
    removed = len(scene.nodes) - len(nodes)
    if removed:
        logger.info("Removed %d orphan nodes", removed)
    return Scene(nodes=nodes, walls=dict(scene.walls), fixtures=dict(scene.fixtures))


def _resolve_merge_chain(node_id: NodeId, merges: Mapping[NodeId, NodeId]) -> NodeId:
    seen = {node_id}
    current = node_id
    while current in merges:
        current = merges[current]
        if current in seen:
            break
        seen.add(current)
    return current


def apply_drag_commit(scene: Scene, commit) -> Scene:
    """Move nodes to their committed positions, then perform requested merges."""

    positions = {node_id: move.final for node_id, move in commit.node_positions.items()}
    result = scene.with_node_positions(positions)
    merges = dict(commit.merge_targets)
    for from_id in sorted(merges):
        to_id = _resolve_merge_chain(from_id, merges)
        if to_id == from_id or from_id not in result.nodes:
            continue
        result = merge_nodes(from_id, to_id, result)
    logger.info("Applied drag commit: %d nodes moved, %d merges", len(positions), len(merges))
    return result


def apply_fixture_commit(scene: Scene, commit) -> Scene:
    return scene.with_fixture_position(commit.fixture_id, commit.final)


def restore_positions(scene: Scene, originals: Mapping[NodeId, Point]) -> Scene:
    return scene.with_node_positions(originals)


__all__ = [
    "apply_drag_commit",
    "apply_fixture_commit",
    "find_node_at_position",
    "merge_nodes",
    "remove_orphan_nodes",
    "restore_positions",
    "should_merge_nodes",
    "split_node",
]


apply_debug_logging(globals(), logger=logger)
