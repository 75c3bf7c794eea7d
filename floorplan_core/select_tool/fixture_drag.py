"""Fixture drags: point-like moves that snap to nodes, the grid and guidelines."""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from .. import vec
from ..config import EditorTolerances, resolve_tolerances
from ..scene import Fixture, Scene
from ..snapping import SnapCandidate, SnapOptions, find_snap_candidates
from ..vec import Point
from .types import DragSession, FixtureDragCommitted

logger = logging.getLogger(__name__)

FIXTURE_SNAP_OPTIONS = SnapOptions(nodes=True, edges=False, midpoints=False, grid=True, guidelines=True)


def start_fixture_drag(scene: Scene, fixture: Fixture, screen: Point, world: Point) -> DragSession:
    return DragSession(
        start_screen=screen,
        start_world=world,
        current_screen=screen,
        snapshot=scene.snapshot(),
        fixture_id=fixture.id,
        fixture_original=fixture.position,
    )


def fixture_drag_frame(
    session: DragSession,
    world: Point,
    scene: Scene,
    snap_tolerance: float,
    tolerances: Optional[EditorTolerances] = None,
    options: SnapOptions = FIXTURE_SNAP_OPTIONS,
) -> Tuple[Point, Optional[SnapCandidate]]:
    """Return the ghost position of the fixture and the snap that produced it."""

    tol = resolve_tolerances(tolerances)
    tentative = vec.add(session.fixture_original, vec.sub(world, session.start_world))
    found = find_snap_candidates(tentative, scene, (), snap_tolerance, options, tol)
    if not found:
        return tentative, None
    return found[0].point, found[0]


def commit_fixture_drag(session: DragSession, final: Point) -> Optional[FixtureDragCommitted]:
    if final == session.fixture_original:
        return None
    logger.info("Fixture %s committed at (%.1f, %.1f)", session.fixture_id, final[0], final[1])
    return FixtureDragCommitted(fixture_id=session.fixture_id, original=session.fixture_original, final=final)


__all__ = [
    "FIXTURE_SNAP_OPTIONS",
    "commit_fixture_drag",
    "fixture_drag_frame",
    "start_fixture_drag",
]
