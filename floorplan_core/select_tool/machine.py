"""Select-tool state machine.

``transition`` is a pure function from (context, event) to (context, effects).
``SelectTool`` keeps the current context and forwards effects to observers.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple

from ..config import EditorTolerances, resolve_tolerances
from ..hit_testing import HitInfo, resolve_hit
from ..scene import FixtureId, Scene, WallId
from ..snapping import SnapOptions, snap_tolerance_mm
from ..vec import Point
from ..viewport import Viewport, screen_to_world
from .fixture_drag import commit_fixture_drag, fixture_drag_frame, start_fixture_drag
from .marquee import get_marquee_box, walls_in_marquee
from .types import (
    Cancel,
    ContextChanged,
    DragCancelled,
    DragCommitted,
    Dragging,
    DragUpdated,
    Effect,
    Event,
    FixtureDragCommitted,
    FixtureDragUpdated,
    Idle,
    InteractionContext,
    Marquee,
    MarqueePending,
    PointerDown,
    PointerMove,
    PointerUp,
    SelectionChanged,
)
from .wall_drag import DRAG_SNAP_OPTIONS, commit_drag, drag_frame, start_node_drag, start_rigid_drag

logger = logging.getLogger(__name__)

Transition = Tuple[InteractionContext, List[Effect]]


def _fixture_options(options: SnapOptions) -> SnapOptions:
    return replace(options, edges=False, midpoints=False, guideline_origin=None, angles=False, angle_origin=None)


def _neutral(context: InteractionContext) -> InteractionContext:
    return replace(
        context,
        state=Idle(),
        display_positions={},
        display_fixture_position=None,
        snap_candidates=(),
        active_snaps={},
    )


def _beyond_drag_threshold(anchor: Point, current: Point, tol: EditorTolerances) -> bool:
    dx = current[0] - anchor[0]
    dy = current[1] - anchor[1]
    return max(abs(dx), abs(dy)) > tol.min_drag_distance_px


def _select_without_drag(context: InteractionContext, wall_ids: FrozenSet[WallId]) -> Transition:
    effects = _selection_effects(context, wall_ids, None)
    return replace(context, selected_wall_ids=wall_ids, selected_fixture_id=None), effects


def _selection_effects(
    context: InteractionContext,
    wall_ids: FrozenSet[WallId],
    fixture_id: Optional[FixtureId],
) -> List[Effect]:
    if wall_ids == context.selected_wall_ids and fixture_id == context.selected_fixture_id:
        return []
    return [SelectionChanged(wall_ids, fixture_id)]


def _start_rigid(
    context: InteractionContext,
    wall_ids: FrozenSet[WallId],
    event: PointerDown,
    world: Point,
    scene: Scene,
) -> Transition:
    session = start_rigid_drag(scene, wall_ids, event.screen, world)
    if session is None:
        return _select_without_drag(context, wall_ids)
    effects = _selection_effects(context, wall_ids, None)
    new = replace(
        context,
        state=Dragging("wall", session),
        selected_wall_ids=wall_ids,
        selected_fixture_id=None,
        display_positions=dict(session.original_positions),
        snap_candidates=(),
        active_snaps={},
    )
    return new, effects


def _on_pointer_down(
    context: InteractionContext,
    event: PointerDown,
    scene: Scene,
    viewport: Viewport,
) -> Transition:
    if not isinstance(context.state, Idle):
        logger.debug("Ignoring pointer-down in state %s", context.state_name)
        return context, []

    world = screen_to_world(event.screen, viewport)
    hit = event.hit
    selection = context.selected_wall_ids

    if hit.kind == "fixture" and hit.fixture_id in scene.fixtures:
        fixture = scene.fixtures[hit.fixture_id]
        session = start_fixture_drag(scene, fixture, event.screen, world)
        effects = _selection_effects(context, selection, fixture.id)
        new = replace(
            context,
            state=Dragging("fixture", session),
            selected_fixture_id=fixture.id,
            display_fixture_position=fixture.position,
            snap_candidates=(),
            active_snaps={},
        )
        return new, effects

    wall = scene.get_wall(hit.wall_id) if hit.wall_id is not None else None

    if hit.is_handle and wall is not None:
        if wall.id in selection and len(selection) > 1:
            return _start_rigid(context, selection, event, world, scene)
        session = start_node_drag(scene, wall, hit.kind, event.screen, world, event.constrain_angle)
        single = frozenset([wall.id])
        if session is None:
            return _select_without_drag(context, single)
        effects = _selection_effects(context, single, None)
        new = replace(
            context,
            state=Dragging(hit.kind, session),
            selected_wall_ids=single,
            selected_fixture_id=None,
            display_positions=dict(session.original_positions),
            snap_candidates=(),
            active_snaps={},
        )
        return new, effects

    if hit.kind == "wall" and wall is not None:
        if wall.id in selection:
            return _start_rigid(context, selection, event, world, scene)
        if event.additive:
            extended = selection | {wall.id}
            return replace(context, selected_wall_ids=extended), _selection_effects(
                context, extended, context.selected_fixture_id
            )
        return _start_rigid(context, frozenset([wall.id]), event, world, scene)

    return replace(context, state=MarqueePending(event.screen, event.additive), hovered_wall_id=None), []


def _on_pointer_move(
    context: InteractionContext,
    event: PointerMove,
    scene: Scene,
    viewport: Viewport,
    tol: EditorTolerances,
    options: SnapOptions,
) -> Transition:
    state = context.state

    if isinstance(state, Idle):
        if event.hit is None:
            return context, []
        hovered = event.hit.wall_id if event.hit.kind in ("wall", "node-a", "node-b") else None
        return replace(context, hovered_wall_id=hovered), []

    if isinstance(state, MarqueePending):
        if _beyond_drag_threshold(state.anchor, event.screen, tol):
            return replace(context, state=Marquee(state.anchor, event.screen)), []
        return context, []

    if isinstance(state, Marquee):
        return replace(context, state=Marquee(state.anchor, event.screen)), []

    session = replace(state.session, current_screen=event.screen, constrain_angle=event.constrain_angle)
    if not session.moved:
        if not _beyond_drag_threshold(session.start_screen, event.screen, tol):
            # still a click; the ghost stays on the original geometry
            return replace(context, state=Dragging(state.mode, session)), []
        session = replace(session, moved=True)
    world = screen_to_world(event.screen, viewport)
    snap_tol = snap_tolerance_mm(viewport, tol)

    if state.mode == "fixture":
        position, candidate = fixture_drag_frame(session, world, scene, snap_tol, tol, _fixture_options(options))
        new = replace(
            context,
            state=Dragging("fixture", session),
            display_fixture_position=position,
            snap_candidates=(candidate,) if candidate is not None else (),
        )
        return new, [FixtureDragUpdated(session.fixture_id, position)]

    frame = drag_frame(state.mode, session, world, scene, snap_tol, tol, options)
    new = replace(
        context,
        state=Dragging(state.mode, session),
        display_positions=dict(frame.positions),
        snap_candidates=frame.snap_candidates,
        active_snaps=dict(frame.active_snaps),
    )
    return new, [DragUpdated(session.wall_ids, dict(frame.positions))]


def _on_pointer_up(
    context: InteractionContext,
    event: PointerUp,
    scene: Scene,
    viewport: Viewport,
    tol: EditorTolerances,
    options: SnapOptions,
) -> Transition:
    state = context.state

    if isinstance(state, Idle):
        return context, []

    if isinstance(state, MarqueePending):
        # a click on empty canvas
        if state.additive:
            return _neutral(context), []
        cleared: FrozenSet[WallId] = frozenset()
        effects = _selection_effects(context, cleared, None)
        return replace(_neutral(context), selected_wall_ids=cleared, selected_fixture_id=None), effects

    if isinstance(state, Marquee):
        current = event.screen if event.screen is not None else state.current
        box = get_marquee_box(state.anchor, current, tol.min_marquee_size_px)
        if box is None:
            logger.debug("Marquee below minimum size, discarded")
            return _neutral(context), []
        selection = context.selected_wall_ids | walls_in_marquee(scene, viewport, box)
        effects = _selection_effects(context, selection, context.selected_fixture_id)
        return replace(_neutral(context), selected_wall_ids=selection), effects

    session = state.session
    screen = event.screen if event.screen is not None else session.current_screen
    if not session.moved and not _beyond_drag_threshold(session.start_screen, screen, tol):
        logger.debug("Drag released within %.1f px; nothing to commit", tol.min_drag_distance_px)
        return _neutral(context), []

    world = screen_to_world(screen, viewport)
    snap_tol = snap_tolerance_mm(viewport, tol)

    if state.mode == "fixture":
        final, _ = fixture_drag_frame(session, world, scene, snap_tol, tol, _fixture_options(options))
        fixture_commit = commit_fixture_drag(session, final)
        return _neutral(context), [fixture_commit] if fixture_commit is not None else []

    frame = drag_frame(state.mode, session, world, scene, snap_tol, tol, options)
    commit = commit_drag(session, frame, scene, tol)
    return _neutral(context), [commit] if commit is not None else []


def _on_cancel(context: InteractionContext) -> Transition:
    state = context.state
    if isinstance(state, Idle):
        return context, []
    if not isinstance(state, Dragging):
        return _neutral(context), []
    session = state.session
    logger.debug("Drag cancelled in mode %s", state.mode)
    cancelled = DragCancelled(
        node_positions=dict(session.original_positions),
        fixture_id=session.fixture_id,
        fixture_position=session.fixture_original,
        snapshot=session.snapshot,
    )
    return _neutral(context), [cancelled]


def transition(
    context: InteractionContext,
    event: Event,
    scene: Scene,
    viewport: Viewport,
    tolerances: Optional[EditorTolerances] = None,
    snap_options: Optional[SnapOptions] = None,
) -> Transition:
    """Advance the select tool by one event.

    Returns the next context and the effects the event produced. The scene is
    only read; committing effects is left to the caller. A ``ContextChanged``
    effect is appended whenever the context differs from the one passed in.
    """

    tol = resolve_tolerances(tolerances)
    options = snap_options or DRAG_SNAP_OPTIONS

    if isinstance(event, PointerDown):
        new, effects = _on_pointer_down(context, event, scene, viewport)
    elif isinstance(event, PointerMove):
        new, effects = _on_pointer_move(context, event, scene, viewport, tol, options)
    elif isinstance(event, PointerUp):
        new, effects = _on_pointer_up(context, event, scene, viewport, tol, options)
    elif isinstance(event, Cancel):
        new, effects = _on_cancel(context)
    else:
        raise TypeError(f"Unsupported select tool event: {event!r}")

    if new != context:
        if new.state_name != context.state_name:
            logger.debug("Select tool %s -> %s", context.state_name, new.state_name)
        effects.append(ContextChanged(new))
    return new, effects


Callback = Callable[..., None]


class SelectTool:
    """Event-driven wrapper around ``transition`` with observer callbacks."""

    def __init__(
        self,
        *,
        tolerances: Optional[EditorTolerances] = None,
        snap_options: Optional[SnapOptions] = None,
        on_context_change: Optional[Callback] = None,
        on_selection_change: Optional[Callback] = None,
        on_drag_update: Optional[Callback] = None,
        on_drag_commit: Optional[Callback] = None,
        on_fixture_drag_update: Optional[Callback] = None,
        on_fixture_drag_commit: Optional[Callback] = None,
        on_drag_cancel: Optional[Callback] = None,
    ) -> None:
        self.tolerances = tolerances
        self.snap_options = snap_options
        self.on_context_change = on_context_change
        self.on_selection_change = on_selection_change
        self.on_drag_update = on_drag_update
        self.on_drag_commit = on_drag_commit
        self.on_fixture_drag_update = on_fixture_drag_update
        self.on_fixture_drag_commit = on_fixture_drag_commit
        self.on_drag_cancel = on_drag_cancel
        self._context = InteractionContext()

    @property
    def context(self) -> InteractionContext:
        return self._context

    def dispatch(self, event: Event, scene: Scene, viewport: Viewport) -> List[Effect]:
        self._context, effects = transition(
            self._context, event, scene, viewport, self.tolerances, self.snap_options
        )
        for effect in effects:
            self._notify(effect)
        return effects

    def pointer_down(
        self,
        screen: Point,
        scene: Scene,
        viewport: Viewport,
        hit: Optional[HitInfo] = None,
        additive: bool = False,
        constrain_angle: bool = False,
    ) -> List[Effect]:
        if hit is None:
            hit = resolve_hit(screen, scene, viewport, self._context.selected_wall_ids, self.tolerances)
        return self.dispatch(PointerDown(screen, hit, additive, constrain_angle), scene, viewport)

    def pointer_move(
        self,
        screen: Point,
        scene: Scene,
        viewport: Viewport,
        hit: Optional[HitInfo] = None,
        constrain_angle: bool = False,
    ) -> List[Effect]:
        return self.dispatch(PointerMove(screen, hit, constrain_angle), scene, viewport)

    def pointer_up(self, scene: Scene, viewport: Viewport, screen: Optional[Point] = None) -> List[Effect]:
        return self.dispatch(PointerUp(screen), scene, viewport)

    def cancel(self, scene: Scene, viewport: Viewport) -> List[Effect]:
        return self.dispatch(Cancel(), scene, viewport)

    def reset(self) -> None:
        """Drop any gesture and selection without emitting drag effects."""

        if self._context == InteractionContext():
            return
        self._context = InteractionContext()
        self._notify(ContextChanged(self._context))

    def _notify(self, effect: Effect) -> None:
        handlers: Dict[type, Tuple[Optional[Callback], Tuple]] = {
            ContextChanged: (self.on_context_change, ("context",)),
            SelectionChanged: (self.on_selection_change, ("wall_ids", "fixture_id")),
            DragUpdated: (self.on_drag_update, ("wall_ids", "node_positions")),
            FixtureDragUpdated: (self.on_fixture_drag_update, ("fixture_id", "position")),
            DragCommitted: (self.on_drag_commit, ()),
            FixtureDragCommitted: (self.on_fixture_drag_commit, ()),
            DragCancelled: (self.on_drag_cancel, ()),
        }
        callback, fields = handlers[type(effect)]
        if callback is None:
            return
        if fields:
            callback(*(getattr(effect, name) for name in fields))
        else:
            callback(effect)


__all__ = ["SelectTool", "Transition", "transition"]
