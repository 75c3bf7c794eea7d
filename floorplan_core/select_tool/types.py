"""States, events and effects of the select tool.

States are small frozen variants; the context that carries them is replaced,
never mutated, on every transition.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Dict, FrozenSet, Mapping, Optional, Tuple, Union

from ..hit_testing import EMPTY_HIT, HitInfo
from ..scene import FixtureId, NodeId, Scene, WallId
from ..snapping import SnapCandidate
from ..vec import Point

DRAG_MODES = ("wall", "node-a", "node-b", "marquee", "fixture")


@dataclass(frozen=True)
class DragSession:
    """Everything captured when a drag starts.

    Screen and world coordinates are kept apart: ``*_screen`` fields are pixels,
    everything else is millimetres. ``moved`` turns true once the pointer has
    travelled past the minimum drag distance; until then the drag is a click.
    """

    start_screen: Point
    start_world: Point
    current_screen: Point
    original_positions: Dict[NodeId, Point] = field(default_factory=dict)
    anchor_offsets: Dict[NodeId, Point] = field(default_factory=dict)
    moving_node_ids: FrozenSet[NodeId] = frozenset()
    wall_ids: Tuple[WallId, ...] = ()
    snapshot: Optional[Scene] = None
    drag_node_id: Optional[NodeId] = None
    anchor_node_id: Optional[NodeId] = None
    fixture_id: Optional[FixtureId] = None
    fixture_original: Optional[Point] = None
    moved: bool = False
    constrain_angle: bool = False


@dataclass(frozen=True)
class Idle:
    name: ClassVar[str] = "idle"


@dataclass(frozen=True)
class MarqueePending:
    name: ClassVar[str] = "marquee-pending"

    anchor: Point
    additive: bool = False


@dataclass(frozen=True)
class Marquee:
    name: ClassVar[str] = "marquee"

    anchor: Point
    current: Point


@dataclass(frozen=True)
class Dragging:
    name: ClassVar[str] = "dragging"

    mode: str
    session: DragSession

    def __post_init__(self) -> None:
        if self.mode not in DRAG_MODES:
            raise ValueError(f"Unknown drag mode '{self.mode}'")


SelectState = Union[Idle, MarqueePending, Marquee, Dragging]


@dataclass(frozen=True)
class InteractionContext:
    state: SelectState = field(default_factory=Idle)
    selected_wall_ids: FrozenSet[WallId] = frozenset()
    selected_fixture_id: Optional[FixtureId] = None
    hovered_wall_id: Optional[WallId] = None
    display_positions: Mapping[NodeId, Point] = field(default_factory=dict)
    display_fixture_position: Optional[Point] = None
    snap_candidates: Tuple[SnapCandidate, ...] = ()
    active_snaps: Mapping[NodeId, str] = field(default_factory=dict)

    @property
    def state_name(self) -> str:
        return self.state.name

    @property
    def drag_mode(self) -> Optional[str]:
        if isinstance(self.state, Dragging):
            return self.state.mode
        if isinstance(self.state, Marquee):
            return "marquee"
        return None

    @property
    def session(self) -> Optional[DragSession]:
        if isinstance(self.state, Dragging):
            return self.state.session
        return None


# events


@dataclass(frozen=True)
class PointerDown:
    screen: Point
    hit: HitInfo = EMPTY_HIT
    additive: bool = False
    constrain_angle: bool = False


@dataclass(frozen=True)
class PointerMove:
    screen: Point
    hit: Optional[HitInfo] = None
    constrain_angle: bool = False


@dataclass(frozen=True)
class PointerUp:
    screen: Optional[Point] = None


@dataclass(frozen=True)
class Cancel:
    pass


Event = Union[PointerDown, PointerMove, PointerUp, Cancel]


# effects


@dataclass(frozen=True)
class NodeMove:
    original: Point
    final: Point


@dataclass(frozen=True)
class ContextChanged:
    context: InteractionContext


@dataclass(frozen=True)
class SelectionChanged:
    wall_ids: FrozenSet[WallId]
    fixture_id: Optional[FixtureId] = None


@dataclass(frozen=True)
class DragUpdated:
    wall_ids: Tuple[WallId, ...]
    node_positions: Dict[NodeId, Point]


@dataclass(frozen=True)
class FixtureDragUpdated:
    fixture_id: FixtureId
    position: Point


@dataclass(frozen=True)
class DragCommitted:
    """Final node positions of a finished drag plus the merges it asks for."""

    wall_ids: Tuple[WallId, ...]
    node_positions: Dict[NodeId, NodeMove]
    merge_targets: Dict[NodeId, NodeId] = field(default_factory=dict)


@dataclass(frozen=True)
class FixtureDragCommitted:
    fixture_id: FixtureId
    original: Point
    final: Point


@dataclass(frozen=True)
class DragCancelled:
    """Positions to restore, plus the scene as it was when the drag started."""

    node_positions: Dict[NodeId, Point] = field(default_factory=dict)
    fixture_id: Optional[FixtureId] = None
    fixture_position: Optional[Point] = None
    snapshot: Optional[Scene] = field(default=None, compare=False)


Effect = Union[
    ContextChanged,
    SelectionChanged,
    DragUpdated,
    FixtureDragUpdated,
    DragCommitted,
    FixtureDragCommitted,
    DragCancelled,
]


__all__ = [
    "Cancel",
    "ContextChanged",
    "DRAG_MODES",
    "DragCancelled",
    "DragCommitted",
    "DragSession",
    "DragUpdated",
    "Dragging",
    "Effect",
    "Event",
    "FixtureDragCommitted",
    "FixtureDragUpdated",
    "Idle",
    "InteractionContext",
    "Marquee",
    "MarqueePending",
    "NodeMove",
    "PointerDown",
    "PointerMove",
    "PointerUp",
    "SelectState",
    "SelectionChanged",
]
