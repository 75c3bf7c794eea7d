"""Pointer interaction for selecting and dragging walls, nodes and fixtures."""

from .machine import SelectTool, transition
from .marquee import MarqueeBox, get_marquee_box, is_point_in_box, segment_intersects_box, walls_in_marquee
from .types import (
    Cancel,
    ContextChanged,
    DragCancelled,
    DragCommitted,
    DragSession,
    DragUpdated,
    Dragging,
    FixtureDragCommitted,
    FixtureDragUpdated,
    Idle,
    InteractionContext,
    Marquee,
    MarqueePending,
    NodeMove,
    PointerDown,
    PointerMove,
    PointerUp,
    SelectionChanged,
)

__all__ = [
    "Cancel",
    "ContextChanged",
    "DragCancelled",
    "DragCommitted",
    "DragSession",
    "DragUpdated",
    "Dragging",
    "FixtureDragCommitted",
    "FixtureDragUpdated",
    "Idle",
    "InteractionContext",
    "Marquee",
    "MarqueeBox",
    "MarqueePending",
    "NodeMove",
    "PointerDown",
    "PointerMove",
    "PointerUp",
    "SelectTool",
    "SelectionChanged",
    "get_marquee_box",
    "is_point_in_box",
    "segment_intersects_box",
    "transition",
    "walls_in_marquee",
]
