"""Tolerances and thresholds shared by the geometry and interaction modules."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Optional

MIN_MARQUEE_SIZE_PX = 5.0
MIN_DRAG_DISTANCE_PX = 10.0
RIGID_BODY_SNAP_TOLERANCE_MM = 0.5
SAME_POSITION_TOLERANCE_MM = 1.0
SNAP_RADIUS_PX = 10.0
WALL_HIT_RADIUS_PX = 20.0
NODE_HANDLE_RADIUS_MM = 30.0
GRID_SPACING_MM = 1000.0
GUIDELINE_TOLERANCE_MM = 50.0
ANGLE_SNAP_INCREMENT_DEG = 15.0
MIN_WALL_DIMENSION_MM = 0.1
MAX_MITER_LENGTH_RATIO = 10.0
EPSILON = 1e-9


@dataclass
class EditorTolerances:
    """Bundle of the thresholds used while editing a plan.

    Pixel values are measured in screen space, millimetre values in world space.
    """

    min_marquee_size_px: float = MIN_MARQUEE_SIZE_PX
    min_drag_distance_px: float = MIN_DRAG_DISTANCE_PX
    rigid_body_snap_tolerance_mm: float = RIGID_BODY_SNAP_TOLERANCE_MM
    same_position_tolerance_mm: float = SAME_POSITION_TOLERANCE_MM
    snap_radius_px: float = SNAP_RADIUS_PX
    wall_hit_radius_px: float = WALL_HIT_RADIUS_PX
    node_handle_radius_mm: float = NODE_HANDLE_RADIUS_MM
    grid_spacing_mm: float = GRID_SPACING_MM
    guideline_tolerance_mm: float = GUIDELINE_TOLERANCE_MM
    angle_snap_increment_deg: float = ANGLE_SNAP_INCREMENT_DEG
    max_miter_length_ratio: float = MAX_MITER_LENGTH_RATIO
    epsilon: float = EPSILON


_TOLERANCES = EditorTolerances()


def get_tolerances() -> EditorTolerances:
    return copy.deepcopy(_TOLERANCES)


def set_tolerances(config: EditorTolerances) -> None:
    global _TOLERANCES
    _TOLERANCES = copy.deepcopy(config)


def resolve_tolerances(config: Optional[EditorTolerances]) -> EditorTolerances:
    """Return ``config`` or the process-wide defaults when it is ``None``."""

    return config if config is not None else get_tolerances()


__all__ = [
    "ANGLE_SNAP_INCREMENT_DEG",
    "EPSILON",
    "EditorTolerances",
    "GRID_SPACING_MM",
    "GUIDELINE_TOLERANCE_MM",
    "MAX_MITER_LENGTH_RATIO",
    "MIN_DRAG_DISTANCE_PX",
    "MIN_MARQUEE_SIZE_PX",
    "MIN_WALL_DIMENSION_MM",
    "NODE_HANDLE_RADIUS_MM",
    "RIGID_BODY_SNAP_TOLERANCE_MM",
    "SAME_POSITION_TOLERANCE_MM",
    "SNAP_RADIUS_PX",
    "WALL_HIT_RADIUS_PX",
    "get_tolerances",
    "resolve_tolerances",
    "set_tolerances",
]
