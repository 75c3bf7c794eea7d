"""Mapping between millimetre world space and pixel screen space."""

from __future__ import annotations

from dataclasses import dataclass

from .vec import Point


@dataclass(frozen=True)
class Viewport:
    """``scale`` is in pixels per millimetre; screen y grows downward."""

    center_x: float = 0.0
    center_y: float = 0.0
    scale: float = 0.1


def world_to_screen(world_mm: Point, viewport: Viewport) -> Point:
    return (
        viewport.center_x + world_mm[0] * viewport.scale,
        viewport.center_y - world_mm[1] * viewport.scale,
    )


def screen_to_world(screen_px: Point, viewport: Viewport) -> Point:
    return (
        (screen_px[0] - viewport.center_x) / viewport.scale,
        (viewport.center_y - screen_px[1]) / viewport.scale,
    )


def px_to_mm(px: float, viewport: Viewport) -> float:
    return px / viewport.scale


__all__ = ["Viewport", "px_to_mm", "screen_to_world", "world_to_screen"]
