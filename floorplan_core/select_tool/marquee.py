"""Screen-space marquee box and wall inclusion tests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Optional, Tuple

from .. import vec
from ..config import MIN_MARQUEE_SIZE_PX
from ..scene import Scene, WallId
from ..vec import Point
from ..viewport import Viewport, world_to_screen


@dataclass(frozen=True)
class MarqueeBox:
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def corners(self) -> Tuple[Point, Point, Point, Point]:
        return (
            (self.min_x, self.min_y),
            (self.max_x, self.min_y),
            (self.max_x, self.max_y),
            (self.min_x, self.max_y),
        )


def get_marquee_box(start: Point, current: Point, min_size: float = MIN_MARQUEE_SIZE_PX) -> Optional[MarqueeBox]:
    """Normalised box spanned by two corners, or ``None`` when it is too small."""

    box = MarqueeBox(
        min(start[0], current[0]),
        min(start[1], current[1]),
        max(start[0], current[0]),
        max(start[1], current[1]),
    )
    if box.width < min_size or box.height < min_size:
        return None
    return box


def is_point_in_box(point: Point, box: MarqueeBox) -> bool:
    return box.min_x <= point[0] <= box.max_x and box.min_y <= point[1] <= box.max_y


def segment_intersects_box(a: Point, b: Point, box: MarqueeBox) -> bool:
    corners = box.corners()
    for idx in range(4):
        if vec.segments_intersect(a, b, corners[idx], corners[(idx + 1) % 4]):
            return True
    return False


def walls_in_marquee(scene: Scene, viewport: Viewport, box: MarqueeBox) -> FrozenSet[WallId]:
    """Walls with an endpoint inside ``box`` or a segment crossing its border."""

    selected = set()
    for wall in scene.valid_walls():
        world_a, world_b = scene.wall_endpoints(wall)
        screen_a = world_to_screen(world_a, viewport)
        screen_b = world_to_screen(world_b, viewport)
        if (
            is_point_in_box(screen_a, box)
            or is_point_in_box(screen_b, box)
            or segment_intersects_box(screen_a, screen_b, box)
        ):
            selected.add(wall.id)
    return frozenset(selected)


__all__ = [
    "MarqueeBox",
    "get_marquee_box",
    "is_point_in_box",
    "segment_intersects_box",
    "walls_in_marquee",
]
