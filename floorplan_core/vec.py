"""Plain tuple-based 2D vector helpers."""

from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

Point = Tuple[float, float]

_DENOM_EPS = 1e-9


def as_point(value: Sequence[float]) -> Point:
    if len(value) != 2:
        raise ValueError("point must be length-2")
    return float(value[0]), float(value[1])


def add(a: Point, b: Point) -> Point:
    return a[0] + b[0], a[1] + b[1]


def sub(a: Point, b: Point) -> Point:
    return a[0] - b[0], a[1] - b[1]


def scale(v: Point, s: float) -> Point:
    return v[0] * s, v[1] * s


def dot(a: Point, b: Point) -> float:
    return a[0] * b[0] + a[1] * b[1]


def cross(a: Point, b: Point) -> float:
    return a[0] * b[1] - a[1] * b[0]


def length(v: Point) -> float:
    return math.hypot(v[0], v[1])


def distance(a: Point, b: Point) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def normalize(v: Point) -> Point:
    norm = length(v)
    if norm <= 0.0:
        return 0.0, 0.0
    return v[0] / norm, v[1] / norm


def perpendicular(v: Point) -> Point:
    # left-hand normal for a y-up world
    return -v[1], v[0]


def midpoint(a: Point, b: Point) -> Point:
    return (a[0] + b[0]) * 0.5, (a[1] + b[1]) * 0.5


def lerp(a: Point, b: Point, t: float) -> Point:
    return a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t


def project_point_to_segment(point: Point, a: Point, b: Point) -> Tuple[Point, float]:
    """Project ``point`` onto segment ``a``-``b``; returns the foot and clamped parameter."""

    ab = sub(b, a)
    denom = dot(ab, ab)
    if denom == 0.0:
        return a, 0.0
    t = dot(sub(point, a), ab) / denom
    t = min(max(t, 0.0), 1.0)
    return lerp(a, b, t), t


def intersect_lines(
    p: Point, r: Point, q: Point, s: Point, *, eps: float = _DENOM_EPS
) -> Optional[Point]:
    """Intersect lines ``p + t*r`` and ``q + u*s``; ``None`` when (nearly) parallel."""

    denom = cross(r, s)
    if abs(denom) <= eps:
        return None
    t = cross(sub(q, p), s) / denom
    return p[0] + t * r[0], p[1] + t * r[1]


def segments_intersect(p1: Point, p2: Point, p3: Point, p4: Point, *, eps: float = 1e-10) -> bool:
    """Return ``True`` when segments ``p1-p2`` and ``p3-p4`` cross or touch."""

    r = sub(p2, p1)
    s = sub(p4, p3)
    denom = cross(r, s)
    if abs(denom) < eps:
        return False
    diff = sub(p3, p1)
    ua = cross(diff, s) / denom
    ub = cross(diff, r) / denom
    return 0.0 <= ua <= 1.0 and 0.0 <= ub <= 1.0


__all__ = [
    "Point",
    "add",
    "as_point",
    "cross",
    "distance",
    "dot",
    "intersect_lines",
    "length",
    "lerp",
    "midpoint",
    "normalize",
    "perpendicular",
    "project_point_to_segment",
    "scale",
    "segments_intersect",
    "sub",
]
