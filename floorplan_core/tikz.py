"""TikZ export of wall outlines, used to eyeball joint construction."""

from __future__ import annotations

import math
from typing import Dict, List, Mapping, Optional, Tuple

from .config import EditorTolerances
from .polygon import Polygon, build_scene_polygons
from .scene import Scene, WallId

standalone_tpl = r"""\documentclass[border=2pt]{standalone}
\usepackage{tikz}
\tikzset{
  fp/line width/.store in=\fpLW,   fp/line width=0.6pt,
  fp/dot radius/.store in=\fpDotR, fp/dot radius=1.2pt,
  wall/.style={line width=\fpLW, fill=black!12},
  node/.style={circle,fill=black,inner sep=0pt,minimum size=0pt},
  nodelabel/.style={font=\tiny, inner sep=1pt, above right},
}
\begin{document}
%s
\end{document}
"""


def _format_float(value: float) -> str:
    if math.isnan(value) or math.isinf(value):
        raise ValueError("Cannot format non-finite float for TikZ output")
    formatted = f"{value:.4f}"
    formatted = formatted.rstrip("0").rstrip(".")
    if formatted in ("", "-0"):
        return "0"
    return formatted


def _escape_id(value: str) -> str:
    return value.replace("_", r"\_").replace("#", r"\#").replace("%", r"\%").replace("&", r"\&")


def _transform(scene: Scene, polygons: Mapping[WallId, Polygon], normalize: bool):
    points: List[Tuple[float, float]] = [node.position for node in scene.nodes.values()]
    for polygon in polygons.values():
        points.extend(polygon)
    if not normalize or not points:
        # millimetres to centimetres
        return lambda pt: (pt[0] / 10.0, pt[1] / 10.0)
    xs = [pt[0] for pt in points]
    ys = [pt[1] for pt in points]
    span = max(max(xs) - min(xs), max(ys) - min(ys), 1e-9)
    cx = 0.5 * (min(xs) + max(xs))
    cy = 0.5 * (min(ys) + max(ys))
    factor = 8.0 / span
    return lambda pt: ((pt[0] - cx) * factor, (pt[1] - cy) * factor)


def generate_tikz_code(
    scene: Scene,
    polygons: Optional[Mapping[WallId, Polygon]] = None,
    *,
    normalize: bool = False,
    tolerances: Optional[EditorTolerances] = None,
) -> str:
    """Emit a ``tikzpicture`` with one filled outline per wall and a dot per node.

    Coordinates are written in centimetres (1 cm per 10 mm) unless ``normalize``
    rescales the drawing to an 8 cm box.
    """

    if polygons is None:
        polygons = build_scene_polygons(scene, tolerances)
    to_page = _transform(scene, polygons, normalize)

    lines: List[str] = ["\\begin{tikzpicture}"]
    for wall_id in sorted(polygons):
        polygon = polygons[wall_id]
        if not polygon:
            continue
        coords = " -- ".join(
            f"({_format_float(x)}, {_format_float(y)})" for x, y in (to_page(pt) for pt in polygon)
        )
        lines.append(f"  \\draw[wall] {coords} -- cycle; % {_escape_id(wall_id)}")

    node_coords: Dict[str, Tuple[float, float]] = {
        node_id: to_page(node.position) for node_id, node in scene.nodes.items()
    }
    for node_id in sorted(node_coords):
        x, y = node_coords[node_id]
        lines.append(
            f"  \\fill ({_format_float(x)}, {_format_float(y)}) circle[radius=\\fpDotR]"
            f" node[nodelabel] {{{_escape_id(node_id)}}};"
        )
    lines.append("\\end{tikzpicture}")
    return "\n".join(lines)


def generate_tikz_document(
    scene: Scene,
    polygons: Optional[Mapping[WallId, Polygon]] = None,
    *,
    normalize: bool = False,
    tolerances: Optional[EditorTolerances] = None,
) -> str:
    """Render a standalone LaTeX document around ``generate_tikz_code``."""

    return standalone_tpl % generate_tikz_code(scene, polygons, normalize=normalize, tolerances=tolerances)


__all__ = ["generate_tikz_code", "generate_tikz_document"]
