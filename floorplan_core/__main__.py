import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence, Tuple

from floorplan_core import (
    SceneValidationError,
    SnapOptions,
    build_scene_polygons,
    find_snap_candidates,
    generate_tikz_document,
    scene_from_dict,
    validate_scene,
)

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def _parse_point(value: Optional[str]) -> Optional[Tuple[float, float]]:
    if not value:
        return None
    parts = [part.strip() for part in value.split(",") if part.strip()]
    if len(parts) != 2:
        logger.warning("Snap point requires two comma-separated numbers, got %r", value)
        return None
    try:
        return (float(parts[0]), float(parts[1]))
    except ValueError:
        logger.warning("Snap point %r is not numeric", value)
        return None


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Inspect floor-plan scenes")
    parser.add_argument("path", help="Path to a scene JSON file")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on walls that reference missing nodes",
    )
    parser.add_argument(
        "--snap",
        help="World point in millimetres to list snap candidates for, e.g. 100,250",
    )
    parser.add_argument(
        "--tolerance",
        type=float,
        default=None,
        help="Snap tolerance in millimetres (default: snap radius at 1 px/mm)",
    )
    parser.add_argument(
        "--exclude",
        nargs="*",
        default=[],
        help="Node or wall ids that must not be snap targets",
    )
    parser.add_argument(
        "--tikz-output-path",
        help="Write a standalone TikZ document of the wall outlines to the given path",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    with open(args.path, encoding="utf-8") as fin:
        data = json.load(fin)

    logger.info("Loading scene from %s", args.path)
    try:
        scene = scene_from_dict(data)
        warnings = validate_scene(scene, strict=args.strict)
    except SceneValidationError as exc:
        logger.error("Invalid scene: %s", exc)
        raise SystemExit(1)
    logger.info("Validation succeeded")

    print(f"Nodes: {len(scene.nodes)}  Walls: {len(scene.walls)}  Fixtures: {len(scene.fixtures)}")
    print("Warnings:")
    if warnings:
        for warning in warnings:
            print(f"  - {warning}")
    else:
        print("  (none)")

    polygons = build_scene_polygons(scene)
    print("Wall polygons:")
    for wall_id in sorted(scene.walls):
        polygon = polygons.get(wall_id)
        if not polygon:
            print(f"  {wall_id}: (none)")
            continue
        coords = ", ".join(f"({x:.3f}, {y:.3f})" for x, y in polygon)
        print(f"  {wall_id} [{len(polygon)}]: {coords}")

    point = _parse_point(args.snap)
    if point is not None:
        options = SnapOptions(nodes=True, edges=True, midpoints=True, grid=True, guidelines=True)
        candidates = find_snap_candidates(point, scene, args.exclude, args.tolerance, options)
        print(f"Snap candidates near ({point[0]:.3f}, {point[1]:.3f}):")
        if candidates:
            for candidate in candidates:
                x, y = candidate.point
                print(
                    f"  {candidate.kind} {candidate.entity_id or '-'} at ({x:.3f}, {y:.3f}) "
                    f"distance={candidate.distance:.3f} priority={candidate.priority}"
                )
        else:
            print("  (none)")

    if args.tikz_output_path:
        output_path = Path(args.tikz_output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Writing TikZ document to %s", output_path)
        tikz_document = generate_tikz_document(scene, polygons, normalize=True)
        output_path.write_text(tikz_document, encoding="utf-8")
        print(f"TikZ document written to {output_path}")


if __name__ == "__main__":
    main(sys.argv[1:])
