"""Example: build mitered wall outlines for a small room and export TikZ."""

from floorplan_core import build_scene_polygons, generate_tikz_document, polygon_area, scene_from_dict

ROOM = {
    "nodes": [
        {"id": "a", "x": 0, "y": 0},
        {"id": "b", "x": 4000, "y": 0},
        {"id": "c", "x": 4000, "y": 3000},
        {"id": "d", "x": 0, "y": 3000},
        {"id": "e", "x": 2000, "y": 3000},
        {"id": "f", "x": 2000, "y": 5000},
    ],
    "walls": [
        {"id": "south", "nodeAId": "a", "nodeBId": "b", "thicknessMm": 200, "heightMm": 2700},
        {"id": "east", "nodeAId": "b", "nodeBId": "c", "thicknessMm": 200, "heightMm": 2700},
        {"id": "north-1", "nodeAId": "c", "nodeBId": "e", "thicknessMm": 200, "heightMm": 2700},
        {"id": "north-2", "nodeAId": "e", "nodeBId": "d", "thicknessMm": 200, "heightMm": 2700},
        {"id": "west", "nodeAId": "d", "nodeBId": "a", "thicknessMm": 200, "heightMm": 2700},
        {"id": "spur", "nodeAId": "e", "nodeBId": "f", "thicknessMm": 100, "heightMm": 2700},
    ],
}


def main() -> None:
    scene = scene_from_dict(ROOM)
    polygons = build_scene_polygons(scene)
    for wall_id in sorted(polygons):
        polygon = polygons[wall_id]
        print(f"{wall_id}: {len(polygon)} vertices, area {polygon_area(polygon) / 1e6:.3f} m^2")
    print()
    print(generate_tikz_document(scene, polygons, normalize=True))


if __name__ == "__main__":
    main()
