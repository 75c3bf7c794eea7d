"""Example: drive the select tool to drag a wall end onto another node."""

from floorplan_core import SelectTool, SnapOptions, Viewport, apply_drag_commit, scene_from_dict, world_to_screen

PLAN = {
    "nodes": [
        {"id": "a", "x": 0, "y": 0},
        {"id": "b", "x": 3000, "y": 0},
        {"id": "c", "x": 3000, "y": 2500},
        {"id": "d", "x": 200, "y": 2400},
    ],
    "walls": [
        {"id": "w1", "nodeAId": "a", "nodeBId": "b", "thicknessMm": 150, "heightMm": 2700},
        {"id": "w2", "nodeAId": "b", "nodeBId": "c", "thicknessMm": 150, "heightMm": 2700},
        {"id": "w3", "nodeAId": "c", "nodeBId": "d", "thicknessMm": 150, "heightMm": 2700},
    ],
}


def _print_ghost(wall_ids, positions):
    rounded = {node_id: (round(x), round(y)) for node_id, (x, y) in positions.items()}
    print("ghost:", rounded)


def main() -> None:
    scene = scene_from_dict(PLAN)
    viewport = Viewport(center_x=400.0, center_y=300.0, scale=0.1)
    commits = []
    tool = SelectTool(
        snap_options=SnapOptions(nodes=True, edges=True, midpoints=True),
        on_selection_change=lambda walls, fixture: print("selected:", sorted(walls)),
        on_drag_update=_print_ghost,
        on_drag_commit=commits.append,
    )

    # grab the free end of w3 and drop it close to node a
    tool.pointer_down(world_to_screen(scene.nodes["d"].position, viewport), scene, viewport)
    tool.pointer_move(world_to_screen((150.0, 1200.0), viewport), scene, viewport)
    tool.pointer_move(world_to_screen((30.0, 40.0), viewport), scene, viewport)
    tool.pointer_up(scene, viewport)

    for commit in commits:
        print("merge targets:", commit.merge_targets)
        scene = apply_drag_commit(scene, commit)
    print("w3 now spans", scene.walls["w3"].node_ids)


if __name__ == "__main__":
    main()
