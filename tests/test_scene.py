import pytest

from floorplan_core.scene import (
    Fixture,
    Node,
    NodeIndex,
    Scene,
    SceneValidationError,
    Wall,
    new_id,
    normalize_wall_dimensions,
    scene_from_dict,
    scene_to_dict,
)
from floorplan_core.validate import validate_scene


def _scene_data():
    return {
        "nodes": [
            {"id": "n1", "x": 0, "y": 0},
            {"id": "n2", "x": 1000, "y": 0},
            {"id": "n3", "x": 1000, "y": 1000, "locked": True},
        ],
        "walls": [
            {"id": "w1", "nodeAId": "n1", "nodeBId": "n2", "thicknessMm": 100, "heightMm": 2700},
            {
                "id": "w2",
                "nodeAId": "n2",
                "nodeBId": "n3",
                "thicknessMm": 150,
                "heightMm": 2700,
                "raiseFromFloorMm": 100,
            },
        ],
        "fixtures": [
            {
                "id": "f1",
                "schemaId": "door-single",
                "position": {"x": 500, "y": 0},
                "rotation": 1.5,
                "params": {"widthMm": 800},
            }
        ],
    }


def _scene(*walls, nodes=None):
    nodes = nodes or {}
    return Scene(
        nodes={node_id: Node(node_id, x, y) for node_id, (x, y) in nodes.items()},
        walls={wall.id: wall for wall in walls},
    )


def test_scene_from_dict_reads_camel_case_fields():
    scene = scene_from_dict(_scene_data())

    assert scene.nodes["n3"].locked
    assert scene.walls["w2"] == Wall("w2", "n2", "n3", 150.0, 2700.0, 100.0)
    fixture = scene.fixtures["f1"]
    assert fixture.schema_id == "door-single"
    assert fixture.position == (500.0, 0.0)
    assert fixture.rotation_rad == 1.5
    assert fixture.params == {"widthMm": 800}


def test_scene_dict_round_trip():
    data = _scene_data()
    again = scene_from_dict(scene_to_dict(scene_from_dict(data)))
    assert again == scene_from_dict(data)


def test_scene_from_dict_rejects_duplicate_ids():
    data = _scene_data()
    data["walls"].append(dict(data["walls"][0]))
    with pytest.raises(SceneValidationError) as exc:
        scene_from_dict(data)
    assert "duplicate wall id 'w1'" in str(exc.value)


def test_scene_from_dict_reports_missing_keys():
    with pytest.raises(SceneValidationError) as exc:
        scene_from_dict({"nodes": [{"id": "n1", "x": 0}]})
    assert "missing 'y'" in str(exc.value)


def test_normalize_wall_dimensions_clamps_to_minimum():
    assert normalize_wall_dimensions(0, -5, -1) == (0.1, 0.1, 0.0)
    assert normalize_wall_dimensions(120, 2400, 50) == (120.0, 2400.0, 50.0)


@pytest.mark.parametrize("bad", ["thick", None, True])
def test_normalize_wall_dimensions_rejects_non_numbers(bad):
    with pytest.raises(SceneValidationError):
        normalize_wall_dimensions(bad, 2400)


def test_lookup_of_unknown_node_raises_key_error():
    scene = _scene(nodes={"n1": (0.0, 0.0)})
    with pytest.raises(KeyError) as exc:
        scene.node("nope")
    assert "Unknown node 'nope' in scene" in str(exc.value)
    assert scene.get_node("nope") is None


def test_dangling_wall_has_no_endpoints():
    wall = Wall("w1", "n1", "ghost", 100.0, 2700.0)
    scene = _scene(wall, nodes={"n1": (0.0, 0.0)})

    assert scene.wall_endpoints(wall) is None
    assert list(scene.valid_walls()) == []


def test_walls_at_node_and_other_node():
    w1 = Wall("w1", "n1", "n2", 100.0, 2700.0)
    w2 = Wall("w2", "n2", "n3", 100.0, 2700.0)
    scene = _scene(w1, w2, nodes={"n1": (0, 0), "n2": (1, 0), "n3": (2, 0)})

    assert sorted(scene.walls_at_node("n2")) == ["w1", "w2"]
    assert scene.other_walls_at_node("n2", "w1") == ["w2"]
    assert w1.other_node_id("n2") == "n1"
    with pytest.raises(KeyError):
        w1.other_node_id("n3")


def test_with_node_positions_leaves_original_untouched():
    scene = _scene(nodes={"n1": (0.0, 0.0), "n2": (10.0, 0.0)})
    moved = scene.with_node_positions({"n1": (5.0, 5.0), "ghost": (1.0, 1.0)})

    assert moved.nodes["n1"].position == (5.0, 5.0)
    assert scene.nodes["n1"].position == (0.0, 0.0)
    assert "ghost" not in moved.nodes


def test_with_fixture_position_moves_only_that_fixture():
    scene = Scene(fixtures={"f1": Fixture("f1", "chair", (0.0, 0.0))})
    moved = scene.with_fixture_position("f1", (3.0, 4.0))
    assert moved.fixtures["f1"].position == (3.0, 4.0)
    assert scene.fixtures["f1"].position == (0.0, 0.0)


def test_node_index_radius_query_is_inclusive_and_sorted():
    nodes = {
        "a": Node("a", 0.0, 0.0),
        "b": Node("b", 3.0, 4.0),
        "c": Node("c", 1.0, 0.0),
        "d": Node("d", 50.0, 0.0),
    }
    index = NodeIndex(nodes)

    hits = index.query_radius((0.0, 0.0), 5.0)
    assert [node_id for node_id, _ in hits] == ["a", "c", "b"]
    assert hits[2][1] == pytest.approx(5.0)
    assert index.nearest((0.0, 0.0), 5.0, exclude={"a"}) == ("c", pytest.approx(1.0))
    assert NodeIndex({}).query_radius((0.0, 0.0), 10.0) == []


def test_new_id_uses_prefix_and_is_unique():
    first = new_id("node")
    assert first.startswith("node-")
    assert first != new_id("node")


def test_validate_scene_accepts_well_formed_scene():
    scene = scene_from_dict(_scene_data())
    assert validate_scene(scene) == []


def test_validate_scene_strict_rejects_missing_node():
    scene = _scene(Wall("w1", "n1", "ghost", 100.0, 2700.0), nodes={"n1": (0, 0)})

    with pytest.raises(SceneValidationError) as exc:
        validate_scene(scene)
    assert 'references missing node "ghost"' in str(exc.value)

    warnings = validate_scene(scene, strict=False)
    assert warnings == ['wall "w1" references missing node "ghost"']


def test_validate_scene_warns_about_orphan_nodes():
    scene = _scene(Wall("w1", "n1", "n2", 100.0, 2700.0), nodes={"n1": (0, 0), "n2": (1, 0), "n9": (5, 5)})
    assert validate_scene(scene) == ['node "n9" is not referenced by any wall']


@pytest.mark.parametrize(
    "wall, message_part",
    [
        (Wall("w1", "n1", "n1", 100.0, 2700.0), "starts and ends at node"),
        (Wall("w1", "n1", "n2", 0.0, 2700.0), "thickness must be positive"),
        (Wall("w1", "n1", "n2", 100.0, -1.0), "height must be positive"),
        (Wall("w1", "n1", "n2", 100.0, 2700.0, -5.0), "raise from floor must be non-negative"),
    ],
)
def test_validate_scene_rejects_bad_walls(wall, message_part):
    scene = _scene(wall, nodes={"n1": (0, 0), "n2": (1, 0)})
    with pytest.raises(SceneValidationError) as exc:
        validate_scene(scene)
    assert message_part in str(exc.value)


def test_validate_scene_rejects_mismatched_keys():
    scene = Scene(nodes={"n1": Node("other", 0.0, 0.0)})
    with pytest.raises(SceneValidationError):
        validate_scene(scene)
