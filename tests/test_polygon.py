import math

import pytest

from floorplan_core.polygon import (
    build_scene_polygons,
    build_wall_polygon,
    compute_joint,
    polygon_area,
    polygon_contains_point,
)
from floorplan_core.scene import Node, Scene, Wall


def _scene(walls, nodes):
    return Scene(
        nodes={node_id: Node(node_id, float(x), float(y)) for node_id, (x, y) in nodes.items()},
        walls={wall.id: wall for wall in walls},
    )


def _wall(wall_id, node_a, node_b, thickness=100.0):
    return Wall(wall_id, node_a, node_b, thickness, 2700.0)


def _assert_polygon(actual, expected):
    assert len(actual) == len(expected), actual
    for got, want in zip(actual, expected):
        assert got == pytest.approx(want, abs=1e-9), (actual, expected)


def test_isolated_wall_is_a_rectangle():
    scene = _scene([_wall("w1", "a", "b")], {"a": (0, 0), "b": (1000, 0)})
    polygon = build_wall_polygon(scene.walls["w1"], scene)

    _assert_polygon(polygon, [(0, 50), (0, -50), (1000, -50), (1000, 50)])
    assert polygon_area(polygon) == pytest.approx(100000.0)


def test_l_joint_miters_both_walls_at_node_a():
    scene = _scene(
        [_wall("w1", "o", "x"), _wall("w2", "o", "y")],
        {"o": (0, 0), "x": (1000, 0), "y": (0, 1000)},
    )

    w1 = build_wall_polygon(scene.walls["w1"], scene)
    w2 = build_wall_polygon(scene.walls["w2"], scene)

    _assert_polygon(w1, [(50, 50), (0, 0), (-50, -50), (1000, -50), (1000, 50)])
    _assert_polygon(w2, [(-50, -50), (0, 0), (50, 50), (50, 1000), (-50, 1000)])
    # the two outlines share the joint edge through the node
    assert w1[0] == pytest.approx(w2[2])
    assert w1[2] == pytest.approx(w2[0])


def test_joint_at_node_b_swaps_sides():
    scene = _scene(
        [_wall("w1", "a", "b"), _wall("w2", "b", "c")],
        {"a": (0, 0), "b": (1000, 0), "c": (1000, 1000)},
    )

    polygon = build_wall_polygon(scene.walls["w1"], scene)

    _assert_polygon(polygon, [(0, 50), (0, -50), (1050, -50), (1000, 0), (950, 50)])
    assert polygon_area(polygon) > 0


def test_compute_joint_reports_apex_at_shared_node():
    scene = _scene(
        [_wall("w1", "o", "x"), _wall("w2", "o", "y")],
        {"o": (0, 0), "x": (1000, 0), "y": (0, 1000)},
    )
    joint = compute_joint(scene.walls["w1"], "o", scene)

    assert joint is not None
    assert joint.apex == (0.0, 0.0)
    assert joint.left == pytest.approx((50.0, 50.0))
    assert joint.right == pytest.approx((-50.0, -50.0))
    assert compute_joint(scene.walls["w1"], "x", scene) is None


def test_short_wall_at_joint_gives_flat_caps_on_both_walls():
    scene = _scene(
        [_wall("long", "o", "x"), _wall("short", "o", "y")],
        {"o": (0, 0), "x": (1000, 0), "y": (0, 30)},
    )

    assert compute_joint(scene.walls["short"], "o", scene) is None
    assert compute_joint(scene.walls["long"], "o", scene) is None
    _assert_polygon(
        build_wall_polygon(scene.walls["long"], scene),
        [(0, 50), (0, -50), (1000, -50), (1000, 50)],
    )


def test_collinear_walls_get_flat_caps():
    scene = _scene(
        [_wall("w1", "a", "b"), _wall("w2", "b", "c")],
        {"a": (0, 0), "b": (1000, 0), "c": (2000, 0)},
    )

    _assert_polygon(
        build_wall_polygon(scene.walls["w1"], scene),
        [(0, 50), (0, -50), (1000, -50), (1000, 50)],
    )


def test_t_junction_gets_flat_caps():
    scene = _scene(
        [_wall("w1", "m", "a"), _wall("w2", "m", "b"), _wall("w3", "m", "c")],
        {"m": (0, 0), "a": (1000, 0), "b": (-1000, 0), "c": (0, 1000)},
    )

    polygons = build_scene_polygons(scene)

    assert sorted(polygons) == ["w1", "w2", "w3"]
    assert all(len(polygon) == 4 for polygon in polygons.values())
    _assert_polygon(polygons["w3"], [(-50, 0), (50, 0), (50, 1000), (-50, 1000)])


def test_very_acute_joint_falls_back_to_flat_cap():
    scene = _scene(
        [_wall("w1", "o", "a"), _wall("w2", "o", "b")],
        {"o": (0, 0), "a": (1000, 0), "b": (1000, 10)},
    )

    assert compute_joint(scene.walls["w1"], "o", scene) is None
    assert len(build_wall_polygon(scene.walls["w1"], scene)) == 4


def test_walls_spanning_the_same_nodes_do_not_miter():
    scene = _scene(
        [_wall("w1", "a", "b"), _wall("w2", "b", "a")],
        {"a": (0, 0), "b": (1000, 0)},
    )

    assert compute_joint(scene.walls["w1"], "a", scene) is None
    assert len(build_wall_polygon(scene.walls["w1"], scene)) == 4


def test_wall_with_missing_node_has_no_polygon():
    scene = _scene([_wall("w1", "a", "ghost"), _wall("w2", "a", "b")], {"a": (0, 0), "b": (0, 1000)})

    assert build_wall_polygon(scene.walls["w1"], scene) == []
    polygons = build_scene_polygons(scene)
    assert list(polygons) == ["w2"]
    # the dangling neighbour does not turn node "a" into a joint
    assert len(polygons["w2"]) == 4


def test_zero_length_wall_yields_finite_vertices():
    scene = _scene([_wall("w1", "a", "b")], {"a": (10, 10), "b": (10, 10)})

    polygon = build_wall_polygon(scene.walls["w1"], scene)

    assert len(polygon) == 4
    assert all(math.isfinite(coord) for point in polygon for coord in point)


@pytest.mark.parametrize(
    "point, expected",
    [
        ((500.0, 0.0), True),
        ((500.0, 50.0), True),
        ((0.0, 0.0), True),
        ((500.0, 51.0), False),
        ((-1.0, 0.0), False),
    ],
)
def test_polygon_contains_point_counts_boundary_as_inside(point, expected):
    rectangle = [(0.0, 50.0), (0.0, -50.0), (1000.0, -50.0), (1000.0, 50.0)]
    assert polygon_contains_point(rectangle, point) is expected


def test_polygon_contains_point_needs_three_vertices():
    assert not polygon_contains_point([(0.0, 0.0), (1.0, 1.0)], (0.5, 0.5))
