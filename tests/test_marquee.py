import pytest

from floorplan_core.scene import Node, Scene, Wall
from floorplan_core.select_tool import (
    MarqueeBox,
    get_marquee_box,
    is_point_in_box,
    segment_intersects_box,
    walls_in_marquee,
)
from floorplan_core.viewport import Viewport

VIEWPORT = Viewport(center_x=0.0, center_y=0.0, scale=1.0)


def _scene(nodes, walls):
    return Scene(
        nodes={node_id: Node(node_id, float(x), float(y)) for node_id, (x, y) in nodes.items()},
        walls={wall_id: Wall(wall_id, a, b, 20.0, 2700.0) for wall_id, a, b in walls},
    )


def test_get_marquee_box_normalises_corners():
    box = get_marquee_box((50.0, 10.0), (-10.0, -10.0))
    assert box == MarqueeBox(-10.0, -10.0, 50.0, 10.0)
    assert (box.width, box.height) == (60.0, 20.0)


@pytest.mark.parametrize("current", [(4.0, 40.0), (40.0, 4.9), (0.0, 0.0)])
def test_get_marquee_box_discards_small_boxes(current):
    assert get_marquee_box((0.0, 0.0), current) is None


def test_get_marquee_box_custom_minimum():
    assert get_marquee_box((0.0, 0.0), (4.0, 4.0), min_size=2.0) == MarqueeBox(0.0, 0.0, 4.0, 4.0)


@pytest.mark.parametrize(
    "point, expected",
    [
        ((0.0, 0.0), True),
        ((10.0, 10.0), True),
        ((10.0, 5.0), True),
        ((5.0, 5.0), True),
        ((10.1, 5.0), False),
        ((5.0, -0.1), False),
    ],
)
def test_is_point_in_box_includes_border(point, expected):
    assert is_point_in_box(point, MarqueeBox(0.0, 0.0, 10.0, 10.0)) is expected


def test_segment_intersects_box():
    box = MarqueeBox(0.0, 0.0, 10.0, 10.0)
    assert segment_intersects_box((-5.0, 5.0), (15.0, 5.0), box)
    assert segment_intersects_box((-5.0, -5.0), (15.0, 15.0), box)
    assert not segment_intersects_box((-5.0, 20.0), (15.0, 20.0), box)


def test_walls_in_marquee_selects_wall_with_endpoint_inside():
    scene = _scene({"a": (0, 0), "b": (100, 0)}, [("A", "a", "b")])
    box = get_marquee_box((-10.0, -10.0), (50.0, 10.0))

    assert walls_in_marquee(scene, VIEWPORT, box) == frozenset({"A"})


def test_walls_in_marquee_selects_wall_crossing_the_box():
    scene = _scene(
        {"a": (-100, 0), "b": (200, 0), "c": (1000, 1000), "d": (1100, 1000)},
        [("across", "a", "b"), ("far", "c", "d")],
    )
    box = get_marquee_box((-10.0, -10.0), (50.0, 10.0))

    assert walls_in_marquee(scene, VIEWPORT, box) == frozenset({"across"})


def test_walls_in_marquee_works_in_screen_space():
    # y points up in the world and down on screen
    scene = _scene({"a": (0, 100), "b": (0, 200)}, [("up", "a", "b")])
    viewport = Viewport(center_x=400.0, center_y=300.0, scale=0.5)

    assert walls_in_marquee(scene, viewport, MarqueeBox(390.0, 190.0, 410.0, 210.0)) == frozenset({"up"})
    assert walls_in_marquee(scene, viewport, MarqueeBox(390.0, 390.0, 410.0, 410.0)) == frozenset()
