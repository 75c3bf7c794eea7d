import pytest

from floorplan_core.viewport import Viewport, px_to_mm, screen_to_world, world_to_screen


def test_world_to_screen_flips_y_axis():
    viewport = Viewport(center_x=400.0, center_y=300.0, scale=0.5)
    assert world_to_screen((100.0, 50.0), viewport) == (450.0, 275.0)


@pytest.mark.parametrize("point", [(0.0, 0.0), (1234.5, -678.0), (-50.0, 9000.0)])
def test_screen_to_world_inverts_world_to_screen(point):
    viewport = Viewport(center_x=-20.0, center_y=75.0, scale=0.25)
    back = screen_to_world(world_to_screen(point, viewport), viewport)
    assert back == pytest.approx(point)


def test_px_to_mm_uses_scale():
    assert px_to_mm(10.0, Viewport(scale=0.1)) == pytest.approx(100.0)
    assert px_to_mm(10.0, Viewport(scale=1.0)) == 10.0
