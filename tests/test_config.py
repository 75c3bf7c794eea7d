from floorplan_core.config import (
    MIN_DRAG_DISTANCE_PX,
    RIGID_BODY_SNAP_TOLERANCE_MM,
    SAME_POSITION_TOLERANCE_MM,
    EditorTolerances,
    get_tolerances,
    resolve_tolerances,
    set_tolerances,
)


def test_defaults_match_named_constants():
    tol = get_tolerances()
    assert tol.min_drag_distance_px == MIN_DRAG_DISTANCE_PX == 10.0
    assert tol.rigid_body_snap_tolerance_mm == RIGID_BODY_SNAP_TOLERANCE_MM == 0.5
    assert tol.same_position_tolerance_mm == SAME_POSITION_TOLERANCE_MM == 1.0
    assert tol.min_marquee_size_px == 5.0


def test_get_tolerances_returns_a_copy():
    tol = get_tolerances()
    tol.snap_radius_px = 99.0
    assert get_tolerances().snap_radius_px == 10.0


def test_set_tolerances_replaces_process_defaults():
    original = get_tolerances()
    try:
        set_tolerances(EditorTolerances(snap_radius_px=25.0))
        assert get_tolerances().snap_radius_px == 25.0
        assert resolve_tolerances(None).snap_radius_px == 25.0
    finally:
        set_tolerances(original)
    assert get_tolerances() == original


def test_resolve_tolerances_prefers_explicit_config():
    explicit = EditorTolerances(grid_spacing_mm=500.0)
    assert resolve_tolerances(explicit) is explicit
