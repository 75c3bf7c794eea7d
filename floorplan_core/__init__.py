from .config import EditorTolerances, get_tolerances, set_tolerances
from .scene import (
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
from .validate import validate_scene
from .viewport import Viewport, px_to_mm, screen_to_world, world_to_screen
from .polygon import (
    JointCorners,
    build_scene_polygons,
    build_wall_polygon,
    compute_joint,
    polygon_area,
    polygon_contains_point,
)
from .hit_testing import (
    HitInfo,
    hit_test_fixtures,
    hit_test_nodes,
    hit_test_wall_node,
    hit_test_walls,
    resolve_hit,
)
from .snapping import (
    Guideline,
    RigidSnapResult,
    SnapCandidate,
    SnapOptions,
    best_snap,
    closest_guideline,
    filter_candidates_for_display,
    find_merge_targets,
    find_rigid_body_snap,
    find_snap_candidates,
    generate_guidelines,
    validate_rigid_body_positions,
)
from .merging import (
    apply_drag_commit,
    apply_fixture_commit,
    find_node_at_position,
    merge_nodes,
    remove_orphan_nodes,
    restore_positions,
    should_merge_nodes,
    split_node,
)
from .select_tool import (
    DragCommitted,
    FixtureDragCommitted,
    InteractionContext,
    NodeMove,
    SelectTool,
    transition,
)
from .tikz import generate_tikz_code, generate_tikz_document

__all__ = [
    'EditorTolerances',
    'get_tolerances',
    'set_tolerances',
    'Fixture',
    'Node',
    'NodeIndex',
    'Scene',
    'SceneValidationError',
    'Wall',
    'new_id',
    'normalize_wall_dimensions',
    'scene_from_dict',
    'scene_to_dict',
    'validate_scene',
    'Viewport',
    'px_to_mm',
    'screen_to_world',
    'world_to_screen',
    'JointCorners',
    'build_scene_polygons',
    'build_wall_polygon',
    'compute_joint',
    'polygon_area',
    'polygon_contains_point',
    'HitInfo',
    'hit_test_fixtures',
    'hit_test_nodes',
    'hit_test_wall_node',
    'hit_test_walls',
    'resolve_hit',
    'Guideline',
    'RigidSnapResult',
    'SnapCandidate',
    'SnapOptions',
    'best_snap',
    'closest_guideline',
    'filter_candidates_for_display',
    'find_merge_targets',
    'find_rigid_body_snap',
    'find_snap_candidates',
    'generate_guidelines',
    'validate_rigid_body_positions',
    'apply_drag_commit',
    'apply_fixture_commit',
    'find_node_at_position',
    'merge_nodes',
    'remove_orphan_nodes',
    'restore_positions',
    'should_merge_nodes',
    'split_node',
    'DragCommitted',
    'FixtureDragCommitted',
    'InteractionContext',
    'NodeMove',
    'SelectTool',
    'transition',
    'generate_tikz_code',
    'generate_tikz_document',
]
