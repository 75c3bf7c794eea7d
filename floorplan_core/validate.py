from typing import List

from .scene import Scene, SceneValidationError


def _check_wall_dimensions(scene: Scene) -> None:
    for wall in scene.walls.values():
        if wall.node_a_id == wall.node_b_id:
            raise SceneValidationError(f'wall "{wall.id}" starts and ends at node "{wall.node_a_id}"')
        if wall.thickness_mm <= 0:
            raise SceneValidationError(f'wall "{wall.id}" thickness must be positive (got {wall.thickness_mm})')
        if wall.height_mm <= 0:
            raise SceneValidationError(f'wall "{wall.id}" height must be positive (got {wall.height_mm})')
        if wall.raise_from_floor_mm < 0:
            raise SceneValidationError(
                f'wall "{wall.id}" raise from floor must be non-negative (got {wall.raise_from_floor_mm})'
            )


def validate_scene(scene: Scene, strict: bool = True) -> List[str]:
    """Check scene invariants; returns non-fatal warnings.

    With ``strict=False`` walls referencing missing nodes are tolerated; they
    simply render as nothing until repaired.
    """
    for key, node in scene.nodes.items():
        if key != node.id:
            raise SceneValidationError(f'node stored under "{key}" has id "{node.id}"')
    for key, wall in scene.walls.items():
        if key != wall.id:
            raise SceneValidationError(f'wall stored under "{key}" has id "{wall.id}"')
    for key, fixture in scene.fixtures.items():
        if key != fixture.id:
            raise SceneValidationError(f'fixture stored under "{key}" has id "{fixture.id}"')

    _check_wall_dimensions(scene)

    warnings: List[str] = []
    referenced = set()
    for wall in scene.walls.values():
        for node_id in wall.node_ids:
            if node_id in scene.nodes:
                referenced.add(node_id)
                continue
            message = f'wall "{wall.id}" references missing node "{node_id}"'
            if strict:
                raise SceneValidationError(message)
            warnings.append(message)

    for node_id in scene.nodes:
        if node_id not in referenced:
            warnings.append(f'node "{node_id}" is not referenced by any wall')
    return warnings
