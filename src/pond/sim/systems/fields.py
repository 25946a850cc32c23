from __future__ import annotations

from pygame.math import Vector2

from ..utils.math2d import _perpendicular, _safe_normalize

Bounds = tuple[float, float, float, float]


def current_force(position: Vector2, world_center: Vector2) -> Vector2:
    """Unit tangent of the circular current around `world_center` (counter-clockwise)."""
    return _safe_normalize(_perpendicular(world_center - position))


def _edge_push(distance: float, margin: float) -> float:
    if distance >= margin:
        return 0.0
    strength = (margin - max(0.0, distance)) / margin
    return strength * strength


def boundary_force(position: Vector2, bounds: Bounds, margin: float, strength: float = 1.0) -> Vector2:
    if margin <= 1e-6:
        return Vector2()
    min_x, min_y, max_x, max_y = bounds
    x = position.x
    y = position.y
    if min_x + margin <= x <= max_x - margin and min_y + margin <= y <= max_y - margin:
        return Vector2()

    push_x = _edge_push(x - min_x, margin) - _edge_push(max_x - x, margin)
    push_y = _edge_push(y - min_y, margin) - _edge_push(max_y - y, margin)
    return Vector2(push_x * strength, push_y * strength)
