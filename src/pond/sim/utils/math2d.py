from __future__ import annotations

import math

from pygame.math import Vector2

TAU = 2.0 * math.pi


def _safe_normalize(vector: Vector2) -> Vector2:
    return _safe_normalize_xy(vector.x, vector.y)


def _safe_normalize_xy(x: float, y: float) -> Vector2:
    magnitude_sq = x * x + y * y
    if magnitude_sq < 1e-10:
        return Vector2()
    inv = 1.0 / math.sqrt(magnitude_sq)
    return Vector2(x * inv, y * inv)


def _clamp_length(vector: Vector2, max_length: float) -> Vector2:
    if max_length <= 0:
        return Vector2()
    magnitude_sq = vector.length_squared()
    if magnitude_sq <= max_length * max_length:
        return vector
    return _safe_normalize(vector) * max_length


def _perpendicular(vector: Vector2) -> Vector2:
    # Counter-clockwise quarter turn.
    return Vector2(-vector.y, vector.x)


def _wrap_angle(angle: float) -> float:
    """Wrap an angle in radians into [0, 2pi)."""
    wrapped = math.fmod(angle, TAU)
    if wrapped < 0.0:
        wrapped += TAU
    if wrapped >= TAU:
        wrapped = 0.0
    return wrapped


def _bearing(origin: Vector2, target: Vector2) -> float:
    return _wrap_angle(math.atan2(target.y - origin.y, target.x - origin.x))


def _angle_between(a: float, b: float) -> float:
    """Smallest absolute difference between two angles, in [0, pi]."""
    diff = _wrap_angle(a - b)
    if diff > math.pi:
        diff = TAU - diff
    return diff


def _unit_from_angle(angle: float) -> Vector2:
    return Vector2(math.cos(angle), math.sin(angle))


def _heading_from_velocity(vector: Vector2) -> float:
    if vector.length_squared() < 1e-12:
        return 0.0
    return math.atan2(vector.y, vector.x)


def _is_finite(vector: Vector2) -> bool:
    return math.isfinite(vector.x) and math.isfinite(vector.y)
