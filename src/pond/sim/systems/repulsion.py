from __future__ import annotations

import math
from typing import Sequence

from pygame.math import Vector2

from ..core.agent import Agent
from ..utils.math2d import _unit_from_angle


def falloff_strength(distance: float, radius: float, base_force: float, falloff: str = "quadratic") -> float:
    """Repulsion magnitude at `distance`; monotonically decreasing, zero at `radius`."""
    if distance >= radius:
        return 0.0
    if falloff == "inverse_square":
        return base_force / (distance * distance)
    strength = (radius - distance) / radius
    return base_force * strength * strength


def repulsion(
    agent: Agent,
    neighbors: Sequence[Agent],
    comfort_radius: float,
    base_force: float,
    falloff: str = "quadratic",
    min_distance: float = 1e-3,
) -> Vector2:
    if comfort_radius <= 1e-6 or not neighbors:
        return Vector2()
    accum_x = 0.0
    accum_y = 0.0
    for other in neighbors:
        offset_x = agent.position.x - other.position.x
        offset_y = agent.position.y - other.position.y
        raw_dist = math.hypot(offset_x, offset_y)
        if raw_dist >= comfort_radius:
            continue
        dist = max(raw_dist, min_distance)
        magnitude = falloff_strength(dist, comfort_radius, base_force, falloff)
        if raw_dist > 1e-12:
            inv_len = 1.0 / raw_dist
            away_x = offset_x * inv_len
            away_y = offset_y * inv_len
        else:
            # Coincident: back away along the reversed heading.
            away = -_unit_from_angle(agent.heading)
            away_x = away.x
            away_y = away.y
        accum_x += away_x * magnitude
        accum_y += away_y * magnitude
    return Vector2(accum_x, accum_y)
