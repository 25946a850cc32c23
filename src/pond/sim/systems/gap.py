"""Gap steering.

An agent looks at the bearings of everything it can see, treats the angular
intervals between consecutive bearings as candidate gaps, and steers toward the
middle of the widest gap that is open both in angle and in depth.

Bearings use the [0, 2pi) convention throughout this module.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, TYPE_CHECKING

from pygame.math import Vector2

from ..core.agent import Agent
from ..utils.math2d import TAU, _angle_between, _bearing, _unit_from_angle, _wrap_angle

if TYPE_CHECKING:
    from ..core.world import World

_CLEARANCE_TOLERANCE = 1e-9


@dataclass(frozen=True)
class GapChoice:
    direction: Vector2
    bearing: float
    width: float
    clearance_radius: float


def probe_distance(
    agent: Agent,
    bearing: float,
    world: World,
    search_radius: float,
    half_angle: float,
) -> float:
    """Distance to the nearest body within `half_angle` of `bearing`, capped at `search_radius`."""
    dormant_visible = world.config.perception.dormant_visible
    bodies: List[Agent] = []
    dist_sq_list: List[float] = []
    world.grid.collect_neighbors(agent.position, search_radius, bodies, dist_sq_list, exclude_id=agent.id)
    nearest_sq = search_radius * search_radius
    for other, dist_sq in zip(bodies, dist_sq_list):
        if dist_sq < 1e-12 or dist_sq >= nearest_sq:
            continue
        if not dormant_visible and not other.is_active:
            continue
        if _angle_between(_bearing(agent.position, other.position), bearing) > half_angle:
            continue
        nearest_sq = dist_sq
    return math.sqrt(nearest_sq)


def gap_is_clear(
    position: Vector2, direction: Vector2, clearance_radius: float, neighbors: Sequence[Agent]
) -> bool:
    """True when no neighbor lies strictly inside the clearance circle ahead along `direction`."""
    center = position + direction * clearance_radius
    limit = clearance_radius - _CLEARANCE_TOLERANCE
    for other in neighbors:
        if other.position.distance_to(center) < limit:
            return False
    return True


def find_gap(
    agent: Agent,
    neighbors: Sequence[Agent],
    world: World,
    search_radius: float,
    min_gap: Optional[float] = None,
    probe_half_angle: Optional[float] = None,
) -> Optional[GapChoice]:
    """Widest angular gap between visible neighbors whose clearance circle is empty.

    `min_gap` and `probe_half_angle` are in radians; by default they come from the
    world configuration (a fraction of the field of view, and the probe cone).
    """
    if not neighbors:
        return None
    config = world.config
    if min_gap is None:
        min_gap = config.gap.min_gap_fraction * math.radians(config.perception.field_of_view)
    if probe_half_angle is None:
        probe_half_angle = math.radians(config.gap.probe_half_angle)

    # Coincident bodies have no bearing.
    bearings = sorted(
        _bearing(agent.position, other.position)
        for other in neighbors
        if agent.position.distance_squared_to(other.position) >= 1e-12
    )
    if not bearings:
        return None
    bearings.append(bearings[0] + TAU)

    best: Optional[GapChoice] = None
    for start, end in zip(bearings, bearings[1:]):
        width = end - start
        if width <= min_gap:
            continue
        if best is not None and width <= best.width:
            continue
        midpoint = _wrap_angle((start + end) * 0.5)
        direction = _unit_from_angle(midpoint)
        clearance = probe_distance(agent, midpoint, world, search_radius, probe_half_angle) * 0.5
        if not gap_is_clear(agent.position, direction, clearance, neighbors):
            continue
        best = GapChoice(direction=direction, bearing=midpoint, width=width, clearance_radius=clearance)
    return best


def gap_direction(
    agent: Agent, neighbors: Sequence[Agent], world: World, search_radius: float
) -> Optional[Vector2]:
    choice = find_gap(agent, neighbors, world, search_radius)
    if choice is None:
        return None
    return choice.direction
