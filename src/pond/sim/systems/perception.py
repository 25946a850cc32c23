from __future__ import annotations

import math
from typing import List, TYPE_CHECKING

from pygame.math import Vector2

from ..core.agent import Agent
from ..utils.math2d import TAU, _angle_between

if TYPE_CHECKING:
    from ..core.world import World

_FOV_EPSILON = 1e-9


def in_field_of_view(heading: float, offset: Vector2, field_of_view: float) -> bool:
    """True when `offset` lies inside the symmetric cone of `field_of_view` radians around `heading`."""
    if offset.length_squared() < 1e-12:
        return True
    if field_of_view >= TAU:
        return True
    bearing = math.atan2(offset.y, offset.x)
    return _angle_between(heading, bearing) <= field_of_view * 0.5 + _FOV_EPSILON


def visible_neighbors(agent: Agent, world: World) -> List[Agent]:
    """Agents that `agent` can see this tick, nearest first, ties broken by id.

    Candidates come from `world.grid`, which `World.step` rebuilds before its read
    phase and again after moving agents. Positions edited outside `step` need a
    `world.rebuild_index()` before querying.
    """
    perception = world.config.perception
    view_distance = max(0.0, perception.view_distance)
    field_of_view = math.radians(perception.field_of_view)
    candidates: List[Agent] = []
    dist_sq_list: List[float] = []
    world.grid.collect_neighbors(agent.position, view_distance, candidates, dist_sq_list, exclude_id=agent.id)

    entries: list[tuple[float, int, Agent]] = []
    for other, dist_sq in zip(candidates, dist_sq_list):
        if other is agent:
            continue
        if not perception.dormant_visible and not other.is_active:
            continue
        offset = other.position - agent.position
        if not in_field_of_view(agent.heading, offset, field_of_view):
            continue
        entries.append((dist_sq, other.id, other))
    entries.sort(key=lambda entry: (entry[0], entry[1]))
    return [entry[2] for entry in entries]
