from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from pygame.math import Vector2

from ..core.agent import Agent
from ..utils.math2d import _clamp_length, _is_finite, _safe_normalize, _unit_from_angle
from .fields import boundary_force, current_force
from .gap import gap_direction
from .perception import visible_neighbors
from .repulsion import repulsion

if TYPE_CHECKING:
    from ..core.world import World

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TickContext:
    """One agent's view of the world for a single tick, shared by every force term."""

    agent: Agent
    neighbors: tuple[Agent, ...]


@dataclass(slots=True)
class ForceBreakdown:
    current: Vector2
    boundary: Vector2
    gap: Vector2
    repulsion: Vector2
    net: Vector2
    gap_direction: Optional[Vector2] = None
    rejected: bool = False


def build_context(agent: Agent, world: World) -> TickContext:
    return TickContext(agent=agent, neighbors=tuple(visible_neighbors(agent, world)))


def compose_force(context: TickContext, world: World) -> ForceBreakdown:
    config = world.config
    steering = config.steering
    repulsion_config = config.repulsion
    agent = context.agent

    current = current_force(agent.position, world.center) * steering.current_strength
    boundary = boundary_force(agent.position, world.bounds, steering.boundary_margin, steering.boundary_force)
    push = repulsion(
        agent,
        context.neighbors,
        repulsion_config.comfort_radius,
        repulsion_config.base_force,
        repulsion_config.falloff,
        repulsion_config.min_distance,
    )

    direction: Optional[Vector2] = None
    gated = steering.gap_repulsion_gate > 0.0 and push.length() >= steering.gap_repulsion_gate
    if not gated:
        direction = gap_direction(agent, context.neighbors, world, config.gap.search_radius)
    gap = Vector2(direction) if direction is not None else Vector2()

    net = (
        current * steering.current_weight
        + boundary * steering.boundary_weight
        + gap * steering.gap_weight
        + push * steering.repulsion_weight
    )
    if not all(_is_finite(term) for term in (current, boundary, gap, push, net)):
        logger.warning(
            "Rejected non-finite force for agent %s (current=%s boundary=%s gap=%s repulsion=%s)",
            agent.id,
            current,
            boundary,
            gap,
            push,
        )
        return ForceBreakdown(
            current=current,
            boundary=boundary,
            gap=gap,
            repulsion=push,
            net=Vector2(),
            gap_direction=None,
            rejected=True,
        )
    return ForceBreakdown(
        current=current,
        boundary=boundary,
        gap=gap,
        repulsion=push,
        net=net,
        gap_direction=direction,
    )


def enforce_speed_envelope(
    agent: Agent, min_speed: float, max_speed: float, fallback: Optional[Vector2] = None
) -> None:
    """Clamp an active agent's speed into [min_speed, max_speed]; dormant agents are left alone.

    A velocity too short to have a direction is lifted along `fallback` (the net
    force applied this tick), or along the heading when that is zero too.
    """
    if not agent.is_active:
        return
    velocity = agent.velocity
    if not _is_finite(velocity):
        logger.warning("Agent %s had non-finite velocity %s; resetting along heading", agent.id, velocity)
        velocity.update(0.0, 0.0)
    speed = velocity.length()
    if speed > max_speed:
        velocity.update(_clamp_length(velocity, max_speed))
    elif speed < min_speed:
        direction = _safe_normalize(velocity)
        if direction.length_squared() == 0.0 and fallback is not None and _is_finite(fallback):
            direction = _safe_normalize(fallback)
        if direction.length_squared() == 0.0:
            direction = _unit_from_angle(agent.heading)
        velocity.update(direction * min_speed)
