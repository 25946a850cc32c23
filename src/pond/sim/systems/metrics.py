from __future__ import annotations

from typing import Iterable

from ..core.agent import Agent
from ..types.metrics import TickMetrics


def create_metrics(
    tick: int,
    agents: Iterable[Agent],
    visible_checks: int,
    gaps_found: int,
    rejected_forces: int,
    duration_ms: float,
) -> TickMetrics:
    active = 0
    dormant = 0
    speed_sum = 0.0
    for agent in agents:
        if agent.is_active:
            active += 1
            speed_sum += agent.velocity.length()
        else:
            dormant += 1
    return TickMetrics(
        tick=tick,
        active=active,
        dormant=dormant,
        visible_checks=visible_checks,
        gaps_found=gaps_found,
        rejected_forces=rejected_forces,
        average_speed=0.0 if active == 0 else speed_sum / active,
        tick_duration_ms=duration_ms,
    )
