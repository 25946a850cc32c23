from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TickMetrics:
    tick: int
    active: int
    dormant: int
    visible_checks: int
    gaps_found: int
    rejected_forces: int
    average_speed: float
    tick_duration_ms: float = 0.0
