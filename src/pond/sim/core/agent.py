from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pygame.math import Vector2


class ActivationState(str, Enum):
    DORMANT = "Dormant"
    ACTIVE = "Active"


@dataclass(slots=True)
class Agent:
    id: int
    position: Vector2
    velocity: Vector2 = field(default_factory=Vector2)
    heading: float = 0.0
    state: ActivationState = ActivationState.DORMANT
    # Debug outputs for the renderer, refreshed after each tick.
    visible_count: int = 0
    gap_direction: Optional[Vector2] = None

    @property
    def is_active(self) -> bool:
        return self.state == ActivationState.ACTIVE
