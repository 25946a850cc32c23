from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterable, List

from ..core.agent import ActivationState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActivationEvent:
    tick: int
    agent_id: int
    state: ActivationState


class ActivationScheduler:
    """Round-robin timer that wakes one dormant agent every `interval_ticks` ticks.

    With `toggle` the queue keeps cycling and an agent whose turn comes round
    again goes back to sleep; otherwise every agent is woken exactly once.
    """

    def __init__(self, agent_ids: Iterable[int], interval_ticks: int, toggle: bool = False) -> None:
        self._interval = max(1, int(interval_ticks))
        self._toggle = toggle
        self._queue: Deque[int] = deque(agent_ids)
        self._states = {agent_id: ActivationState.DORMANT for agent_id in self._queue}

    @property
    def pending(self) -> int:
        return len(self._queue)

    def advance(self, tick: int) -> List[ActivationEvent]:
        if tick <= 0 or tick % self._interval != 0 or not self._queue:
            return []
        agent_id = self._queue.popleft()
        current = self._states[agent_id]
        if current == ActivationState.DORMANT:
            next_state = ActivationState.ACTIVE
        else:
            next_state = ActivationState.DORMANT
        self._states[agent_id] = next_state
        if self._toggle:
            self._queue.append(agent_id)
        logger.debug("tick %d: agent %d -> %s", tick, agent_id, next_state.value)
        return [ActivationEvent(tick=tick, agent_id=agent_id, state=next_state)]
