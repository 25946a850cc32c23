from __future__ import annotations

from pond.sim.core.agent import ActivationState
from pond.sim.systems.activation import ActivationScheduler


def _collect(scheduler: ActivationScheduler, ticks: int):
    events = []
    for tick in range(ticks):
        events.extend(scheduler.advance(tick))
    return events


def test_wakes_one_agent_per_interval_in_order():
    scheduler = ActivationScheduler([4, 5, 6], interval_ticks=3)
    events = _collect(scheduler, 20)

    assert [(e.tick, e.agent_id) for e in events] == [(3, 4), (6, 5), (9, 6)]
    assert all(e.state == ActivationState.ACTIVE for e in events)
    assert scheduler.pending == 0


def test_each_agent_activates_exactly_once_by_default():
    scheduler = ActivationScheduler(range(5), interval_ticks=1)
    events = _collect(scheduler, 50)
    assert sorted(e.agent_id for e in events) == list(range(5))


def test_toggle_mode_cycles_back_to_dormant():
    scheduler = ActivationScheduler([0, 1], interval_ticks=1, toggle=True)
    events = _collect(scheduler, 5)

    assert [(e.agent_id, e.state) for e in events] == [
        (0, ActivationState.ACTIVE),
        (1, ActivationState.ACTIVE),
        (0, ActivationState.DORMANT),
        (1, ActivationState.DORMANT),
    ]
    assert scheduler.pending == 2
