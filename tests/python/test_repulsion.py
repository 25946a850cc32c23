from __future__ import annotations

import math

import pytest
from pygame.math import Vector2

from pond.sim.core.agent import Agent
from pond.sim.systems.repulsion import falloff_strength, repulsion


def _agent(agent_id: int, x: float, y: float, heading: float = 0.0) -> Agent:
    return Agent(id=agent_id, position=Vector2(x, y), heading=heading)


def test_no_neighbors_is_zero_vector():
    assert repulsion(_agent(0, 0, 0), [], 10.0, 1.0) == Vector2()


def test_neighbors_outside_radius_do_not_push():
    agent = _agent(0, 0, 0)
    assert repulsion(agent, [_agent(1, 10, 0), _agent(2, 0, 25)], 10.0, 1.0) == Vector2()


def test_opposite_neighbors_cancel():
    agent = _agent(0, 0, 0)
    result = repulsion(agent, [_agent(1, 4, 0), _agent(2, -4, 0)], 10.0, 1.0)
    assert result.length() == pytest.approx(0.0, abs=1e-12)


def test_push_points_away_with_quadratic_falloff():
    agent = _agent(0, 0, 0)
    result = repulsion(agent, [_agent(1, 5, 0)], 10.0, 2.0)
    assert result.x == pytest.approx(-2.0 * 0.25)
    assert result.y == pytest.approx(0.0)


@pytest.mark.parametrize("falloff", ["quadratic", "inverse_square"])
def test_falloff_is_monotonic_and_bounded(falloff):
    distances = [0.001, 0.5, 1.0, 2.0, 5.0, 9.9]
    values = [falloff_strength(d, 10.0, 1.0, falloff) for d in distances]
    assert all(a > b for a, b in zip(values, values[1:]))
    assert all(math.isfinite(value) for value in values)
    assert falloff_strength(10.0, 10.0, 1.0, falloff) == 0.0


def test_coincident_neighbor_is_finite_and_pushes_backwards():
    agent = _agent(0, 3, 3, heading=0.0)
    result = repulsion(agent, [_agent(1, 3, 3)], 10.0, 1.0, falloff="inverse_square", min_distance=0.1)
    assert math.isfinite(result.x) and math.isfinite(result.y)
    assert result.x < 0.0
    assert result.y == pytest.approx(0.0)
