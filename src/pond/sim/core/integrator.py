from __future__ import annotations

from typing import Dict, Iterable

from pygame.math import Vector2

from .agent import Agent


class Integrator:
    """Point-mass semi-implicit Euler integrator.

    Forces are accumulated with `apply_force` during the read phase of a tick and
    only turned into velocity changes by `integrate_velocity`; `integrate_position`
    then moves agents with whatever velocity the caller left after clamping.
    """

    def __init__(self, mass: float = 1.0) -> None:
        self._mass = mass
        self._pending: Dict[int, Vector2] = {}

    def apply_force(self, agent: Agent, force: Vector2) -> None:
        pending = self._pending.get(agent.id)
        if pending is None:
            self._pending[agent.id] = Vector2(force)
        else:
            pending += force

    def clear(self) -> None:
        self._pending.clear()

    def pending(self, agent: Agent) -> Vector2:
        force = self._pending.get(agent.id)
        return Vector2(force) if force is not None else Vector2()

    def integrate_velocity(self, agents: Iterable[Agent], dt: float) -> None:
        """Turn accumulated forces into velocity changes for active agents.

        Accumulators are kept until `integrate_position` so the applied force can
        still be read between the two halves of the step.
        """
        inv_mass = 1.0 / self._mass
        pending = self._pending
        for agent in agents:
            force = pending.get(agent.id)
            if force is None or not agent.is_active:
                continue
            agent.velocity.update(
                agent.velocity.x + force.x * inv_mass * dt,
                agent.velocity.y + force.y * inv_mass * dt,
            )

    def integrate_position(self, agents: Iterable[Agent], dt: float) -> None:
        for agent in agents:
            if not agent.is_active:
                continue
            agent.position.update(
                agent.position.x + agent.velocity.x * dt,
                agent.position.y + agent.velocity.y * dt,
            )
        self._pending.clear()
