from __future__ import annotations

import logging
import math
from time import perf_counter
from typing import Dict, List, Optional

from pygame.math import Vector2

from .agent import ActivationState, Agent
from .config import SimulationConfig, validate_config
from .integrator import Integrator
from ...spatial_grid import SpatialGrid
from ..systems import composer, metrics as metrics_system
from ..systems.activation import ActivationEvent, ActivationScheduler
from ..types.metrics import TickMetrics
from ..types.snapshot import Snapshot, SnapshotMetadata, SnapshotWorld
from ..utils.math2d import _heading_from_velocity

logger = logging.getLogger(__name__)


def hex_ring_layout(count: int, spacing: float, center: Vector2) -> List[tuple[Vector2, float]]:
    """Positions and ring angles for whole hexagonal layers until at least `count` bodies exist."""
    layout: List[tuple[Vector2, float]] = []
    layer = 0
    while len(layout) < count:
        bodies_in_layer = 1 if layer == 0 else 6 * layer
        angle_step = 2.0 * math.pi / bodies_in_layer
        radius = spacing * layer
        for i in range(bodies_in_layer):
            angle = angle_step * i
            position = Vector2(center.x + radius * math.cos(angle), center.y + radius * math.sin(angle))
            layout.append((position, angle))
        layer += 1
    return layout


class World:
    def __init__(self, config: SimulationConfig, center: Optional[Vector2] = None):
        validate_config(config)
        self._config = config
        self._center_override = Vector2(center) if center is not None else None
        self._grid = SpatialGrid(config.cell_size)
        self._integrator = Integrator(config.steering.mass)
        self._agents: List[Agent] = []
        self._id_to_index: Dict[int, int] = {}
        self._next_id = 0
        self._metrics: TickMetrics | None = None
        self._bootstrap_population()
        self._scheduler = self._make_scheduler()

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def agents(self) -> List[Agent]:
        return self._agents

    @property
    def grid(self) -> SpatialGrid:
        return self._grid

    @property
    def integrator(self) -> Integrator:
        return self._integrator

    @property
    def scheduler(self) -> ActivationScheduler:
        return self._scheduler

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        return (0.0, 0.0, self._config.width, self._config.height)

    @property
    def center(self) -> Vector2:
        if self._center_override is not None:
            return Vector2(self._center_override)
        if self._config.current_center is not None:
            return Vector2(self._config.current_center)
        return Vector2(self._config.width * 0.5, self._config.height * 0.5)

    def bodies(self) -> List[Agent]:
        return list(self._agents)

    def get_agent(self, agent_id: int) -> Agent:
        return self._agents[self._id_to_index[agent_id]]

    def add_agent(
        self,
        position: Vector2,
        velocity: Optional[Vector2] = None,
        heading: Optional[float] = None,
        state: ActivationState = ActivationState.ACTIVE,
    ) -> Agent:
        velocity = Vector2(velocity) if velocity is not None else Vector2()
        if heading is None:
            heading = _heading_from_velocity(velocity)
        agent = Agent(
            id=self._next_id,
            position=Vector2(position),
            velocity=velocity,
            heading=heading,
            state=state,
        )
        self._next_id += 1
        self._id_to_index[agent.id] = len(self._agents)
        self._agents.append(agent)
        self._grid.insert(agent)
        return agent

    def reset(self) -> None:
        self._agents.clear()
        self._id_to_index.clear()
        self._grid.clear()
        self._integrator.clear()
        self._next_id = 0
        self._metrics = None
        self._bootstrap_population()
        self._scheduler = self._make_scheduler()

    def rebuild_index(self) -> None:
        self._grid.rebuild(self._agents)

    def apply_activation(self, event: ActivationEvent) -> None:
        index = self._id_to_index.get(event.agent_id)
        if index is None:
            logger.warning("Activation event for unknown agent %d ignored", event.agent_id)
            return
        agent = self._agents[index]
        agent.state = event.state
        if event.state == ActivationState.DORMANT:
            agent.velocity.update(0.0, 0.0)
            agent.gap_direction = None

    def step(self, tick: int) -> TickMetrics:
        start = perf_counter()
        config = self._config
        steering = config.steering
        dt = config.time_step

        for event in self._scheduler.advance(tick):
            self.apply_activation(event)

        # Read phase: every force is computed from the pre-tick snapshot.
        self.rebuild_index()
        visible_checks = 0
        gaps_found = 0
        rejected = 0
        breakdowns: Dict[int, composer.ForceBreakdown] = {}
        for agent in self._agents:
            if not agent.is_active:
                continue
            context = composer.build_context(agent, self)
            breakdown = composer.compose_force(context, self)
            breakdowns[agent.id] = breakdown
            agent.visible_count = len(context.neighbors)
            visible_checks += agent.visible_count
            if breakdown.gap_direction is not None:
                gaps_found += 1
            if breakdown.rejected:
                rejected += 1
            self._integrator.apply_force(agent, breakdown.net)

        # Write phase: velocities are clamped before they move anyone.
        integrator = self._integrator
        integrator.integrate_velocity(self._agents, dt)
        for agent in self._agents:
            if not agent.is_active:
                continue
            composer.enforce_speed_envelope(
                agent, steering.min_speed, steering.max_speed, fallback=integrator.pending(agent)
            )
            self._update_heading(agent)
            breakdown = breakdowns.get(agent.id)
            agent.gap_direction = breakdown.gap_direction if breakdown is not None else None
        integrator.integrate_position(self._agents, dt)
        # Keep cell membership current for queries made between ticks.
        self.rebuild_index()

        elapsed_ms = (perf_counter() - start) * 1000.0
        metrics = metrics_system.create_metrics(
            tick, self._agents, visible_checks, gaps_found, rejected, elapsed_ms
        )
        self._metrics = metrics
        return metrics

    def snapshot(self, tick: int) -> Snapshot:
        metrics = self._metrics
        if metrics is None:
            metrics = metrics_system.create_metrics(tick, self._agents, 0, 0, 0, 0.0)
        center = self.center
        return Snapshot(
            tick=tick,
            metrics=metrics,
            agents=[self._agent_snapshot(agent) for agent in self._agents],
            world=SnapshotWorld(
                width=self._config.width,
                height=self._config.height,
                center_x=center.x,
                center_y=center.y,
            ),
            metadata=SnapshotMetadata(
                sim_dt=self._config.time_step,
                tick_rate=0.0 if self._config.time_step <= 0 else 1.0 / self._config.time_step,
                field_of_view=self._config.perception.field_of_view,
                view_distance=self._config.perception.view_distance,
                config_version=self._config.config_version,
            ),
        )

    def _bootstrap_population(self) -> None:
        seed = self._config.seed
        layout = hex_ring_layout(seed.count, seed.ring_spacing, self.center)
        for position, angle in layout:
            self.add_agent(position, heading=angle + math.pi / 2, state=ActivationState.DORMANT)
        logger.debug("Seeded %d dormant agents in %d-spacing rings", len(layout), int(seed.ring_spacing))

    def _make_scheduler(self) -> ActivationScheduler:
        activation = self._config.activation
        return ActivationScheduler(
            (agent.id for agent in self._agents),
            activation.interval_ticks,
            toggle=activation.toggle,
        )

    def _update_heading(self, agent: Agent) -> None:
        if agent.velocity.length_squared() > 1e-8:
            agent.heading = _heading_from_velocity(agent.velocity)

    @staticmethod
    def _agent_snapshot(agent: Agent) -> Dict[str, object]:
        gap = agent.gap_direction
        return {
            "id": agent.id,
            "x": agent.position.x,
            "y": agent.position.y,
            "vx": agent.velocity.x,
            "vy": agent.velocity.y,
            "heading": agent.heading,
            "speed": agent.velocity.length(),
            "state": agent.state.value,
            "visible_count": agent.visible_count,
            "gap": None if gap is None else [gap.x, gap.y],
        }
