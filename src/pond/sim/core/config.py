from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

_FALLOFF_LAWS = ("quadratic", "inverse_square")


class ConfigError(ValueError):
    """Raised when a configuration value is outside its allowed range."""


@dataclass
class PerceptionConfig:
    view_distance: float = 250.0
    # Full cone angle in degrees, centered on the heading.
    field_of_view: float = 135.0
    # Dormant agents still occlude and repel when visible.
    dormant_visible: bool = True


@dataclass
class GapConfig:
    min_gap_fraction: float = 0.1
    probe_half_angle: float = 10.0
    search_radius: float = 200.0


@dataclass
class RepulsionConfig:
    comfort_radius: float = 80.0
    base_force: float = 1.0
    falloff: str = "quadratic"
    min_distance: float = 1e-3


@dataclass
class SteeringConfig:
    current_weight: float = 1.0
    boundary_weight: float = 1.0
    gap_weight: float = 0.35
    repulsion_weight: float = 0.6
    current_strength: float = 0.15
    boundary_margin: float = 20.0
    boundary_force: float = 1.0
    min_speed: float = 1.0
    max_speed: float = 5.0
    mass: float = 1.0
    # Gap steering is skipped while repulsion is at least this strong; 0 disables.
    gap_repulsion_gate: float = 0.0


@dataclass
class SeedConfig:
    count: int = 60
    body_radius: float = 10.0
    # Ring spacing; defaults to seven body radii.
    spacing: Optional[float] = None

    @property
    def ring_spacing(self) -> float:
        return self.spacing if self.spacing is not None else 7.0 * self.body_radius


@dataclass
class ActivationConfig:
    interval_ticks: int = 10
    toggle: bool = False


@dataclass
class SimulationConfig:
    time_step: float = 1.0
    width: float = 1280.0
    height: float = 800.0
    cell_size: float = 50.0
    current_center: Optional[tuple[float, float]] = None
    config_version: str = "v1"
    perception: PerceptionConfig = field(default_factory=PerceptionConfig)
    gap: GapConfig = field(default_factory=GapConfig)
    repulsion: RepulsionConfig = field(default_factory=RepulsionConfig)
    steering: SteeringConfig = field(default_factory=SteeringConfig)
    seed: SeedConfig = field(default_factory=SeedConfig)
    activation: ActivationConfig = field(default_factory=ActivationConfig)

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)


def load_config(raw: dict) -> SimulationConfig:
    def _pair(value: tuple[float, float] | list[float] | None) -> Optional[tuple[float, float]]:
        if isinstance(value, (tuple, list)) and len(value) == 2:
            return (float(value[0]), float(value[1]))
        return None

    sections = {"perception", "gap", "repulsion", "steering", "seed", "activation"}
    sim_values = {k: v for k, v in raw.items() if k not in sections and k != "current_center"}
    config = SimulationConfig(
        perception=PerceptionConfig(**raw.get("perception", {})),
        gap=GapConfig(**raw.get("gap", {})),
        repulsion=RepulsionConfig(**raw.get("repulsion", {})),
        steering=SteeringConfig(**raw.get("steering", {})),
        seed=SeedConfig(**raw.get("seed", {})),
        activation=ActivationConfig(**raw.get("activation", {})),
        current_center=_pair(raw.get("current_center")),
        **sim_values,
    )
    validate_config(config)
    return config


def validate_config(config: SimulationConfig) -> SimulationConfig:
    if config.time_step <= 0.0:
        raise ConfigError(f"time_step must be positive, got {config.time_step}")
    if config.width <= 0.0 or config.height <= 0.0:
        raise ConfigError(f"world bounds must be positive, got {config.width}x{config.height}")
    if config.cell_size <= 0.0:
        raise ConfigError(f"cell_size must be positive, got {config.cell_size}")

    perception = config.perception
    if perception.view_distance < 0.0:
        raise ConfigError(f"view_distance must be >= 0, got {perception.view_distance}")
    if not 0.0 < perception.field_of_view <= 360.0:
        raise ConfigError(f"field_of_view must be in (0, 360], got {perception.field_of_view}")

    gap = config.gap
    if gap.min_gap_fraction < 0.0:
        raise ConfigError(f"min_gap_fraction must be >= 0, got {gap.min_gap_fraction}")
    if not 0.0 < gap.probe_half_angle <= 180.0:
        raise ConfigError(f"probe_half_angle must be in (0, 180], got {gap.probe_half_angle}")
    if gap.search_radius <= 0.0:
        raise ConfigError(f"search_radius must be positive, got {gap.search_radius}")

    repulsion = config.repulsion
    if repulsion.comfort_radius < 0.0:
        raise ConfigError(f"comfort_radius must be >= 0, got {repulsion.comfort_radius}")
    if repulsion.falloff not in _FALLOFF_LAWS:
        raise ConfigError(f"falloff must be one of {_FALLOFF_LAWS}, got {repulsion.falloff!r}")
    if repulsion.min_distance <= 0.0:
        raise ConfigError(f"min_distance must be positive, got {repulsion.min_distance}")

    steering = config.steering
    if steering.min_speed < 0.0 or steering.max_speed < steering.min_speed:
        raise ConfigError(
            f"speed envelope must satisfy 0 <= min_speed <= max_speed, got "
            f"[{steering.min_speed}, {steering.max_speed}]"
        )
    if steering.mass <= 0.0:
        raise ConfigError(f"mass must be positive, got {steering.mass}")
    if steering.boundary_margin < 0.0:
        raise ConfigError(f"boundary_margin must be >= 0, got {steering.boundary_margin}")

    seed = config.seed
    if seed.count < 0 or seed.body_radius <= 0.0 or seed.ring_spacing <= 0.0:
        raise ConfigError(
            f"seed needs count >= 0 and positive body_radius and spacing, got "
            f"count={seed.count} body_radius={seed.body_radius} spacing={seed.ring_spacing}"
        )
    if config.activation.interval_ticks < 1:
        raise ConfigError(f"activation interval must be >= 1 tick, got {config.activation.interval_ticks}")
    return config
