from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from pathlib import Path
from typing import Optional

from ..logging_config import configure_logging
from ..sim.core.config import SimulationConfig
from ..sim.core.world import World
from ..sim.types.metrics import TickMetrics

logger = logging.getLogger(__name__)

_BASIC_HEADER = [
    "tick",
    "active",
    "dormant",
    "visible_checks",
    "gaps_found",
    "avg_speed",
    "tick_ms",
]

_DETAILED_HEADER = [
    "tick",
    "active",
    "dormant",
    "visible_checks",
    "gaps_found",
    "rejected_forces",
    "avg_speed",
    "tick_ms",
    "visible_per_agent",
    "gap_ratio",
    "min_speed",
    "max_speed",
    "avg_distance_to_center",
]


def _format_basic_row(metrics: TickMetrics, tick_ms: float) -> list[object]:
    return [
        metrics.tick,
        metrics.active,
        metrics.dormant,
        metrics.visible_checks,
        metrics.gaps_found,
        f"{metrics.average_speed:.4f}",
        f"{tick_ms:.3f}",
    ]


def _format_detailed_row(world: World, metrics: TickMetrics, tick_ms: float) -> list[object]:
    active = metrics.active
    if active <= 0:
        visible_per_agent = 0.0
        gap_ratio = 0.0
        min_speed = 0.0
        max_speed = 0.0
        avg_distance = 0.0
    else:
        visible_per_agent = metrics.visible_checks / active
        gap_ratio = metrics.gaps_found / active
        center = world.center
        speeds = []
        distance_sum = 0.0
        for agent in world.agents:
            if not agent.is_active:
                continue
            speeds.append(math.hypot(agent.velocity.x, agent.velocity.y))
            distance_sum += agent.position.distance_to(center)
        min_speed = min(speeds)
        max_speed = max(speeds)
        avg_distance = distance_sum / active

    return [
        metrics.tick,
        active,
        metrics.dormant,
        metrics.visible_checks,
        metrics.gaps_found,
        metrics.rejected_forces,
        f"{metrics.average_speed:.4f}",
        f"{tick_ms:.3f}",
        f"{visible_per_agent:.4f}",
        f"{gap_ratio:.4f}",
        f"{min_speed:.4f}",
        f"{max_speed:.4f}",
        f"{avg_distance:.4f}",
    ]


def _percentile(sorted_values: list[float], percentile: float) -> float:
    if not sorted_values:
        return 0.0
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    pos = (len(sorted_values) - 1) * percentile
    low = int(math.floor(pos))
    high = int(math.ceil(pos))
    if low == high:
        return float(sorted_values[low])
    weight = pos - low
    return float(sorted_values[low] + (sorted_values[high] - sorted_values[low]) * weight)


def _summary_stats(values: list[float]) -> dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p90": 0.0, "p99": 0.0}
    sorted_values = sorted(values)
    return {
        "min": float(sorted_values[0]),
        "max": float(sorted_values[-1]),
        "avg": float(sum(values) / len(values)),
        "p50": _percentile(sorted_values, 0.50),
        "p90": _percentile(sorted_values, 0.90),
        "p99": _percentile(sorted_values, 0.99),
    }


def run_headless(
    steps: int,
    config: Optional[SimulationConfig] = None,
    log_path: Optional[Path] = None,
    deterministic_log: bool = False,
    log_format: str = "detailed",
    summary_path: Optional[Path] = None,
) -> World:
    config = config if config is not None else SimulationConfig()
    log_mode = log_format.lower().strip()
    if log_mode not in {"basic", "detailed"}:
        raise ValueError(f"Unknown log format: {log_format}")

    world = World(config)
    logger.info("Running %d ticks with %d agents", steps, len(world.agents))

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_DETAILED_HEADER if log_mode == "detailed" else _BASIC_HEADER)

    tick_ms_series: list[float] = []
    speed_series: list[float] = []
    gap_series: list[float] = []
    rejected_total = 0
    try:
        for tick in range(steps):
            metrics = world.step(tick)
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms
            tick_ms_series.append(tick_ms)
            speed_series.append(metrics.average_speed)
            gap_series.append(float(metrics.gaps_found))
            rejected_total += metrics.rejected_forces
            if writer:
                if log_mode == "detailed":
                    writer.writerow(_format_detailed_row(world, metrics, tick_ms))
                else:
                    writer.writerow(_format_basic_row(metrics, tick_ms))
    finally:
        if csv_file:
            csv_file.close()

    if rejected_total:
        logger.warning("%d force computations were rejected as non-finite", rejected_total)

    if summary_path:
        final = world.metrics
        summary = {
            "steps": steps,
            "log_format": log_mode,
            "deterministic_log": deterministic_log,
            "agents": len(world.agents),
            "final_active": 0 if final is None else final.active,
            "rejected_forces": rejected_total,
            "tick_ms": _summary_stats(tick_ms_series),
            "average_speed": _summary_stats(speed_series),
            "gaps_found": _summary_stats(gap_series),
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))
    logger.info("Finished %d ticks", steps)
    return world


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless pond flocking simulation")
    parser.add_argument("--steps", type=int, default=3000)
    parser.add_argument("--config", type=Path, default=None, help="YAML configuration file")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write metrics")
    parser.add_argument(
        "--log-format",
        choices=["basic", "detailed"],
        default="detailed",
        help="CSV format to write when --log is provided.",
    )
    parser.add_argument(
        "--summary",
        type=Path,
        default=None,
        help="Optional JSON file to write summary stats for the run.",
    )
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical runs match).",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (defaults to POND_LOG_LEVEL or INFO)")
    args = parser.parse_args()
    configure_logging(level=args.log_level)
    config = SimulationConfig.from_yaml(args.config) if args.config else SimulationConfig()
    run_headless(
        args.steps,
        config,
        args.log,
        deterministic_log=args.deterministic_log,
        log_format=args.log_format,
        summary_path=args.summary,
    )


if __name__ == "__main__":
    main()
