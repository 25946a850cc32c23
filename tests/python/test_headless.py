import csv
import json
import logging

import pytest

from pond.app.headless import run_headless
from pond.logging_config import configure_logging
from pond.sim.core.config import ActivationConfig, SeedConfig, SimulationConfig


def _read_csv(path):
    with path.open(newline="") as handle:
        return list(csv.reader(handle))


def _config():
    return SimulationConfig(seed=SeedConfig(count=7), activation=ActivationConfig(interval_ticks=1))


def test_headless_basic_log_header(tmp_path):
    log_path = tmp_path / "basic.csv"
    run_headless(steps=3, config=_config(), log_path=log_path, deterministic_log=True, log_format="basic")
    rows = _read_csv(log_path)
    assert len(rows) == 4
    assert rows[0] == ["tick", "active", "dormant", "visible_checks", "gaps_found", "avg_speed", "tick_ms"]
    assert [row[1] for row in rows[1:]] == ["0", "1", "2"]
    assert all(row[-1] == "0.000" for row in rows[1:])


def test_headless_detailed_log_ratios(tmp_path):
    log_path = tmp_path / "detailed.csv"
    run_headless(steps=5, config=_config(), log_path=log_path, deterministic_log=True)
    rows = _read_csv(log_path)
    header = rows[0]
    idx = {name: i for i, name in enumerate(header)}
    last = rows[-1]
    active = int(last[idx["active"]])
    assert active == 4
    assert float(last[idx["visible_per_agent"]]) == pytest.approx(int(last[idx["visible_checks"]]) / active, abs=1e-4)
    assert float(last[idx["min_speed"]]) >= 1.0 - 1e-4
    assert float(last[idx["max_speed"]]) <= 5.0 + 1e-4


def test_deterministic_logs_match(tmp_path):
    first = tmp_path / "a.csv"
    second = tmp_path / "b.csv"
    run_headless(steps=20, config=_config(), log_path=first, deterministic_log=True)
    run_headless(steps=20, config=_config(), log_path=second, deterministic_log=True)
    assert first.read_text() == second.read_text()


def test_headless_summary_output(tmp_path):
    summary_path = tmp_path / "summary.json"
    world = run_headless(steps=4, config=_config(), deterministic_log=True, summary_path=summary_path)
    payload = json.loads(summary_path.read_text())
    assert payload["steps"] == 4
    assert payload["agents"] == len(world.agents)
    assert payload["final_active"] == 3
    assert payload["rejected_forces"] == 0
    assert "p90" in payload["average_speed"]


def test_unknown_log_format_is_rejected():
    with pytest.raises(ValueError):
        run_headless(steps=1, config=_config(), log_format="fancy")


def test_configure_logging_reads_env_level(monkeypatch):
    monkeypatch.setenv("POND_LOG_LEVEL", "debug")
    logger = configure_logging()
    assert logger.name == "pond"
    assert logger.level == logging.DEBUG

    logger = configure_logging(level="warning", include_uvicorn=True)
    assert logger.level == logging.WARNING
    assert logging.getLogger("uvicorn.access").level == logging.WARNING
    for name in ("pond", "uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(logging.NOTSET)
