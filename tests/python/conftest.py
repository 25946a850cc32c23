import os
import sys
from pathlib import Path

import pytest

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

ROOT = Path(__file__).resolve().parents[2]
src_root = ROOT / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

from pond.sim.core.config import SeedConfig, SimulationConfig  # noqa: E402
from pond.sim.core.world import World  # noqa: E402


@pytest.fixture
def empty_config() -> SimulationConfig:
    return SimulationConfig(seed=SeedConfig(count=0))


@pytest.fixture
def empty_world(empty_config: SimulationConfig) -> World:
    return World(empty_config)
