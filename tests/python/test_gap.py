from __future__ import annotations

import math
import random

import pytest
from pygame.math import Vector2

from pond.sim.core.config import GapConfig, PerceptionConfig, SeedConfig, SimulationConfig
from pond.sim.core.world import World
from pond.sim.systems.gap import find_gap, gap_direction, gap_is_clear, probe_distance
from pond.sim.systems.perception import visible_neighbors

ORIGIN = Vector2(600, 400)


def _polar(degrees: float, distance: float) -> Vector2:
    angle = math.radians(degrees)
    return ORIGIN + Vector2(math.cos(angle), math.sin(angle)) * distance


def _world(field_of_view: float = 270.0, search_radius: float = 100.0) -> World:
    return World(
        SimulationConfig(
            seed=SeedConfig(count=0),
            perception=PerceptionConfig(view_distance=300.0, field_of_view=field_of_view),
            gap=GapConfig(search_radius=search_radius),
        )
    )


def _bearing_degrees(direction: Vector2) -> float:
    return math.degrees(math.atan2(direction.y, direction.x)) % 360.0


def test_no_neighbors_means_no_gap(empty_world):
    agent = empty_world.add_agent(ORIGIN)
    assert gap_direction(agent, [], empty_world, 100.0) is None
    assert find_gap(agent, [], empty_world, 100.0) is None


def test_coincident_neighbor_has_no_bearing(empty_world):
    agent = empty_world.add_agent(ORIGIN)
    twin = empty_world.add_agent(Vector2(ORIGIN))
    assert find_gap(agent, [twin], empty_world, 100.0) is None


def test_three_neighbor_scenario_picks_widest_clear_gap():
    world = _world()
    observer = world.add_agent(ORIGIN, heading=math.radians(100))
    # The close neighbor at 0 degrees blocks the wider 200->360 wraparound gap in depth.
    world.add_agent(_polar(0, 10))
    world.add_agent(_polar(90, 80))
    world.add_agent(_polar(200, 80))
    neighbors = visible_neighbors(observer, world)
    assert len(neighbors) == 3

    choice = find_gap(observer, neighbors, world, 100.0, min_gap=math.radians(10))

    assert choice is not None
    assert choice.width == pytest.approx(math.radians(110))
    assert _bearing_degrees(choice.direction) == pytest.approx(145.0, abs=1e-6)
    assert choice.direction.length() == pytest.approx(1.0)


def test_wraparound_gap_wins_when_it_is_clear():
    world = _world()
    observer = world.add_agent(ORIGIN, heading=math.radians(100))
    for degrees in (0, 90, 200):
        world.add_agent(_polar(degrees, 80))
    neighbors = visible_neighbors(observer, world)

    choice = find_gap(observer, neighbors, world, 100.0, min_gap=math.radians(10))

    assert choice is not None
    assert _bearing_degrees(choice.direction) == pytest.approx(280.0, abs=1e-6)


def test_single_neighbor_ahead_steers_directly_away():
    world = _world(field_of_view=135.0, search_radius=200.0)
    observer = world.add_agent(ORIGIN, heading=0.0)
    world.add_agent(_polar(0, 50))
    neighbors = visible_neighbors(observer, world)

    direction = gap_direction(observer, neighbors, world, 200.0)

    assert direction is not None
    assert direction.x == pytest.approx(-1.0)
    assert direction.y == pytest.approx(0.0, abs=1e-9)


def test_gaps_narrower_than_threshold_are_ignored():
    world = _world(field_of_view=360.0)
    observer = world.add_agent(ORIGIN)
    neighbors = [world.add_agent(_polar(degrees, 60)) for degrees in range(0, 360, 5)]

    assert find_gap(observer, neighbors, world, 100.0, min_gap=math.radians(10)) is None


def test_probe_distance_only_sees_bodies_inside_cone():
    world = _world()
    observer = world.add_agent(ORIGIN)
    world.add_agent(_polar(45, 30))
    world.add_agent(_polar(95, 60))
    world.add_agent(_polar(180, 20))

    assert probe_distance(observer, math.radians(90), world, 100.0, math.radians(10)) == pytest.approx(60.0)
    assert probe_distance(observer, math.radians(270), world, 100.0, math.radians(10)) == pytest.approx(100.0)


def test_gap_is_clear_rejects_occupied_circle():
    world = _world()
    blocker = world.add_agent(Vector2(620, 400))
    assert not gap_is_clear(ORIGIN, Vector2(1, 0), 25.0, [blocker])
    assert gap_is_clear(ORIGIN, Vector2(-1, 0), 25.0, [blocker])
    # A body on the far rim of the circle is not inside it.
    rim = world.add_agent(Vector2(650, 400))
    assert gap_is_clear(ORIGIN, Vector2(1, 0), 25.0, [rim])


def test_returned_gaps_always_have_empty_clearance_circles():
    rng = random.Random(7)
    for _ in range(40):
        world = _world(field_of_view=360.0, search_radius=150.0)
        observer = world.add_agent(ORIGIN)
        for _ in range(rng.randint(1, 9)):
            world.add_agent(_polar(rng.uniform(0, 360), rng.uniform(5, 140)))
        neighbors = visible_neighbors(observer, world)

        choice = find_gap(observer, neighbors, world, 150.0)

        if choice is None:
            continue
        center = observer.position + choice.direction * choice.clearance_radius
        for other in neighbors:
            assert other.position.distance_to(center) >= choice.clearance_radius - 1e-6
