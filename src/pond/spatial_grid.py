from __future__ import annotations

import math
from typing import TYPE_CHECKING, Dict, List, Tuple

from pygame.math import Vector2

if TYPE_CHECKING:
    from .sim.core.agent import Agent


class SpatialGrid:
    """Uniform-cell broad phase used to enumerate candidate neighbors."""

    def __init__(self, cell_size: float) -> None:
        self._cell_size = cell_size
        self._cells: Dict[Tuple[int, int], List["Agent"]] = {}
        self._active_keys: List[Tuple[int, int]] = []

    def clear(self) -> None:
        for key in self._active_keys:
            bucket = self._cells.get(key)
            if bucket:
                bucket.clear()
        self._active_keys.clear()

    def insert(self, agent: "Agent") -> None:
        key = self._cell_key(agent.position)
        bucket = self._cells.get(key)
        if bucket is None:
            bucket = []
            self._cells[key] = bucket
            self._active_keys.append(key)
        elif not bucket:
            # Bucket exists but was cleared at the start of this tick; mark it active again.
            self._active_keys.append(key)
        bucket.append(agent)

    def rebuild(self, agents: List["Agent"]) -> None:
        self.clear()
        for agent in agents:
            self.insert(agent)

    def collect_neighbors(
        self,
        position: Vector2,
        radius: float,
        out_agents: List["Agent"],
        out_dist_sq: List[float],
        exclude_id: int | None = None,
    ) -> None:
        """
        Fill the provided buffers with agents within `radius` and their squared distances.

        Buffers are cleared first; callers own them.
        """

        out_agents.clear()
        out_dist_sq.clear()
        base_key = self._cell_key(position)
        cell_range = int(math.ceil(radius / self._cell_size))
        radius_sq = radius * radius
        pos_x = position.x
        pos_y = position.y
        cells = self._cells
        append_agent = out_agents.append
        append_dist = out_dist_sq.append

        for dx in range(-cell_range, cell_range + 1):
            for dy in range(-cell_range, cell_range + 1):
                bucket = cells.get((base_key[0] + dx, base_key[1] + dy))
                if not bucket:
                    continue
                for agent in bucket:
                    if exclude_id is not None and agent.id == exclude_id:
                        continue
                    pos = agent.position
                    offset_x = pos.x - pos_x
                    offset_y = pos.y - pos_y
                    dist_sq = offset_x * offset_x + offset_y * offset_y
                    if dist_sq <= radius_sq:
                        append_agent(agent)
                        append_dist(dist_sq)

    def _cell_key(self, position: Vector2) -> Tuple[int, int]:
        return (int(position.x // self._cell_size), int(position.y // self._cell_size))
