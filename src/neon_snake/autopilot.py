"""Greedy headless driver for simulations and smoke runs."""

from __future__ import annotations

from neon_snake.engine import SnakeSimulator
from neon_snake.snake import Direction


class Autopilot:
    """Steers towards the food while avoiding immediately lethal cells.

    Only looks one move ahead, so it will eventually trap itself; that
    is enough to exercise every subsystem end to end.
    """

    def __init__(self, simulator: SnakeSimulator) -> None:
        self.simulator = simulator

    def choose(self) -> Direction | None:
        sim = self.simulator
        if not sim.alive or not len(sim.snake):
            return None
        current = sim.snake.direction
        target = sim.food.position
        hx, hy = sim.snake.head

        best: tuple[int, int] | None = None
        choice: Direction | None = None
        for direction in Direction:
            if direction is current.opposite:
                continue
            dx, dy = direction.value
            cell = (hx + dx, hy + dy)
            if not self._safe(cell):
                continue
            dist = 0 if target is None else abs(target[0] - cell[0]) + abs(target[1] - cell[1])
            # Prefer keeping the heading on ties so the path stays smooth.
            rank = (dist, 0 if direction is current else 1)
            if best is None or rank < best:
                best, choice = rank, direction
        return choice

    def _safe(self, cell: tuple[int, int]) -> bool:
        sim = self.simulator
        if not sim.grid.in_bounds(cell):
            return False
        if sim.snake.blocks(cell, tail_vacates=not sim.food.is_at(cell)):
            return False
        return not sim.hazards.is_lethal_at(cell)
