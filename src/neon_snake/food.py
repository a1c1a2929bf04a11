"""Food placement logic."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from neon_snake.grid import Grid, GridPosition

logger = logging.getLogger(__name__)


class FoodSpawner:
    """Owns the single food cell on the grid.

    Uses the injected NumPy RNG so placement is reproducible per seed.
    """

    def __init__(self, grid: Grid, rng: np.random.Generator | None = None) -> None:
        self.grid = grid
        self.rng = rng if rng is not None else np.random.default_rng()
        self.position: GridPosition | None = None

    def respawn(self, *exclude: Iterable[GridPosition]) -> GridPosition | None:
        """Move the food to a random cell outside every exclusion set.

        Leaves the food absent when the grid is full; the next call
        retries.
        """
        pos = self.grid.random_empty_cell(self.rng, *exclude)
        if pos is None:
            logger.warning("No free cell for food; food removed until next spawn.")
        self.position = pos
        return pos

    def is_at(self, pos: GridPosition) -> bool:
        return self.position is not None and self.position == pos

    def occupied(self) -> list[GridPosition]:
        """Cells held by food, for use as an exclusion set."""
        return [] if self.position is None else [self.position]

    def clear(self) -> None:
        self.position = None

    def to_dict(self) -> dict:
        """Serialize food state to a dictionary."""
        return {"position": None if self.position is None else list(self.position)}
