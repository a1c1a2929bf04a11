"""Grid model: bounds checks and uniform free-cell selection."""

from __future__ import annotations

import logging
from collections.abc import Iterable

import numpy as np

logger = logging.getLogger(__name__)

GridPosition = tuple[int, int]


class Grid:
    """Fixed-size playfield of ``columns`` x ``rows`` cells.

    Positions are ``(x, y)`` tuples. Candidate masks are NumPy boolean
    arrays indexed ``[y, x]`` so placement filters compose with ``&``.
    """

    def __init__(self, columns: int = 32, rows: int = 24, hud_rows: int = 0) -> None:
        if columns < 4 or rows < 4:
            raise ValueError("Grid dimensions must be at least 4x4.")
        if not 0 <= hud_rows < rows:
            raise ValueError("hud_rows must lie inside the grid.")
        self.columns = columns
        self.rows = rows
        self.hud_rows = hud_rows
        self._ys, self._xs = np.indices((rows, columns))

    def in_bounds(self, pos: GridPosition) -> bool:
        """Check whether a coordinate lies within the grid."""
        x, y = pos
        return 0 <= x < self.columns and 0 <= y < self.rows

    def clamp(self, x: int, y: int) -> GridPosition:
        """Clamp a coordinate onto the nearest in-bounds cell."""
        return (
            max(0, min(self.columns - 1, x)),
            max(0, min(self.rows - 1, y)),
        )

    def free_mask(self, *exclude: Iterable[GridPosition]) -> np.ndarray:
        """Return a mask that is True for every cell not in *exclude*."""
        mask = np.ones((self.rows, self.columns), dtype=bool)
        for group in exclude:
            for x, y in group:
                if 0 <= x < self.columns and 0 <= y < self.rows:
                    mask[y, x] = False
        return mask

    def below_hud_mask(self) -> np.ndarray:
        """Mask of rows outside the reserved HUD band."""
        return self._ys >= self.hud_rows

    def distance_mask(self, center: GridPosition, min_distance: int) -> np.ndarray:
        """Mask of cells at Manhattan distance >= *min_distance* from *center*."""
        cx, cy = center
        dist = np.abs(self._xs - cx) + np.abs(self._ys - cy)
        return dist >= min_distance

    def footprint_mask(self, mask: np.ndarray, size: int) -> np.ndarray:
        """Mask of anchors whose *size* x *size* square lies inside *mask*.

        The anchor is the square's top-left cell, so anchors too close to
        the right or bottom edge are never selected.
        """
        if size <= 1:
            return mask.copy()
        out = np.zeros_like(mask)
        h, w = self.rows - size + 1, self.columns - size + 1
        if h <= 0 or w <= 0:
            return out
        window = np.ones((h, w), dtype=bool)
        for dy in range(size):
            for dx in range(size):
                window &= mask[dy:dy + h, dx:dx + w]
        out[:h, :w] = window
        return out

    def cells_in(self, mask: np.ndarray) -> list[GridPosition]:
        """List the ``(x, y)`` coordinates selected by *mask*."""
        ys, xs = np.nonzero(mask)
        return list(zip(xs.tolist(), ys.tolist(), strict=True))

    def pick(self, mask: np.ndarray, rng: np.random.Generator) -> GridPosition | None:
        """Pick uniformly among all cells selected by *mask*.

        Returns ``None`` when the mask selects nothing.
        """
        candidates = self.cells_in(mask)
        if not candidates:
            return None
        return candidates[int(rng.integers(len(candidates)))]

    def random_empty_cell(
        self,
        rng: np.random.Generator,
        *exclude: Iterable[GridPosition],
    ) -> GridPosition | None:
        """Pick a uniformly random cell outside every exclusion set."""
        pos = self.pick(self.free_mask(*exclude), rng)
        if pos is None:
            logger.warning("No empty cells available on %dx%d grid.", self.columns, self.rows)
        return pos

    def to_dict(self) -> dict:
        """Serialize grid dimensions to a dictionary."""
        return {
            "columns": self.columns,
            "rows": self.rows,
            "hud_rows": self.hud_rows,
        }
