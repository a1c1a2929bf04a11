"""Snake representation and movement logic."""

from __future__ import annotations

import enum
from collections import deque

from neon_snake.grid import GridPosition


class Direction(enum.Enum):
    """Cardinal movement directions with (dx, dy) values; y grows downward."""

    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def opposite(self) -> Direction:
        return _OPPOSITES[self]

    @classmethod
    def parse(cls, name: str) -> Direction:
        """Look up a direction by case-insensitive name."""
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"Unknown direction {name!r}.") from None


# Pairs that would cause an instant 180° reversal.
_OPPOSITES: dict[Direction, Direction] = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}


class Snake:
    """A snake represented as an ordered deque of (x, y) body segments.

    The head is ``body[0]``; the tail is ``body[-1]``. ``next_direction``
    buffers the latest accepted intent until the next tick commits it.
    """

    def __init__(
        self,
        start_x: int,
        start_y: int,
        direction: Direction = Direction.RIGHT,
        length: int = 3,
    ) -> None:
        if length < 1:
            raise ValueError("Snake length must be at least 1.")
        dx, dy = direction.value
        self.body: deque[GridPosition] = deque(
            (start_x - dx * i, start_y - dy * i) for i in range(length)
        )
        self.direction = direction
        self.next_direction = direction

    @property
    def head(self) -> GridPosition:
        """Return the head coordinate."""
        return self.body[0]

    @property
    def tail(self) -> GridPosition:
        return self.body[-1]

    def __len__(self) -> int:
        return len(self.body)

    def queue_direction(self, new_direction: Direction) -> bool:
        """Buffer an intent, ignoring exact reversals of the current heading."""
        if new_direction is self.direction.opposite:
            return False
        self.next_direction = new_direction
        return True

    def commit_direction(self) -> Direction:
        """Apply the buffered intent, re-validating against reversal."""
        if self.next_direction is not self.direction.opposite:
            self.direction = self.next_direction
        self.next_direction = self.direction
        return self.direction

    def next_head(self) -> GridPosition:
        """Compute the next head position without moving."""
        dx, dy = self.direction.value
        x, y = self.head
        return x + dx, y + dy

    def blocks(self, pos: GridPosition, tail_vacates: bool) -> bool:
        """Check whether moving the head onto *pos* hits the body.

        When *tail_vacates* is True the tail cell is ignored because it
        moves away during the same tick.
        """
        if tail_vacates and pos == self.body[-1]:
            return any(seg == pos for seg in list(self.body)[:-1])
        return pos in self.body

    def advance(self, new_head: GridPosition, grow: bool = False) -> GridPosition | None:
        """Push *new_head* onto the body.

        Returns the vacated tail cell, or ``None`` if the snake grew.
        """
        self.body.appendleft(new_head)
        if grow:
            return None
        return self.body.pop()

    def truncate(self, length: int) -> list[GridPosition]:
        """Drop tail segments until the body has *length* cells."""
        removed: list[GridPosition] = []
        while len(self.body) > max(length, 0):
            removed.append(self.body.pop())
        return removed

    def clear(self) -> None:
        self.body.clear()

    def occupies(self, pos: GridPosition) -> bool:
        """Check whether the snake occupies a given cell."""
        return pos in self.body

    def to_dict(self) -> dict:
        """Serialize snake state to a dictionary."""
        return {
            "body": [list(seg) for seg in self.body],
            "direction": self.direction.name.lower(),
            "next_direction": self.next_direction.name.lower(),
        }
