"""Discrete game events published for rendering and UI consumers."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class EventType(str, enum.Enum):
    PHASE_CHANGED = "phase_changed"
    FOOD_EATEN = "food_eaten"
    TIER_CHANGED = "tier_changed"
    HAZARDS_UNLOCKED = "hazards_unlocked"
    FLOW_TIER_CHANGED = "flow_tier_changed"
    FLOW_EXPIRED = "flow_expired"
    BOOSTER_SPAWNED = "booster_spawned"
    BOOSTER_COLLECTED = "booster_collected"
    COIN_COLLECTED = "coin_collected"
    SNAKE_SHRUNK = "snake_shrunk"
    SHRINK_FAILED = "shrink_failed"
    SNAKE_DIED = "snake_died"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class GameEvent:
    type: EventType
    tick: int
    data: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"type": self.type.value, "tick": self.tick, "data": self.data}


class EventQueue:
    """FIFO of events emitted since the last :meth:`drain`."""

    def __init__(self) -> None:
        self._events: list[GameEvent] = []

    def emit(self, event_type: EventType, tick: int, **data) -> GameEvent:
        event = GameEvent(event_type, tick, data)
        self._events.append(event)
        return event

    def drain(self) -> list[GameEvent]:
        """Return and forget all pending events."""
        events, self._events = self._events, []
        return events

    def __len__(self) -> int:
        return len(self._events)
