"""Flow: a chain-eating streak that grants a score multiplier.

Eating within the flow window keeps the chain alive and refills the
window. Every ``food_to_increase_flow`` consecutive pickups raise the
flow tier (capped at ``max_flow_tier``); letting the window run out
drops the chain back to inactive tier 0.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

from neon_snake.config import FlowConfig

logger = logging.getLogger(__name__)

# Remaining-window threshold below which the HUD warns the player.
_DANGER_THRESHOLD_SEC = 2.0


@dataclass
class FlowState:
    tier: int = 0
    streak_count: int = 0
    timer_sec: float = 0.0
    active: bool = False

    def to_dict(self) -> dict:
        return asdict(self)


class FlowEngine:
    """State machine driven by ``on_food_eaten`` and ``on_tick``."""

    def __init__(self, config: FlowConfig | None = None) -> None:
        self.config = config or FlowConfig()
        self.state = FlowState()

    @property
    def multiplier(self) -> float:
        """Current score multiplier (1.0 means no bonus)."""
        return self.multiplier_for_tier(self.state.tier)

    def multiplier_for_tier(self, tier: int) -> float:
        table = self.config.score_multipliers
        return table[tier] if 0 <= tier < len(table) else 1.0

    @property
    def in_danger(self) -> bool:
        """True while the chain is alive but about to expire."""
        s = self.state
        return s.active and 0 < s.timer_sec < _DANGER_THRESHOLD_SEC

    def on_food_eaten(self, window_sec: float) -> int | None:
        """Start or continue the chain with a fresh *window_sec* timer.

        Returns the new flow tier when it increased, else ``None``.
        """
        s = self.state
        if not s.active:
            s.active = True
            s.tier = 0
            s.streak_count = 1
            s.timer_sec = window_sec
            logger.debug("Flow chain started (window %.1fs).", window_sec)
            return None

        s.timer_sec = window_sec
        s.streak_count += 1
        if (
            s.streak_count >= self.config.food_to_increase_flow
            and s.tier < self.config.max_flow_tier
        ):
            s.tier += 1
            s.streak_count = 0
            logger.info(
                "Flow tier increased to %d (%.1fx).", s.tier, self.multiplier,
            )
            return s.tier
        return None

    def on_tick(self, dt: float) -> bool:
        """Count the window down by *dt*. Returns True if the chain expired."""
        s = self.state
        if not s.active:
            return False
        s.timer_sec -= dt
        if s.timer_sec > 0:
            return False
        previous = s.tier
        self.reset()
        if previous > 0:
            logger.info("Flow expired at tier %d.", previous)
        return True

    def reset(self) -> None:
        self.state = FlowState()
