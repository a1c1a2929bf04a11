"""Difficulty tiers driven by cumulative food eaten."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

from neon_snake.config import DifficultyConfig, FlowConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DifficultySnapshot:
    """Derived difficulty values, recomputed whenever food is eaten."""

    tier: int
    speed_ms: int
    flow_window_sec: float
    food_needed_for_next_tier: int

    def to_dict(self) -> dict:
        return asdict(self)


class DifficultyEngine:
    """Maps total food eaten to a tier, and a tier to speed and flow window.

    The tier never decreases within a run and is clamped to
    ``[0, max_tier]``.
    """

    def __init__(
        self,
        config: DifficultyConfig | None = None,
        flow_config: FlowConfig | None = None,
    ) -> None:
        self.config = config or DifficultyConfig()
        self.flow_config = flow_config or FlowConfig()
        self.snapshot = self._build(0)

    def tier_for_food(self, total_food: int) -> int:
        """Count the cumulative tier thresholds reached by *total_food*."""
        tier = 0
        cumulative = 0
        for needed in self.config.food_per_tier:
            cumulative += needed
            if total_food < cumulative:
                break
            tier += 1
        return min(tier, self.config.max_tier)

    def speed_for_tier(self, tier: int) -> int:
        """Milliseconds per move; never faster than ``speed_min_ms``."""
        table = self.config.speed_by_tier
        speed = table[tier] if 0 <= tier < len(table) else table[-1]
        return max(speed, self.config.speed_min_ms)

    def flow_window_for_tier(self, tier: int) -> float:
        fc = self.flow_config
        return max(fc.window_min_sec, fc.window_base_sec - tier * fc.window_decay_per_tier)

    def food_for_next_tier(self, tier: int) -> int:
        """Total food needed to reach the tier after *tier*."""
        target = min(tier + 1, self.config.max_tier)
        return sum(self.config.food_per_tier[:target])

    def update(self, total_food: int) -> int | None:
        """Recompute the snapshot after a food-eaten event.

        Returns the previous tier when the tier increased, else ``None``.
        """
        previous = self.snapshot.tier
        tier = max(previous, self.tier_for_food(total_food))
        self.snapshot = self._build(tier)
        if tier == previous:
            return None
        logger.info(
            "Tier increased: %d -> %d (speed %dms, next tier at %d food).",
            previous, tier, self.snapshot.speed_ms,
            self.snapshot.food_needed_for_next_tier,
        )
        return previous

    def reset(self) -> None:
        self.snapshot = self._build(0)

    def _build(self, tier: int) -> DifficultySnapshot:
        return DifficultySnapshot(
            tier=tier,
            speed_ms=self.speed_for_tier(tier),
            flow_window_sec=self.flow_window_for_tier(tier),
            food_needed_for_next_tier=self.food_for_next_tier(tier),
        )
