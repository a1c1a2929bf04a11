"""Tunable game configuration, grouped per subsystem."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GridConfig:
    """Playfield dimensions and the HUD band reserved at the top."""

    columns: int = 32
    rows: int = 24
    hud_rows: int = 3

    def __post_init__(self) -> None:
        if self.columns < 8 or self.rows < 8:
            raise ValueError("Grid dimensions must be at least 8x8.")
        if not 0 <= self.hud_rows < self.rows // 2:
            raise ValueError("hud_rows must be between 0 and half the rows.")


@dataclass(frozen=True)
class SnakeConfig:
    starting_length: int = 3
    starting_direction: str = "right"
    min_length: int = 3

    def __post_init__(self) -> None:
        if self.starting_length < 3:
            raise ValueError("starting_length must be at least 3.")
        if self.min_length < 1:
            raise ValueError("min_length must be at least 1.")


@dataclass(frozen=True)
class DifficultyConfig:
    """Food-driven tier progression and per-tier tick speed."""

    food_per_tier: tuple[int, ...] = (10, 10, 12, 12, 14, 14, 16, 16, 18, 20)
    speed_by_tier: tuple[int, ...] = (
        120, 112, 105, 98, 92, 86, 81, 77, 74, 72, 70,
    )
    speed_min_ms: int = 70
    max_tier: int = 10

    def __post_init__(self) -> None:
        if not self.food_per_tier or not self.speed_by_tier:
            raise ValueError("Difficulty tables must not be empty.")
        if any(n < 1 for n in self.food_per_tier):
            raise ValueError("food_per_tier entries must be at least 1.")
        if self.speed_min_ms < 1:
            raise ValueError("speed_min_ms must be at least 1.")
        if self.max_tier < 0:
            raise ValueError("max_tier must be >= 0.")


@dataclass(frozen=True)
class FlowConfig:
    """Chain-eating window and score multipliers."""

    window_base_sec: float = 6.0
    window_decay_per_tier: float = 0.3
    window_min_sec: float = 3.0
    food_to_increase_flow: int = 3
    max_flow_tier: int = 4
    score_multipliers: tuple[float, ...] = (1.0, 1.2, 1.5, 2.0, 3.0)

    def __post_init__(self) -> None:
        if self.window_min_sec <= 0 or self.window_base_sec < self.window_min_sec:
            raise ValueError("Flow window must be positive and >= its floor.")
        if self.food_to_increase_flow < 1:
            raise ValueError("food_to_increase_flow must be at least 1.")
        if len(self.score_multipliers) < self.max_flow_tier + 1:
            raise ValueError("score_multipliers must cover every flow tier.")


@dataclass(frozen=True)
class HazardConfig:
    telegraph_duration_sec: float = 1.0
    spawn_safe_radius: int = 5
    orb_spawn_safe_radius: int = 7
    min_distance_from_food: int = 2
    max_concurrent_static: int = 12
    max_concurrent_orbs: int = 4
    static_by_tier: tuple[int, ...] = (0, 0, 1, 2, 3, 4, 5, 6, 7, 8, 8)
    orbs_by_tier: tuple[int, ...] = (0, 0, 0, 0, 1, 1, 2, 2, 3, 3, 3)
    orb_patrol_min: int = 4
    orb_patrol_max: int = 8
    orb_base_speed: float = 2.0
    orb_speed_per_tier: float = 0.15
    orb_max_speed: float = 4.0
    orb_collision_radius: float = 0.6

    def __post_init__(self) -> None:
        if self.telegraph_duration_sec < 0:
            raise ValueError("telegraph_duration_sec must be >= 0.")
        if not 1 <= self.orb_patrol_min <= self.orb_patrol_max:
            raise ValueError("orb patrol lengths must satisfy 1 <= min <= max.")
        if self.orb_collision_radius <= 0:
            raise ValueError("orb_collision_radius must be positive.")


@dataclass(frozen=True)
class CoinShowerConfig:
    duration_sec: float = 8.0
    coin_count: int = 12
    explosion_speed: float = 6.0
    flight_duration_sec: float = 0.6
    coin_lifetime_sec: float = 6.0
    coin_value: int = 1
    deceleration: float = 0.95


@dataclass(frozen=True)
class BoosterConfig:
    pickup_lifetime_sec: float = 10.0
    spawn_interval_sec: float = 12.0
    max_pickups: int = 1
    spawn_safe_radius: int = 4
    unlock_tier: int = 1
    shrink_fraction: float = 0.5
    coin_shower: CoinShowerConfig = field(default_factory=CoinShowerConfig)

    def __post_init__(self) -> None:
        if self.pickup_lifetime_sec <= 0 or self.spawn_interval_sec <= 0:
            raise ValueError("Booster timings must be positive.")
        if not 0.0 < self.shrink_fraction < 1.0:
            raise ValueError("shrink_fraction must be in (0, 1).")


@dataclass(frozen=True)
class EconomyConfig:
    base_food_score: int = 10
    coin_per_food: int = 1
    coin_per_death: int = 0
    coin_per_score_multiplier: float = 0.1


@dataclass(frozen=True)
class TimingConfig:
    """Frame-loop clamps and fixed animation/phase durations, in seconds."""

    max_frame_dt: float = 0.033
    min_frame_dt: float = 0.001
    intro_duration: float = 1.2
    death_duration: float = 1.0
    mouth_anim_duration: float = 0.45
    grow_anim_duration: float = 0.2

    def __post_init__(self) -> None:
        if not 0 < self.min_frame_dt <= self.max_frame_dt:
            raise ValueError("Frame dt clamps must satisfy 0 < min <= max.")


_SECTIONS: dict[str, type] = {
    "grid": GridConfig,
    "snake": SnakeConfig,
    "difficulty": DifficultyConfig,
    "flow": FlowConfig,
    "hazards": HazardConfig,
    "boosters": BoosterConfig,
    "economy": EconomyConfig,
    "timing": TimingConfig,
}


def _section_from_dict(cls: type, raw: dict):
    """Build a section dataclass, restoring tuples and nested sections."""
    kwargs = {}
    for f in fields(cls):
        if f.name not in raw:
            continue
        value = raw[f.name]
        if f.name == "coin_shower":
            value = CoinShowerConfig(**value)
        elif isinstance(value, list):
            value = tuple(value)
        kwargs[f.name] = value
    return cls(**kwargs)


@dataclass(frozen=True)
class GameConfig:
    """Full game configuration.

    Supports JSON serialization so tuning sessions are reproducible.
    """

    grid: GridConfig = field(default_factory=GridConfig)
    snake: SnakeConfig = field(default_factory=SnakeConfig)
    difficulty: DifficultyConfig = field(default_factory=DifficultyConfig)
    flow: FlowConfig = field(default_factory=FlowConfig)
    hazards: HazardConfig = field(default_factory=HazardConfig)
    boosters: BoosterConfig = field(default_factory=BoosterConfig)
    economy: EconomyConfig = field(default_factory=EconomyConfig)
    timing: TimingConfig = field(default_factory=TimingConfig)

    def to_dict(self) -> dict:
        """Serialize to a plain dict (tuples become lists on JSON dump)."""
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: dict) -> GameConfig:
        sections = {
            name: _section_from_dict(section_cls, raw[name])
            for name, section_cls in _SECTIONS.items()
            if name in raw
        }
        return cls(**sections)

    def save(self, path: str | Path) -> None:
        """Write config to a JSON file."""
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(self.to_dict(), indent=2))
        logger.info("Config saved to %s", p)

    @classmethod
    def load(cls, path: str | Path) -> GameConfig:
        """Load config from a JSON file; missing sections keep defaults."""
        return cls.from_dict(json.loads(Path(path).read_text()))
