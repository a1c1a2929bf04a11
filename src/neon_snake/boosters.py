"""Booster pickups and their effects: coin shower and shrink."""

from __future__ import annotations

import enum
import itertools
import logging
import math
from collections.abc import Iterable
from dataclasses import asdict, dataclass, field

import numpy as np

from neon_snake.config import BoosterConfig
from neon_snake.grid import Grid, GridPosition
from neon_snake.snake import Snake

logger = logging.getLogger(__name__)

# Max random deviation applied to each coin's launch angle, in radians.
_ANGLE_JITTER = math.pi * 0.3


class BoosterType(str, enum.Enum):
    COIN_SHOWER = "coin_shower"
    SHRINK = "shrink"


# Side length of each pickup square, in cells.
_FOOTPRINT = {BoosterType.COIN_SHOWER: 1, BoosterType.SHRINK: 2}


@dataclass
class BoosterPickup:
    """A pickup anchored at its top-left cell ``(x, y)``.

    It covers a ``size`` x ``size`` square growing right and down.
    """

    id: int
    type: BoosterType
    x: int
    y: int
    lifetime_sec: float
    age: float = 0.0
    size: int = 1

    @property
    def cell(self) -> GridPosition:
        return self.x, self.y

    @property
    def cells(self) -> list[GridPosition]:
        return [
            (self.x + dx, self.y + dy)
            for dy in range(self.size)
            for dx in range(self.size)
        ]

    def covers(self, pos: GridPosition) -> bool:
        x, y = pos
        return self.x <= x < self.x + self.size and self.y <= y < self.y + self.size

    def to_dict(self) -> dict:
        d = asdict(self)
        d["type"] = self.type.value
        return d


@dataclass
class FlyingCoin:
    """A coin in flight, in continuous grid units."""

    x: float
    y: float
    vx: float
    vy: float
    flight_duration: float
    age: float = 0.0


@dataclass
class SettledCoin:
    x: int
    y: int
    lifetime: float
    age: float = 0.0

    @property
    def cell(self) -> GridPosition:
        return self.x, self.y


@dataclass
class CoinShower:
    active: bool = False
    timer: float = 0.0
    flying: list[FlyingCoin] = field(default_factory=list)
    coins: list[SettledCoin] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


class ShrinkOutcome(str, enum.Enum):
    SHRUNK = "shrunk"
    TOO_SHORT = "too_short"


@dataclass(frozen=True)
class ShrinkResult:
    outcome: ShrinkOutcome
    old_length: int
    new_length: int
    burst_at: GridPosition | None = None

    @property
    def removed(self) -> int:
        return self.old_length - self.new_length


class BoosterManager:
    """Owns pickups on the grid plus the coin-shower effect state."""

    def __init__(
        self,
        grid: Grid,
        config: BoosterConfig | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.grid = grid
        self.config = config or BoosterConfig()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.shower = CoinShower()
        self._pickups: list[BoosterPickup] = []
        self._ids = itertools.count(1)
        self._spawn_timer = 0.0

    @property
    def pickups(self) -> tuple[BoosterPickup, ...]:
        return tuple(self._pickups)

    def occupied_cells(self) -> list[GridPosition]:
        """Cells held by pickups and settled coins."""
        cells = [cell for p in self._pickups for cell in p.cells]
        return cells + [c.cell for c in self.shower.coins]

    # --- pickups ---

    def spawn_pickup(
        self,
        booster_type: BoosterType,
        snake: Iterable[GridPosition],
        food: GridPosition | None,
        hazard_cells: Iterable[GridPosition] = (),
    ) -> BoosterPickup | None:
        """Place a pickup below the HUD band, away from the snake head."""
        body = list(snake)
        food_cells = [] if food is None else [food]
        size = _FOOTPRINT[booster_type]
        mask = self.grid.free_mask(body, food_cells, hazard_cells, self.occupied_cells())
        mask &= self.grid.below_hud_mask()
        mask = self.grid.footprint_mask(mask, size)
        if body:
            mask &= self.grid.distance_mask(body[0], self.config.spawn_safe_radius)
        pos = self.grid.pick(mask, self.rng)
        if pos is None:
            logger.warning("Could not spawn booster %s - no safe location.", booster_type.value)
            return None

        pickup = BoosterPickup(
            id=next(self._ids),
            type=booster_type,
            x=pos[0],
            y=pos[1],
            lifetime_sec=self.config.pickup_lifetime_sec,
            size=size,
        )
        self._pickups.append(pickup)
        logger.debug("Spawned booster %s at %s.", booster_type.value, pos)
        return pickup

    def maybe_spawn(
        self,
        dt: float,
        tier: int,
        snake: Iterable[GridPosition],
        food: GridPosition | None,
        hazard_cells: Iterable[GridPosition] = (),
    ) -> BoosterPickup | None:
        """Advance the natural spawn timer; spawn a random pickup when due."""
        if tier < self.config.unlock_tier:
            return None
        self._spawn_timer += dt
        if self._spawn_timer < self.config.spawn_interval_sec:
            return None
        self._spawn_timer = 0.0
        if len(self._pickups) >= self.config.max_pickups:
            return None
        types = list(BoosterType)
        chosen = types[int(self.rng.integers(len(types)))]
        return self.spawn_pickup(chosen, snake, food, hazard_cells)

    def update_pickups(self, dt: float) -> list[BoosterPickup]:
        """Age pickups and drop the expired ones, which are returned."""
        expired = [p for p in self._pickups if p.age + dt >= p.lifetime_sec]
        for p in self._pickups:
            p.age += dt
        self._pickups = [p for p in self._pickups if p.age < p.lifetime_sec]
        for p in expired:
            logger.debug("Booster expired: %s.", p.type.value)
        return expired

    def take_pickup_at(self, pos: GridPosition) -> BoosterPickup | None:
        """Remove and return the pickup on *pos*, if any."""
        for i, p in enumerate(self._pickups):
            if p.covers(pos):
                del self._pickups[i]
                logger.info("Collected booster %s at %s.", p.type.value, pos)
                return p
        return None

    # --- coin shower ---

    def activate_coin_shower(self) -> bool:
        """Start the shower, or refill its timer when already running.

        Returns True when the shower was newly activated.
        """
        duration = self.config.coin_shower.duration_sec
        if self.shower.active:
            self.shower.timer = duration
            return False
        self.shower = CoinShower(active=True, timer=duration)
        logger.info("Coin shower activated for %.1fs.", duration)
        return True

    def explode_basket(self, origin: GridPosition) -> int:
        """Activate the shower and launch coins radially from *origin*."""
        self.activate_coin_shower()
        cfg = self.config.coin_shower
        ox, oy = origin
        for i in range(cfg.coin_count):
            angle = (i / cfg.coin_count) * 2 * math.pi
            angle += (self.rng.random() - 0.5) * _ANGLE_JITTER
            speed = cfg.explosion_speed * (0.8 + self.rng.random() * 0.4)
            self.shower.flying.append(
                FlyingCoin(
                    x=float(ox),
                    y=float(oy),
                    vx=math.cos(angle) * speed,
                    vy=math.sin(angle) * speed,
                    flight_duration=cfg.flight_duration_sec,
                )
            )
        logger.info("Basket exploded at %s - %d coins launched.", origin, cfg.coin_count)
        return cfg.coin_count

    def update_coin_shower(self, dt: float, blocked: Iterable[GridPosition] = ()) -> int:
        """Move flying coins, settle landed ones, age settled coins.

        *blocked* holds cells a coin may not settle on (snake, food,
        hazards). Returns the number of coins settled this frame.
        """
        shower = self.shower
        if not shower.active:
            return 0
        shower.timer -= dt
        if shower.timer <= 0:
            self._deactivate_shower()
            return 0

        cfg = self.config.coin_shower
        decay = cfg.deceleration ** dt
        blocked_cells = set(blocked)
        settled = 0
        still_flying: list[FlyingCoin] = []
        for coin in shower.flying:
            coin.age += dt
            coin.x += coin.vx * dt
            coin.y += coin.vy * dt
            coin.vx *= decay
            coin.vy *= decay
            if coin.age < coin.flight_duration:
                still_flying.append(coin)
                continue
            cell = self.grid.clamp(math.floor(coin.x + 0.5), math.floor(coin.y + 0.5))
            if cell in blocked_cells or cell in self.occupied_cells():
                logger.debug("Coin discarded; %s is occupied.", cell)
                continue
            shower.coins.append(SettledCoin(cell[0], cell[1], cfg.coin_lifetime_sec))
            settled += 1
        shower.flying = still_flying

        for coin in shower.coins:
            coin.age += dt
        shower.coins = [c for c in shower.coins if c.age < c.lifetime]
        return settled

    def collect_coin_at(self, pos: GridPosition) -> int:
        """Remove a settled coin on *pos* and return its currency value."""
        for i, coin in enumerate(self.shower.coins):
            if coin.cell == pos:
                del self.shower.coins[i]
                return self.config.coin_shower.coin_value
        return 0

    def _deactivate_shower(self) -> None:
        self.shower = CoinShower()
        logger.info("Coin shower deactivated.")

    # --- shrink ---

    def shrink(self, snake: Snake, min_length: int = 3) -> ShrinkResult:
        """Cut the configured fraction of segments off the tail."""
        old_length = len(snake)
        cut = math.floor(old_length * self.config.shrink_fraction)
        new_length = max(min_length, old_length - cut)
        if new_length >= old_length:
            logger.info("Shrink failed: snake too short (%d).", old_length)
            return ShrinkResult(ShrinkOutcome.TOO_SHORT, old_length, old_length)
        burst_at = snake.tail
        snake.truncate(new_length)
        logger.info("Shrink removed %d segments (%d -> %d).", old_length - new_length, old_length, new_length)
        return ShrinkResult(ShrinkOutcome.SHRUNK, old_length, new_length, burst_at)

    def reset(self) -> None:
        self._pickups.clear()
        self.shower = CoinShower()
        self._spawn_timer = 0.0

    def to_dict(self) -> dict:
        return {
            "pickups": [p.to_dict() for p in self._pickups],
            "coin_shower": self.shower.to_dict(),
        }
