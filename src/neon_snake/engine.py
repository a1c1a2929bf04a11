"""Fixed-step snake simulation composing every gameplay subsystem."""

from __future__ import annotations

import enum
import logging
import math

import numpy as np

from neon_snake.boosters import BoosterManager, BoosterType, ShrinkOutcome
from neon_snake.config import GameConfig
from neon_snake.difficulty import DifficultyEngine
from neon_snake.economy import Wallet
from neon_snake.events import EventQueue, EventType
from neon_snake.flow import FlowEngine
from neon_snake.food import FoodSpawner
from neon_snake.grid import Grid, GridPosition
from neon_snake.hazards import HazardManager
from neon_snake.snake import Direction, Snake

logger = logging.getLogger(__name__)


class TickOutcome(str, enum.Enum):
    MOVED = "moved"
    ATE = "ate"
    DIED = "died"


class DeathCause(str, enum.Enum):
    WALL = "wall"
    SELF = "self"
    HAZARD = "hazard"


class SnakeSimulator:
    """Single-snake simulation: the discrete tick plus per-frame updates.

    The simulator owns the snake and delegates every other collection to
    its manager. :meth:`step` advances exactly one movement tick and is
    deterministic for a given state; :meth:`update` runs the
    continuous-time subsystems for one frame.
    """

    def __init__(
        self,
        config: GameConfig | None = None,
        rng: np.random.Generator | None = None,
        wallet: Wallet | None = None,
        events: EventQueue | None = None,
    ) -> None:
        self.config = cfg = config or GameConfig()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.wallet = wallet if wallet is not None else Wallet(config=cfg.economy)
        self.events = events if events is not None else EventQueue()

        self.grid = Grid(cfg.grid.columns, cfg.grid.rows, cfg.grid.hud_rows)
        self.food = FoodSpawner(self.grid, rng=self.rng)
        self.difficulty = DifficultyEngine(cfg.difficulty, cfg.flow)
        self.flow = FlowEngine(cfg.flow)
        self.hazards = HazardManager(self.grid, cfg.hazards, rng=self.rng)
        self.boosters = BoosterManager(self.grid, cfg.boosters, rng=self.rng)
        self.reset()

    def _new_snake(self) -> Snake:
        cfg = self.config
        return Snake(
            cfg.grid.columns // 2,
            cfg.grid.rows // 2,
            Direction.parse(cfg.snake.starting_direction),
            length=cfg.snake.starting_length,
        )

    def reset(self) -> None:
        """Start a fresh run; persistent wallet values are kept."""
        self.snake = self._new_snake()
        self.difficulty.reset()
        self.flow.reset()
        self.hazards.reset()
        self.boosters.reset()
        self.food.clear()
        self.food.respawn(self.snake.body)

        self.score = 0
        self.food_eaten = 0
        self.tick = 0
        self.alive = True
        self.death_cause: DeathCause | None = None
        self.currency_earned = 0
        self.new_high_score = False
        self.hazards_unlocked = False
        self.mouth_open_timer = 0.0
        self.grow_timer = 0.0

    @property
    def speed_ms(self) -> int:
        return self.difficulty.snapshot.speed_ms

    def set_direction(self, direction: Direction) -> bool:
        """Buffer a directional intent; reversals are silently ignored."""
        if not self.alive:
            return False
        return self.snake.queue_direction(direction)

    # --- discrete tick ---

    def step(self) -> TickOutcome:
        """Advance the snake by one cell and resolve the consequences."""
        if not self.alive:
            return TickOutcome.DIED
        self.tick += 1
        self.snake.commit_direction()
        next_head = self.snake.next_head()

        if not self.grid.in_bounds(next_head):
            return self._kill(DeathCause.WALL)

        will_eat = self.food.is_at(next_head)

        # The tail vacates its cell this tick unless the snake grows.
        if self.snake.blocks(next_head, tail_vacates=not will_eat):
            return self._kill(DeathCause.SELF)

        if self.hazards.is_lethal_at(next_head):
            return self._kill(DeathCause.HAZARD)

        self.snake.advance(next_head, grow=will_eat)
        if will_eat:
            self._eat(next_head)
        self._collect_at(next_head)
        return TickOutcome.ATE if will_eat else TickOutcome.MOVED

    def _eat(self, pos: GridPosition) -> None:
        cfg = self.config
        self.food_eaten += 1
        previous_tier = self.difficulty.update(self.food_eaten)
        snapshot = self.difficulty.snapshot

        new_flow_tier = self.flow.on_food_eaten(snapshot.flow_window_sec)
        multiplier = self.flow.multiplier
        gained = math.floor(cfg.economy.base_food_score * multiplier)
        self.score += gained
        self.wallet.award(cfg.economy.coin_per_food)

        self.food.respawn(
            self.snake.body,
            self.hazards.occupied_cells(),
            self.boosters.occupied_cells(),
        )
        self.mouth_open_timer = max(self.mouth_open_timer, cfg.timing.mouth_anim_duration)
        self.grow_timer = cfg.timing.grow_anim_duration

        self.events.emit(
            EventType.FOOD_EATEN, self.tick,
            position=list(pos), score_gained=gained, multiplier=multiplier,
            food_eaten=self.food_eaten,
        )
        if new_flow_tier is not None:
            self.events.emit(
                EventType.FLOW_TIER_CHANGED, self.tick,
                tier=new_flow_tier, multiplier=multiplier,
            )
        if previous_tier is not None:
            self._on_tier_changed(previous_tier, snapshot.tier)

    def _on_tier_changed(self, previous: int, tier: int) -> None:
        self.events.emit(
            EventType.TIER_CHANGED, self.tick,
            previous=previous, tier=tier,
            speed_ms=self.difficulty.snapshot.speed_ms,
        )
        self.hazards.sync_to_tier(tier, self.snake.body, self.food.position)
        if not self.hazards_unlocked and any(self.hazards.target_counts(tier)):
            self.hazards_unlocked = True
            self.events.emit(EventType.HAZARDS_UNLOCKED, self.tick, tier=tier)
            logger.info("Hazards unlocked at tier %d.", tier)

    def _collect_at(self, pos: GridPosition) -> None:
        """Collect any booster pickup or settled coin under the new head."""
        value = self.boosters.collect_coin_at(pos)
        if value:
            self.wallet.award(value)
            self.events.emit(
                EventType.COIN_COLLECTED, self.tick,
                position=list(pos), value=value, currency=self.wallet.currency,
            )

        pickup = self.boosters.take_pickup_at(pos)
        if pickup is None:
            return
        self.events.emit(
            EventType.BOOSTER_COLLECTED, self.tick,
            type=pickup.type.value, position=list(pos),
        )
        if pickup.type is BoosterType.COIN_SHOWER:
            self.boosters.explode_basket(pos)
        elif pickup.type is BoosterType.SHRINK:
            self.apply_shrink()

    def apply_shrink(self) -> None:
        result = self.boosters.shrink(self.snake, self.config.snake.min_length)
        if result.outcome is ShrinkOutcome.TOO_SHORT:
            self.events.emit(EventType.SHRINK_FAILED, self.tick, length=result.old_length)
            return
        self.events.emit(
            EventType.SNAKE_SHRUNK, self.tick,
            removed=result.removed, length=result.new_length,
            burst_at=list(result.burst_at),
        )

    def _kill(self, cause: DeathCause) -> TickOutcome:
        """Enter the death transition: clear the body and settle rewards."""
        self.alive = False
        self.death_cause = cause
        self.snake.clear()
        self.currency_earned = self.wallet.death_reward(self.score)
        self.wallet.award(self.currency_earned)
        self.new_high_score = new_high = self.wallet.record_score(self.score)
        self.events.emit(
            EventType.SNAKE_DIED, self.tick,
            cause=cause.value, score=self.score, new_high_score=new_high,
        )
        logger.info(
            "Snake died (%s) at tick %d with score %d.",
            cause.value, self.tick, self.score,
        )
        return TickOutcome.DIED

    # --- continuous-time update ---

    def update(self, dt: float) -> None:
        """Run one frame of hazard, flow, booster and animation timers."""
        if not self.alive:
            return
        self.hazards.update(dt)

        if self.flow.on_tick(dt):
            self.events.emit(EventType.FLOW_EXPIRED, self.tick)

        self.boosters.update_pickups(dt)
        self.boosters.update_coin_shower(dt, self.blocked_cells())
        pickup = self.boosters.maybe_spawn(
            dt, self.difficulty.snapshot.tier,
            self.snake.body, self.food.position, self.hazards.occupied_cells(),
        )
        if pickup is not None:
            self.events.emit(
                EventType.BOOSTER_SPAWNED, self.tick,
                type=pickup.type.value, position=list(pickup.cell),
            )

        self.mouth_open_timer = max(0.0, self.mouth_open_timer - dt)
        self.grow_timer = max(0.0, self.grow_timer - dt)

        if self.food.position is None:
            self.food.respawn(
                self.snake.body,
                self.hazards.occupied_cells(),
                self.boosters.occupied_cells(),
            )

    def blocked_cells(self) -> list[GridPosition]:
        """Cells occupied by the snake, food or hazards."""
        return list(self.snake.body) + self.food.occupied() + self.hazards.occupied_cells()

    # --- debug spawn commands ---

    def spawn_hazard(self) -> bool:
        return self.hazards.spawn_static(self.snake.body, self.food.position) is not None

    def spawn_orb(self) -> bool:
        return self.hazards.spawn_orb(
            self.snake.body, self.food.position, self.difficulty.snapshot.tier,
        ) is not None

    def spawn_booster(self, booster_type: BoosterType = BoosterType.COIN_SHOWER) -> bool:
        pickup = self.boosters.spawn_pickup(
            booster_type, self.snake.body, self.food.position,
            self.hazards.occupied_cells(),
        )
        return pickup is not None

    def get_state(self) -> dict:
        """Return a read-only, serializable snapshot of the simulation."""
        return {
            "tick": self.tick,
            "alive": self.alive,
            "death_cause": None if self.death_cause is None else self.death_cause.value,
            "score": self.score,
            "food_eaten": self.food_eaten,
            "currency": self.wallet.currency,
            "high_score": self.wallet.high_score,
            "skin": self.wallet.selected_skin,
            "grid": self.grid.to_dict(),
            "snake": self.snake.to_dict(),
            "food": self.food.to_dict(),
            "hazards": self.hazards.to_list(),
            "boosters": self.boosters.to_dict(),
            "difficulty": self.difficulty.snapshot.to_dict(),
            "flow": {**self.flow.state.to_dict(), "multiplier": self.flow.multiplier},
            "mouth_open": self.mouth_open_timer > 0,
            "growing": self.grow_timer > 0,
        }
