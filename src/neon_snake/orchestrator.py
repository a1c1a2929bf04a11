"""Top-level game state machine and frame loop."""

from __future__ import annotations

import enum
import logging

import numpy as np

from neon_snake.boosters import BoosterType
from neon_snake.config import GameConfig
from neon_snake.economy import Storage, Wallet
from neon_snake.engine import SnakeSimulator, TickOutcome
from neon_snake.events import EventQueue, EventType, GameEvent
from neon_snake.snake import Direction

logger = logging.getLogger(__name__)

# Float slack when comparing accumulated frame time against the tick interval.
_TICK_EPSILON_MS = 1e-6


class GamePhase(str, enum.Enum):
    INIT = "init"
    INTRO = "intro"
    PLAYING = "playing"
    PAUSED = "paused"
    DYING = "dying"
    GAMEOVER = "gameover"


class Command(str, enum.Enum):
    START = "start"
    TOGGLE_PAUSE = "toggle_pause"
    RESTART = "restart"
    SPAWN_HAZARD = "spawn_hazard"
    SPAWN_ORB = "spawn_orb"
    SPAWN_BOOSTER = "spawn_booster"


class GameOrchestrator:
    """Drives the simulation from a display-rate frame callback.

    Call :meth:`advance` once per frame with the elapsed wall time. The
    delta is clamped, gameplay timers run every frame while playing, and
    the snake ticks whenever accumulated time reaches the current speed
    interval. Every gameplay timer is frozen outside ``playing``; intro
    and dying only run their own phase timers.
    """

    def __init__(
        self,
        config: GameConfig | None = None,
        seed: int | None = None,
        storage: Storage | None = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rng = np.random.default_rng(seed)
        self.events = EventQueue()
        self.wallet = Wallet(storage, self.config.economy)
        self.simulator = SnakeSimulator(
            self.config, rng=self.rng, wallet=self.wallet, events=self.events,
        )
        self.phase = GamePhase.INIT
        self.phase_timer = 0.0
        self.elapsed = 0.0
        self.frames = 0
        self._tick_accumulator_ms = 0.0

    # --- commands ---

    def start(self) -> bool:
        """Begin play: intro on first launch, straight in after game over."""
        if self.phase is GamePhase.INIT:
            self.simulator.reset()
            self._set_phase(GamePhase.INTRO)
            self.phase_timer = self.config.timing.intro_duration
            return True
        if self.phase is GamePhase.GAMEOVER:
            self._begin_run()
            return True
        return False

    def toggle_pause(self) -> bool:
        if self.phase is GamePhase.PLAYING:
            self._set_phase(GamePhase.PAUSED)
            return True
        if self.phase is GamePhase.PAUSED:
            self._tick_accumulator_ms = 0.0
            self._set_phase(GamePhase.PLAYING)
            return True
        return False

    def restart(self) -> bool:
        """Force a full reset into a fresh run from any phase."""
        self._begin_run()
        return True

    def set_direction(self, direction: Direction) -> bool:
        if self.phase is not GamePhase.PLAYING:
            return False
        return self.simulator.set_direction(direction)

    def handle_command(self, command: Command | str) -> bool:
        """Dispatch a named command. Unknown names raise ``ValueError``."""
        cmd = Command(command)
        if cmd is Command.START:
            return self.start()
        if cmd is Command.TOGGLE_PAUSE:
            return self.toggle_pause()
        if cmd is Command.RESTART:
            return self.restart()
        if self.phase is not GamePhase.PLAYING:
            return False
        if cmd is Command.SPAWN_HAZARD:
            return self.simulator.spawn_hazard()
        if cmd is Command.SPAWN_ORB:
            return self.simulator.spawn_orb()
        return self.simulator.spawn_booster(
            BoosterType.COIN_SHOWER if self.rng.random() < 0.5 else BoosterType.SHRINK,
        )

    # --- frame loop ---

    def advance(self, dt: float) -> list[GameEvent]:
        """Run one frame and return the events it produced."""
        timing = self.config.timing
        dt = min(timing.max_frame_dt, max(timing.min_frame_dt, dt))
        self.elapsed += dt
        self.frames += 1

        if self.phase is GamePhase.INTRO:
            self.phase_timer -= dt
            if self.phase_timer <= 0:
                self._tick_accumulator_ms = 0.0
                self._set_phase(GamePhase.PLAYING)
        elif self.phase is GamePhase.PLAYING:
            self.simulator.update(dt)
            self._tick_accumulator_ms += dt * 1000.0
            if self._tick_accumulator_ms + _TICK_EPSILON_MS >= self.simulator.speed_ms:
                self._tick_accumulator_ms = 0.0
                if self.simulator.step() is TickOutcome.DIED:
                    self._set_phase(GamePhase.DYING)
                    self.phase_timer = timing.death_duration
        elif self.phase is GamePhase.DYING:
            self.phase_timer -= dt
            if self.phase_timer <= 0:
                self._finalize_game_over()

        return self.events.drain()

    def _begin_run(self) -> None:
        self.simulator.reset()
        self.phase_timer = 0.0
        self._tick_accumulator_ms = 0.0
        self._set_phase(GamePhase.PLAYING)

    def _finalize_game_over(self) -> None:
        sim = self.simulator
        self.phase_timer = 0.0
        self._set_phase(GamePhase.GAMEOVER)
        self.events.emit(
            EventType.GAME_OVER, sim.tick,
            score=sim.score,
            high_score=self.wallet.high_score,
            new_high_score=sim.new_high_score,
            food_eaten=sim.food_eaten,
            tier=sim.difficulty.snapshot.tier,
            cause=None if sim.death_cause is None else sim.death_cause.value,
            currency_earned=sim.currency_earned,
            currency=self.wallet.currency,
        )

    def _set_phase(self, phase: GamePhase) -> None:
        if phase is self.phase:
            return
        previous, self.phase = self.phase, phase
        self.events.emit(
            EventType.PHASE_CHANGED, self.simulator.tick,
            previous=previous.value, phase=phase.value,
        )
        logger.info("Phase %s -> %s.", previous.value, phase.value)

    def snapshot(self) -> dict:
        """Read-only view of everything a renderer needs."""
        return {
            "phase": self.phase.value,
            "phase_timer": self.phase_timer,
            "elapsed": self.elapsed,
            **self.simulator.get_state(),
            "wallet": self.wallet.to_dict(),
        }
