"""Tests for the SnakeSimulator module."""

import json
from collections import deque

import numpy as np

from neon_snake.boosters import BoosterType, SettledCoin
from neon_snake.engine import DeathCause, SnakeSimulator, TickOutcome
from neon_snake.events import EventType
from neon_snake.hazards import Hazard, HazardKind, HazardState
from neon_snake.snake import Direction, Snake


def _sim(seed=0):
    return SnakeSimulator(rng=np.random.default_rng(seed))


def _event_types(sim):
    return [e.type for e in sim.events.drain()]


def _feed_ahead(sim):
    """Put the food directly in front of the head."""
    sim.food.position = sim.snake.next_head()


class TestSimulatorInit:
    def test_initial_state(self):
        sim = _sim()
        assert list(sim.snake.body) == [(16, 12), (15, 12), (14, 12)]
        assert sim.snake.direction is Direction.RIGHT
        assert sim.score == 0
        assert sim.tick == 0
        assert sim.alive
        assert sim.speed_ms == 120

    def test_food_not_on_snake(self):
        for seed in range(20):
            sim = _sim(seed)
            assert sim.food.position is not None
            assert not sim.snake.occupies(sim.food.position)


class TestMovement:
    def test_step_moves_right(self):
        sim = _sim()
        sim.food.position = (0, 0)
        assert sim.step() is TickOutcome.MOVED
        assert sim.snake.head == (17, 12)
        assert len(sim.snake) == 3
        assert sim.tick == 1

    def test_turn(self):
        sim = _sim()
        sim.food.position = (0, 0)
        assert sim.set_direction(Direction.UP)
        sim.step()
        assert sim.snake.head == (16, 11)

    def test_reversal_ignored(self):
        sim = _sim()
        sim.food.position = (0, 0)
        assert not sim.set_direction(Direction.LEFT)
        sim.step()
        assert sim.snake.head == (17, 12)

    def test_length_constant_without_food(self):
        sim = _sim()
        sim.food.position = (0, 0)
        for _ in range(10):
            sim.step()
        assert len(sim.snake) == 3


class TestEating:
    def test_eat_grows_and_scores(self):
        sim = _sim()
        sim.food.position = (17, 12)
        assert sim.step() is TickOutcome.ATE
        assert list(sim.snake.body) == [(17, 12), (16, 12), (15, 12), (14, 12)]
        assert sim.score == 10
        assert sim.food_eaten == 1
        assert sim.wallet.currency == 1
        assert sim.food.position is not None
        assert not sim.snake.occupies(sim.food.position)
        assert sim.mouth_open_timer > 0
        assert EventType.FOOD_EATEN in _event_types(sim)

    def test_flow_multiplier_applies(self):
        sim = _sim()
        for _ in range(3):
            _feed_ahead(sim)
            sim.step()
        # Third consecutive food reaches flow tier 1 (1.2x).
        assert sim.score == 10 + 10 + 12
        assert sim.flow.state.tier == 1
        assert EventType.FLOW_TIER_CHANGED in _event_types(sim)

    def test_tier_change_event(self):
        sim = _sim()
        sim.food_eaten = 9
        _feed_ahead(sim)
        sim.step()
        assert sim.difficulty.snapshot.tier == 1
        assert sim.speed_ms == 112
        types = _event_types(sim)
        assert EventType.TIER_CHANGED in types
        assert EventType.HAZARDS_UNLOCKED not in types
        assert len(sim.hazards) == 0

    def test_hazards_unlock_with_tier(self):
        sim = _sim()
        sim.food_eaten = 19
        _feed_ahead(sim)
        sim.step()
        assert sim.difficulty.snapshot.tier == 2
        assert len(sim.hazards) == 1
        assert sim.hazards_unlocked
        assert EventType.HAZARDS_UNLOCKED in _event_types(sim)

    def test_new_food_avoids_hazards(self):
        sim = _sim(4)
        for _ in range(6):
            sim.spawn_hazard()
        _feed_ahead(sim)
        sim.step()
        assert sim.food.position not in sim.hazards.occupied_cells()


class TestWallCollision:
    def test_death_on_wall(self):
        sim = _sim()
        sim.snake = Snake(0, 5, Direction.LEFT)
        sim.score = 95
        assert sim.step() is TickOutcome.DIED
        assert not sim.alive
        assert sim.death_cause is DeathCause.WALL
        assert len(sim.snake) == 0
        assert sim.currency_earned == 9
        assert sim.wallet.currency == 9
        assert sim.wallet.high_score == 95
        assert sim.new_high_score

    def test_dead_snake_does_not_step(self):
        sim = _sim()
        sim.snake = Snake(0, 5, Direction.LEFT)
        sim.step()
        tick = sim.tick
        assert sim.step() is TickOutcome.DIED
        assert sim.tick == tick
        assert not sim.set_direction(Direction.UP)


class TestSelfCollision:
    def _coiled(self, sim):
        sim.snake.body = deque([(5, 5), (5, 6), (6, 6), (6, 5), (6, 4)])
        sim.snake.direction = sim.snake.next_direction = Direction.UP
        sim.food.position = (20, 20)

    def test_death_on_body(self):
        sim = _sim()
        self._coiled(sim)
        sim.set_direction(Direction.RIGHT)
        assert sim.step() is TickOutcome.DIED
        assert sim.death_cause is DeathCause.SELF

    def test_may_enter_vacating_tail(self):
        sim = _sim()
        sim.snake.body = deque([(5, 5), (5, 6), (6, 6), (6, 5)])
        sim.snake.direction = sim.snake.next_direction = Direction.UP
        sim.food.position = (20, 20)
        sim.set_direction(Direction.RIGHT)
        assert sim.step() is TickOutcome.MOVED
        assert list(sim.snake.body) == [(6, 5), (5, 5), (5, 6), (6, 6)]

    def test_tail_stays_when_eating(self):
        sim = _sim()
        sim.snake.body = deque([(5, 5), (5, 6), (6, 6), (6, 5)])
        sim.snake.direction = sim.snake.next_direction = Direction.UP
        sim.food.position = (6, 5)
        sim.set_direction(Direction.RIGHT)
        assert sim.step() is TickOutcome.DIED
        assert sim.death_cause is DeathCause.SELF


class TestHazardCollision:
    def _static(self, state):
        return Hazard(
            id=500, kind=HazardKind.STATIC, x=17, y=12,
            telegraph_duration=1.0, state=state,
        )

    def test_active_hazard_kills(self):
        sim = _sim()
        sim.food.position = (0, 0)
        sim.hazards.add(self._static(HazardState.ACTIVE))
        assert sim.step() is TickOutcome.DIED
        assert sim.death_cause is DeathCause.HAZARD

    def test_telegraph_is_harmless(self):
        sim = _sim()
        sim.food.position = (0, 0)
        sim.hazards.add(self._static(HazardState.TELEGRAPH))
        assert sim.step() is TickOutcome.MOVED
        assert sim.alive


class TestBoosters:
    def _place_pickup(self, sim, booster_type):
        assert sim.spawn_booster(booster_type)
        pickup = sim.boosters.pickups[0]
        pickup.x, pickup.y = 17, 12
        sim.food.position = (0, 0)
        return pickup

    def test_coin_shower_pickup(self):
        sim = _sim()
        self._place_pickup(sim, BoosterType.COIN_SHOWER)
        sim.step()
        assert sim.boosters.pickups == ()
        assert sim.boosters.shower.active
        assert len(sim.boosters.shower.flying) == 12
        assert EventType.BOOSTER_COLLECTED in _event_types(sim)

    def test_shrink_pickup_on_short_snake(self):
        sim = _sim()
        self._place_pickup(sim, BoosterType.SHRINK)
        sim.step()
        assert len(sim.snake) == 3
        assert EventType.SHRINK_FAILED in _event_types(sim)

    def test_shrink_collected_off_anchor(self):
        sim = _sim()
        pickup = self._place_pickup(sim, BoosterType.SHRINK)
        # The head enters the lower-left cell of the 2x2 square.
        pickup.x, pickup.y = 17, 11
        sim.step()
        assert sim.boosters.pickups == ()
        assert EventType.BOOSTER_COLLECTED in _event_types(sim)

    def test_apply_shrink(self):
        sim = _sim()
        sim.snake = Snake(20, 12, length=10)
        sim.apply_shrink()
        assert len(sim.snake) == 5
        events = sim.events.drain()
        assert events[-1].type is EventType.SNAKE_SHRUNK
        assert events[-1].data["removed"] == 5

    def test_collect_settled_coin(self):
        sim = _sim()
        sim.food.position = (0, 0)
        sim.boosters.activate_coin_shower()
        sim.boosters.shower.coins.append(SettledCoin(17, 12, 6.0))
        sim.step()
        assert sim.wallet.currency == 1
        assert sim.boosters.shower.coins == []
        assert EventType.COIN_COLLECTED in _event_types(sim)


class TestUpdate:
    def test_flow_expires(self):
        sim = _sim()
        _feed_ahead(sim)
        sim.step()
        sim.events.drain()
        for _ in range(200):
            sim.update(0.033)
        assert not sim.flow.state.active
        assert EventType.FLOW_EXPIRED in _event_types(sim)

    def test_animation_timers_decay(self):
        sim = _sim()
        _feed_ahead(sim)
        sim.step()
        sim.update(1.0)
        assert sim.mouth_open_timer == 0.0
        assert sim.grow_timer == 0.0

    def test_food_retried_when_absent(self):
        sim = _sim()
        sim.food.clear()
        sim.update(0.016)
        assert sim.food.position is not None

    def test_update_ignored_when_dead(self):
        sim = _sim()
        hazard = sim.hazards.add(
            Hazard(id=1, kind=HazardKind.STATIC, x=3, y=3, telegraph_duration=1.0),
        )
        sim.snake = Snake(0, 5, Direction.LEFT)
        sim.step()
        sim.update(5.0)
        assert hazard.age == 0.0


class TestStateAndDeterminism:
    def test_state_is_json_serializable(self):
        sim = _sim()
        sim.spawn_hazard()
        sim.spawn_orb()
        sim.spawn_booster()
        sim.update(0.5)
        json.dumps(sim.get_state())

    def test_state_keys(self):
        state = _sim().get_state()
        for key in ("tick", "alive", "score", "snake", "food", "hazards",
                    "boosters", "difficulty", "flow", "currency", "high_score"):
            assert key in state
        assert state["flow"]["multiplier"] == 1.0

    def test_same_seed_same_run(self):
        def run(seed):
            sim = _sim(seed)
            turns = [Direction.UP, Direction.LEFT, Direction.DOWN, Direction.RIGHT]
            for i in range(40):
                if not sim.alive:
                    break
                if i % 5 == 0:
                    sim.set_direction(turns[(i // 5) % 4])
                _feed_ahead(sim)
                sim.step()
                sim.update(0.033)
            return sim.get_state()

        assert run(11) == run(11)

    def test_reset_keeps_wallet(self):
        sim = _sim()
        _feed_ahead(sim)
        sim.step()
        sim.reset()
        assert sim.score == 0
        assert sim.food_eaten == 0
        assert sim.wallet.currency == 1
        assert len(sim.snake) == 3
