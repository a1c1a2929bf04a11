"""Tests for the greedy autopilot."""

import numpy as np

from neon_snake.autopilot import Autopilot
from neon_snake.engine import SnakeSimulator
from neon_snake.orchestrator import GameOrchestrator, GamePhase
from neon_snake.snake import Direction, Snake


class TestAutopilot:
    def test_heads_towards_food(self):
        sim = SnakeSimulator(rng=np.random.default_rng(0))
        sim.food.position = (16, 4)
        assert Autopilot(sim).choose() is Direction.UP

    def test_avoids_wall(self):
        sim = SnakeSimulator(rng=np.random.default_rng(0))
        sim.snake = Snake(0, 5, Direction.LEFT)
        sim.food.position = (0, 20)
        assert Autopilot(sim).choose() is Direction.DOWN

    def test_keeps_heading_on_tie(self):
        sim = SnakeSimulator(rng=np.random.default_rng(0))
        sim.food.position = (20, 8)
        assert Autopilot(sim).choose() is Direction.RIGHT

    def test_dead_snake(self):
        sim = SnakeSimulator(rng=np.random.default_rng(0))
        sim.snake = Snake(0, 5, Direction.LEFT)
        sim.step()
        assert Autopilot(sim).choose() is None

    def test_plays_a_game(self):
        game = GameOrchestrator(seed=1)
        pilot = Autopilot(game.simulator)
        game.start()
        for _ in range(3000):
            if game.phase is GamePhase.PLAYING:
                direction = pilot.choose()
                if direction is not None:
                    game.set_direction(direction)
            game.advance(0.033)
            if game.phase is GamePhase.GAMEOVER:
                break
        assert game.simulator.food_eaten >= 1
