"""Neon Snake: deterministic game-simulation core."""

from neon_snake.boosters import BoosterManager, BoosterType, ShrinkOutcome, ShrinkResult
from neon_snake.config import GameConfig
from neon_snake.difficulty import DifficultyEngine, DifficultySnapshot
from neon_snake.economy import JsonFileStorage, MemoryStorage, Storage, Wallet
from neon_snake.engine import DeathCause, SnakeSimulator, TickOutcome
from neon_snake.events import EventQueue, EventType, GameEvent
from neon_snake.flow import FlowEngine, FlowState
from neon_snake.grid import Grid, GridPosition
from neon_snake.hazards import Hazard, HazardKind, HazardManager, HazardState
from neon_snake.orchestrator import Command, GameOrchestrator, GamePhase
from neon_snake.snake import Direction, Snake

__all__ = [
    "BoosterManager",
    "BoosterType",
    "Command",
    "DeathCause",
    "DifficultyEngine",
    "DifficultySnapshot",
    "Direction",
    "EventQueue",
    "EventType",
    "FlowEngine",
    "FlowState",
    "GameConfig",
    "GameEvent",
    "GameOrchestrator",
    "GamePhase",
    "Grid",
    "GridPosition",
    "Hazard",
    "HazardKind",
    "HazardManager",
    "HazardState",
    "JsonFileStorage",
    "MemoryStorage",
    "ShrinkOutcome",
    "ShrinkResult",
    "Snake",
    "SnakeSimulator",
    "Storage",
    "TickOutcome",
    "Wallet",
]
