"""Command-line entry point for Neon Snake."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections import Counter

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="neon-snake",
        description="Neon Snake simulation core, headless runner and server.",
    )
    sub = parser.add_subparsers(dest="command", help="Available commands.")

    # --- simulate ---
    sim_p = sub.add_parser(
        "simulate", help="Run a headless game driven by the autopilot.",
    )
    sim_p.add_argument("--seed", type=int, default=None)
    sim_p.add_argument("--frames", type=int, default=20_000)
    sim_p.add_argument("--fps", type=float, default=60.0)
    sim_p.add_argument(
        "--config", type=str, default=None,
        help="Path to a JSON game config file.",
    )
    sim_p.add_argument(
        "--storage", type=str, default=None,
        help="JSON file for high score and currency.",
    )

    # --- serve ---
    serve_p = sub.add_parser("serve", help="Run the remote-play server.")
    serve_p.add_argument("--host", type=str, default="127.0.0.1")
    serve_p.add_argument("--port", type=int, default=8765)
    serve_p.add_argument("--storage", type=str, default=None)

    # --- config ---
    config_p = sub.add_parser("config", help="Write the default config as JSON.")
    config_p.add_argument("output", help="Destination path.")

    return parser


def _load_config(path: str | None):
    from neon_snake.config import GameConfig

    return GameConfig.load(path) if path else GameConfig()


def _make_storage(path: str | None, autoflush: bool = True):
    from neon_snake.economy import JsonFileStorage, MemoryStorage

    return JsonFileStorage(path, autoflush=autoflush) if path else MemoryStorage()


def _run_simulate(args: argparse.Namespace) -> int:
    from neon_snake.autopilot import Autopilot
    from neon_snake.orchestrator import GameOrchestrator, GamePhase

    game = GameOrchestrator(
        _load_config(args.config), seed=args.seed, storage=_make_storage(args.storage),
    )
    pilot = Autopilot(game.simulator)
    dt = 1.0 / args.fps
    counts: Counter[str] = Counter()

    game.start()
    for _ in range(args.frames):
        if game.phase is GamePhase.PLAYING:
            direction = pilot.choose()
            if direction is not None:
                game.set_direction(direction)
        for event in game.advance(dt):
            counts[event.type.value] += 1
        if game.phase is GamePhase.GAMEOVER:
            break

    state = game.snapshot()
    summary = {
        "phase": state["phase"],
        "frames": game.frames,
        "ticks": state["tick"],
        "score": state["score"],
        "food_eaten": state["food_eaten"],
        "tier": state["difficulty"]["tier"],
        "death_cause": state["death_cause"],
        "currency": state["currency"],
        "high_score": state["high_score"],
        "events": dict(sorted(counts.items())),
    }
    print(json.dumps(summary, indent=2))  # noqa: T201
    return 0


def _run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from neon_snake.server.app import create_app

    # The server flushes buffered writes off the event loop.
    storage = _make_storage(args.storage, autoflush=False)
    uvicorn.run(create_app(storage=storage), host=args.host, port=args.port)
    return 0


def _run_config(args: argparse.Namespace) -> int:
    from neon_snake.config import GameConfig

    GameConfig().save(args.output)
    print(f"Wrote default config to {args.output}")  # noqa: T201
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``neon-snake`` CLI."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    handlers = {
        "simulate": _run_simulate,
        "serve": _run_serve,
        "config": _run_config,
    }
    return handlers[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
