"""Tests for the neon-snake CLI."""

import json

from neon_snake.cli import _build_parser, main
from neon_snake.config import GameConfig


class TestParser:
    def test_simulate_defaults(self):
        args = _build_parser().parse_args(["simulate"])
        assert args.frames == 20_000
        assert args.fps == 60.0
        assert args.seed is None

    def test_serve_defaults(self):
        args = _build_parser().parse_args(["serve"])
        assert args.host == "127.0.0.1"
        assert args.port == 8765


class TestMain:
    def test_no_command(self):
        assert main([]) == 1

    def test_config_writes_defaults(self, tmp_path):
        path = tmp_path / "cfg.json"
        assert main(["config", str(path)]) == 0
        assert GameConfig.load(path) == GameConfig()

    def test_simulate(self, tmp_path, capsys):
        store = tmp_path / "store.json"
        code = main(["simulate", "--seed", "3", "--frames", "300", "--storage", str(store)])
        assert code == 0
        out = capsys.readouterr().out
        summary = json.loads(out)
        assert summary["frames"] <= 300
        assert summary["events"]["phase_changed"] >= 2
        assert summary["score"] >= 0

    def test_simulate_with_config(self, tmp_path, capsys):
        path = tmp_path / "cfg.json"
        GameConfig().save(path)
        assert main(["simulate", "--seed", "1", "--frames", "50", "--config", str(path)]) == 0
        summary = json.loads(capsys.readouterr().out)
        assert summary["phase"] == "intro"
        assert summary["ticks"] == 0
