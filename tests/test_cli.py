# Area: Runner Tests
"""Tests for the command line entry point."""

import json
from unittest.mock import patch

import pytest

from glitch_duel import cli
from glitch_duel._shared import disable_protocol_mode
from glitch_duel._sync.history import GameHistoryRepository
from glitch_duel.records import GameRecord


ENV_KEYS = [
    "GLITCH_PLAYER_ID", "GLITCH_PLAYER_NAME", "GLITCH_PLAYER_AVATAR",
    "GLITCH_HISTORY_DB", "GLITCH_LOG_FILE", "GLITCH_TICK_INTERVAL", "GLITCH_DURATION",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    yield
    disable_protocol_mode()


class TestParseArgs:
    """Tests for argument parsing."""

    def test_defaults(self):
        args = cli.parse_args([])
        assert args.demo is False
        assert args.speed == 1.0
        assert args.seed is None

    def test_modes_are_exclusive(self):
        with pytest.raises(SystemExit):
            cli.parse_args(["--demo", "--history"])

    def test_options(self):
        args = cli.parse_args(["--solo", "--duration", "3", "--speed", "20", "--seed", "7"])
        assert args.solo is True
        assert args.duration == "3"
        assert args.speed == 20.0
        assert args.seed == 7


class TestLoadConfig:
    """Config file, .env and environment."""

    def test_json_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"player_id": "p-file", "bot_accuracy": 0.5}))
        config = cli.load_config(str(path))
        assert config == {"player_id": "p-file", "bot_accuracy": 0.5}

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"player_id": "p-file"}))
        monkeypatch.setenv("GLITCH_PLAYER_ID", "p-env")
        monkeypatch.setenv("GLITCH_TICK_INTERVAL", "0.1")
        config = cli.load_config(str(path))
        assert config["player_id"] == "p-env"
        assert config["tick_interval"] == 0.1

    def test_dotenv_loaded_before_environment(self, monkeypatch):
        def fake_load_dotenv():
            monkeypatch.setenv("GLITCH_PLAYER_NAME", "Dot")

        with patch("glitch_duel.cli.load_dotenv", side_effect=fake_load_dotenv) as load:
            config = cli.load_config(None)
        load.assert_called_once()
        assert config["player_name"] == "Dot"

    def test_missing_file_is_empty(self):
        assert cli.load_config("nope.json") == {}


class TestResolveProfile:
    """Profile file, then config values."""

    def test_config_values_win(self, tmp_path):
        path = tmp_path / "profile.json"
        path.write_text(json.dumps({"name": "File", "avatar": "🐙", "playerId": "p-file"}))
        args = cli.parse_args(["--profile", str(path)])
        profile = cli.resolve_profile(args, {"player_name": "Config"})
        assert profile.name == "Config"
        assert profile.avatar == "🐙"
        assert profile.player_id == "p-file"

    def test_default_player_id(self):
        profile = cli.resolve_profile(cli.parse_args([]), {})
        assert profile.player_id == "player-1"


class TestMain:
    """Tests for main()."""

    def test_history_without_database(self, capsys):
        assert cli.main(["--history"]) == 1
        assert "No history database" in capsys.readouterr().err

    def test_history_listing(self, tmp_path, monkeypatch, capsys):
        db = str(tmp_path / "h.db")
        GameHistoryRepository(db).save(GameRecord("Ada", "🦊", "2026-05-01 18:00:00", 2, 7, 9, 78))
        monkeypatch.setenv("GLITCH_HISTORY_DB", db)
        assert cli.main(["--history"]) == 0
        out = capsys.readouterr().out
        assert "Ada" in out
        assert "7/9" in out

    def test_empty_history(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv("GLITCH_HISTORY_DB", str(tmp_path / "h.db"))
        assert cli.main(["--history"]) == 0
        assert "No matches played yet." in capsys.readouterr().out

    @pytest.mark.parametrize("flag,count", [("--demo", 2), ("--solo", 1)])
    def test_sessions_handed_to_runner(self, flag, count):
        with patch("glitch_duel.cli.MatchRunner") as runner_cls:
            assert cli.main([flag, "--seed", "1"]) == 0
        _config, _hub, sessions = runner_cls.call_args.args
        assert len(sessions) == count
        runner_cls.return_value.run.assert_called_once()
        if count == 2:
            roles = {s.orchestrator.role.value for s in sessions}
            assert roles == {"host", "guest"}
