# Area: Shared
"""
glitch_duel.cli — Command-line interface
========================================

Provides the CLI entry point for bot matches and stored history.

Usage:
    python -m glitch_duel --demo                 # bot vs bot multiplayer match
    python -m glitch_duel --solo                 # bot single-player match
    python -m glitch_duel --history              # print stored records
    python -m glitch_duel --demo --speed 10      # run the clock 10x faster

Configuration comes from an optional JSON file (--config), then a .env
file, then environment variables:
    GLITCH_PLAYER_ID, GLITCH_PLAYER_NAME, GLITCH_PLAYER_AVATAR,
    GLITCH_HISTORY_DB, GLITCH_LOG_FILE, GLITCH_TICK_INTERVAL, GLITCH_DURATION
"""

import argparse
import json
import os
import random
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from ._runner_config import PlayerProfile, load_profile, parse_match_params
from ._shared import enable_protocol_mode, get_game_channel_name
from ._sync.history import GameHistoryRepository, MatchLedgerRepository
from ._sync.transport import InMemoryHub
from .runner import MatchRunner, build_session, scaled_clock

BOT_PROFILE = PlayerProfile(player_id="glitch-bot", name="Glitch Bot", avatar="🤖")


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Glitch Duel - two-player timed arithmetic quiz",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m glitch_duel --demo
  python -m glitch_duel --solo --duration 2
  python -m glitch_duel --history --config config.json
  GLITCH_PLAYER_NAME=Ada python -m glitch_duel --demo --speed 5
        """,
    )

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--demo",
        action="store_true",
        help="Play a bot vs bot multiplayer match and print the protocol log",
    )
    mode.add_argument(
        "--solo",
        action="store_true",
        help="Play a bot single-player match (default)",
    )
    mode.add_argument(
        "--history",
        action="store_true",
        help="Print stored match history and exit",
    )

    parser.add_argument("--config", type=str, help="Path to JSON config file")
    parser.add_argument("--profile", type=str, help="Path to player profile JSON")
    parser.add_argument("--duration", type=str, help="Match length in minutes (1-5)")
    parser.add_argument(
        "--speed",
        type=float,
        default=1.0,
        help="Clock speed factor for bot matches (default: 1.0)",
    )
    parser.add_argument("--seed", type=int, help="Random seed for reproducible matches")

    return parser.parse_args(argv)


def load_config(config_path: Optional[str]) -> Dict[str, Any]:
    """Load config from file, then .env, then environment."""
    config: Dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            with open(path, encoding="utf-8") as f:
                config = json.load(f)

    load_dotenv()

    # Override with environment variables
    env_mappings = {
        "GLITCH_PLAYER_ID": "player_id",
        "GLITCH_PLAYER_NAME": "player_name",
        "GLITCH_PLAYER_AVATAR": "player_avatar",
        "GLITCH_HISTORY_DB": "history_db",
        "GLITCH_LOG_FILE": "log_file",
        "GLITCH_TICK_INTERVAL": "tick_interval",
        "GLITCH_DURATION": "duration",
    }

    for env_key, config_key in env_mappings.items():
        if env_key in os.environ:
            value: Any = os.environ[env_key]
            if config_key == "tick_interval":
                value = float(value)
            config[config_key] = value

    return config


def resolve_profile(args: argparse.Namespace, config: Dict[str, Any]) -> PlayerProfile:
    """Profile file first, then config values, then defaults."""
    profile = load_profile(args.profile or config.get("profile"), config.get("player_id", ""))
    return PlayerProfile(
        player_id=config.get("player_id") or profile.player_id or "player-1",
        name=config.get("player_name") or profile.name,
        avatar=config.get("player_avatar") or profile.avatar,
    )


def print_history(config: Dict[str, Any], profile: PlayerProfile) -> int:
    db_path = config.get("history_db")
    if not db_path:
        print("Error: No history database configured (GLITCH_HISTORY_DB).", file=sys.stderr)
        return 1
    records = GameHistoryRepository(db_path).load_all()
    if not records:
        print("No matches played yet.")
    for record in records:
        print(
            f"{record.date}  {record.avatar} {record.name:16} {record.duration} min  "
            f"{record.correct}/{record.total}  {record.percent}%"
        )
    last = MatchLedgerRepository(db_path).last_game(profile.player_id)
    if last is not None:
        outcome = "won" if last.won else "did not win"
        print(f"Last multiplayer match vs {last.opponent}: {last.score}-{last.opponent_score} ({outcome})")
    return 0


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    args = parse_args(argv)
    config = load_config(args.config)
    profile = resolve_profile(args, config)
    config["player_id"] = profile.player_id

    if args.history:
        return print_history(config, profile)

    duration = args.duration or str(config.get("duration", "1"))
    rng = random.Random(args.seed) if args.seed is not None else None
    hub = InMemoryHub()

    if args.demo:
        enable_protocol_mode()
        channel = get_game_channel_name(profile.name, BOT_PROFILE.name)
        host_params = parse_match_params({
            "multiplayer": "true", "channel": channel, "role": "host",
            "duration": duration, "opponentId": BOT_PROFILE.player_id,
            "opponentName": BOT_PROFILE.name, "opponentAvatar": BOT_PROFILE.avatar,
        })
        guest_params = parse_match_params({
            "multiplayer": "true", "channel": channel, "role": "guest",
            "duration": duration, "opponentId": profile.player_id,
            "opponentName": profile.name, "opponentAvatar": profile.avatar,
        })
        sessions = [
            build_session(hub, host_params, profile, config, scaled_clock(args.speed), rng=rng),
            build_session(hub, guest_params, BOT_PROFILE, {}, scaled_clock(args.speed), rng=rng),
        ]
    else:
        params = parse_match_params({"duration": duration})
        sessions = [build_session(hub, params, profile, config, scaled_clock(args.speed), rng=rng)]

    try:
        runner = MatchRunner(config, hub, sessions)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    runner.run()
    return 0
