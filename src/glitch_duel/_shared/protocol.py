# Area: Shared
"""
glitch_duel._shared.protocol — Channel names, ids and timestamps
================================================================

Names shared by every participant on the pub/sub transport, plus the
id and timestamp helpers used when building wire messages and records.
"""

import time
import uuid
from datetime import datetime

# Event name carried by every message on a match or lobby channel
GAME_EVENT = "game-event"

# Lobby presence channel (full-snapshot records, one per player)
PLAYERS_CHANNEL = "glitch-players"

# Append-only per-player match ledger
HISTORY_CHANNEL = "glitch-history"

# Presence marker for a player busy in a single-player match
SOLO_MATCH_ID = "solo"


def get_game_channel_name(name1: str, name2: str) -> str:
    """Build the per-match channel name from both players' names.

    Format: "<name1> - <name2>"
    """
    return f"{name1} - {name2}"


def generate_game_id() -> str:
    """Generate unique game ID for a finished-match result."""
    return str(uuid.uuid4())


def epoch_ms() -> int:
    """Wall-clock milliseconds since the epoch (wire timestamps, ledger)."""
    return int(time.time() * 1000)


def display_date() -> str:
    """Human-readable local date for game history records."""
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")
