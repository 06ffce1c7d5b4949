# Area: Shared
"""
Shared utilities used by both the match engine and the sync layer.

This package contains:
- Logging configuration
- Wire message (protocol) logging
- Channel names, ids and timestamp helpers
"""

from .logging_config import (
    setup_logging,
    log_and_terminate,
    log_error_block,
    enable_protocol_mode,
    disable_protocol_mode,
    is_protocol_mode_enabled,
)
from .protocol import (
    GAME_EVENT,
    PLAYERS_CHANNEL,
    HISTORY_CHANNEL,
    SOLO_MATCH_ID,
    get_game_channel_name,
    generate_game_id,
    epoch_ms,
    display_date,
)
from .protocol_logger import ProtocolLogger

__all__ = [
    "setup_logging",
    "log_and_terminate",
    "log_error_block",
    "enable_protocol_mode",
    "disable_protocol_mode",
    "is_protocol_mode_enabled",
    "GAME_EVENT",
    "PLAYERS_CHANNEL",
    "HISTORY_CHANNEL",
    "SOLO_MATCH_ID",
    "get_game_channel_name",
    "generate_game_id",
    "epoch_ms",
    "display_date",
    "ProtocolLogger",
]
