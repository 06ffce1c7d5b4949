# Area: Shared
"""
glitch_duel._runner_config — Runner Configuration
=================================================

Configuration validation, match parameter parsing and local profile
loading for the match runner.
"""

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Union
from urllib.parse import parse_qsl

from ._match.constants import (
    DEFAULT_DURATION_MINUTES,
    MAX_DURATION_MINUTES,
    MIN_DURATION_MINUTES,
)
from ._match.enums import Role

logger = logging.getLogger("glitch_duel")

# Required config keys
REQUIRED_CONFIG_KEYS = [
    "player_id",
]

DEFAULT_PLAYER_NAME = "Player"
DEFAULT_PLAYER_AVATAR = "🦊"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@dataclass(frozen=True)
class PlayerProfile:
    """Local identity, read once at session start."""

    player_id: str
    name: str = DEFAULT_PLAYER_NAME
    avatar: str = DEFAULT_PLAYER_AVATAR


@dataclass(frozen=True)
class MatchParams:
    """
    Parameters a match is launched with.

    Attributes:
        is_multiplayer: Two-player match over the transport
        channel: Match channel name (multiplayer only)
        role: HOST or GUEST in multiplayer, SOLO otherwise
        duration_minutes: Match length, 1..5
        opponent_id: Opponent player id
        opponent_name: Opponent display name
        opponent_avatar: Opponent avatar
    """

    is_multiplayer: bool = False
    channel: str = ""
    role: Role = Role.SOLO
    duration_minutes: int = DEFAULT_DURATION_MINUTES
    opponent_id: str = ""
    opponent_name: str = ""
    opponent_avatar: str = ""

    @property
    def duration_ms(self) -> int:
        return self.duration_minutes * 60_000

    @property
    def produces_questions(self) -> bool:
        """Host and single-player generate questions; a guest only receives them."""
        return self.role != Role.GUEST


def validate_config(config: dict) -> None:
    """
    Validate required configuration keys.

    Args:
        config: Configuration dict

    Raises:
        ValueError: If required keys are missing
    """
    missing = [k for k in REQUIRED_CONFIG_KEYS if not config.get(k)]
    if missing:
        raise ValueError(f"Missing required config keys: {missing}")


def clamp_duration(raw: Optional[str]) -> int:
    """Parse a duration in minutes; unparseable means the default."""
    match = _LEADING_INT.match(raw or "")
    if not match:
        return DEFAULT_DURATION_MINUTES
    return max(MIN_DURATION_MINUTES, min(MAX_DURATION_MINUTES, int(match.group(1))))


def parse_match_params(query: Union[str, Mapping[str, str], None]) -> MatchParams:
    """
    Parse match launch parameters.

    A multiplayer match needs ``multiplayer=true``, a non-empty
    ``channel`` and a ``role`` of host or guest. Anything less falls back
    to a single-player match.

    Args:
        query: A query string ("multiplayer=true&channel=...") or a mapping

    Returns:
        MatchParams
    """
    if query is None:
        values: Mapping[str, str] = {}
    elif isinstance(query, str):
        values = dict(parse_qsl(query.lstrip("?")))
    else:
        values = query

    channel = values.get("channel") or ""
    role_value = values.get("role")
    role = {"host": Role.HOST, "guest": Role.GUEST}.get(role_value or "")
    is_multiplayer = values.get("multiplayer") == "true" and bool(channel) and role is not None

    if values.get("multiplayer") == "true" and not is_multiplayer:
        logger.warning(
            "Incomplete multiplayer parameters (channel=%r, role=%r), playing solo",
            channel, role_value,
        )

    return MatchParams(
        is_multiplayer=is_multiplayer,
        channel=channel,
        role=role if is_multiplayer else Role.SOLO,
        duration_minutes=clamp_duration(values.get("duration")),
        opponent_id=values.get("opponentId") or "",
        opponent_name=values.get("opponentName") or "",
        opponent_avatar=values.get("opponentAvatar") or "",
    )


def load_profile(path: Optional[Union[str, Path]], fallback_id: str = "") -> PlayerProfile:
    """
    Read the local player profile.

    The file holds ``{"name": ..., "avatar": ..., "playerId": ...}``.
    A missing or unreadable file, or missing fields, yield defaults.

    Args:
        path: Profile JSON file
        fallback_id: Player id used when the file has none
    """
    data: dict = {}
    if path:
        try:
            with open(path, encoding="utf-8") as f:
                loaded = json.load(f)
            if isinstance(loaded, dict):
                data = loaded
            else:
                logger.warning("Profile %s is not an object, using defaults", path)
        except FileNotFoundError:
            logger.debug("No profile at %s", path)
        except (OSError, ValueError) as exc:
            logger.warning("Unreadable profile %s: %s", path, exc)

    return PlayerProfile(
        player_id=str(data.get("playerId") or fallback_id),
        name=str(data.get("name") or DEFAULT_PLAYER_NAME),
        avatar=str(data.get("avatar") or DEFAULT_PLAYER_AVATAR),
    )
