# Area: Sync
"""Opponent forfeit detection from match messages and lobby presence."""
import logging
from dataclasses import dataclass
from typing import Optional

from ..errors import MessageFormatError
from .._match.state import ForfeitInfo
from .messages import ForfeitMessage
from .presence import PresenceData
from .transport import PresenceEvent

logger = logging.getLogger("glitch_duel.sync.forfeit")

DEFAULT_OPPONENT_NAME = "Opponent"
DEFAULT_OPPONENT_AVATAR = "🤖"

SOURCE_MESSAGE = "message"
SOURCE_PRESENCE_LEAVE = "presence-leave"
SOURCE_PRESENCE_UPDATE = "presence-update"


@dataclass(frozen=True)
class ForfeitSignal:
    """A detected forfeit and which of the three signals reported it."""

    source: str
    by: ForfeitInfo


def forfeit_from_message(
    message: ForfeitMessage,
    self_id: str,
) -> Optional[ForfeitSignal]:
    """Explicit ``game-forfeit`` message. Our own echoed forfeit is ignored."""
    if message.player_id == self_id:
        return None
    return ForfeitSignal(
        source=SOURCE_MESSAGE,
        by=ForfeitInfo(
            name=message.player_name or DEFAULT_OPPONENT_NAME,
            avatar=message.player_avatar or DEFAULT_OPPONENT_AVATAR,
        ),
    )


def forfeit_from_presence(
    event: PresenceEvent,
    opponent_id: str,
    match_channel: str,
    opponent_name: str = "",
    opponent_avatar: str = "",
) -> Optional[ForfeitSignal]:
    """Classify a lobby presence event.

    The opponent leaving the lobby entirely, or publishing a record whose
    current game is not this match, both count as a forfeit. Enter events
    and events about other players never do.

    Args:
        event: Presence event from the lobby channel.
        opponent_id: Player id of the opponent in this match.
        match_channel: Name of this match's channel.
        opponent_name: Last known opponent name, used when the event
                       carries none.
        opponent_avatar: Last known opponent avatar.

    Returns:
        ForfeitSignal, or None if the event is not a forfeit.
    """
    if event.client_id != opponent_id:
        return None

    fallback = ForfeitInfo(
        name=opponent_name or DEFAULT_OPPONENT_NAME,
        avatar=opponent_avatar or DEFAULT_OPPONENT_AVATAR,
    )

    if event.action == "leave":
        return ForfeitSignal(source=SOURCE_PRESENCE_LEAVE, by=fallback)

    if event.action != "update":
        return None

    try:
        record = PresenceData.from_wire(event.data or {})
    except MessageFormatError as exc:
        logger.debug("Unreadable opponent presence: %s", exc.validation_errors)
        return None

    if record.current_game == match_channel:
        return None

    return ForfeitSignal(
        source=SOURCE_PRESENCE_UPDATE,
        by=ForfeitInfo(
            name=record.name or fallback.name,
            avatar=record.avatar or fallback.avatar,
        ),
    )
