# Area: Sync
"""
glitch_duel._sync.presence — Lobby presence records
===================================================

The lobby presence channel keeps one record per player and every update
replaces that record wholesale. A field left out of an update is gone
for every observer, so records are never patched: ``PresenceBuilder``
rebuilds the complete snapshot from the local identity, the current
match and the remembered last-match summary on every publish.

``SoloPresence`` marks a player as busy while they play alone and turns
down any invite addressed to them until the solo match ends.
"""

import logging
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import MessageFormatError, TransportError
from ..records import LastGameSummary
from .._match.state import MatchState
from .._shared.protocol import GAME_EVENT, SOLO_MATCH_ID
from .._shared.protocol_logger import ProtocolLogger
from .messages import InviteMessage, InviteResponseMessage, encode_message, parse_message
from .transport import Channel

logger = logging.getLogger("glitch_duel.sync.presence")


class LastGame(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    opponent: str
    score: int
    opponent_score: int = Field(alias="opponentScore")
    won: bool


class PresenceData(BaseModel):
    """
    Full presence record of one player.

    Attributes:
        player_id: Stable player identity
        name: Display name
        avatar: Avatar emoji
        current_game: Match channel, ``"solo"``, or None when idle
        current_opponent: Opponent name while in a match
        current_score: Own score in the current match
        current_opponent_score: Opponent score in the current match
        last_game: Summary of the most recent multiplayer match
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    player_id: str = Field(alias="playerId")
    name: str = ""
    avatar: str = ""
    current_game: Optional[str] = Field(default=None, alias="currentGame")
    current_opponent: Optional[str] = Field(default=None, alias="currentOpponent")
    current_score: int = Field(default=0, alias="currentScore")
    current_opponent_score: int = Field(default=0, alias="currentOpponentScore")
    last_game: Optional[LastGame] = Field(default=None, alias="lastGame")

    def to_wire(self) -> Dict[str, Any]:
        # None fields stay in the record: absence would erase them
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_wire(cls, data: Any) -> "PresenceData":
        """Decode a received record.

        Raises:
            MessageFormatError: If the record is not a valid snapshot
        """
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            problems = [f"{'.'.join(map(str, e['loc']))}: {e['msg']}" for e in exc.errors()]
            raise MessageFormatError(data, problems) from exc


class PresenceBuilder:
    """
    Rebuilds the complete presence record on every publish.

    Usage:
        builder = PresenceBuilder("p-1", "Ada", "🦊")
        record = builder.build(state, current_game="Ada - Bob", current_opponent="Bob")
        players_channel.presence.update(record.to_wire())
    """

    def __init__(
        self,
        player_id: str,
        name: str,
        avatar: str,
        last_game: Optional[LastGameSummary] = None,
    ) -> None:
        self.player_id = player_id
        self.name = name
        self.avatar = avatar
        self.last_game = last_game

    def remember_last_game(self, summary: Optional[LastGameSummary]) -> None:
        """Keep the last-match summary for every later record."""
        self.last_game = summary

    def build(
        self,
        state: Optional[MatchState] = None,
        current_game: Optional[str] = None,
        current_opponent: Optional[str] = None,
    ) -> PresenceData:
        last_game = None
        if self.last_game is not None:
            last_game = LastGame(
                opponent=self.last_game.opponent,
                score=self.last_game.score,
                opponent_score=self.last_game.opponent_score,
                won=self.last_game.won,
            )
        return PresenceData(
            player_id=self.player_id,
            name=self.name,
            avatar=self.avatar,
            current_game=current_game,
            current_opponent=current_opponent,
            current_score=state.self_score if state is not None else 0,
            current_opponent_score=state.peer_score if state is not None else 0,
            last_game=last_game,
        )


class SoloPresence:
    """Busy marker and invite auto-deny for a single-player match."""

    def __init__(
        self,
        players_channel: Channel,
        builder: PresenceBuilder,
        protocol_logger: Optional[ProtocolLogger] = None,
    ) -> None:
        self._channel = players_channel
        self._builder = builder
        self._protocol = protocol_logger or ProtocolLogger(role="SOLO")
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def active(self) -> bool:
        return self._unsubscribe is not None

    def start(self) -> None:
        """Publish the solo marker and start turning down invites."""
        if self.active:
            return
        self._update(self._builder.build(current_game=SOLO_MATCH_ID))
        self._unsubscribe = self._channel.subscribe(GAME_EVENT, self._on_lobby_message)
        logger.info("Solo presence on for %s", self._builder.player_id)

    def stop(self) -> None:
        """Stop auto-denying and clear the solo marker."""
        if not self.active:
            return
        self._unsubscribe()
        self._unsubscribe = None
        self._update(self._builder.build())
        logger.info("Solo presence off for %s", self._builder.player_id)

    def _update(self, record: PresenceData) -> None:
        try:
            self._channel.presence.update(record.to_wire())
        except TransportError as exc:
            logger.warning("Presence update failed: %s", exc)

    def _on_lobby_message(self, data: Dict[str, Any]) -> None:
        try:
            message = parse_message(data)
        except MessageFormatError:
            return
        if not isinstance(message, InviteMessage):
            return
        if message.to_player_id != self._builder.player_id:
            return
        self._protocol.log_received(message.from_name, message.type)
        deny = InviteResponseMessage(
            accepted=False,
            from_player_id=self._builder.player_id,
            from_name=self._builder.name,
            from_avatar=self._builder.avatar,
            to_player_id=message.from_player_id,
        )
        try:
            self._channel.publish(GAME_EVENT, encode_message(deny))
            self._protocol.log_sent(deny.type)
        except TransportError as exc:
            logger.warning("Invite auto-deny failed: %s", exc)
