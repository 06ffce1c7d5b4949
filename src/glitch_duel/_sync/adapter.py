# Area: Sync
"""
glitch_duel._sync.adapter — Multiplayer sync adapter
====================================================

Bridges the local match state machine to the remote peer.

Outbound: local transitions become wire messages on the match channel
(``question``, ``answer``, ``game-end``, ``game-forfeit``, ``game-result``)
and full presence snapshots on the lobby channel.

Inbound: received messages become local actions. Answers are applied
through the reducer directly; questions, match end and forfeits are
handed to the ``SyncListener`` (the orchestrator), which owns the timers.

Two rules keep both peers live:

1. Lockout echo. When the peer's correct answer pre-empts a local side
   that has not answered yet, the local side publishes an answer of -1
   (wrong, 0 points) so the peer's bookkeeping also reaches both-answered.
2. Redundant forfeit detection. An explicit ``game-forfeit``, the
   opponent leaving the lobby, or the opponent publishing a record for
   another match all report a forfeit.

Every publish is best-effort: a TransportError is logged and swallowed.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

from ..errors import MessageFormatError, TransportError
from .._match.actions import Action, PeerAnswered
from .._match.constants import NO_ANSWER
from .._match.enums import Role
from .._match.question import Question
from .._match.reducer import is_lockout
from .._match.state import MatchState
from .._shared.protocol import GAME_EVENT, epoch_ms, generate_game_id
from .._shared.protocol_logger import ProtocolLogger
from .forfeit_detector import ForfeitSignal, forfeit_from_message, forfeit_from_presence
from .messages import (
    AnswerMessage,
    ForfeitMessage,
    MatchEndMessage,
    QuestionMessage,
    ResultMessage,
    WireMessage,
    encode_message,
    parse_message,
)
from .presence import PresenceBuilder
from .transport import Channel, PresenceEvent

logger = logging.getLogger("glitch_duel.sync.adapter")


class SyncListener(ABC):
    """Receives the inbound events that need timers or side effects."""

    @abstractmethod
    def on_remote_question(self, question_index: int, question: Question) -> None:
        """Host published a question (guest only)."""

    @abstractmethod
    def on_lockout(self) -> None:
        """The peer's correct answer is about to pre-empt the local side."""

    @abstractmethod
    def on_remote_match_end(self) -> None:
        """Host declared the match over (guest only)."""

    @abstractmethod
    def on_remote_forfeit(self, signal: ForfeitSignal) -> None:
        """Opponent left the match by any of the three signals."""


class MultiplayerSyncAdapter:
    """
    One side of a two-player match on a pub/sub transport.

    Usage:
        adapter = MultiplayerSyncAdapter(game_channel, players_channel,
                                         builder, Role.HOST, "p-2", "Bob")
        adapter.bind(get_state, dispatch, listener)
        adapter.connect()
    """

    def __init__(
        self,
        game_channel: Channel,
        players_channel: Channel,
        builder: PresenceBuilder,
        role: Role,
        opponent_id: str,
        opponent_name: str = "",
        opponent_avatar: str = "",
        protocol_logger: Optional[ProtocolLogger] = None,
    ) -> None:
        if role not in (Role.HOST, Role.GUEST):
            raise ValueError(f"Multiplayer role must be host or guest, got {role}")
        self.game_channel = game_channel
        self.players_channel = players_channel
        self.builder = builder
        self.role = role
        self.opponent_id = opponent_id
        self.opponent_name = opponent_name
        self.opponent_avatar = opponent_avatar
        self.protocol = protocol_logger or ProtocolLogger(role=role.name)
        self.protocol.set_channel(game_channel.name)
        self._get_state: Optional[Callable[[], MatchState]] = None
        self._dispatch: Optional[Callable[[Action], MatchState]] = None
        self._listener: Optional[SyncListener] = None
        self._unsubscribers: List[Callable[[], None]] = []

    @property
    def player_id(self) -> str:
        return self.builder.player_id

    @property
    def channel_name(self) -> str:
        return self.game_channel.name

    @property
    def is_host(self) -> bool:
        return self.role == Role.HOST

    @property
    def connected(self) -> bool:
        return bool(self._unsubscribers)

    def bind(
        self,
        get_state: Callable[[], MatchState],
        dispatch: Callable[[Action], MatchState],
        listener: SyncListener,
    ) -> None:
        """Attach the local state machine and the event listener."""
        self._get_state = get_state
        self._dispatch = dispatch
        self._listener = listener

    # ── lifecycle ──────────────────────────────────────────────

    def connect(self) -> None:
        """Subscribe to the match channel and to lobby presence."""
        if self._listener is None:
            raise RuntimeError("bind() must be called before connect()")
        if self.connected:
            return
        self._unsubscribers.append(
            self.game_channel.subscribe(GAME_EVENT, self._on_message)
        )
        self._unsubscribers.append(
            self.players_channel.presence.subscribe(self._on_presence)
        )
        logger.info(
            "Connected to %s as %s (opponent %s)",
            self.channel_name, self.role.value, self.opponent_id,
        )

    def disconnect(self) -> None:
        """Stop receiving. Safe to call more than once."""
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        if self._unsubscribers:
            logger.info("Disconnected from %s", self.channel_name)
        self._unsubscribers = []

    # ── outbound ───────────────────────────────────────────────

    def _publish(self, message: WireMessage, question_index: Optional[int] = None) -> bool:
        try:
            self.game_channel.publish(GAME_EVENT, encode_message(message))
        except TransportError as exc:
            logger.warning("Publish %s failed: %s", message.type, exc)
            self.protocol.log_error(f"publish {message.type} failed: {exc.reason}")
            return False
        self.protocol.log_sent(message.type, question_index)
        return True

    def publish_question(self, question_index: int, question: Question) -> bool:
        """Host only: broadcast the next question."""
        if not self.is_host:
            logger.warning("Guest tried to publish question %d", question_index)
            return False
        message = QuestionMessage(question_index=question_index, question=question)
        return self._publish(message, question_index)

    def publish_answer(
        self,
        question_index: int,
        value: int,
        correct: bool,
        points: int,
    ) -> bool:
        """Report the local side's answer, timeout or lockout echo."""
        message = AnswerMessage(
            player_id=self.player_id,
            question_index=question_index,
            selected_value=value,
            is_correct=correct,
            points=points,
            timestamp=epoch_ms(),
        )
        return self._publish(message, question_index)

    def publish_match_end(self) -> bool:
        """Host only: the match clock ran out."""
        if not self.is_host:
            logger.warning("Guest tried to publish game-end")
            return False
        return self._publish(MatchEndMessage())

    def publish_forfeit(self) -> bool:
        message = ForfeitMessage(
            player_id=self.player_id,
            player_name=self.builder.name,
            player_avatar=self.builder.avatar,
        )
        return self._publish(message)

    def publish_result(self, state: MatchState) -> bool:
        """Host only: final scores for the external record keeper."""
        if not self.is_host:
            return False
        message = ResultMessage(
            game_id=generate_game_id(),
            player1_id=self.player_id,
            player1_name=self.builder.name,
            player1_avatar=self.builder.avatar,
            player1_score=state.self_score,
            player2_id=self.opponent_id,
            player2_name=self.opponent_name,
            player2_avatar=self.opponent_avatar,
            player2_score=state.peer_score,
            channel=self.channel_name,
        )
        return self._publish(message)

    def publish_presence(self, state: Optional[MatchState], in_match: bool = True) -> bool:
        """
        Publish the full lobby record.

        Args:
            state: Current match state, for the scores
            in_match: False to publish an idle record (no current match)
        """
        if in_match:
            record = self.builder.build(
                state,
                current_game=self.channel_name,
                current_opponent=self.opponent_name or None,
            )
        else:
            record = self.builder.build(state)
        try:
            self.players_channel.presence.update(record.to_wire())
        except TransportError as exc:
            logger.warning("Presence update failed: %s", exc)
            return False
        return True

    # ── inbound ────────────────────────────────────────────────

    def _on_message(self, data: Dict[str, Any]) -> None:
        try:
            message = parse_message(data)
        except MessageFormatError as exc:
            logger.debug("Dropped malformed message: %s", exc.validation_errors)
            return

        if isinstance(message, AnswerMessage):
            self._on_answer(message)
        elif isinstance(message, QuestionMessage):
            if self.is_host:
                return
            self.protocol.log_received("host", message.type, message.question_index)
            self._listener.on_remote_question(message.question_index, message.question)
        elif isinstance(message, MatchEndMessage):
            if self.is_host:
                return
            self.protocol.log_received("host", message.type)
            self._listener.on_remote_match_end()
        elif isinstance(message, ForfeitMessage):
            signal = forfeit_from_message(message, self.player_id)
            if signal is None:
                return
            self.protocol.log_received(message.player_name, message.type)
            self._listener.on_remote_forfeit(signal)
        else:
            logger.debug("Ignored %s on match channel", message.type)

    def _on_answer(self, message: AnswerMessage) -> None:
        if message.player_id == self.player_id:
            return
        before = self._get_state()
        self.protocol.log_received(message.player_id, message.type, message.question_index)
        if message.question_index != before.question_index:
            logger.debug(
                "Dropped answer for question %d (local %d)",
                message.question_index, before.question_index,
            )
            return

        action = PeerAnswered(
            value=message.selected_value,
            correct=message.is_correct,
            points=message.points,
        )
        locked_out = is_lockout(before, action)
        if locked_out:
            # Question clock must stop before the lockout is applied
            self._listener.on_lockout()
        after = self._dispatch(action)
        if after is before:
            return

        if locked_out:
            logger.info("Locked out on question %d, echoing", before.question_index)
            self.publish_answer(before.question_index, NO_ANSWER, False, 0)
        self.publish_presence(after)

    def _on_presence(self, event: PresenceEvent) -> None:
        signal = forfeit_from_presence(
            event,
            opponent_id=self.opponent_id,
            match_channel=self.channel_name,
            opponent_name=self.opponent_name,
            opponent_avatar=self.opponent_avatar,
        )
        if signal is None:
            return
        if not self._get_state().is_live:
            logger.debug("Ignored %s, match not live", signal.source)
            return
        logger.info("Opponent forfeit detected via %s", signal.source)
        self.protocol.log_received(signal.by.name, "presence")
        self._listener.on_remote_forfeit(signal)
