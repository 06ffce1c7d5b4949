# Area: Match
"""
glitch_duel._match.orchestrator — Match orchestrator
====================================================

Top-level driver of one match. Wires the question generator, the state
machine, the timers and (in multiplayer) the sync adapter:

- local answer / timeout / peer message -> compute the semantic action,
  dispatch it, mirror it to the peer, re-arm the timers
- both-answered -> schedule the advance
- advance -> next question (host or single-player) or match end
- match end -> summary to the local history, entry to the match ledger

The question clock is always stopped before an answer, a timeout or a
lockout is applied for the same question, so a stale expiry can never
fire against the next question.
"""

from __future__ import annotations

import logging
import random
from typing import Callable, List, Optional, Tuple

from .._runner_config import MatchParams, PlayerProfile
from .._shared.protocol import display_date, epoch_ms
from .._shared.protocol_logger import ProtocolLogger
from ..records import get_last_game
from .._sync.adapter import MultiplayerSyncAdapter, SyncListener
from .._sync.forfeit_detector import ForfeitSignal
from .._sync.history import GameHistoryRepository, MatchLedgerRepository
from .._sync.presence import SoloPresence
from .actions import (
    Action,
    CountdownFinished,
    EndMatch,
    Forfeit,
    HideBonus,
    LoadHistory,
    NewQuestion,
    ResetToSetup,
    SelfAnswered,
    SelfTimedOut,
    ShowBonus,
    StartMatch,
    TickCountdown,
)
from .constants import FORFEIT_GRACE_MS, MATCH_END_GRACE_MS, NO_ANSWER
from .enums import GamePhase, QuestionPhase, Role
from .question import Question
from .question_generator import generate_question
from .reducer import match_reducer
from .scoring import advance_delay_ms, build_game_record, build_ledger_record, score_answer
from .state import ForfeitInfo, MatchState, create_initial_state
from .timing import TimingController, format_remaining

logger = logging.getLogger("glitch_duel.match.orchestrator")

Observer = Callable[[MatchState, MatchState, Action], None]

# Local side can still answer or time out
_OPEN_PHASES = frozenset({QuestionPhase.WAITING, QuestionPhase.PEER_ANSWERED})


def describe(state: MatchState) -> str:
    """Short phase/score label for transition logs."""
    if state.phase == GamePhase.ACTIVE:
        return (
            f"{state.phase.value}/{state.question_phase.value} "
            f"q{state.question_index} {state.self_score}-{state.peer_score}"
        )
    return state.phase.value


class MatchOrchestrator(SyncListener):
    """
    Drives one match from countdown to results.

    Usage:
        orchestrator = MatchOrchestrator(params, profile)
        orchestrator.start()
        orchestrator.start_match()        # single-player only
        while not orchestrator.left:
            orchestrator.poll()
    """

    def __init__(
        self,
        params: MatchParams,
        profile: PlayerProfile,
        timing: Optional[TimingController] = None,
        adapter: Optional[MultiplayerSyncAdapter] = None,
        history: Optional[GameHistoryRepository] = None,
        ledger: Optional[MatchLedgerRepository] = None,
        solo_presence: Optional[SoloPresence] = None,
        rng: Optional[random.Random] = None,
        protocol_logger: Optional[ProtocolLogger] = None,
        on_navigate: Optional[Callable[[], None]] = None,
    ) -> None:
        if params.is_multiplayer and adapter is None:
            raise ValueError("A multiplayer match needs a sync adapter")
        self.params = params
        self.profile = profile
        self.timing = timing or TimingController()
        self.adapter = adapter if params.is_multiplayer else None
        self.history = history
        self.ledger = ledger
        self.solo_presence = solo_presence
        self.rng = rng
        self.protocol = protocol_logger or ProtocolLogger(role=params.role.name)
        self.on_navigate = on_navigate

        self.state: MatchState = create_initial_state(params.is_multiplayer)
        self.time_display = ""
        self.question_progress = 1.0
        self.left = False
        self._observers: List[Observer] = []
        self._buffered_question: Optional[Tuple[int, Question]] = None

        if self.adapter is not None:
            self.protocol.set_channel(params.channel)
            self.adapter.bind(lambda: self.state, self.dispatch, self)

    @property
    def is_multiplayer(self) -> bool:
        return self.params.is_multiplayer

    @property
    def role(self) -> Role:
        return self.params.role

    # ── state machine ──────────────────────────────────────────

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Call ``observer(before, after, action)`` on every accepted action."""
        self._observers.append(observer)
        return lambda: self._observers.remove(observer)

    def dispatch(self, action: Action) -> MatchState:
        """
        Apply one action and run the follow-ups of its transition.

        Returns:
            The current state (unchanged if the action was absorbed)
        """
        before = self.state
        after = match_reducer(before, action)
        if after is before:
            return before
        self.state = after
        self.protocol.log_transition(action.type.value, describe(before), describe(after))
        for observer in list(self._observers):
            observer(before, after, action)
        if after.is_settled and not before.is_settled:
            delay = advance_delay_ms(after, self.is_multiplayer)
            logger.debug("Question %d settled, advancing in %dms", after.question_index, delay)
            self.timing.schedule_advance(delay, self.on_advance)
        return after

    # ── session ────────────────────────────────────────────────

    def start(self) -> None:
        """
        Session start: hydrate history, announce presence and, in
        multiplayer, begin the countdown at once.
        """
        if self.history is not None:
            self.dispatch(LoadHistory(tuple(self.history.load_all())))
        if self.ledger is not None and self.adapter is not None:
            self.adapter.builder.remember_last_game(
                self.ledger.last_game(self.profile.player_id)
            )

        if self.adapter is not None:
            self.adapter.connect()
            self.adapter.publish_presence(self.state)
            if self.state.phase == GamePhase.COUNTDOWN:
                self._run_countdown()
        elif self.solo_presence is not None:
            self.solo_presence.start()

    def start_match(self) -> MatchState:
        """Single-player: leave setup and count down."""
        before = self.state
        after = self.dispatch(StartMatch())
        if after is not before:
            self._run_countdown()
        return after

    def play_again(self) -> MatchState:
        """Back to setup, keeping the history."""
        self.timing.cancel_all()
        self._buffered_question = None
        return self.dispatch(ResetToSetup())

    def poll(self) -> None:
        """Fire due timers. Called by the runner loop."""
        self.timing.poll()

    def _run_countdown(self) -> None:
        self.timing.run_countdown(
            self.params.duration_ms,
            on_tick=lambda value: self.dispatch(TickCountdown(value)),
            on_done=self._on_countdown_done,
        )

    def _on_countdown_done(self, match_ends_at: int) -> None:
        before = self.state
        if self.dispatch(CountdownFinished(match_ends_at)) is before:
            return

        if self.is_multiplayer:
            # A lost answer or game-end must not keep the match open forever
            self.timing.start_match_clock(
                match_ends_at,
                self._on_clock,
                on_expired=self._on_match_overdue,
                expiry_grace_ms=MATCH_END_GRACE_MS,
            )
        else:
            self.timing.start_match_clock(match_ends_at, self._on_clock)

        if self.role == Role.GUEST:
            if self._buffered_question is not None:
                index, question = self._buffered_question
                self._buffered_question = None
                self._show_question(question, index)
            return
        self.next_question()

    def _on_clock(self, remaining_ms: int) -> None:
        self.time_display = format_remaining(remaining_ms)

    def _on_progress(self, fraction: float) -> None:
        self.question_progress = fraction

    def _on_match_overdue(self) -> None:
        if self.state.phase != GamePhase.ACTIVE:
            return
        logger.warning("Match still open past its end time, ending locally")
        if self.adapter is not None and self.role == Role.HOST:
            self.adapter.publish_match_end()
        self.end_match()

    # ── questions ──────────────────────────────────────────────

    def next_question(self) -> Optional[Question]:
        """Host or single-player: generate, show and broadcast the next question."""
        if not self.params.produces_questions or self.state.phase != GamePhase.ACTIVE:
            return None
        question = generate_question(self.rng)
        index = self.state.question_index + 1
        if not self._show_question(question, index):
            return None
        if self.adapter is not None:
            self.adapter.publish_question(index, question)
        return question

    def _show_question(self, question: Question, index: int) -> bool:
        before = self.state
        after = self.dispatch(NewQuestion(question, index, self.timing.now_ms()))
        if after is before:
            return False
        self.timing.advance.cancel()
        self.question_progress = 1.0
        self.timing.start_question_clock(self.on_question_expired, self._on_progress)
        return True

    def answer(self, value: int) -> MatchState:
        """
        Local option pick.

        Args:
            value: Option value picked

        Returns:
            The resulting state
        """
        state = self.state
        question = state.current_question
        if (
            state.phase != GamePhase.ACTIVE
            or state.question_phase not in _OPEN_PHASES
            or question is None
        ):
            return state

        self.timing.cancel_question_clock()
        elapsed = self.timing.now_ms() - state.question_started_at
        outcome = score_answer(question, value, elapsed)
        after = self.dispatch(
            SelfAnswered(value, outcome.correct, outcome.points, self.is_multiplayer)
        )
        if outcome.bonus:
            self.dispatch(ShowBonus())
            self.timing.show_bonus(lambda: self.dispatch(HideBonus()))

        if self.adapter is not None:
            self.adapter.publish_answer(
                state.question_index, value, outcome.correct, outcome.points
            )
            self.adapter.publish_presence(self.state)
        return after

    def on_question_expired(self) -> None:
        """The 5-second answer window ran out."""
        state = self.state
        if state.phase != GamePhase.ACTIVE or state.question_phase not in _OPEN_PHASES:
            return
        before = state
        if self.dispatch(SelfTimedOut(self.is_multiplayer)) is before:
            return
        if self.adapter is not None:
            self.adapter.publish_answer(state.question_index, NO_ANSWER, False, 0)

    def on_advance(self) -> None:
        """A settled question has been on screen long enough."""
        state = self.state
        if state.phase != GamePhase.ACTIVE:
            return
        if self.timing.now_ms() >= state.match_ends_at:
            if self.adapter is not None and self.role == Role.HOST:
                self.adapter.publish_match_end()
            self.end_match()
        elif self.params.produces_questions:
            self.next_question()

    # ── match end ──────────────────────────────────────────────

    def end_match(self) -> MatchState:
        """Close an active match and persist its summary."""
        state = self.state
        if state.phase != GamePhase.ACTIVE:
            return state
        self.timing.cancel_all()

        record = build_game_record(
            state,
            self.profile.name,
            self.profile.avatar,
            self.params.duration_minutes,
            display_date(),
        )
        after = self.dispatch(EndMatch(record))
        if self.history is not None:
            self.history.save(record)

        if self.adapter is not None:
            entry = build_ledger_record(
                after,
                epoch_ms(),
                self.params.opponent_name,
                self.params.opponent_avatar,
                self.params.opponent_id,
            )
            if self.ledger is not None:
                self.ledger.save(self.profile.player_id, entry)
            if self.role == Role.HOST:
                self.adapter.publish_result(after)
            self.adapter.builder.remember_last_game(get_last_game([entry]))
            self.adapter.publish_presence(after)

        logger.info(
            "Match over: %d-%d after %d questions",
            after.self_score, after.peer_score, after.answered_count,
        )
        return after

    def quit(self) -> None:
        """
        Leave the match now.

        Cancels every timer, tells the peer (while the match is still
        live) and clears the presence marker. Publishes are best-effort.
        """
        self.timing.cancel_all()
        if self.adapter is not None:
            if self.state.is_live:
                self.adapter.publish_forfeit()
            self.adapter.publish_presence(self.state, in_match=False)
        self._leave()

    def _leave(self) -> None:
        if self.left:
            return
        self.timing.cancel_all()
        if self.adapter is not None:
            self.adapter.disconnect()
        if self.solo_presence is not None:
            self.solo_presence.stop()
        self.left = True
        logger.info("Returning to lobby")
        if self.on_navigate is not None:
            self.on_navigate()

    # ── SyncListener ───────────────────────────────────────────

    def on_remote_question(self, question_index: int, question: Question) -> None:
        if self.role != Role.GUEST:
            return
        if self.state.phase == GamePhase.COUNTDOWN:
            buffered = self._buffered_question
            if buffered is None or question_index > buffered[0]:
                self._buffered_question = (question_index, question)
            return
        self._show_question(question, question_index)

    def on_lockout(self) -> None:
        self.timing.cancel_question_clock()

    def on_remote_match_end(self) -> None:
        if self.role == Role.GUEST:
            self.end_match()

    def on_remote_forfeit(self, signal: ForfeitSignal) -> None:
        self.handle_opponent_forfeit(signal.by)

    def handle_opponent_forfeit(self, by: ForfeitInfo) -> MatchState:
        """Opponent left: show who, then return to the lobby after a grace period."""
        if not self.state.is_live:
            return self.state
        self.timing.cancel_all()
        after = self.dispatch(Forfeit(by))
        if self.adapter is not None:
            self.adapter.publish_presence(after, in_match=False)
        self.timing.schedule_navigation(FORFEIT_GRACE_MS, self._leave)
        logger.info("%s forfeited", by.name)
        return after
