# Area: Match
"""
glitch_duel._match.reducer — Match State Machine
================================================

Pure transition function ``match_reducer(state, action) -> state``.

Every transition is a guarded no-op: when the action's required source
phase / question phase does not match, the very same state object is
returned. Both peers apply their own answer and the other side's answer
independently, so each guard is written to mean "this event has not been
accounted for yet". Applying the same logical event twice is therefore
always absorbed here, without sequence numbers or deduplication.
"""

import logging
from dataclasses import replace
from typing import Callable, Dict, FrozenSet, Optional, Tuple

from .actions import (
    Action,
    CountdownFinished,
    EndMatch,
    Forfeit,
    LoadHistory,
    NewQuestion,
    PeerAnswered,
    SelfAnswered,
    SelfTimedOut,
    TickCountdown,
)
from .constants import COUNTDOWN_STEPS, NORMAL_POINTS
from .enums import ActionType, GamePhase, OptionMark, QuestionPhase
from .state import MatchState

logger = logging.getLogger("glitch_duel.match.reducer")

ALL_PHASES: FrozenSet[GamePhase] = frozenset(GamePhase)

# Valid sources: {action: (phases, question phases or None for any)}
GUARDS: Dict[ActionType, Tuple[FrozenSet[GamePhase], Optional[FrozenSet[QuestionPhase]]]] = {
    ActionType.START_MATCH: (frozenset({GamePhase.SETUP}), None),
    ActionType.TICK_COUNTDOWN: (frozenset({GamePhase.COUNTDOWN}), None),
    ActionType.COUNTDOWN_FINISHED: (frozenset({GamePhase.COUNTDOWN}), None),
    ActionType.NEW_QUESTION: (frozenset({GamePhase.ACTIVE}), None),
    ActionType.SELF_ANSWERED: (
        frozenset({GamePhase.ACTIVE}),
        frozenset({QuestionPhase.WAITING, QuestionPhase.PEER_ANSWERED}),
    ),
    ActionType.PEER_ANSWERED: (
        frozenset({GamePhase.ACTIVE}),
        frozenset({
            QuestionPhase.WAITING,
            QuestionPhase.SELF_ANSWERED,
            QuestionPhase.SELF_TIMED_OUT,
        }),
    ),
    ActionType.SELF_TIMED_OUT: (
        frozenset({GamePhase.ACTIVE}),
        frozenset({QuestionPhase.WAITING, QuestionPhase.PEER_ANSWERED}),
    ),
    ActionType.END_MATCH: (frozenset({GamePhase.ACTIVE}), None),
    ActionType.FORFEIT: (frozenset({GamePhase.ACTIVE, GamePhase.COUNTDOWN}), None),
    ActionType.RESET_TO_SETUP: (ALL_PHASES, None),
    ActionType.SHOW_BONUS: (frozenset({GamePhase.ACTIVE}), None),
    ActionType.HIDE_BONUS: (frozenset({GamePhase.ACTIVE}), None),
    ActionType.LOAD_HISTORY: (ALL_PHASES, None),
}

# Actions about the question on screen; meaningless before the first one
QUESTION_SCOPED = frozenset({
    ActionType.SELF_ANSWERED,
    ActionType.PEER_ANSWERED,
    ActionType.SELF_TIMED_OUT,
})

# Local side has already settled its part of the question
_SELF_DONE = frozenset({QuestionPhase.SELF_ANSWERED, QuestionPhase.SELF_TIMED_OUT})


def can_apply(state: MatchState, action: Action) -> bool:
    """
    Check whether an action's precondition holds for a state.

    Args:
        state: Current state
        action: Candidate action

    Returns:
        True if match_reducer would produce a new state
    """
    phases, question_phases = GUARDS[action.type]
    if state.phase not in phases:
        return False
    if question_phases is not None and state.question_phase not in question_phases:
        return False
    if action.type in QUESTION_SCOPED and state.current_question is None:
        return False
    if isinstance(action, NewQuestion) and action.question_index <= state.question_index:
        return False
    return True


def peer_points(action: PeerAnswered) -> int:
    """Points credited to the peer: the sender's value, 1 if it sent none.

    A wrong answer never scores.
    """
    if not action.correct:
        return 0
    return action.points if action.points is not None else NORMAL_POINTS


def _start_match(state: MatchState, action: Action) -> MatchState:
    return replace(
        state,
        phase=GamePhase.COUNTDOWN,
        question_phase=QuestionPhase.WAITING,
        self_score=0,
        peer_score=0,
        answered_count=0,
        question_index=0,
        current_question=None,
        countdown_value=COUNTDOWN_STEPS[0],
        option_highlights={},
        input_locked=False,
        bonus_flag=False,
        forfeit_info=None,
    )


def _tick_countdown(state: MatchState, action: TickCountdown) -> MatchState:
    return replace(state, countdown_value=action.value)


def _countdown_finished(state: MatchState, action: CountdownFinished) -> MatchState:
    return replace(state, phase=GamePhase.ACTIVE, match_ends_at=action.match_ends_at)


def _new_question(state: MatchState, action: NewQuestion) -> MatchState:
    return replace(
        state,
        question_phase=QuestionPhase.WAITING,
        current_question=action.question,
        question_index=action.question_index,
        question_started_at=action.started_at,
        option_highlights={},
        input_locked=False,
    )


def _self_answered(state: MatchState, action: SelfAnswered) -> MatchState:
    question = state.current_question
    highlights = dict(state.option_highlights)
    if action.correct:
        highlights[action.value] = OptionMark.CORRECT
    else:
        highlights[action.value] = OptionMark.WRONG
        highlights[question.answer] = OptionMark.CORRECT

    peer_done = state.question_phase == QuestionPhase.PEER_ANSWERED
    if peer_done or not action.is_multiplayer:
        next_phase = QuestionPhase.BOTH_ANSWERED
    else:
        next_phase = QuestionPhase.SELF_ANSWERED

    return replace(
        state,
        question_phase=next_phase,
        self_score=state.self_score + action.points,
        answered_count=state.answered_count + 1,
        option_highlights=highlights,
        input_locked=True,
    )


def _peer_answered(state: MatchState, action: PeerAnswered) -> MatchState:
    peer_score = state.peer_score + peer_points(action)
    highlights = dict(state.option_highlights)

    # Peer got it right before I answered: I am locked out
    if action.correct and state.question_phase == QuestionPhase.WAITING:
        highlights[action.value] = OptionMark.CORRECT
        return replace(
            state,
            question_phase=QuestionPhase.BOTH_ANSWERED,
            peer_score=peer_score,
            answered_count=state.answered_count + 1,
            option_highlights=highlights,
            input_locked=True,
        )

    if not action.correct and action.value >= 0:
        highlights.setdefault(action.value, OptionMark.PEER_WRONG)

    if state.question_phase in _SELF_DONE:
        next_phase = QuestionPhase.BOTH_ANSWERED
    else:
        next_phase = QuestionPhase.PEER_ANSWERED

    return replace(
        state,
        question_phase=next_phase,
        peer_score=peer_score,
        option_highlights=highlights,
    )


def _self_timed_out(state: MatchState, action: SelfTimedOut) -> MatchState:
    highlights = dict(state.option_highlights)
    highlights[state.current_question.answer] = OptionMark.CORRECT

    peer_done = state.question_phase == QuestionPhase.PEER_ANSWERED
    if peer_done or not action.is_multiplayer:
        next_phase = QuestionPhase.BOTH_ANSWERED
    else:
        next_phase = QuestionPhase.SELF_TIMED_OUT

    return replace(
        state,
        question_phase=next_phase,
        answered_count=state.answered_count + 1,
        option_highlights=highlights,
        input_locked=True,
    )


def _end_match(state: MatchState, action: EndMatch) -> MatchState:
    return replace(
        state,
        phase=GamePhase.RESULTS,
        question_phase=QuestionPhase.WAITING,
        current_question=None,
        input_locked=True,
        bonus_flag=False,
        history=state.history + (action.summary,),
    )


def _forfeit(state: MatchState, action: Forfeit) -> MatchState:
    return replace(
        state,
        phase=GamePhase.FORFEITED,
        question_phase=QuestionPhase.WAITING,
        current_question=None,
        input_locked=True,
        bonus_flag=False,
        forfeit_info=action.by,
    )


def _reset_to_setup(state: MatchState, action: Action) -> MatchState:
    return replace(
        state,
        phase=GamePhase.SETUP,
        question_phase=QuestionPhase.WAITING,
        current_question=None,
        countdown_value=COUNTDOWN_STEPS[0],
        option_highlights={},
        input_locked=False,
        bonus_flag=False,
        forfeit_info=None,
    )


def _show_bonus(state: MatchState, action: Action) -> MatchState:
    if state.bonus_flag:
        return state
    return replace(state, bonus_flag=True)


def _hide_bonus(state: MatchState, action: Action) -> MatchState:
    if not state.bonus_flag:
        return state
    return replace(state, bonus_flag=False)


def _load_history(state: MatchState, action: LoadHistory) -> MatchState:
    return replace(state, history=tuple(action.history))


_HANDLERS: Dict[ActionType, Callable[[MatchState, Action], MatchState]] = {
    ActionType.START_MATCH: _start_match,
    ActionType.TICK_COUNTDOWN: _tick_countdown,
    ActionType.COUNTDOWN_FINISHED: _countdown_finished,
    ActionType.NEW_QUESTION: _new_question,
    ActionType.SELF_ANSWERED: _self_answered,
    ActionType.PEER_ANSWERED: _peer_answered,
    ActionType.SELF_TIMED_OUT: _self_timed_out,
    ActionType.END_MATCH: _end_match,
    ActionType.FORFEIT: _forfeit,
    ActionType.RESET_TO_SETUP: _reset_to_setup,
    ActionType.SHOW_BONUS: _show_bonus,
    ActionType.HIDE_BONUS: _hide_bonus,
    ActionType.LOAD_HISTORY: _load_history,
}


def match_reducer(state: MatchState, action: Action) -> MatchState:
    """
    Apply one action.

    Args:
        state: Current state (never modified)
        action: Action to apply

    Returns:
        A new state, or ``state`` itself when the precondition does not hold
    """
    if not can_apply(state, action):
        logger.debug(
            "Absorbed %s in %s/%s",
            action.type.value, state.phase.value, state.question_phase.value,
        )
        return state
    return _HANDLERS[action.type](state, action)


def is_lockout(state: MatchState, action: PeerAnswered) -> bool:
    """True if a peer answer pre-empts a local side that has not answered.

    The locked-out side never submits an answer of its own, so it has to
    echo a no-answer to the peer.
    """
    return (
        can_apply(state, action)
        and action.correct
        and state.question_phase == QuestionPhase.WAITING
    )
