# Area: Match
"""
glitch_duel._match.scoring — Points, advance delay and match summaries
======================================================================

Scoring rules:
- Correct answer: 1 point
- Correct answer to a hard question within 3 seconds: 2 points (bonus)
- Wrong answer or timeout: 0 points
"""

from dataclasses import dataclass
from typing import Optional

from ..records import GameRecord, MultiplayerGameRecord, percent_correct
from .constants import (
    ADVANCE_FAST_MS,
    ADVANCE_SLOW_MS,
    BONUS_POINTS,
    BONUS_WINDOW_MS,
    NORMAL_POINTS,
)
from .enums import OptionMark
from .question import Question
from .state import MatchState


@dataclass(frozen=True)
class AnswerOutcome:
    """Result of evaluating a local option pick."""

    correct: bool
    bonus: bool
    points: int


def score_answer(question: Question, value: int, elapsed_ms: int) -> AnswerOutcome:
    """
    Evaluate an option pick.

    Args:
        question: Question on screen
        value: Option value picked
        elapsed_ms: Milliseconds since the question appeared

    Returns:
        AnswerOutcome with the points to credit
    """
    correct = question.is_correct(value)
    bonus = correct and question.is_hard and elapsed_ms < BONUS_WINDOW_MS
    if not correct:
        points = 0
    elif bonus:
        points = BONUS_POINTS
    else:
        points = NORMAL_POINTS
    return AnswerOutcome(correct=correct, bonus=bonus, points=points)


def advance_delay_ms(state: MatchState, is_multiplayer: bool) -> int:
    """Delay between settlement and the next question.

    Multiplayer always uses the fast delay. Single-player lingers on a
    question that shows a wrong pick so the correct answer can be read.
    """
    if is_multiplayer:
        return ADVANCE_FAST_MS
    question = state.current_question
    highlights = state.option_highlights
    clean = (
        question is not None
        and highlights.get(question.answer) == OptionMark.CORRECT
        and OptionMark.WRONG not in highlights.values()
    )
    return ADVANCE_FAST_MS if clean else ADVANCE_SLOW_MS


def build_game_record(
    state: MatchState,
    name: str,
    avatar: str,
    duration_minutes: int,
    date: str,
) -> GameRecord:
    """Summarize a finished match for the local history."""
    return GameRecord(
        name=name,
        avatar=avatar,
        date=date,
        duration=duration_minutes,
        correct=state.self_score,
        total=state.answered_count,
        percent=percent_correct(state.self_score, state.answered_count),
    )


def build_ledger_record(
    state: MatchState,
    finished_at: int,
    opponent: Optional[str],
    opponent_avatar: Optional[str],
    opponent_id: str,
) -> MultiplayerGameRecord:
    """Summarize a finished multiplayer match for the per-player ledger."""
    return MultiplayerGameRecord(
        finished_at=finished_at,
        opponent=opponent or "Opponent",
        opponent_avatar=opponent_avatar or "🤖",
        opponent_id=opponent_id,
        score=state.self_score,
        opponent_score=state.peer_score,
    )
