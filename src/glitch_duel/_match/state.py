# Area: Match
"""
glitch_duel._match.state — Match state snapshot
===============================================

``MatchState`` is an immutable snapshot. The reducer is its only writer:
each accepted action yields a new snapshot, each rejected action yields
the very same object back.
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple

from ..records import GameRecord
from .constants import COUNTDOWN_STEPS
from .enums import GamePhase, OptionMark, QuestionPhase
from .question import Question


@dataclass(frozen=True)
class ForfeitInfo:
    """Identity of whoever ended the match early."""

    name: str
    avatar: str


@dataclass(frozen=True)
class MatchState:
    """
    Everything the match shows, for one match attempt.

    Attributes:
        phase: Coarse lifecycle phase
        question_phase: Per-question race state (only meaningful while ACTIVE)
        self_score: Local points, bonus answers count double
        peer_score: Opponent points
        answered_count: Questions settled for the local side
        question_index: Index of the current question, strictly increasing
        current_question: Question on screen, None outside ACTIVE
        question_started_at: Clock ms when the current question appeared
        match_ends_at: Clock ms when the match is over
        countdown_value: Value shown during the 3-2-1 countdown
        option_highlights: Option value -> highlight, cleared per question
        input_locked: Local participation in the question is settled
        bonus_flag: Transient bonus banner
        history: Finished-match summaries, oldest first
        forfeit_info: Who ended the match early, if anyone
    """

    phase: GamePhase = GamePhase.SETUP
    question_phase: QuestionPhase = QuestionPhase.WAITING
    self_score: int = 0
    peer_score: int = 0
    answered_count: int = 0
    question_index: int = 0
    current_question: Optional[Question] = None
    question_started_at: int = 0
    match_ends_at: int = 0
    countdown_value: int = COUNTDOWN_STEPS[0]
    option_highlights: Mapping[int, OptionMark] = field(default_factory=dict)
    input_locked: bool = False
    bonus_flag: bool = False
    history: Tuple[GameRecord, ...] = ()
    forfeit_info: Optional[ForfeitInfo] = None

    @property
    def is_live(self) -> bool:
        """True while a forfeit can still happen (countdown or active)."""
        return self.phase in (GamePhase.COUNTDOWN, GamePhase.ACTIVE)

    @property
    def is_settled(self) -> bool:
        return (
            self.phase == GamePhase.ACTIVE
            and self.question_phase == QuestionPhase.BOTH_ANSWERED
        )


def create_initial_state(is_multiplayer: bool) -> MatchState:
    """Fresh state for one match attempt.

    Multiplayer matches skip setup and start counting down at once.
    """
    return MatchState(
        phase=GamePhase.COUNTDOWN if is_multiplayer else GamePhase.SETUP,
    )
