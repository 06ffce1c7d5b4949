# Area: Match
"""
Match engine: question generation, the match state machine, timers and
the orchestrator that drives one match.
"""

from .enums import GamePhase, QuestionPhase, OptionMark, Role, ActionType
from .question import Question
from .question_generator import generate_question
from .actions import (
    Action,
    StartMatch,
    TickCountdown,
    CountdownFinished,
    NewQuestion,
    SelfAnswered,
    PeerAnswered,
    SelfTimedOut,
    EndMatch,
    Forfeit,
    ResetToSetup,
    ShowBonus,
    HideBonus,
    LoadHistory,
)
from .state import ForfeitInfo, MatchState, create_initial_state
from .reducer import can_apply, is_lockout, match_reducer
from .scoring import AnswerOutcome, score_answer, advance_delay_ms
from .timing import TimerSlot, TimingController

__all__ = [
    "GamePhase",
    "QuestionPhase",
    "OptionMark",
    "Role",
    "ActionType",
    "Question",
    "generate_question",
    "Action",
    "StartMatch",
    "TickCountdown",
    "CountdownFinished",
    "NewQuestion",
    "SelfAnswered",
    "PeerAnswered",
    "SelfTimedOut",
    "EndMatch",
    "Forfeit",
    "ResetToSetup",
    "ShowBonus",
    "HideBonus",
    "LoadHistory",
    "ForfeitInfo",
    "MatchState",
    "create_initial_state",
    "can_apply",
    "is_lockout",
    "match_reducer",
    "AnswerOutcome",
    "score_answer",
    "advance_delay_ms",
    "TimerSlot",
    "TimingController",
]
