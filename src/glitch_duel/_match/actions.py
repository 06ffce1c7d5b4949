# Area: Match
"""
glitch_duel._match.actions — Match reducer actions
==================================================

One frozen dataclass per action. Every action carries all the data its
transition needs, so the reducer never reads a clock or a random source.
"""

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple, Union

from ..records import GameRecord
from .enums import ActionType
from .question import Question
from .state import ForfeitInfo


@dataclass(frozen=True)
class StartMatch:
    type: ClassVar[ActionType] = ActionType.START_MATCH


@dataclass(frozen=True)
class TickCountdown:
    value: int
    type: ClassVar[ActionType] = ActionType.TICK_COUNTDOWN


@dataclass(frozen=True)
class CountdownFinished:
    match_ends_at: int
    type: ClassVar[ActionType] = ActionType.COUNTDOWN_FINISHED


@dataclass(frozen=True)
class NewQuestion:
    question: Question
    question_index: int
    started_at: int = 0
    type: ClassVar[ActionType] = ActionType.NEW_QUESTION


@dataclass(frozen=True)
class SelfAnswered:
    value: int
    correct: bool
    points: int
    is_multiplayer: bool
    type: ClassVar[ActionType] = ActionType.SELF_ANSWERED


@dataclass(frozen=True)
class PeerAnswered:
    """Answer received from the peer.

    ``points`` is the sender's own value; None means the field was absent.
    """
    value: int
    correct: bool
    points: Optional[int] = None
    type: ClassVar[ActionType] = ActionType.PEER_ANSWERED


@dataclass(frozen=True)
class SelfTimedOut:
    is_multiplayer: bool
    type: ClassVar[ActionType] = ActionType.SELF_TIMED_OUT


@dataclass(frozen=True)
class EndMatch:
    summary: GameRecord
    type: ClassVar[ActionType] = ActionType.END_MATCH


@dataclass(frozen=True)
class Forfeit:
    by: ForfeitInfo
    type: ClassVar[ActionType] = ActionType.FORFEIT


@dataclass(frozen=True)
class ResetToSetup:
    type: ClassVar[ActionType] = ActionType.RESET_TO_SETUP


@dataclass(frozen=True)
class ShowBonus:
    type: ClassVar[ActionType] = ActionType.SHOW_BONUS


@dataclass(frozen=True)
class HideBonus:
    type: ClassVar[ActionType] = ActionType.HIDE_BONUS


@dataclass(frozen=True)
class LoadHistory:
    history: Tuple[GameRecord, ...]
    type: ClassVar[ActionType] = ActionType.LOAD_HISTORY


Action = Union[
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
]
