"""
glitch_duel.records — Finished-match record dataclasses
=======================================================

Records produced when a match ends. ``GameRecord`` is the per-session
summary kept in the local history; ``MultiplayerGameRecord`` is appended
to the per-player match ledger; ``LastGameSummary`` is the compact form
published in the lobby presence record.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class GameRecord:
    """
    Summary of one finished match, as shown in the history table.

    Attributes:
        name: Player display name
        avatar: Player avatar (an emoji)
        date: Human-readable local date the match finished
        duration: Match duration in minutes
        correct: Points scored (bonus answers count double)
        total: Questions settled for this player
        percent: correct / total as a whole percentage, 0 when total is 0
    """

    name: str
    avatar: str
    date: str
    duration: int
    correct: int
    total: int
    percent: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GameRecord":
        return cls(
            name=str(data.get("name", "")),
            avatar=str(data.get("avatar", "")),
            date=str(data.get("date", "")),
            duration=int(data.get("duration", 0)),
            correct=int(data.get("correct", 0)),
            total=int(data.get("total", 0)),
            percent=int(data.get("percent", 0)),
        )


@dataclass(frozen=True)
class MultiplayerGameRecord:
    """
    Ledger entry for one finished multiplayer match.

    Attributes:
        finished_at: Epoch milliseconds when the match ended
        opponent: Opponent display name
        opponent_avatar: Opponent avatar
        opponent_id: Opponent player id
        score: Local player's final score
        opponent_score: Opponent's final score
    """

    finished_at: int
    opponent: str
    opponent_avatar: str
    opponent_id: str
    score: int
    opponent_score: int


@dataclass(frozen=True)
class LastGameSummary:
    """Compact last-match summary published in presence."""

    opponent: str
    score: int
    opponent_score: int
    won: bool


def percent_correct(correct: int, total: int) -> int:
    """Percentage of points over settled questions, 0 for an empty match."""
    if total == 0:
        return 0
    # Half-up rounding, not round()'s half-to-even
    return int(correct / total * 100 + 0.5)


def get_last_game(
    records: List[MultiplayerGameRecord],
) -> Optional[LastGameSummary]:
    """Summarize the most recent ledger entry, or None if there is none.

    A tie is not a win.
    """
    if not records:
        return None
    last = records[-1]
    return LastGameSummary(
        opponent=last.opponent,
        score=last.score,
        opponent_score=last.opponent_score,
        won=last.score > last.opponent_score,
    )
