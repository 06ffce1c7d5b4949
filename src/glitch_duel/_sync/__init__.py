# Area: Sync
"""
Multiplayer sync layer.

This package contains:
- Wire message models
- Channel/presence interfaces and the in-memory hub
- Presence snapshots and forfeit detection
- The multiplayer sync adapter
- Match history persistence
"""

from .messages import (
    QuestionMessage,
    AnswerMessage,
    MatchEndMessage,
    ForfeitMessage,
    ResultMessage,
    InviteMessage,
    InviteResponseMessage,
    parse_message,
    encode_message,
)
from .transport import Channel, Presence, PresenceEvent, InMemoryHub
from .presence import PresenceData, PresenceBuilder, SoloPresence
from .forfeit_detector import ForfeitSignal, forfeit_from_message, forfeit_from_presence
from .adapter import MultiplayerSyncAdapter, SyncListener
from .history import GameHistoryRepository, MatchLedgerRepository

__all__ = [
    "QuestionMessage",
    "AnswerMessage",
    "MatchEndMessage",
    "ForfeitMessage",
    "ResultMessage",
    "InviteMessage",
    "InviteResponseMessage",
    "parse_message",
    "encode_message",
    "Channel",
    "Presence",
    "PresenceEvent",
    "InMemoryHub",
    "PresenceData",
    "PresenceBuilder",
    "SoloPresence",
    "ForfeitSignal",
    "forfeit_from_message",
    "forfeit_from_presence",
    "MultiplayerSyncAdapter",
    "SyncListener",
    "GameHistoryRepository",
    "MatchLedgerRepository",
]
