# Area: Match
"""
glitch_duel._match.enums — Match State Machine Enums
====================================================

Defines the phases, per-question race states, option highlights and
action types of the match state machine.
"""

from enum import Enum


class GamePhase(Enum):
    """
    Coarse lifecycle of one match.

    Phase transitions:
    SETUP -> COUNTDOWN (on START_MATCH)
    COUNTDOWN -> ACTIVE (on COUNTDOWN_FINISHED)
    ACTIVE -> RESULTS (on END_MATCH)
    COUNTDOWN | ACTIVE -> FORFEITED (on FORFEIT)
    Any phase -> SETUP (on RESET_TO_SETUP)
    """
    SETUP = "setup"
    COUNTDOWN = "countdown"
    ACTIVE = "active"
    RESULTS = "results"
    FORFEITED = "forfeited"


class QuestionPhase(Enum):
    """
    Per-question race state, meaningful only while ACTIVE.

    WAITING          question shown, nobody settled
    SELF_ANSWERED    I answered, waiting for the peer
    PEER_ANSWERED    the peer answered wrong, I have not answered
    BOTH_ANSWERED    both sides accounted for (or single-player settled)
    SELF_TIMED_OUT   my clock ran out, waiting for the peer
    """
    WAITING = "waiting"
    SELF_ANSWERED = "self-answered"
    PEER_ANSWERED = "peer-answered"
    BOTH_ANSWERED = "both-answered"
    SELF_TIMED_OUT = "self-timed-out"


class OptionMark(Enum):
    """Highlight applied to an answer option."""
    CORRECT = "correct"
    WRONG = "wrong"
    PEER_WRONG = "peer-wrong"


class Role(Enum):
    """Local side of a match. Only the host produces questions."""
    HOST = "host"
    GUEST = "guest"
    SOLO = "solo"


class ActionType(Enum):
    """
    Actions accepted by the match reducer.

    Actions are produced by:
    - START_MATCH: player pressed start (single-player)
    - TICK_COUNTDOWN / COUNTDOWN_FINISHED: TimingController countdown
    - NEW_QUESTION: generator (host/solo) or a received Question (guest)
    - SELF_ANSWERED: local option pick
    - PEER_ANSWERED: received Answer message
    - SELF_TIMED_OUT: question clock expiry
    - END_MATCH: advance past matchEndsAt, or received game-end
    - FORFEIT: explicit Forfeit message or presence signal
    - RESET_TO_SETUP: play again
    - SHOW_BONUS / HIDE_BONUS: bonus highlight window
    - LOAD_HISTORY: session start hydration
    """
    START_MATCH = "START_MATCH"
    TICK_COUNTDOWN = "TICK_COUNTDOWN"
    COUNTDOWN_FINISHED = "COUNTDOWN_FINISHED"
    NEW_QUESTION = "NEW_QUESTION"
    SELF_ANSWERED = "SELF_ANSWERED"
    PEER_ANSWERED = "PEER_ANSWERED"
    SELF_TIMED_OUT = "SELF_TIMED_OUT"
    END_MATCH = "END_MATCH"
    FORFEIT = "FORFEIT"
    RESET_TO_SETUP = "RESET_TO_SETUP"
    SHOW_BONUS = "SHOW_BONUS"
    HIDE_BONUS = "HIDE_BONUS"
    LOAD_HISTORY = "LOAD_HISTORY"
