# Area: Shared
"""
glitch_duel._shared.protocol_logger — Wire message logging
==========================================================

Structured logging for wire messages and local match transitions.
Shows colored output with the match channel, local role and question index.
"""

from __future__ import annotations
import sys
from datetime import datetime
from typing import Optional

# ══════════════════════════════════════════════════════════════
# ANSI COLOR CODES
# ══════════════════════════════════════════════════════════════

GREEN = "\033[32m"       # Wire messages
ORANGE = "\033[38;5;208m"  # Local transitions
RED = "\033[31m"         # Errors
RESET = "\033[0m"

# ══════════════════════════════════════════════════════════════
# MESSAGE TYPE → DISPLAY NAME MAPPINGS
# ══════════════════════════════════════════════════════════════

DISPLAY_NAMES = {
    "question": "QUESTION",
    "answer": "ANSWER",
    "game-end": "MATCH-END",
    "game-forfeit": "FORFEIT",
    "game-result": "RESULT",
    "invite": "INVITE",
    "invite-response": "INVITE-RESPONSE",
    "presence": "PRESENCE",
}

# What the receiving side is expected to do next
EXPECTED_REACTIONS = {
    "question": "Answer within 5s",
    "answer": "Settle question",
    "game-end": "Show results",
    "game-forfeit": "Return to lobby",
    "game-result": "None (record keeper)",
    "invite": "Accept or deny",
    "invite-response": "None",
    "presence": "Replace snapshot",
}


class ProtocolLogger:
    """Logger for wire messages and local transitions."""

    def __init__(self, role: str = "SOLO"):
        self.role = role
        self._channel: str = "-"

    def set_channel(self, channel: str) -> None:
        """Set current match channel for logging context."""
        self._channel = channel or "-"

    def set_role(self, role: str) -> None:
        """Set the local role shown on every line (HOST, GUEST, SOLO)."""
        self.role = role

    def _now(self) -> str:
        return datetime.now().strftime("%H:%M:%S")

    def _now_ms(self) -> str:
        return datetime.now().strftime("%H:%M:%S:%f")[:-3]

    def _index(self, question_index: Optional[int]) -> str:
        return f"#{question_index}" if question_index is not None else "-"

    def log_received(
        self,
        sender: str,
        message_type: str,
        question_index: Optional[int] = None,
    ) -> None:
        """Log a received wire message."""
        display = DISPLAY_NAMES.get(message_type, message_type)
        expected = EXPECTED_REACTIONS.get(message_type, "Unknown")
        line = (
            f"{GREEN}{self._now()} | MATCH: {self._channel:24} | RECEIVED | "
            f"from {sender:16} | {display:16} | Q: {self._index(question_index):5} | "
            f"EXPECTED: {expected:20} | ROLE: {self.role}{RESET}"
        )
        print(line, file=sys.stdout)

    def log_sent(
        self,
        message_type: str,
        question_index: Optional[int] = None,
    ) -> None:
        """Log a sent wire message."""
        display = DISPLAY_NAMES.get(message_type, message_type)
        expected = EXPECTED_REACTIONS.get(message_type, "Unknown")
        line = (
            f"{GREEN}{self._now()} | MATCH: {self._channel:24} | SENT     | "
            f"{'':21} | {display:16} | Q: {self._index(question_index):5} | "
            f"EXPECTED: {expected:20} | ROLE: {self.role}{RESET}"
        )
        print(line, file=sys.stdout)

    def log_transition(self, action: str, before: str, after: str) -> None:
        """Log a local state transition."""
        line = (
            f"{ORANGE}{self._now_ms()} | ACTION: {action:20} | "
            f"{before} -> {after} | ROLE: {self.role}{RESET}"
        )
        print(line, file=sys.stdout)

    def log_error(self, description: str) -> None:
        """Log an error."""
        line = f"{RED}[ERROR] {self._now()} | {description}{RESET}"
        print(line, file=sys.stderr)
