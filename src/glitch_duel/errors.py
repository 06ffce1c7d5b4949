"""
glitch_duel.errors — Custom exception classes
=============================================

Defines the exception hierarchy for the match engine and sync layer.
Each exception stores full context for structured logging.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional
import json


class GlitchDuelError(Exception):
    """Base exception for all glitch_duel errors."""

    def format_error_log(self) -> str:
        return _format_error_block(
            error_type=self.__class__.__name__,
            summary=str(self),
            context={},
            problems=None,
        )


class GenerationInvariantError(GlitchDuelError):
    """Raised when a generated question breaks its own option invariant.

    This is a logic bug in the generator, never a runtime condition.
    """

    def __init__(self, answer: int, options: List[int], reason: str):
        self.answer = answer
        self.options = list(options)
        self.reason = reason
        super().__init__(
            f"Generated question is invalid: {reason} "
            f"(answer={answer}, options={self.options})"
        )

    def format_error_log(self) -> str:
        return _format_error_block(
            error_type="GENERATION_INVARIANT_VIOLATION",
            summary=self.reason,
            context={"answer": self.answer, "options": self.options},
            problems=[self.reason],
        )


class MessageFormatError(GlitchDuelError):
    """Raised when an inbound wire payload fails validation."""

    def __init__(self, raw: Any, validation_errors: List[str]):
        self.raw = raw
        self.validation_errors = validation_errors
        super().__init__(f"Malformed wire message: {validation_errors}")

    def format_error_log(self) -> str:
        payload = self.raw if isinstance(self.raw, dict) else {"raw": repr(self.raw)}
        return _format_error_block(
            error_type="MESSAGE_FORMAT",
            summary="Inbound message dropped",
            context=payload,
            problems=self.validation_errors,
        )


class TransportError(GlitchDuelError):
    """Raised by a transport when a publish or presence call fails."""

    def __init__(self, channel: str, operation: str, reason: str = ""):
        self.channel = channel
        self.operation = operation
        self.reason = reason
        super().__init__(
            f"Transport {operation} failed on '{channel}'"
            + (f": {reason}" if reason else "")
        )

    def format_error_log(self) -> str:
        return _format_error_block(
            error_type="TRANSPORT_FAILURE",
            summary=str(self),
            context={"channel": self.channel, "operation": self.operation},
            problems=[self.reason] if self.reason else None,
        )


def _format_error_block(
    error_type: str,
    summary: str,
    context: Dict[str, Any],
    problems: Optional[List[str]],
) -> str:
    """Format a structured error block."""
    from datetime import datetime, timezone

    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"

    lines = [
        "",
        "=" * 64,
        " GLITCH DUEL ERROR",
        "=" * 64,
        f" Timestamp:    {timestamp}",
        f" Error Type:   {error_type}",
        f" Summary:      {summary}",
    ]

    if context:
        lines.append("")
        lines.append(" ── CONTEXT " + "─" * 52)
        lines.append(_indent_json(context))

    if problems:
        lines.append("")
        lines.append(" ── PROBLEMS " + "─" * 51)
        for problem in problems:
            lines.append(f" • {problem}")

    lines.append("")
    lines.append("=" * 64)
    lines.append("")

    return "\n".join(lines)


def _indent_json(data: Dict[str, Any], indent: int = 2) -> str:
    """Format JSON with indentation for error logs."""
    try:
        formatted = json.dumps(data, indent=indent, default=str)
        return "\n".join(" " + line for line in formatted.split("\n"))
    except (TypeError, ValueError):
        return f" {repr(data)}"
