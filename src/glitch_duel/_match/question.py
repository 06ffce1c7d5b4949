# Area: Match
"""
glitch_duel._match.question — Immutable question value
======================================================

A ``Question`` is created once by the generator (or decoded from a
received Question message) and never modified. It travels on the wire
with its camelCase wire field names.
"""

from typing import Literal, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .constants import OPTION_COUNT

QuestionKind = Literal["multiplication", "division"]


class Question(BaseModel):
    """
    One arithmetic question with six answer options.

    Attributes:
        a: Left operand (the dividend for division)
        b: Right operand (the divisor for division)
        kind: "multiplication" or "division" (wire name: ``type``)
        answer: The correct answer, present exactly once in ``options``
        options: Six distinct candidate answers in display order
        is_hard: Both operands come from the hard tables
            (wire name: ``isHardQuestion``)
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    a: int
    b: int
    kind: QuestionKind = Field(alias="type")
    answer: int
    options: Tuple[int, ...]
    is_hard: bool = Field(alias="isHardQuestion")

    @model_validator(mode="after")
    def _check_options(self) -> "Question":
        if len(self.options) != OPTION_COUNT:
            raise ValueError(
                f"expected {OPTION_COUNT} options, got {len(self.options)}"
            )
        if self.options.count(self.answer) != 1:
            raise ValueError("answer must appear exactly once in options")
        if len(set(self.options)) != len(self.options):
            raise ValueError("options must be distinct")
        return self

    def is_correct(self, value: int) -> bool:
        return value == self.answer

    def prompt(self) -> str:
        """Text shown to the player, e.g. '6 × 7' or '42 ÷ 6'."""
        symbol = "×" if self.kind == "multiplication" else "÷"
        return f"{self.a} {symbol} {self.b}"

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
