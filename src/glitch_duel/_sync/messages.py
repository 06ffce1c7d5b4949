# Area: Sync
"""
glitch_duel._sync.messages — Wire message models
================================================

Every payload published on the ``game-event`` event of a match channel
(or of the lobby channel, for invites) is one of the models below. Field
names on the wire are camelCase and the ``type`` tag selects the model.

Inbound payloads go through ``parse_message``, which raises
``MessageFormatError`` for anything that does not validate. Outbound
models go through ``encode_message``.
"""

from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from ..errors import MessageFormatError
from .._match.question import Question


class WireMessage(BaseModel):
    """Base for all wire messages."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class QuestionMessage(WireMessage):
    """Host -> guest: the next question to show."""

    type: Literal["question"] = "question"
    question_index: int = Field(alias="questionIndex")
    question: Question


class AnswerMessage(WireMessage):
    """
    A side settled its part of a question.

    ``selected_value == -1`` with ``is_correct == False`` and ``points == 0``
    is a timeout or a lockout echo.
    """

    type: Literal["answer"] = "answer"
    player_id: str = Field(alias="playerId")
    question_index: int = Field(alias="questionIndex")
    selected_value: int = Field(alias="selectedValue")
    is_correct: bool = Field(alias="isCorrect")
    points: Optional[int] = None
    timestamp: int = 0


class MatchEndMessage(WireMessage):
    """Host -> guest: the match clock ran out."""

    type: Literal["game-end"] = "game-end"


class ForfeitMessage(WireMessage):
    """A side left the match before it finished."""

    type: Literal["game-forfeit"] = "game-forfeit"
    player_id: str = Field(alias="playerId")
    player_name: str = Field(alias="playerName")
    player_avatar: str = Field(alias="playerAvatar")


class ResultMessage(WireMessage):
    """Host -> record keeper: final scores of a finished match."""

    type: Literal["game-result"] = "game-result"
    game_id: Optional[str] = Field(default=None, alias="gameId")
    player1_id: str = Field(alias="player1Id")
    player1_name: str = Field(alias="player1Name")
    player1_avatar: str = Field(alias="player1Avatar")
    player1_score: int = Field(alias="player1Score")
    player2_id: str = Field(alias="player2Id")
    player2_name: str = Field(alias="player2Name")
    player2_avatar: str = Field(alias="player2Avatar")
    player2_score: int = Field(alias="player2Score")
    channel: str


class InviteMessage(WireMessage):
    """Lobby: challenge another player."""

    type: Literal["invite"] = "invite"
    from_player_id: str = Field(alias="fromPlayerId")
    from_name: str = Field(alias="fromName")
    from_avatar: str = Field(alias="fromAvatar")
    duration: int = 1
    to_player_id: Optional[str] = Field(default=None, alias="toPlayerId")


class InviteResponseMessage(WireMessage):
    """Lobby: answer to an invite."""

    type: Literal["invite-response"] = "invite-response"
    accepted: bool
    from_player_id: str = Field(alias="fromPlayerId")
    from_name: str = Field(alias="fromName")
    from_avatar: str = Field(alias="fromAvatar")
    to_player_id: Optional[str] = Field(default=None, alias="toPlayerId")


GameMessage = Annotated[
    Union[
        QuestionMessage,
        AnswerMessage,
        MatchEndMessage,
        ForfeitMessage,
        ResultMessage,
        InviteMessage,
        InviteResponseMessage,
    ],
    Field(discriminator="type"),
]

_ADAPTER: TypeAdapter = TypeAdapter(GameMessage)


def _describe(exc: ValidationError) -> List[str]:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
        problems.append(f"{location}: {error.get('msg', 'invalid')}")
    return problems


def parse_message(raw: Any) -> GameMessage:
    """
    Decode one inbound payload.

    Args:
        raw: A dict (already decoded JSON) or a JSON string/bytes

    Returns:
        The matching wire model

    Raises:
        MessageFormatError: If the payload has no known ``type`` or a
            field is missing or of the wrong type
    """
    try:
        if isinstance(raw, (str, bytes, bytearray)):
            return _ADAPTER.validate_json(raw)
        return _ADAPTER.validate_python(raw)
    except ValidationError as exc:
        raise MessageFormatError(raw, _describe(exc)) from exc


def encode_message(message: WireMessage) -> dict:
    """Render a wire model as a JSON-ready dict with camelCase keys."""
    return message.model_dump(mode="json", by_alias=True, exclude_none=True)
