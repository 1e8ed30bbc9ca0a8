"""Inbound command and outbound event models (what travels over the websocket)"""

from typing import Annotated, Any, Literal, Optional, Self, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from src.core.exceptions import InvalidRequestError
from src.core.models import GameModel
from src.core.shared_types import Color, InvalidReason, NoticeType

StoneColor = str


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


# --- COMMANDS (participant -> server) ---
class JoinQueueCommand(WireModel):
    type: Literal["joinQueue"] = "joinQueue"


class CancelQueueCommand(WireModel):
    type: Literal["cancelQueue"] = "cancelQueue"


class JoinRoomCommand(WireModel):
    type: Literal["joinRoom"] = "joinRoom"
    room_id: str = Field(min_length=1)
    color: Optional[Color] = None


class PlaceCommand(WireModel):
    """Coordinates are not range-checked here: an off-board square is simply an illegal move."""

    type: Literal["place"] = "place"
    r: int
    c: int


class RestartCommand(WireModel):
    type: Literal["restart"] = "restart"


Command = Annotated[
    Union[
        JoinQueueCommand,
        CancelQueueCommand,
        JoinRoomCommand,
        PlaceCommand,
        RestartCommand,
    ],
    Field(discriminator="type"),
]

_command_adapter: TypeAdapter[Command] = TypeAdapter(Command)


def parse_command(data: Any) -> Command:
    """Validate a decoded JSON payload into one of the command models."""
    try:
        return _command_adapter.validate_python(data)
    except ValidationError as error:
        raise InvalidRequestError(f"Cannot interpret command: {error}") from error


# --- EVENTS (server -> participant / room) ---
class QueueJoinedEvent(WireModel):
    event: Literal["queue:joined"] = "queue:joined"


class QueueCancelledEvent(WireModel):
    event: Literal["queue:cancelled"] = "queue:cancelled"


class MatchFoundEvent(WireModel):
    event: Literal["matchFound"] = "matchFound"
    room_id: str
    color: Color


class RoomFullEvent(WireModel):
    event: Literal["room:full"] = "room:full"


class RoomJoinedEvent(WireModel):
    event: Literal["roomJoined"] = "roomJoined"
    room_id: str
    color: Color


class InvalidEvent(WireModel):
    event: Literal["invalid"] = "invalid"
    reason: InvalidReason


class MessageEvent(WireModel):
    event: Literal["message"] = "message"
    type: NoticeType
    color: Color


class LastMovePayload(WireModel):
    r: int
    c: int
    flips: list[tuple[int, int]]
    color: StoneColor


class ResultPayload(WireModel):
    winner: Optional[StoneColor]
    draw: bool
    reason: Optional[str] = None


class ScorePayload(WireModel):
    black: int
    white: int


class StateEvent(WireModel):
    """Full game state. Othello has no hidden information, so everybody in the room gets the same payload."""

    event: Literal["state"] = "state"
    board: list[list[int]]
    turn: StoneColor
    last_move: Optional[LastMovePayload]
    result: Optional[ResultPayload]
    score: ScorePayload
    message: Optional[str] = None

    @classmethod
    def from_model(cls, model: GameModel, message: Optional[str] = None) -> Self:
        last_move = (
            LastMovePayload(
                r=model.last_move.row,
                c=model.last_move.col,
                flips=model.last_move.flips,
                color=model.last_move.color,
            )
            if model.last_move
            else None
        )
        result = (
            ResultPayload(
                winner=model.result.winner,
                draw=model.result.draw,
                reason=model.result.reason,
            )
            if model.result
            else None
        )
        return cls(
            board=model.board,
            turn=model.turn,
            last_move=last_move,
            result=result,
            score=ScorePayload(
                black=model.score[Color.BLACK.value],
                white=model.score[Color.WHITE.value],
            ),
            message=message,
        )


Event = Union[
    QueueJoinedEvent,
    QueueCancelledEvent,
    MatchFoundEvent,
    RoomFullEvent,
    RoomJoinedEvent,
    InvalidEvent,
    MessageEvent,
    StateEvent,
]
