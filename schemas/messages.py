from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from typing import Annotated, Any, List, Literal, Union


class MessageDecodeError(ValueError):
    """Raised when an inbound frame is not one of the known message kinds."""


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# Inbound

class JoinMessage(WireModel):
    type: Literal["join"]
    room_id: Any = Field(None, alias="roomId")
    player_id: Any = Field(None, alias="playerId")
    player_name: Any = Field(None, alias="playerName")

class PieceMoveMessage(WireModel):
    type: Literal["piece_move"]
    pieces: Any = None

class ChatMessage(WireModel):
    type: Literal["chat_message"]
    player_name: Any = Field(None, alias="playerName")
    player_id: Any = Field(None, alias="playerId")
    message: Any = None
    timestamp: Any = None

class InitPuzzleMessage(WireModel):
    type: Literal["init_puzzle"]
    pieces: Any = None


InboundMessage = Annotated[
    Union[JoinMessage, PieceMoveMessage, ChatMessage, InitPuzzleMessage],
    Field(discriminator="type"),
]

inbound_adapter = TypeAdapter(InboundMessage)


def parse_inbound(payload: Union[str, bytes]):
    """Decode one frame into its message model.

    Anything that is not a JSON object tagged with a known ``type`` and
    carrying the fields that kind needs raises MessageDecodeError.
    """
    try:
        return inbound_adapter.validate_json(payload)
    except ValidationError as e:
        raise MessageDecodeError(str(e)) from e


# Outbound

class Player(WireModel):
    id: Any = None
    name: Any = None
    avatar: str
    score: int = 0
    online: bool = True

class PuzzleStateMessage(WireModel):
    type: Literal["puzzle_state"] = "puzzle_state"
    pieces: Any = None
    game_state: dict = Field(default_factory=dict, alias="gameState")

class PlayersMessage(WireModel):
    type: Literal["players"] = "players"
    players: List[Player]

class PieceMoveBroadcast(WireModel):
    type: Literal["piece_move"] = "piece_move"
    pieces: Any = None

class ChatEntry(WireModel):
    id: str
    player: Any = None
    player_id: Any = Field(None, alias="playerId")
    message: Any = None
    timestamp: Any = None
    type: Literal["message"] = "message"

class ChatBroadcast(WireModel):
    type: Literal["chat_message"] = "chat_message"
    message: ChatEntry


OutboundMessage = Union[PuzzleStateMessage, PlayersMessage, PieceMoveBroadcast, ChatBroadcast]


def serialize(message: OutboundMessage) -> str:
    return message.model_dump_json(by_alias=True)
