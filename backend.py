import asyncio
import uuid
from typing import Any, Dict, List, NamedTuple, Optional
from urllib.parse import quote

from constants import AVATAR_URL_TEMPLATE, DEFAULT_ROOM_ID
from logging_config import get_logger
from schemas.messages import (
    ChatBroadcast,
    ChatEntry,
    PieceMoveBroadcast,
    Player,
    PlayersMessage,
    PuzzleStateMessage,
)

logger = get_logger(__name__)


def wire_string(value) -> str:
    """Render a JSON value the way a JavaScript client would stringify it."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def avatar_for(player_name) -> str:
    return AVATAR_URL_TEMPLATE.format(seed=quote(wire_string(player_name), safe="!~*'()"))


def normalize_room_id(room_id) -> str:
    # Any non-empty value is an opaque key
    if room_id is None or room_id is False or room_id == "" or room_id == 0:
        return DEFAULT_ROOM_ID
    return wire_string(room_id)


class JoinResult(NamedTuple):
    snapshot: PuzzleStateMessage
    roster: PlayersMessage
    player: Player


class LeaveResult(NamedTuple):
    roster: Optional[PlayersMessage]
    should_destroy: bool


class PuzzleState:
    def __init__(self):
        self.pieces: Any = []


class Room:
    """Connections, puzzle state and roster of one collaborative session.

    The mutating methods are synchronous and must be called while holding
    ``self.lock``; each returns the message(s) to fan out.
    """

    def __init__(self, room_id: str):
        self.room_id = room_id
        self.connections = set()
        self.puzzle_state = PuzzleState()
        self.players: List[Player] = []
        self.lock = asyncio.Lock()
        # Set once the registry has dropped this room
        self.closed = False

    def __repr__(self):
        return f"<Room {self.room_id} connections={len(self.connections)} players={len(self.players)}>"

    @property
    def pieces(self) -> Any:
        return self.puzzle_state.pieces

    @property
    def piece_count(self) -> int:
        pieces = self.puzzle_state.pieces
        return len(pieces) if isinstance(pieces, list) else 0

    def roster_message(self) -> PlayersMessage:
        return PlayersMessage(players=list(self.players))

    def snapshot_message(self) -> PuzzleStateMessage:
        return PuzzleStateMessage(pieces=self.puzzle_state.pieces)

    def join(self, connection, player_id, player_name) -> JoinResult:
        self.connections.add(connection)

        player = Player(id=player_id, name=player_name, avatar=avatar_for(player_name), score=0, online=True)
        # A rejoin replaces the old record and moves it to the end
        self.players = [p for p in self.players if p.id != player_id]
        self.players.append(player)
        logger.debug(f"Player {player_id} joined room {self.room_id} ({len(self.connections)} connections)")

        return JoinResult(self.snapshot_message(), self.roster_message(), player)

    def replace_pieces(self, pieces: Any):
        """Last write wins: the supplied value becomes authoritative as is."""
        self.puzzle_state.pieces = pieces

    def apply_piece_move(self, pieces: Any) -> PieceMoveBroadcast:
        self.replace_pieces(pieces)
        return PieceMoveBroadcast(pieces=pieces)

    def init_puzzle(self, pieces: Any) -> PuzzleStateMessage:
        self.replace_pieces(pieces)
        return PuzzleStateMessage(pieces=pieces)

    def record_chat(self, player_id, player_name, text, timestamp) -> ChatBroadcast:
        entry = ChatEntry(
            id=uuid.uuid4().hex,
            player=player_name,
            player_id=player_id,
            message=text,
            timestamp=timestamp,
        )
        return ChatBroadcast(message=entry)

    def leave(self, connection, player: Optional[Player] = None) -> LeaveResult:
        self.connections.discard(connection)

        roster = None
        if player is not None:
            self.players = [
                p.model_copy(update={"online": False}) if p.id == player.id else p
                for p in self.players
            ]
            roster = self.roster_message()
            logger.debug(f"Player {player.id} went offline in room {self.room_id}")

        return LeaveResult(roster, len(self.connections) == 0)


class RoomRegistry:
    """Owns every live Room; one instance per application."""

    def __init__(self):
        self._rooms: Dict[str, Room] = {}
        self._lock = asyncio.Lock()

    def __contains__(self, room_id: str) -> bool:
        return room_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)

    def get(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def rooms(self) -> List[Room]:
        return list(self._rooms.values())

    async def resolve_or_create(self, room_id: str) -> Room:
        async with self._lock:
            room = self._rooms.get(room_id)
            if room is None:
                room = Room(room_id)
                self._rooms[room_id] = room
                logger.info(f"Created room {room_id} (rooms: {len(self._rooms)})")
            return room

    async def remove_if_empty(self, room_id: str) -> bool:
        """Drop the room if it has no connections left.

        Callers hold the room's lock so the check happens in the same
        critical section that removed the last connection.
        """
        async with self._lock:
            room = self._rooms.get(room_id)
            if room is None or room.connections:
                return False
            room.closed = True
            del self._rooms[room_id]
            logger.info(f"Destroyed empty room {room_id} (rooms: {len(self._rooms)})")
            return True
