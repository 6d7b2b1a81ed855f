from dataclasses import dataclass
from typing import Optional, Union

from backend import Room, RoomRegistry, normalize_room_id
from broadcast import BroadcastDispatcher
from logging_config import get_logger
from schemas.messages import (
    ChatMessage,
    InitPuzzleMessage,
    JoinMessage,
    MessageDecodeError,
    PieceMoveMessage,
    Player,
    parse_inbound,
)

logger = get_logger(__name__)


@dataclass
class Session:
    """Room and player a connection is currently joined as."""
    room_id: Optional[str] = None
    player: Optional[Player] = None

    @property
    def joined(self) -> bool:
        return self.room_id is not None


class MessageRouter:
    """Turns one connection's inbound frames into Room operations.

    Frames that fail to decode, and room operations sent before a join,
    are dropped without a reply.
    """

    def __init__(self, connection, registry: RoomRegistry, dispatcher: BroadcastDispatcher):
        self.connection = connection
        self.registry = registry
        self.dispatcher = dispatcher
        self.session = Session()
        self._handlers = {
            "join": self.on_join,
            "piece_move": self.on_piece_move,
            "chat_message": self.on_chat_message,
            "init_puzzle": self.on_init_puzzle,
        }

    async def handle_frame(self, payload: Union[str, bytes]):
        try:
            message = parse_inbound(payload)
        except MessageDecodeError as e:
            logger.debug(f"Discarding undecodable frame from {self.connection!r}: {e}")
            return
        await self._handlers[message.type](message)

    def current_room(self) -> Optional[Room]:
        if not self.session.joined:
            return None
        return self.registry.get(self.session.room_id)

    async def on_join(self, message: JoinMessage):
        room_id = normalize_room_id(message.room_id)
        # Rejoining the current room keeps it; only a move to another room leaves first
        if self.session.joined and self.session.room_id != room_id:
            await self.leave_current_room()

        while True:
            room = await self.registry.resolve_or_create(room_id)
            async with room.lock:
                # Lost a race with the last leave; the registry has a new room by now
                if room.closed:
                    continue
                result = room.join(self.connection, message.player_id, message.player_name)
                self.session = Session(room_id=room_id, player=result.player)
                self.dispatcher.send(self.connection, result.snapshot)
                self.dispatcher.deliver(room, result.roster)
                break

        logger.info(f"Player {message.player_id} ({message.player_name}) joined room {room_id} on {self.connection!r}")

    async def on_piece_move(self, message: PieceMoveMessage):
        room = self.current_room()
        if room is None:
            logger.debug(f"Ignoring piece_move from {self.connection!r} before join")
            return
        async with room.lock:
            self.dispatcher.deliver(room, room.apply_piece_move(message.pieces))

    async def on_init_puzzle(self, message: InitPuzzleMessage):
        room = self.current_room()
        if room is None:
            logger.debug(f"Ignoring init_puzzle from {self.connection!r} before join")
            return
        async with room.lock:
            self.dispatcher.deliver(room, room.init_puzzle(message.pieces))
        logger.info(f"Room {room.room_id} puzzle initialized with {room.piece_count} pieces")

    async def on_chat_message(self, message: ChatMessage):
        room = self.current_room()
        if room is None:
            logger.debug(f"Ignoring chat_message from {self.connection!r} before join")
            return
        async with room.lock:
            broadcast = room.record_chat(message.player_id, message.player_name, message.message, message.timestamp)
            self.dispatcher.deliver(room, broadcast)

    async def leave_current_room(self):
        room = self.current_room()
        player = self.session.player
        self.session = Session()
        if room is None:
            return

        async with room.lock:
            result = room.leave(self.connection, player)
            if result.roster is not None:
                self.dispatcher.deliver(room, result.roster)
            if result.should_destroy:
                await self.registry.remove_if_empty(room.room_id)

        logger.info(f"Player {player.id if player else None} left room {room.room_id} on {self.connection!r}")

    async def close(self):
        """Transport closed: leave whatever room this connection is in."""
        if self.session.joined:
            await self.leave_current_room()
