from logging_config import get_logger
from schemas.messages import OutboundMessage, serialize

logger = get_logger(__name__)


class BroadcastDispatcher:
    """Fans room messages out to connection handles."""

    def deliver(self, room, message: OutboundMessage) -> int:
        """Send ``message`` to every open connection in ``room``.

        The message is serialized once. Closed handles are skipped but stay
        in the room until they leave; a failing handle never stops the rest.
        Returns the number of handles that accepted the frame.
        """
        payload = serialize(message)
        delivered = 0
        for connection in list(room.connections):
            if not connection.is_open:
                continue
            try:
                if connection.send(payload):
                    delivered += 1
            except Exception as e:
                logger.warning(f"Error sending {message.type} to {connection!r} in room {room.room_id}: {e}")
        logger.debug(f"Broadcast {message.type} to {delivered}/{len(room.connections)} connections in room {room.room_id}")
        return delivered

    def send(self, connection, message: OutboundMessage) -> bool:
        if not connection.is_open:
            return False
        try:
            return connection.send(serialize(message))
        except Exception as e:
            logger.warning(f"Error sending {message.type} to {connection!r}: {e}")
            return False
