import asyncio
import uuid

from starlette.websockets import WebSocket, WebSocketState

from constants import OUTBOUND_QUEUE_SIZE
from logging_config import get_logger

logger = get_logger(__name__)


class ConnectionHandle:
    """One client's WebSocket, seen by rooms as a fire-and-forget sink.

    ``send`` only enqueues; ``run_writer`` drains the outbox onto the socket
    in order. A full outbox or a closed handle drops the frame.
    """

    def __init__(self, websocket: WebSocket, queue_size: int = OUTBOUND_QUEUE_SIZE):
        self.connection_id = str(uuid.uuid4())
        self.websocket = websocket
        self._outbox: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
        self._closed = asyncio.Event()

    def __repr__(self):
        return f"<ConnectionHandle {self.connection_id[:8]}>"

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    @property
    def is_open(self) -> bool:
        if self.closed:
            return False
        return (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    def send(self, payload: str) -> bool:
        if not self.is_open:
            logger.debug(f"Dropping frame for closed connection {self.connection_id}")
            return False
        try:
            self._outbox.put_nowait(payload)
        except asyncio.QueueFull:
            logger.warning(f"Outbox full for connection {self.connection_id}, dropping frame")
            return False
        return True

    def close(self):
        if not self.closed:
            self._closed.set()
            logger.debug(f"Connection {self.connection_id} marked closed")

    async def wait_closed(self):
        await self._closed.wait()

    async def run_writer(self):
        """Write queued frames to the socket until the handle is closed."""
        try:
            while not self.closed:
                payload = await self._outbox.get()
                try:
                    await self.websocket.send_text(payload)
                except Exception as e:
                    logger.warning(f"Send failed on connection {self.connection_id}: {e}")
                    self.close()
        except asyncio.CancelledError:
            logger.debug(f"Writer for connection {self.connection_id} cancelled")
            raise
