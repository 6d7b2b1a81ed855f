import asyncio
from contextlib import suppress

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from connection import ConnectionHandle
from logging_config import get_logger
from message_router import MessageRouter

logger = get_logger(__name__)

session_router = APIRouter(tags=["session"])


@session_router.websocket("/")
@session_router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """Relay endpoint: one MessageRouter per connection, frames handled in order."""
    await websocket.accept()
    registry = websocket.app.state.registry
    dispatcher = websocket.app.state.dispatcher

    connection = ConnectionHandle(websocket, queue_size=websocket.app.state.outbound_queue_size)
    router = MessageRouter(connection, registry, dispatcher)
    writer = asyncio.create_task(connection.run_writer())
    client_host = websocket.client.host if websocket.client else "unknown"
    logger.info(f"WebSocket connection {connection.connection_id} accepted from {client_host}")

    message_count = 0
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.info(f"WebSocket {connection.connection_id} disconnected (code={message.get('code')})")
                break
            payload = message.get("text")
            if payload is None:
                payload = message.get("bytes")
            if payload is None:
                continue
            message_count += 1
            logger.debug(f"Received frame #{message_count} from connection {connection.connection_id}")
            await router.handle_frame(payload)
    except WebSocketDisconnect:
        logger.info(f"WebSocket {connection.connection_id} disconnected")
    except Exception as e:
        logger.error(f"Error on connection {connection.connection_id}: {e}", exc_info=True)
    finally:
        connection.close()
        await router.close()
        writer.cancel()
        with suppress(asyncio.CancelledError):
            await writer
        if websocket.client_state == WebSocketState.CONNECTED:
            try:
                await websocket.close()
            except Exception as e:
                logger.debug(f"Error closing WebSocket: {e}")
