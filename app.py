from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend import RoomRegistry
from broadcast import BroadcastDispatcher
from constants import CORS_ORIGINS, LOG_FILE, LOG_LEVEL, OUTBOUND_QUEUE_SIZE
from logging_config import get_logger, setup_logging
from routers.rooms import health_router, rooms_router
from routers.session import session_router

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)


def create_app(registry: Optional[RoomRegistry] = None, outbound_queue_size: int = OUTBOUND_QUEUE_SIZE) -> FastAPI:
    app = FastAPI(title="Puzzle Room Relay")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # One registry per process, reached through app.state by every connection
    app.state.registry = registry if registry is not None else RoomRegistry()
    app.state.dispatcher = BroadcastDispatcher()
    app.state.outbound_queue_size = outbound_queue_size

    app.include_router(rooms_router)
    app.include_router(health_router)
    app.include_router(session_router)

    logger.info("FastAPI application initialized")
    return app


app = create_app()
