from fastapi import APIRouter, HTTPException, Request
from typing import List

from logging_config import get_logger
from schemas.rooms import HealthResponse, RoomDetailsResponse, RoomSummary

logger = get_logger(__name__)

rooms_router = APIRouter(prefix="/rooms", tags=["rooms"])
health_router = APIRouter(tags=["health"])


@rooms_router.get("/", response_model=List[RoomSummary])
async def list_rooms(request: Request):
    registry = request.app.state.registry
    return [
        RoomSummary(
            room_id=room.room_id,
            connection_count=len(room.connections),
            player_count=len(room.players),
            piece_count=room.piece_count,
        )
        for room in registry.rooms()
    ]


@rooms_router.get("/{room_id}", response_model=RoomDetailsResponse)
async def get_room_details(room_id: str, request: Request):
    """
    Get a live room's details.

    Returns:
    - room_id: Room identifier
    - connection_count: Open connections in the room
    - online_players_count: Roster entries currently online
    - piece_count: Length of the authoritative piece list
    - players: The roster in join order
    """
    client_host = request.client.host if request.client else 'unknown'
    logger.info(f"Room details request for {room_id} from {client_host}")

    room = request.app.state.registry.get(room_id)
    if room is None:
        logger.warning(f"Room details failed: Room {room_id} not found")
        raise HTTPException(status_code=404, detail="Room not found")

    players = list(room.players)
    return RoomDetailsResponse(
        room_id=room.room_id,
        connection_count=len(room.connections),
        online_players_count=sum(1 for p in players if p.online),
        piece_count=room.piece_count,
        players=players,
    )


@health_router.get("/health", response_model=HealthResponse)
async def health(request: Request):
    return HealthResponse(status="ok", rooms=len(request.app.state.registry))
