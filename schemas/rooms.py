from pydantic import BaseModel
from typing import List

from schemas.messages import Player


class RoomSummary(BaseModel):
    room_id: str
    connection_count: int
    player_count: int
    piece_count: int

class RoomDetailsResponse(BaseModel):
    room_id: str
    connection_count: int
    online_players_count: int
    piece_count: int
    players: List[Player]

class HealthResponse(BaseModel):
    status: str
    rooms: int
