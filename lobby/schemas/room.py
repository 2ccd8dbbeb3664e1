"""Room schemas."""
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from lobby.models.room import Room
from .base import CamelModel, epoch_to_datetime
from .enums import GameType, RoomStatus, Slot


class RoomTicketResponse(CamelModel):
    """Response for create/join and wait requests."""
    room_id: str
    game_type: GameType
    slot: Slot
    status: RoomStatus
    ready: bool  # both slots are taken
    created: bool = False  # True only on the request that created the room
    expire: datetime

    @classmethod
    def from_room(cls, room: Room, slot: Slot, created: bool = False) -> "RoomTicketResponse":
        return cls(
            room_id=room.room_id,
            game_type=room.game_type,
            slot=slot,
            status=room.status,
            ready=room.player2 is not None,
            created=created,
            expire=epoch_to_datetime(room.expire),
        )


class RoomStateResponse(CamelModel):
    """Game state of a room as seen by the caller."""
    room_id: str
    game_type: GameType
    slot: Slot
    status: RoomStatus
    expire: datetime
    state: dict[str, Any]

    @classmethod
    def from_view(cls, room: Room, slot: Slot, state: dict) -> "RoomStateResponse":
        return cls(
            room_id=room.room_id,
            game_type=room.game_type,
            slot=slot,
            status=room.status,
            expire=epoch_to_datetime(room.expire),
            state=state,
        )


class RoundEndResponse(CamelModel):
    """Last completed round of a round-based game."""
    room_id: str
    slot: Slot
    result: Optional[dict[str, Any]] = None  # None until the first round resolves


class MoveRequest(BaseModel):
    """Request schema for submitting a move."""
    move: dict[str, Any] = Field(..., description="Game-specific move payload")


class ErrorResponse(BaseModel):
    """Error body rendered for every AppException."""
    error: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)
