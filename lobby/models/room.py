"""Room data model for in-memory storage."""
from dataclasses import dataclass, replace
from typing import Optional

from lobby.schemas.enums import GameType, RoomStatus, Slot


@dataclass
class Room:
    """A match record pairing up to two session tokens.

    `expire` is an absolute epoch timestamp; once it is in the past the room
    and its paired game state are eligible for removal.
    """
    room_id: str
    game_type: GameType
    player1: str
    expire: float
    created_at: float
    player2: Optional[str] = None
    finished: bool = False

    @property
    def status(self) -> RoomStatus:
        if self.finished:
            return RoomStatus.FINISHED
        if self.player2 is None:
            return RoomStatus.WAITING
        return RoomStatus.ACTIVE

    def is_expired(self, now: float) -> bool:
        return now >= self.expire

    def slot_of(self, token: Optional[str]) -> Slot:
        """Return the slot `token` occupies, or Slot.NONE."""
        if not token:
            return Slot.NONE
        if token == self.player1:
            return Slot.PLAYER1
        if self.player2 is not None and token == self.player2:
            return Slot.PLAYER2
        return Slot.NONE

    def snapshot(self) -> "Room":
        """Detached copy safe to hand out of the registry lock."""
        return replace(self)
