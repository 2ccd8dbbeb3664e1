"""Room registry - room table, slot assignment and expiry for one game type.

One RoomRegistry is instantiated per game type. It owns the mapping from
room id to Room and the paired game state store, and keeps the two in
lockstep: a room and its state are created together and removed together.

Concurrency:
    FastAPI runs the sync endpoints in a threadpool, so several requests can
    touch the same registry at once. Every composite operation (check then
    insert, resolve then fill, read then apply then store, sweep) runs under
    one re-entrant lock per registry. Registries never share a lock.

Expiry:
    Expired rooms are removed lazily. Any lookup that meets an expired room
    drops it on the spot, and access paths call maybe_sweep() which walks the
    whole table at most once per `sweep_min_interval` seconds. A periodic
    background sweep (see lobby.main) covers idle registries.
"""
import logging
import random
import threading
import time
from typing import Callable, Generic, Optional, TypeVar

from lobby.core.exceptions import (
    IdSpaceExhaustedError,
    RoomFullError,
    RoomNotFoundError,
    ServerCapacityError,
)
from lobby.core.identity import mask_token
from lobby.models.room import Room
from lobby.schemas.enums import GameType, Slot
from lobby.storage import GameStateStore, create_state_store

logger = logging.getLogger(__name__)

StateT = TypeVar("StateT")


class RoomRegistry(Generic[StateT]):
    """In-memory room table paired with a game state store."""

    def __init__(
        self,
        game_type: GameType,
        *,
        room_ttl_seconds: float,
        finished_ttl_seconds: float,
        id_space: int,
        max_id_attempts: int,
        max_rooms: int,
        sweep_min_interval: float = 0.0,
        store: Optional[GameStateStore] = None,
        clock: Callable[[], float] = time.time,
        rng: Optional[random.Random] = None,
    ):
        self.game_type = game_type
        self.room_ttl_seconds = room_ttl_seconds
        self.finished_ttl_seconds = finished_ttl_seconds
        self.id_space = id_space
        self.max_id_attempts = max_id_attempts
        self.max_rooms = max_rooms
        self.sweep_min_interval = sweep_min_interval

        self._rooms: dict[str, Room] = {}
        self._store: GameStateStore = store if store is not None else create_state_store()
        self._clock = clock
        self._rng = rng or random.Random()
        self._lock = threading.RLock()
        self._last_sweep: Optional[float] = None

    @property
    def store(self) -> GameStateStore:
        return self._store

    # ------------------------------------------------------------------
    # Internal helpers (caller holds the lock)
    # ------------------------------------------------------------------

    def _purge(self, room_id: str) -> None:
        self._rooms.pop(room_id, None)
        self._store.delete(room_id)

    def _live_room(self, room_id: str) -> Optional[Room]:
        room = self._rooms.get(room_id)
        if room is None:
            return None
        if room.is_expired(self._clock()):
            logger.info(f"[{self.game_type.value}] Room {room_id} expired on access, removing")
            self._purge(room_id)
            return None
        return room

    def _require_room(self, room_id: str) -> Room:
        room = self._live_room(room_id)
        if room is None:
            raise RoomNotFoundError(room_id)
        return room

    # ------------------------------------------------------------------
    # Capability set
    # ------------------------------------------------------------------

    def exists(self, room_id: str) -> bool:
        """True iff the table holds an unexpired room under `room_id`."""
        with self._lock:
            return self._live_room(room_id) is not None

    def generate_id(self) -> str:
        """Draw a room id not used by any live room.

        Raises:
            IdSpaceExhaustedError: if `max_id_attempts` draws all collided
        """
        with self._lock:
            for _ in range(self.max_id_attempts):
                candidate = str(self._rng.randrange(self.id_space))
                if self._live_room(candidate) is None:
                    return candidate
            room_count = len(self._rooms)

        logger.error(
            f"[{self.game_type.value}] No free room id after {self.max_id_attempts} attempts "
            f"({room_count} rooms in a space of {self.id_space})"
        )
        raise IdSpaceExhaustedError(self.max_id_attempts)

    def sweep(self) -> int:
        """Remove every expired room together with its game state.

        Returns:
            Number of rooms removed
        """
        with self._lock:
            now = self._clock()
            self._last_sweep = now
            expired = [room_id for room_id, room in self._rooms.items() if room.is_expired(now)]
            for room_id in expired:
                self._purge(room_id)
            remaining = len(self._rooms)

        if expired:
            logger.info(
                f"[{self.game_type.value}] Swept {len(expired)} expired room(s), "
                f"{remaining} remaining"
            )
        return len(expired)

    def maybe_sweep(self) -> int:
        """Sweep unless the previous sweep ran less than `sweep_min_interval` ago."""
        with self._lock:
            if (
                self._last_sweep is not None
                and self._clock() - self._last_sweep < self.sweep_min_interval
            ):
                return 0
            return self.sweep()

    def resolve_slot(self, room_id: str, token: Optional[str]) -> Slot:
        """Return the slot `token` holds in the room, or Slot.NONE.

        Never raises: an unknown room or token simply resolves to NONE.
        """
        with self._lock:
            room = self._live_room(room_id)
            if room is None:
                return Slot.NONE
            return room.slot_of(token)

    # ------------------------------------------------------------------
    # Room lifecycle
    # ------------------------------------------------------------------

    def create_room(self, token: str, initial_state: StateT) -> Room:
        """Create a waiting room with `token` in player1 and its paired state."""
        with self._lock:
            self.maybe_sweep()
            if len(self._rooms) >= self.max_rooms:
                cleaned = self.sweep()
                if len(self._rooms) >= self.max_rooms:
                    raise ServerCapacityError(
                        f"Server at capacity ({self.max_rooms} {self.game_type.value} rooms). "
                        f"Cleaned {cleaned} expired rooms but still full. Try again later."
                    )

            room_id = self.generate_id()
            now = self._clock()
            room = Room(
                room_id=room_id,
                game_type=self.game_type,
                player1=token,
                created_at=now,
                expire=now + self.room_ttl_seconds,
            )
            self._rooms[room_id] = room
            self._store.put(room_id, initial_state)
            snapshot = room.snapshot()

        logger.info(
            f"[{self.game_type.value}] Room {room_id} created by {mask_token(token)}"
        )
        return snapshot

    def join_room(self, room_id: str, token: str) -> Slot:
        """Seat `token` in the room.

        A session already seated gets its existing slot back. Otherwise the
        session fills player2.

        Raises:
            RoomNotFoundError: unknown or expired room
            RoomFullError: both slots are held by other sessions
        """
        with self._lock:
            self.maybe_sweep()
            room = self._require_room(room_id)
            slot = room.slot_of(token)
            if slot != Slot.NONE:
                return slot
            if room.player2 is not None:
                logger.warning(
                    f"[{self.game_type.value}] Join rejected: room {room_id} is full "
                    f"({mask_token(token)})"
                )
                raise RoomFullError(room_id)
            room.player2 = token

        logger.info(
            f"[{self.game_type.value}] {mask_token(token)} joined room {room_id} as player2"
        )
        return Slot.PLAYER2

    def get_room(self, room_id: str) -> Room:
        """Return a snapshot of a live room.

        Raises:
            RoomNotFoundError: unknown or expired room
        """
        with self._lock:
            self.maybe_sweep()
            return self._require_room(room_id).snapshot()

    def get_state(self, room_id: str) -> StateT:
        """Return the game state paired with a live room."""
        with self._lock:
            self._require_room(room_id)
            return self._store.get(room_id)

    def read(self, room_id: str) -> tuple[Room, StateT]:
        """Return a room snapshot and its state, taken in one critical section."""
        with self._lock:
            self.maybe_sweep()
            room = self._require_room(room_id)
            return room.snapshot(), self._store.get(room_id)

    def update_state(
        self,
        room_id: str,
        mutate: Callable[[Room, StateT], StateT],
        is_terminal: Optional[Callable[[StateT], bool]] = None,
    ) -> tuple[Room, StateT]:
        """Replace a room's state with `mutate(room, state)` atomically.

        `mutate` runs under the registry lock and receives a snapshot of the
        room. If it raises, the stored state is left untouched. When
        `is_terminal` reports the new state as final, the room is marked
        finished in the same critical section.
        """
        with self._lock:
            self.maybe_sweep()
            room = self._require_room(room_id)
            new_state = mutate(room.snapshot(), self._store.get(room_id))
            self._store.put(room_id, new_state)
            if is_terminal is not None and is_terminal(new_state):
                self._finish(room)
            return room.snapshot(), new_state

    def _finish(self, room: Room) -> None:
        if room.finished:
            return
        room.finished = True
        room.expire = min(room.expire, self._clock() + self.finished_ttl_seconds)
        logger.info(
            f"[{self.game_type.value}] Room {room.room_id} finished, "
            f"expires in {self.finished_ttl_seconds}s"
        )

    def mark_finished(self, room_id: str) -> Room:
        """Flag a room finished and shorten its expiry to the finished grace period."""
        with self._lock:
            room = self._require_room(room_id)
            self._finish(room)
            return room.snapshot()

    def delete_room(self, room_id: str) -> bool:
        """Remove a room and its state. Returns True if the room existed."""
        with self._lock:
            existed = room_id in self._rooms
            self._purge(room_id)
            return existed

    def count(self) -> int:
        with self._lock:
            return len(self._rooms)

    def room_ids(self) -> list[str]:
        """IDs of every room in the table, including expired ones not yet swept."""
        with self._lock:
            return list(self._rooms.keys())
