"""Lobby context - create/join/poll/move flows across all game types.

A LobbyContext owns one RoomRegistry and one GameEngine per game type.
It is built explicitly and handed to the HTTP layer through app.state, so
tests can run against isolated instances.

Usage:
    context = LobbyContext(settings)
    room, slot, created = context.start(GameType.TICTACTOE, token)
    view = context.submit_move(GameType.TICTACTOE, room.room_id, token, {"cell": 4})
"""
import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from lobby.core.config import Settings
from lobby.core.exceptions import (
    MoveRejectedError,
    NotInRoomError,
    UnsupportedOperationError,
)
from lobby.core.identity import mask_token
from lobby.models.room import Room
from lobby.schemas.enums import GameType, Slot
from lobby.services.games import GameEngine, build_engines
from lobby.services.room_registry import RoomRegistry

logger = logging.getLogger(__name__)


@dataclass
class RoomView:
    """A room together with its state as seen by one caller."""
    room: Room
    slot: Slot
    state: dict


class LobbyContext:
    """Registry and engine for every game type, plus the flows that use them."""

    def __init__(
        self,
        settings: Settings,
        *,
        engines: Optional[dict[GameType, GameEngine]] = None,
        clock: Callable[[], float] = time.time,
        rng: Optional[random.Random] = None,
    ):
        self.settings = settings
        self.engines = engines if engines is not None else build_engines(settings)
        self.registries: dict[GameType, RoomRegistry[Any]] = {
            game_type: RoomRegistry(
                game_type,
                room_ttl_seconds=settings.ROOM_TTL_SECONDS,
                finished_ttl_seconds=settings.FINISHED_ROOM_TTL_SECONDS,
                id_space=settings.ROOM_ID_SPACE,
                max_id_attempts=settings.ROOM_ID_MAX_ATTEMPTS,
                max_rooms=settings.MAX_ROOMS_PER_GAME,
                sweep_min_interval=settings.SWEEP_MIN_INTERVAL_SECONDS,
                clock=clock,
                rng=rng,
            )
            for game_type in self.engines
        }

    def registry(self, game_type: GameType) -> RoomRegistry[Any]:
        return self.registries[game_type]

    def engine(self, game_type: GameType) -> GameEngine:
        return self.engines[game_type]

    # ------------------------------------------------------------------
    # Flows
    # ------------------------------------------------------------------

    def start(
        self,
        game_type: GameType,
        token: str,
        room_id: Optional[str] = None,
    ) -> tuple[Room, Slot, bool]:
        """
        Create a room, or join the one named by `room_id`.

        Returns:
            Tuple of (room, caller's slot, whether a new room was created)

        Raises:
            RoomNotFoundError: `room_id` is unknown or expired
            RoomFullError: both slots of `room_id` are taken
        """
        registry = self.registry(game_type)
        if room_id is None:
            room = registry.create_room(token, self.engine(game_type).initial_state())
            return room, Slot.PLAYER1, True

        slot = registry.join_room(room_id, token)
        return registry.get_room(room_id), slot, False

    def wait(self, game_type: GameType, room_id: str, token: Optional[str]) -> tuple[Room, Slot]:
        """Poll a room for its second player."""
        room = self.registry(game_type).get_room(room_id)
        return room, room.slot_of(token)

    def poll(self, game_type: GameType, room_id: str, token: Optional[str]) -> RoomView:
        """Read a room's state filtered for the caller's slot."""
        room, state = self.registry(game_type).read(room_id)
        slot = room.slot_of(token)
        return RoomView(room=room, slot=slot, state=self.engine(game_type).view(state, slot))

    def submit_move(
        self,
        game_type: GameType,
        room_id: str,
        token: Optional[str],
        move: dict,
    ) -> RoomView:
        """
        Apply a move for the caller.

        Raises:
            RoomNotFoundError: unknown or expired room
            NotInRoomError: the caller holds no slot
            MoveRejectedError: the room is still waiting, or the engine refused the move
        """
        engine = self.engine(game_type)

        def mutate(room: Room, state: Any) -> Any:
            slot = room.slot_of(token)
            if slot == Slot.NONE:
                raise NotInRoomError(room.room_id)
            if room.player2 is None:
                raise MoveRejectedError("Waiting for the second player", move)
            return engine.apply_move(state, slot, move)

        try:
            room, state = self.registry(game_type).update_state(
                room_id, mutate, is_terminal=engine.is_terminal
            )
        except MoveRejectedError as e:
            logger.info(
                f"[{game_type.value}] Move rejected in room {room_id} "
                f"for {mask_token(token)}: {e.reason}"
            )
            raise

        slot = room.slot_of(token)
        logger.debug(f"[{game_type.value}] Move applied in room {room_id} by {slot.value}")
        return RoomView(room=room, slot=slot, state=engine.view(state, slot))

    def round_end(self, game_type: GameType, room_id: str, token: Optional[str]) -> tuple[Room, Slot, Optional[dict]]:
        """
        Read the last completed round of a room.

        Raises:
            UnsupportedOperationError: the game has no rounds
        """
        if game_type != GameType.RPS:
            raise UnsupportedOperationError(game_type.value, "roundend")
        room, state = self.registry(game_type).read(room_id)
        return room, room.slot_of(token), self.engine(game_type).round_result(state)

    def sweep_all(self) -> int:
        """Sweep every registry. Returns the total number of rooms removed."""
        return sum(registry.sweep() for registry in self.registries.values())

    def room_counts(self) -> dict[str, int]:
        return {game_type.value: registry.count() for game_type, registry in self.registries.items()}
