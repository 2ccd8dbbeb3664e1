"""Base protocol and utilities for game engines."""
from typing import Any, Optional, Protocol

from lobby.core.exceptions import MoveRejectedError
from lobby.schemas.enums import GameType, Slot


class GameEngine(Protocol):
    """Contract between the lobby and one game's rules.

    The lobby never looks inside a game state. It stores whatever
    initial_state() returns and hands it back to apply_move() and view().
    apply_move() must not mutate its input: it returns a new state, or
    raises MoveRejectedError leaving the old one valid.
    """

    game_type: GameType

    def initial_state(self) -> Any:
        ...

    def apply_move(self, state: Any, slot: Slot, move: dict) -> Any:
        ...

    def is_terminal(self, state: Any) -> bool:
        ...

    def view(self, state: Any, slot: Slot) -> dict:
        """State as seen by `slot`; Slot.NONE gets the public view."""
        ...

    def round_result(self, state: Any) -> Optional[dict]:
        """Last completed round, or None for games without rounds."""
        ...


def opponent(slot: Slot) -> Slot:
    """Return the other player slot."""
    if slot == Slot.PLAYER1:
        return Slot.PLAYER2
    if slot == Slot.PLAYER2:
        return Slot.PLAYER1
    raise ValueError(f"Spectators have no opponent: {slot}")


def require_int(move: dict, key: str, low: int, high: int) -> int:
    """
    Read an integer field from a move and check it lies in [low, high].

    Raises:
        MoveRejectedError: If the field is missing, not an integer or out of range
    """
    value = move.get(key)
    # bool is an int subclass; true/false are not coordinates
    if not isinstance(value, int) or isinstance(value, bool):
        raise MoveRejectedError(f"'{key}' must be an integer", move)
    if value < low or value > high:
        raise MoveRejectedError(f"'{key}' must be between {low} and {high}", move)
    return value


def slot_name(slot: Optional[Slot]) -> Optional[str]:
    return slot.value if slot is not None else None
