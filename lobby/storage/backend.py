"""Storage backend protocol for game state.

Defines the interface a game state store must implement. A store holds the
opaque per-room payload of one game type, keyed by room id. The room
registry is its only caller and drives its lifecycle.
"""

from typing import Any, Optional, Protocol


class GameStateStore(Protocol):
    """Protocol defining the storage interface for game state.

    Implementations:
    - InMemoryStateStore: Dict-based storage (default)
    """

    def get(self, room_id: str) -> Optional[Any]:
        """Retrieve the state of a room. Returns None if not found."""
        ...

    def put(self, room_id: str, state: Any) -> None:
        """Store or replace the state of a room."""
        ...

    def delete(self, room_id: str) -> bool:
        """Delete a room's state. Returns True if it existed."""
        ...

    def exists(self, room_id: str) -> bool:
        """Check if a room's state exists."""
        ...

    def count(self) -> int:
        """Return the number of stored states."""
        ...

    def all_ids(self) -> list[str]:
        """Return all stored room IDs."""
        ...
