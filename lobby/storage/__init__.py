"""Game state storage layer.

Each room registry owns one store holding the opaque game state of its
rooms. Only the in-memory backend exists; state does not survive a
process restart.
"""

from lobby.storage.backend import GameStateStore
from lobby.storage.memory import InMemoryStateStore

__all__ = ["GameStateStore", "InMemoryStateStore", "create_state_store"]


def create_state_store() -> GameStateStore:
    """Create the state store paired with a new room registry."""
    return InMemoryStateStore()
