"""In-memory storage backend for game state.

States are stored in a Python dict with O(1) access.
"""

from typing import Any, Optional


class InMemoryStateStore:
    """Dict-based in-memory game state storage.

    This store keeps state objects by reference and does no locking of its
    own: the owning RoomRegistry serializes every call under its lock.
    """

    def __init__(self) -> None:
        self._states: dict[str, Any] = {}

    def get(self, room_id: str) -> Optional[Any]:
        return self._states.get(room_id)

    def put(self, room_id: str, state: Any) -> None:
        self._states[room_id] = state

    def delete(self, room_id: str) -> bool:
        return self._states.pop(room_id, None) is not None

    def exists(self, room_id: str) -> bool:
        return room_id in self._states

    def count(self) -> int:
        return len(self._states)

    def all_ids(self) -> list[str]:
        return list(self._states.keys())
