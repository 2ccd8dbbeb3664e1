"""Custom exceptions for the application.

Provides standardized error handling across the application. Every
exception carries the HTTP status the global handler in `lobby.main`
renders it with.
"""
from typing import Optional


class AppException(Exception):
    """Base exception for application errors."""

    http_status: int = 400

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[dict] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details
        }


class RoomException(AppException):
    """Room-related exceptions."""
    pass


class RoomNotFoundError(RoomException):
    """Raised when a room is unknown or has expired."""

    http_status = 404

    def __init__(self, room_id: str):
        super().__init__(
            message=f"Room not found: {room_id}",
            code="ROOM_NOT_FOUND",
            details={"room_id": room_id}
        )


class RoomFullError(RoomException):
    """Raised when both slots of a room are already taken."""

    http_status = 409

    def __init__(self, room_id: str):
        super().__init__(
            message="Room is full",
            code="ROOM_FULL",
            details={"room_id": room_id}
        )


class NotInRoomError(RoomException):
    """Raised when a session that holds no slot tries to act in a room."""

    http_status = 403

    def __init__(self, room_id: str):
        super().__init__(
            message="You are not a player in this room",
            code="NOT_IN_ROOM",
            details={"room_id": room_id}
        )


class IdSpaceExhaustedError(RoomException):
    """Raised when no free room id was found within the retry budget."""

    http_status = 503

    def __init__(self, attempts: int):
        super().__init__(
            message="Could not allocate a room id, try again later",
            code="ID_SPACE_EXHAUSTED",
            details={"attempts": attempts}
        )


class ServerCapacityError(AppException):
    """Raised when a registry holds its maximum number of rooms."""

    http_status = 503

    def __init__(self, message: str = "Server at capacity"):
        super().__init__(
            message=message,
            code="SERVER_CAPACITY"
        )


class GameException(AppException):
    """Game-related exceptions."""
    pass


class MoveRejectedError(GameException):
    """Raised by a game engine when a move is not legal in the current state."""

    def __init__(self, reason: str, move: Optional[dict] = None):
        super().__init__(
            message=reason,
            code="MOVE_REJECTED",
            details={"move": move} if move else {}
        )
        self.reason = reason


class UnsupportedOperationError(GameException):
    """Raised when a game type does not offer the requested operation."""

    http_status = 404

    def __init__(self, game_type: str, operation: str):
        super().__init__(
            message=f"{game_type} does not support {operation}",
            code="UNSUPPORTED_OPERATION",
            details={"game_type": game_type, "operation": operation}
        )
