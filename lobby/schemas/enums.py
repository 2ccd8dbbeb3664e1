"""Lobby enums definition."""
from enum import Enum


class GameType(str, Enum):
    """Game types served by the lobby. Values match the URL segment."""
    AIRPLANE = "FindAirplane"
    RPS = "RockPaperScissor"
    TICTACTOE = "TicTacToeBox"


class Slot(str, Enum):
    """Player slot a session occupies in a room."""
    PLAYER1 = "player1"
    PLAYER2 = "player2"
    NONE = "none"  # spectator or unrecognized session


class RoomStatus(str, Enum):
    """Room status enum."""
    WAITING = "waiting"
    ACTIVE = "active"
    FINISHED = "finished"
