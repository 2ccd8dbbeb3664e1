"""Game engines served by the lobby.

Each engine implements the GameEngine protocol for one GameType.
"""
from lobby.core.config import Settings
from lobby.schemas.enums import GameType

from .base import GameEngine, opponent, require_int
from .airplane import FindAirplaneEngine
from .rps import RockPaperScissorEngine
from .tictactoe import TicTacToeEngine

__all__ = [
    "GameEngine",
    "FindAirplaneEngine",
    "RockPaperScissorEngine",
    "TicTacToeEngine",
    "build_engines",
    "opponent",
    "require_int",
]


def build_engines(settings: Settings) -> dict[GameType, GameEngine]:
    """Create one engine per game type using the configured rules."""
    return {
        GameType.AIRPLANE: FindAirplaneEngine(plane_count=settings.AIRPLANE_COUNT),
        GameType.RPS: RockPaperScissorEngine(winning_score=settings.RPS_WINNING_SCORE),
        GameType.TICTACTOE: TicTacToeEngine(),
    }
