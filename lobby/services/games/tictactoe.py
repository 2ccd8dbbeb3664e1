"""Tic-tac-toe rules.

player1 plays X and moves first. A move is {"cell": 0..8} or
{"row": 0..2, "col": 0..2}.
"""
from dataclasses import dataclass, field, replace
from typing import Optional

from lobby.core.exceptions import MoveRejectedError
from lobby.schemas.enums import GameType, Slot
from lobby.services.games.base import opponent, require_int, slot_name

SYMBOLS = {Slot.PLAYER1: "X", Slot.PLAYER2: "O"}

WIN_LINES = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),
    (0, 3, 6), (1, 4, 7), (2, 5, 8),
    (0, 4, 8), (2, 4, 6),
)


@dataclass
class TicTacToeState:
    """Board cells hold the slot that marked them."""
    board: list[Optional[Slot]] = field(default_factory=lambda: [None] * 9)
    turn: Slot = Slot.PLAYER1
    winner: Optional[Slot] = None
    winning_line: Optional[tuple[int, int, int]] = None
    draw: bool = False


class TicTacToeEngine:
    game_type = GameType.TICTACTOE

    def initial_state(self) -> TicTacToeState:
        return TicTacToeState()

    def is_terminal(self, state: TicTacToeState) -> bool:
        return state.winner is not None or state.draw

    def _cell(self, move: dict) -> int:
        if "cell" in move:
            return require_int(move, "cell", 0, 8)
        row = require_int(move, "row", 0, 2)
        col = require_int(move, "col", 0, 2)
        return row * 3 + col

    def apply_move(self, state: TicTacToeState, slot: Slot, move: dict) -> TicTacToeState:
        if self.is_terminal(state):
            raise MoveRejectedError("Game is over", move)
        if slot != state.turn:
            raise MoveRejectedError("Not your turn", move)

        cell = self._cell(move)
        if state.board[cell] is not None:
            raise MoveRejectedError(f"Cell {cell} is already taken", move)

        board = list(state.board)
        board[cell] = slot

        for line in WIN_LINES:
            if all(board[i] == slot for i in line):
                return replace(state, board=board, winner=slot, winning_line=line)

        if all(mark is not None for mark in board):
            return replace(state, board=board, draw=True)

        return replace(state, board=board, turn=opponent(slot))

    def view(self, state: TicTacToeState, slot: Slot) -> dict:
        return {
            "board": [SYMBOLS[mark] if mark else "" for mark in state.board],
            "turn": state.turn.value,
            "yourTurn": slot == state.turn and not self.is_terminal(state),
            "mySymbol": SYMBOLS.get(slot),
            "winner": slot_name(state.winner),
            "winningLine": list(state.winning_line) if state.winning_line else None,
            "draw": state.draw,
            "gameOver": self.is_terminal(state),
        }

    def round_result(self, state: TicTacToeState) -> None:
        return None
