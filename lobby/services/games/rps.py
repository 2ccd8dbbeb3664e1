"""Rock-paper-scissors rules.

Both players submit {"choice": "rock" | "paper" | "scissors"} each round.
A round resolves once both have chosen; the first player to reach the
winning score takes the match. A player's choice stays hidden from the
opponent until the round resolves.
"""
from dataclasses import dataclass, field, replace
from typing import Optional

from lobby.core.exceptions import MoveRejectedError
from lobby.schemas.enums import GameType, Slot
from lobby.services.games.base import opponent, slot_name

CHOICES = ("rock", "paper", "scissors")

# choice -> the choice it defeats
BEATS = {"rock": "scissors", "paper": "rock", "scissors": "paper"}


@dataclass(frozen=True)
class RoundRecord:
    """Outcome of one resolved round. winner is None on a tie."""
    number: int
    choices: dict[Slot, str]
    winner: Optional[Slot]

    def to_dict(self) -> dict:
        return {
            "round": self.number,
            "choices": {slot.value: choice for slot, choice in self.choices.items()},
            "winner": slot_name(self.winner),
            "tie": self.winner is None,
        }


@dataclass
class RPSState:
    winning_score: int
    round: int = 1
    scores: dict[Slot, int] = field(
        default_factory=lambda: {Slot.PLAYER1: 0, Slot.PLAYER2: 0}
    )
    pending: dict[Slot, str] = field(default_factory=dict)
    history: list[RoundRecord] = field(default_factory=list)
    winner: Optional[Slot] = None


def decide(first: str, second: str) -> int:
    """1 if `first` wins, -1 if `second` wins, 0 on a tie."""
    if first == second:
        return 0
    return 1 if BEATS[first] == second else -1


class RockPaperScissorEngine:
    game_type = GameType.RPS

    def __init__(self, winning_score: int = 3):
        self.winning_score = max(1, winning_score)

    def initial_state(self) -> RPSState:
        return RPSState(winning_score=self.winning_score)

    def is_terminal(self, state: RPSState) -> bool:
        return state.winner is not None

    def apply_move(self, state: RPSState, slot: Slot, move: dict) -> RPSState:
        if self.is_terminal(state):
            raise MoveRejectedError("Game is over", move)

        choice = move.get("choice")
        if not isinstance(choice, str) or choice.lower() not in CHOICES:
            raise MoveRejectedError(
                f"'choice' must be one of {', '.join(CHOICES)}", move
            )
        if slot in state.pending:
            raise MoveRejectedError(
                f"You already chose for round {state.round}", move
            )

        pending = dict(state.pending)
        pending[slot] = choice.lower()
        if len(pending) < 2:
            return replace(state, pending=pending)

        outcome = decide(pending[Slot.PLAYER1], pending[Slot.PLAYER2])
        round_winner = {1: Slot.PLAYER1, -1: Slot.PLAYER2}.get(outcome)

        scores = dict(state.scores)
        if round_winner is not None:
            scores[round_winner] += 1

        record = RoundRecord(number=state.round, choices=pending, winner=round_winner)
        match_winner = None
        if round_winner is not None and scores[round_winner] >= state.winning_score:
            match_winner = round_winner

        return replace(
            state,
            round=state.round + 1,
            scores=scores,
            pending={},
            history=state.history + [record],
            winner=match_winner,
        )

    def view(self, state: RPSState, slot: Slot) -> dict:
        last = state.history[-1].to_dict() if state.history else None
        data = {
            "round": state.round,
            "scores": {s.value: score for s, score in state.scores.items()},
            "winningScore": state.winning_score,
            "chosen": {s.value: s in state.pending for s in (Slot.PLAYER1, Slot.PLAYER2)},
            "lastRound": last,
            "winner": slot_name(state.winner),
            "gameOver": self.is_terminal(state),
        }
        if slot != Slot.NONE:
            data["myChoice"] = state.pending.get(slot)
            data["opponentChosen"] = opponent(slot) in state.pending
        return data

    def round_result(self, state: RPSState) -> Optional[dict]:
        if not state.history:
            return None
        result = state.history[-1].to_dict()
        result["scores"] = {s.value: score for s, score in state.scores.items()}
        result["gameOver"] = self.is_terminal(state)
        result["winnerOfMatch"] = slot_name(state.winner)
        return result
