"""Find-the-airplane rules.

Each player hides airplanes on a 10x10 grid, then players take turns
guessing cells on the opponent's grid. A guess answers "head", "body" or
"miss"; the first player to hit every enemy head wins.

An airplane pointing up with its head at (x, y) covers:

    . . H . .      row y      head
    W W W W W      row y+1    wings
    . . B . .      row y+2    body
    . T T T .      row y+3    tail

The other directions are rotations of this shape around the head.

Moves:
    placing:  {"planes": [{"x": 4, "y": 0, "direction": "up"}, ...]}
    guessing: {"x": 3, "y": 7}
"""
from dataclasses import dataclass, field, replace
from typing import Optional

from lobby.core.exceptions import MoveRejectedError
from lobby.schemas.enums import GameType, Slot
from lobby.services.games.base import opponent, require_int, slot_name

BOARD_SIZE = 10

PHASE_PLACING = "placing"
PHASE_GUESSING = "guessing"
PHASE_FINISHED = "finished"

HEAD = "head"
BODY = "body"
MISS = "miss"

# Offsets (dx, dy) from the head for an airplane pointing up
_UP_SHAPE = (
    (0, 0),
    (-2, 1), (-1, 1), (0, 1), (1, 1), (2, 1),
    (0, 2),
    (-1, 3), (0, 3), (1, 3),
)

SHAPES = {
    "up": _UP_SHAPE,
    "down": tuple((dx, -dy) for dx, dy in _UP_SHAPE),
    "left": tuple((dy, dx) for dx, dy in _UP_SHAPE),
    "right": tuple((-dy, dx) for dx, dy in _UP_SHAPE),
}


@dataclass(frozen=True)
class Plane:
    x: int
    y: int
    direction: str

    @property
    def head(self) -> tuple[int, int]:
        return (self.x, self.y)

    @property
    def cells(self) -> tuple[tuple[int, int], ...]:
        return tuple((self.x + dx, self.y + dy) for dx, dy in SHAPES[self.direction])

    def to_dict(self) -> dict:
        return {
            "x": self.x,
            "y": self.y,
            "direction": self.direction,
            "cells": [list(cell) for cell in self.cells],
        }


@dataclass
class AirplaneState:
    plane_count: int
    phase: str = PHASE_PLACING
    planes: dict[Slot, tuple[Plane, ...]] = field(default_factory=dict)
    # Guesses fired BY each slot at the opponent's grid: cell -> result
    shots: dict[Slot, dict[tuple[int, int], str]] = field(
        default_factory=lambda: {Slot.PLAYER1: {}, Slot.PLAYER2: {}}
    )
    turn: Slot = Slot.PLAYER1
    winner: Optional[Slot] = None


def _in_bounds(cell: tuple[int, int]) -> bool:
    return 0 <= cell[0] < BOARD_SIZE and 0 <= cell[1] < BOARD_SIZE


def heads_found(state: AirplaneState, slot: Slot) -> int:
    return sum(1 for result in state.shots[slot].values() if result == HEAD)


def _shot_list(shots: dict[tuple[int, int], str]) -> list[dict]:
    return [{"x": x, "y": y, "result": result} for (x, y), result in shots.items()]


class FindAirplaneEngine:
    game_type = GameType.AIRPLANE

    def __init__(self, plane_count: int = 3):
        self.plane_count = max(1, plane_count)

    def initial_state(self) -> AirplaneState:
        return AirplaneState(plane_count=self.plane_count)

    def is_terminal(self, state: AirplaneState) -> bool:
        return state.phase == PHASE_FINISHED

    def apply_move(self, state: AirplaneState, slot: Slot, move: dict) -> AirplaneState:
        if state.phase == PHASE_PLACING:
            return self._place(state, slot, move)
        if state.phase == PHASE_GUESSING:
            return self._guess(state, slot, move)
        raise MoveRejectedError("Game is over", move)

    # ------------------------------------------------------------------

    def parse_planes(self, raw, plane_count: int) -> tuple[Plane, ...]:
        """Validate a placement payload and return the planes it describes."""
        if not isinstance(raw, list):
            raise MoveRejectedError("'planes' must be a list")
        if len(raw) != plane_count:
            raise MoveRejectedError(f"Exactly {plane_count} planes must be placed")

        planes = []
        occupied: set[tuple[int, int]] = set()
        for index, item in enumerate(raw):
            if not isinstance(item, dict):
                raise MoveRejectedError(f"Plane {index} must be an object")
            direction = item.get("direction")
            if direction not in SHAPES:
                raise MoveRejectedError(
                    f"Plane {index}: 'direction' must be one of {', '.join(SHAPES)}"
                )
            plane = Plane(
                x=require_int(item, "x", 0, BOARD_SIZE - 1),
                y=require_int(item, "y", 0, BOARD_SIZE - 1),
                direction=direction,
            )
            cells = plane.cells
            if not all(_in_bounds(cell) for cell in cells):
                raise MoveRejectedError(f"Plane {index} does not fit on the board")
            if occupied.intersection(cells):
                raise MoveRejectedError(f"Plane {index} overlaps another plane")
            occupied.update(cells)
            planes.append(plane)
        return tuple(planes)

    def _place(self, state: AirplaneState, slot: Slot, move: dict) -> AirplaneState:
        if slot in state.planes:
            raise MoveRejectedError("Planes already placed, waiting for opponent", move)

        planes = dict(state.planes)
        planes[slot] = self.parse_planes(move.get("planes"), state.plane_count)
        phase = PHASE_GUESSING if len(planes) == 2 else PHASE_PLACING
        return replace(state, planes=planes, phase=phase)

    def _guess(self, state: AirplaneState, slot: Slot, move: dict) -> AirplaneState:
        if slot != state.turn:
            raise MoveRejectedError("Not your turn", move)

        cell = (
            require_int(move, "x", 0, BOARD_SIZE - 1),
            require_int(move, "y", 0, BOARD_SIZE - 1),
        )
        if cell in state.shots[slot]:
            raise MoveRejectedError(f"Cell {cell[0]},{cell[1]} was already guessed", move)

        target = state.planes[opponent(slot)]
        if any(plane.head == cell for plane in target):
            result = HEAD
        elif any(cell in plane.cells for plane in target):
            result = BODY
        else:
            result = MISS

        shots = {s: dict(fired) for s, fired in state.shots.items()}
        shots[slot][cell] = result
        new_state = replace(state, shots=shots, turn=opponent(slot))

        if heads_found(new_state, slot) >= len(target):
            return replace(new_state, phase=PHASE_FINISHED, winner=slot, turn=slot)
        return new_state

    # ------------------------------------------------------------------

    def view(self, state: AirplaneState, slot: Slot) -> dict:
        finished = self.is_terminal(state)
        data = {
            "phase": state.phase,
            "boardSize": BOARD_SIZE,
            "planeCount": state.plane_count,
            "turn": state.turn.value,
            "placed": {s.value: s in state.planes for s in (Slot.PLAYER1, Slot.PLAYER2)},
            "headsFound": {
                s.value: heads_found(state, s) for s in (Slot.PLAYER1, Slot.PLAYER2)
            },
            "winner": slot_name(state.winner),
            "gameOver": finished,
        }

        if slot == Slot.NONE:
            data["shots"] = {s.value: _shot_list(fired) for s, fired in state.shots.items()}
            return data

        other = opponent(slot)
        data["yourTurn"] = state.phase == PHASE_GUESSING and state.turn == slot
        data["myPlanes"] = [plane.to_dict() for plane in state.planes.get(slot, ())]
        data["myShots"] = _shot_list(state.shots[slot])
        data["opponentShots"] = _shot_list(state.shots[other])
        if finished:
            data["opponentPlanes"] = [plane.to_dict() for plane in state.planes.get(other, ())]
        return data

    def round_result(self, state: AirplaneState) -> None:
        return None
