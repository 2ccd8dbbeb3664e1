"""Game API endpoints, shared by every game type.

All routes live under /Game/api/{game_type}/Game, where game_type is one of
FindAirplane, RockPaperScissor or TicTacToeBox. Clients poll; nothing is
pushed.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from lobby.api.dependencies import get_lobby, get_session_token
from lobby.schemas.enums import GameType
from lobby.schemas.room import (
    ErrorResponse,
    MoveRequest,
    RoomStateResponse,
    RoomTicketResponse,
    RoundEndResponse,
)
from lobby.services.lobby import LobbyContext

router = APIRouter(
    prefix="/{game_type}/Game",
    tags=["game"],
    responses={
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
logger = logging.getLogger(__name__)


@router.api_route("", methods=["GET", "POST"], response_model=RoomTicketResponse)
def start_game(
    game_type: GameType,
    room_id: Optional[str] = Query(None, alias="roomId"),
    token: str = Depends(get_session_token),
    lobby: LobbyContext = Depends(get_lobby),
):
    """
    Create a room, or join the room given by `roomId`.

    GET/POST /Game/api/{game_type}/Game[?roomId=...]

    Without `roomId` a new waiting room is created with the caller as
    player1. With `roomId` the caller takes player2, or gets back the slot
    they already hold.
    """
    room, slot, created = lobby.start(game_type, token, room_id)
    logger.debug(
        f"[{game_type.value}] {'Created' if created else 'Joined'} room {room.room_id} "
        f"as {slot.value}"
    )
    return RoomTicketResponse.from_room(room, slot, created=created)


@router.get("/wait", response_model=RoomTicketResponse)
def wait_for_player2(
    game_type: GameType,
    room_id: str = Query(..., alias="roomId"),
    token: str = Depends(get_session_token),
    lobby: LobbyContext = Depends(get_lobby),
):
    """
    Poll until the second player has joined.

    GET /Game/api/{game_type}/Game/wait?roomId=...
    """
    room, slot = lobby.wait(game_type, room_id, token)
    return RoomTicketResponse.from_room(room, slot)


@router.get("/room", response_model=RoomStateResponse)
def get_room_state(
    game_type: GameType,
    room_id: str = Query(..., alias="roomId"),
    token: str = Depends(get_session_token),
    lobby: LobbyContext = Depends(get_lobby),
):
    """
    Poll the game state, filtered for the caller's slot.

    GET /Game/api/{game_type}/Game/room?roomId=...

    Callers holding no slot get the public view.
    """
    view = lobby.poll(game_type, room_id, token)
    return RoomStateResponse.from_view(view.room, view.slot, view.state)


@router.post("/room", response_model=RoomStateResponse)
def submit_move(
    game_type: GameType,
    body: MoveRequest,
    room_id: str = Query(..., alias="roomId"),
    token: str = Depends(get_session_token),
    lobby: LobbyContext = Depends(get_lobby),
):
    """
    Submit a move and return the resulting state.

    POST /Game/api/{game_type}/Game/room?roomId=...
    Body: {"move": {...}}
    """
    view = lobby.submit_move(game_type, room_id, token, body.move)
    return RoomStateResponse.from_view(view.room, view.slot, view.state)


@router.get("/roundend", response_model=RoundEndResponse)
def get_round_end(
    game_type: GameType,
    room_id: str = Query(..., alias="roomId"),
    token: str = Depends(get_session_token),
    lobby: LobbyContext = Depends(get_lobby),
):
    """
    Read the result of the last completed round (RockPaperScissor only).

    GET /Game/api/{game_type}/Game/roundend?roomId=...
    """
    room, slot, result = lobby.round_end(game_type, room_id, token)
    return RoundEndResponse(room_id=room.room_id, slot=slot, result=result)
