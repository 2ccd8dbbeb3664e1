"""API router aggregation."""
from fastapi import APIRouter

from lobby.api.endpoints import game

api_router = APIRouter(prefix="/Game/api")
api_router.include_router(game.router)
