"""FastAPI application entry point."""
import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from lobby.api.api import api_router
from lobby.core.config import Settings, settings
from lobby.core.exceptions import AppException
from lobby.services.lobby import LobbyContext

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def periodic_sweep(lobby: LobbyContext, interval_seconds: float) -> None:
    """Background task removing expired rooms from idle registries.

    On-access sweeping only runs when a registry is consulted; this loop
    reclaims rooms of game types nobody is currently playing.
    """
    while True:
        try:
            await asyncio.sleep(interval_seconds)
            removed = lobby.sweep_all()
            if removed > 0:
                logger.info(
                    f"Room sweep: {removed} expired room(s) removed. "
                    f"Active rooms: {lobby.room_counts()}"
                )
            else:
                logger.debug(f"Room sweep: no expired rooms. Active: {lobby.room_counts()}")
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Error in room sweep task: {e}", exc_info=True)


def create_app(lobby: Optional[LobbyContext] = None, config: Optional[Settings] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        lobby: LobbyContext to serve (a new one is built if not provided)
        config: Settings to use (defaults to the module-level settings)

    Returns:
        FastAPI application instance
    """
    config = config or (lobby.settings if lobby is not None else settings)
    lobby = lobby or LobbyContext(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan: start and stop the periodic sweeper."""
        logger.info("Game lobby starting up...")
        logger.info(f"Serving game types: {', '.join(gt.value for gt in lobby.engines)}")
        sweeper: Optional[asyncio.Task] = None
        if config.SWEEP_INTERVAL_SECONDS > 0:
            sweeper = asyncio.create_task(periodic_sweep(lobby, config.SWEEP_INTERVAL_SECONDS))
            logger.info(f"Room sweep task started (every {config.SWEEP_INTERVAL_SECONDS}s)")
        yield
        logger.info("Game lobby shutting down...")
        if sweeper is not None:
            sweeper.cancel()
            await asyncio.gather(sweeper, return_exceptions=True)
            logger.info("Room sweep task cancelled")

    app = FastAPI(
        title="Game Lobby API",
        description="Rooms and sessions for two-player browser games",
        version="1.0.0",
        debug=config.DEBUG,
        lifespan=lifespan,
    )
    app.state.lobby = lobby

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=config.CORS_ALLOW_CREDENTIALS,
        allow_methods=["POST", "GET", "OPTIONS", "PUT", "DELETE"],
        allow_headers=[
            "Accept", "Content-Type", "Content-Length", "Accept-Encoding",
            "X-CSRF-Token", "Authorization",
        ],
    )

    app.include_router(api_router)

    # ── Global Exception Handlers ──

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        """Convert AppException subclasses to structured JSON responses."""
        return JSONResponse(
            status_code=exc.http_status,
            content=exc.to_dict(),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        """Catch-all handler to prevent stack trace leaking in production.

        With DEBUG on, Starlette answers with its own traceback page and
        this handler is not reached.
        """
        logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "INTERNAL_ERROR",
                "message": "An unexpected error occurred.",
                "details": {},
            },
        )

    # ── Frontend ──

    dist_dir = Path(config.FRONTEND_DIST_DIR)
    for asset_dir in ("js", "css"):
        if (dist_dir / asset_dir).is_dir():
            app.mount(f"/{asset_dir}", StaticFiles(directory=dist_dir / asset_dir), name=asset_dir)

    @app.get("/", include_in_schema=False)
    @app.get("/Game", include_in_schema=False)
    def index():
        """Serve the single-page frontend."""
        index_file = dist_dir / "index.html"
        if not index_file.is_file():
            logger.warning(f"Frontend index not found at {index_file}")
            return JSONResponse(
                status_code=404,
                content={"error": "NOT_FOUND", "message": "Frontend not built", "details": {}},
            )
        return FileResponse(index_file)

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "rooms": lobby.room_counts()}

    return app


app = create_app()


def run() -> None:
    """Serve the lobby with uvicorn on the configured host and port."""
    import uvicorn
    uvicorn.run("lobby.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
