"""Application configuration.

Uses Pydantic BaseSettings for declarative environment variable binding.
Values may come from the process environment or a `.env` file.
"""
import logging
from typing import Any, Optional
from pathlib import Path
from dotenv import load_dotenv

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

__all__ = ["settings", "Settings", "ENV_FILE_PATH", "ENV_FILE_LOADED"]

# Resolved .env path used at startup
ENV_FILE_PATH: Optional[Path] = None
ENV_FILE_LOADED: bool = False


def _find_env_file() -> Optional[Path]:
    """Find .env file from multiple possible locations."""
    global ENV_FILE_PATH, ENV_FILE_LOADED
    current_file = Path(__file__).resolve()
    possible_paths = [
        current_file.parent.parent.parent / '.env',
        Path.cwd() / '.env',
    ]

    for env_path in possible_paths:
        if env_path.exists():
            ENV_FILE_PATH = env_path
            ENV_FILE_LOADED = True
            logger.info(f"Found .env at: {env_path}")
            return env_path

    logger.debug("No .env file found - using environment variables and defaults")
    return None


_env_path = _find_env_file()
if _env_path:
    load_dotenv(dotenv_path=_env_path, override=False)


def _parse_comma_list(value: str) -> list[str]:
    """Parse a comma-separated string into a list of stripped, non-empty strings."""
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Application settings ---
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    FRONTEND_DIST_DIR: str = "frontend/dist"

    # --- CORS ---
    CORS_ORIGINS: Any = "http://localhost:8080"  # str from env, overwritten to list[str] by validator
    CORS_ALLOW_CREDENTIALS: bool = True

    # --- Session cookie ---
    SESSION_COOKIE_NAME: str = "gameUser"
    SESSION_TTL_SECONDS: int = 60 * 60 * 24
    SESSION_TOKEN_BITS: int = 128
    COOKIE_SECURE: bool = False

    # --- Room registry ---
    ROOM_TTL_SECONDS: int = 60 * 60 * 24
    FINISHED_ROOM_TTL_SECONDS: int = 300
    ROOM_ID_SPACE: int = 1_000_000
    ROOM_ID_MAX_ATTEMPTS: int = 64
    MAX_ROOMS_PER_GAME: int = 10000
    SWEEP_INTERVAL_SECONDS: int = 60
    SWEEP_MIN_INTERVAL_SECONDS: float = 0.0

    # --- Game rules ---
    RPS_WINNING_SCORE: int = 3
    AIRPLANE_COUNT: int = 3

    @model_validator(mode="after")
    def _resolve_computed_fields(self) -> "Settings":
        """Resolve comma-separated strings and sanity-check numeric limits."""
        if isinstance(self.CORS_ORIGINS, str):
            if self.CORS_ORIGINS.strip() == "*":
                self.CORS_ORIGINS = ["*"]
                # Browsers refuse credentialed requests against a wildcard origin
                self.CORS_ALLOW_CREDENTIALS = False
                logger.warning(
                    "CORS_ORIGINS='*' disables credentials; the session cookie "
                    "will not be sent by cross-origin clients."
                )
            else:
                self.CORS_ORIGINS = _parse_comma_list(self.CORS_ORIGINS)

        if self.ROOM_ID_SPACE < 1:
            raise ValueError("ROOM_ID_SPACE must be at least 1")
        if self.ROOM_ID_MAX_ATTEMPTS < 1:
            raise ValueError("ROOM_ID_MAX_ATTEMPTS must be at least 1")
        if self.SESSION_TOKEN_BITS < 32:
            raise ValueError("SESSION_TOKEN_BITS must be at least 32")

        return self


settings = Settings()
