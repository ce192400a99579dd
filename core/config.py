"""
core/config.py -- carshop settings, read once from the environment.

Every knob the server has lives on Settings. Values come from environment
variables or a .env file in the working directory; field names map to upper
case env names (secret_key -> SECRET_KEY, initial_score -> INITIAL_SCORE).
Nothing else in the tree reads os.environ.

get_settings() is cached, so the first call fixes the configuration for the
life of the process. Tests set env vars before importing the app.

SECRET_KEY signs login tokens. Without DEBUG=true a missing or short key is a
startup error; with DEBUG=true a throwaway key is generated, which logs
everyone out on restart.

Layer rule: core/ is the kernel. This module may not import from api/, web/,
auth/, or cars/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("carshop.config")

PROJECT_ROOT = Path(__file__).resolve().parent.parent

_DEFAULT_CORS_ORIGINS = [
    "http://127.0.0.1:8080",
    "http://localhost:8080",
    "http://127.0.0.1:3000",
    "http://localhost:3000",
    "http://localhost:5173",
    "http://localhost:5174",
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a dev key or raises, so callers never see "".
    secret_key: str = ""

    # ------------------------------------------------------------------
    # Server
    # ------------------------------------------------------------------

    host: str = "127.0.0.1"
    port: int = 3030
    cors_origins: list[str] = _DEFAULT_CORS_ORIGINS
    public_dir: Path = PROJECT_ROOT / "public"

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    database_url: str = f"sqlite:///{PROJECT_ROOT / 'carshop.db'}"

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    secure_cookies: bool = False
    token_expire_seconds: int = 24 * 3600
    login_rate_limit: str = "10/minute"

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    initial_score: int = 10000

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Enforce the SECRET_KEY policy.

        Dev mode (DEBUG=true): auto-generate a random key with a warning.
            Login tokens will not survive a restart.

        Production mode: refuse to start if SECRET_KEY is missing.

        Both modes: reject keys shorter than 32 characters.
        """
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning(
                    "WARNING: Using auto-generated SECRET_KEY. " "Login tokens will not persist across restarts."
                )
            else:
                raise ValueError(
                    "SECRET_KEY is required in production mode. "
                    "Set SECRET_KEY in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
