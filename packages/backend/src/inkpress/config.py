"""Application configuration via environment variables.

Uses pydantic-settings to load config from env vars with INKPRESS_ prefix.
No YAML files, no file-based config — just env vars (12-factor app style).

Learn: Settings is frozen. It is built once at startup by get_settings()
and handed to create_app(), which passes it on to the token codec and the
database. Request handlers never read env vars themselves.

The signing secret has no default. If INKPRESS_JWT_SECRET is missing or
blank, Settings() raises and the process refuses to start.
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """All app configuration. Set via INKPRESS_* env vars."""

    # Auth
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    token_leeway_seconds: int = 0
    bcrypt_rounds: int = 12

    # Database
    database_url: str = "sqlite+aiosqlite:///./inkpress.db"
    create_schema: bool = True

    # Server
    environment: str = "development"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 5000

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
    ]

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    model_config = SettingsConfigDict(env_prefix="INKPRESS_", frozen=True)

    @field_validator("jwt_secret")
    @classmethod
    def secret_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError(
                "INKPRESS_JWT_SECRET must be set. Generate one with: "
                'python -c "import secrets; print(secrets.token_urlsafe(32))"'
            )
        return value

    @field_validator("access_token_expire_minutes")
    @classmethod
    def lifetime_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("access_token_expire_minutes must be positive")
        return value


@lru_cache
def get_settings() -> Settings:
    """Load settings from the environment once per process."""
    return Settings()
