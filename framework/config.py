from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # --- Basic configuration ---
    APP_NAME: str = "PocketBook"
    APP_DESCRIPTION: str = "User records CRUD service with an external API passthrough"
    APP_VERSION: str = "1.0.0"
    APP_ENV: str = "development"  # development, production, testing
    DEBUG: bool = True

    # --- Database (SQLite via aiosqlite) ---
    DB_PATH: str = "pocketbook.db"
    DB_ECHO: bool = False
    # Full SQLAlchemy URL; takes precedence over DB_PATH when set
    DATABASE_URL_OVERRIDE: Optional[str] = None

    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"sqlite+aiosqlite:///{self.DB_PATH}"

    # --- External API passthrough ---
    EXTERNAL_API_BASE_URL: str = "https://jsonplaceholder.org"
    EXTERNAL_API_TIMEOUT: float = 10.0

    # --- Logging ---
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    # --- API route prefixes ---
    API_V1_USERS_PREFIX: str = "/api/v1/users"
    API_V1_EXTERNAL_PREFIX: str = "/api/v1/external"

    # --- Gunicorn process name (optional) ---
    GUNICORN_PROC_NAME: Optional[str] = None  # Fallback to APP_NAME when empty

    # --- Pydantic ---
    # Load env from project root .env; priority: env vars > .env > defaults
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
    )


# Singleton settings instance
settings = Settings()
