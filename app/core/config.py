# app/core/config.py

from typing import Any, List, Literal
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict
import os

# project root directory
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


class Settings(BaseSettings):
    """
    Pydantic BaseSettings model holding every application setting.
    Values are loaded from environment variables and the project-root .env file.
    """

    # --- Pydantic Settings ---
    model_config = SettingsConfigDict(
        env_file=os.path.join(BASE_DIR, '.env'),
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=True
    )

    # --- application ---
    APP_NAME: str = "Hospital Equipment Tracker API"
    APP_VERSION: str = "0.1.0"
    APP_DESCRIPTION: str = "Hospital medical-equipment inventory and maintenance tracker API"
    APP_ENV: str = Field("development", description="Application environment (e.g., development, production, testing)")
    DEBUG_MODE: bool = Field(False, description="Enable debug mode for detailed logging and SQL echo")
    LOG_LEVEL: str = Field("INFO", description="Root log level")

    # --- storage ---
    STORAGE_BACKEND: Literal["memory", "database"] = Field(
        "memory", description="Persistence implementation selected at startup"
    )
    DATABASE_URL: SecretStr = Field(
        SecretStr("sqlite+aiosqlite:///./equipment.db"),
        description="Async SQLAlchemy database URL (used when STORAGE_BACKEND=database)",
    )

    # --- sessions ---
    SESSION_COOKIE_NAME: str = Field("hemt_session", description="Name of the session cookie")
    SESSION_MAX_AGE_SECONDS: int = Field(86400, description="Sliding session lifetime in seconds")
    SESSION_COOKIE_SECURE: bool = Field(False, description="Send the session cookie over HTTPS only")

    # --- seed data ---
    SEED_DEFAULT_DATA: bool = Field(True, description="Seed default departments and admin account when empty")
    DEFAULT_ADMIN_USERNAME: str = Field("admin", description="Username of the seeded admin account")
    DEFAULT_ADMIN_PASSWORD: SecretStr = Field(SecretStr("admin123"), description="Password of the seeded admin account")

    # --- http ---
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["*"], description="CORS allow list")

    # --- import ---
    MAX_IMPORT_FILE_SIZE_MB: int = Field(10, description="Maximum accepted import file size")

    def model_post_init(self, __context: Any) -> None:  # noqa: ANN001
        if self.DEBUG_MODE and self.LOG_LEVEL == "INFO":
            self.LOG_LEVEL = "DEBUG"


settings = Settings()
