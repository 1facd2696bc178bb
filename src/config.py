"""
CaseDesk Legal - Configuration Settings
"""

from pydantic_settings import BaseSettings
from pydantic import model_validator
from typing import Optional


DEFAULT_SECRET_KEY = "dev-secret-key-change-in-production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "CaseDesk Legal"
    APP_DESCRIPTION: str = "Practice management API for cases, clients, documents and tasks"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = True

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 3001
    CORS_ORIGINS: list[str] = ["*"]

    # Security
    SECRET_KEY: str = DEFAULT_SECRET_KEY
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 3  # 3 days
    PASSWORD_RESET_EXPIRE_MINUTES: int = 60

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/casedesk.db"
    DB_POOL_SIZE: int = 10
    DB_SERVER_SELECTION_TIMEOUT: float = 5.0  # seconds
    DB_SOCKET_TIMEOUT: float = 45.0  # seconds
    DB_MAX_CONNECT_ATTEMPTS: int = 3
    DB_RETRY_DELAY_SECONDS: float = 0.5
    DB_ECHO: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_REQUESTS: bool = True

    # Backend picked by get_auth_backend() for out-of-process callers:
    # "direct" talks to the database, "remote" to API_URL. The routes are always direct.
    AUTH_BACKEND: str = "direct"
    API_URL: Optional[str] = None

    @model_validator(mode="after")
    def validate_secret_key(self):
        """Refuse to start with the default secret key in production."""
        if not self.DEBUG and self.SECRET_KEY == DEFAULT_SECRET_KEY:
            raise ValueError(
                "SECRET_KEY must be changed from the default value in production. "
                "Set a strong, unique SECRET_KEY in your .env file."
            )
        return self

    @model_validator(mode="after")
    def validate_auth_backend(self):
        """The remote account backend needs an API base URL."""
        if self.AUTH_BACKEND not in ("direct", "remote"):
            raise ValueError(f"AUTH_BACKEND must be 'direct' or 'remote', got {self.AUTH_BACKEND!r}")
        if self.AUTH_BACKEND == "remote" and not self.API_URL:
            raise ValueError("API_URL is required when AUTH_BACKEND is 'remote'")
        return self

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Create settings instance
settings = Settings()
