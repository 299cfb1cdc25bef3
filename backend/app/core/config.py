"""
Application configuration and environment settings.
"""
from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import List, Union


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Fleet Ledger"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    COMPANY_NAME: str = "Bombay Uttranchal Tempo Service"

    # Database
    DATABASE_URL: str = "sqlite:///./fleet_ledger.db"
    DB_ECHO: bool = False

    # CORS
    CORS_ORIGINS: Union[List[str], str] = ["http://localhost:3000", "http://localhost:8080"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS_ORIGINS from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # Settlement
    DEFAULT_PER_KM_RATE: float = 19.5  # Pre-filled rate for new driver calculations

    # Outbound API client
    API_BASE_URL: str = "http://localhost:8000/api"
    API_TIMEOUT: float = 10.0

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
