"""
Application Configuration
Loads settings from environment variables
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from .env file"""

    # Application
    APP_ENV: str = "development"
    APP_NAME: str = "CampusHub"
    APP_URL: str = "http://localhost:8000"
    CLIENT_URL: str = "http://localhost:3000"
    DEBUG: bool = True
    CORS_ORIGINS: str = "*"

    # Database / document store
    DATABASE_URL: str = "sqlite:///./campushub.db"
    STORE_BACKEND: str = "sql"  # 'sql' or 'memory'
    STORE_TIMEOUT_SECONDS: float = 5.0

    # JWT
    JWT_SECRET_KEY: str = "temp-jwt-secret-change-later"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_HOURS: int = 24

    # Registration
    ALLOWED_EMAIL_DOMAIN: Optional[str] = None

    # Email
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    EMAIL_FROM: str = "noreply@campushub.edu"
    MAIL_TIMEOUT_SECONDS: float = 10.0
    EMAIL_NOTIFICATIONS_ENABLED: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "plain"  # 'plain' or 'json'

    # Listing
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # Lost & found
    LOST_FOUND_DEFAULT_RADIUS_KM: float = 5.0
    LOST_FOUND_EXPIRY_DAYS: int = 30

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


# Create global settings instance
settings = Settings()
