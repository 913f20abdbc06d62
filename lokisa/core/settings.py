"""
Core settings and environment variables for Lokisa.
Uses pydantic-settings for type-safe environment variable loading.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """

    # Application
    APP_NAME: str = "Lokisa"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS - Frontend URLs allowed to access this API (comma separated)
    CORS_ORIGINS: str = "http://localhost:5000,http://localhost:5173"

    # Firebase/Firestore
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None  # Path to service account JSON

    # In-process repository for local development and tests
    USE_MOCK_DB: bool = False

    # Email routing
    # - OVERSIGHT_EMAIL is added to every recipient list
    # - FALLBACK_DEPARTMENT_EMAIL is used when no municipality matches
    OVERSIGHT_EMAIL: str = "waltstrydom@gmail.com"
    FALLBACK_DEPARTMENT_EMAIL: str = "customercare@tshwane.gov.za"

    # Email delivery
    # - EMAIL_PROVIDER: "resend" (needs RESEND_API_KEY) or "log"
    EMAIL_PROVIDER: str = "resend"
    RESEND_API_KEY: Optional[str] = None
    EMAIL_FROM: str = "Lokisa Infrastructure Reports <reports@resend.dev>"
    EMAIL_TIMEOUT_SECONDS: float = 5.0
    PUBLIC_BASE_URL: str = "https://lokisa.replit.app"

    # Nearby issues
    NEARBY_DEFAULT_RADIUS_KM: float = 5.0

    # Reminders for unresolved issues
    REMINDERS_ENABLED: bool = False
    REMINDER_AGE_DAYS: int = 45
    REMINDER_INTERVAL_DAYS: int = 7
    REMINDER_CHECK_INTERVAL_HOURS: float = 24.0

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"


# Global settings instance
settings = Settings()
