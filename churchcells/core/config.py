# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Core configuration — env-driven, one place for every tunable.
"""

import os


class Settings:
    """Application settings loaded from environment variables."""

    SERVICE_NAME: str = os.getenv("SERVICE_NAME", "homecell-service")
    SERVICE_VERSION: str = os.getenv("SERVICE_VERSION", "1.0.0")
    SERVICE_PORT: int = int(os.getenv("SERVICE_PORT", "8005"))

    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./homecells.db")
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "10"))
    DB_MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", "5"))
    DB_POOL_RECYCLE: int = int(os.getenv("DB_POOL_RECYCLE", "300"))

    # Used by the async client / console when talking to a running service.
    API_BASE_URL: str = os.getenv("API_BASE_URL", "http://localhost:8005")
    API_TIMEOUT: float = float(os.getenv("API_TIMEOUT", "10.0"))

    CORS_ORIGINS: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    SEED_DEFAULT_DISTRICTS: bool = (
        os.getenv("SEED_DEFAULT_DISTRICTS", "true").lower() == "true"
    )


settings = Settings()
