"""
Application Configuration
Loads settings from environment variables
"""

import logging

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from .env file"""

    # Application
    APP_NAME: str = "CertIssuer"
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./certissuer.db"

    # Artifacts
    UPLOADS_DIR: str = "./uploads"
    GENERATED_DIR: str = "./generated"
    GENERATED_URL_PREFIX: str = "/generated"

    # Rendering
    VERIFY_URL_PREFIX: str = "sarvarth.com/verify"
    DEFAULT_FONT_FAMILY: str = "Helvetica"
    DEFAULT_FONT_SIZE: int = 16
    OFF_PAGE_TOLERANCE: float = 50.0

    class Config:
        env_file = ".env"
        case_sensitive = True


# Create global settings instance
settings = Settings()


def configure_logging(level: str = None) -> None:
    """Apply LOG_LEVEL to the root logger"""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
