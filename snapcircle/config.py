"""Application configuration loaded from environment variables and .env file."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Values are loaded from environment variables first,
    then from a .env file in the project root as fallback.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    DATABASE_URL: str = "sqlite:///./snapcircle.db"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Blob storage settings
    STORAGE_PROVIDER: str = "memory"
    STORAGE_BASE_URL: str = "memory://snapcircle"

    # Social settings
    SEARCH_RESULT_LIMIT: int = 50
    DEFAULT_PHOTO_VISIBILITY: str = "ALL_FRIENDS"


settings = Settings()
