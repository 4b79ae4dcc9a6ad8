from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


# project root (folder holding pyproject.toml)
BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):
    # App
    app_name: str = "TindaPH"
    app_env: str = "dev"
    log_level: str = "INFO"

    # Security / JWT / DB
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24
    database_url: str = "sqlite:///./tinda.db"

    # Media (listing images)
    media_root: Path = BASE_DIR / "media"
    media_url: str = "/media"
    image_max_width: int = 800
    image_quality: int = 70

    # Gemini (listing description writer)
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.5-flash"
    gemini_api_base: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_timeout_seconds: float = 20.0

    # Admin account created at startup when both are set
    admin_email: str | None = None
    admin_password: str | None = None
    admin_name: str = "Super Admin"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",    # ignore .env keys that are not fields here
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
