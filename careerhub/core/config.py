"""
Service settings, read from the environment or a local .env file.

Every tunable (database, token verification, recommendation cut-off,
log level) lives on Settings; import get_settings() instead of reading
os.environ.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # MongoDB
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "careerhub"

    # JWT Auth (tokens are issued by the accounts service, we only verify)
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440

    # ATS recommendations
    recommendation_threshold: int = 85
    recommendation_limit: int = 20

    # App
    log_level: str = "INFO"
    debug: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
