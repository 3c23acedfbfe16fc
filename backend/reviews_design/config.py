from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database_url: str = "postgresql+psycopg2://reviews:reviews_dev@db:5432/reviews"
    environment: str = "development"

    # Run migrations and install default options on startup
    run_startup_tasks: bool = True

    jwt_secret_key: str
    jwt_algorithm: str = "HS256"

    # Moderation form nonces
    nonce_expire_minutes: int = 60 * 12

    # Media store settings
    uploads_base_path: Path = Path("/var/lib/reviews-design/uploads")
    media_url_prefix: str = "/api/v1/media"
    thumbnail_size: int = 150
    medium_size: int = 300


settings = Settings()
