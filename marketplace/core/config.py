"""Application configuration."""

from os import getenv

from pydantic import BaseModel


class Settings(BaseModel):
    """Runtime settings for the order service."""

    app_name: str = getenv("APP_NAME", "marketplace orders API")
    app_env: str = getenv("APP_ENV", "dev")
    debug: bool = getenv("DEBUG", "0") == "1"
    database_url: str = getenv("DATABASE_URL", "sqlite:///./marketplace.db")
    jwt_secret_key: str = getenv("JWT_SECRET_KEY", "dev-only-change-me-to-a-long-random-secret")
    jwt_algorithm: str = getenv("JWT_ALGORITHM", "HS256")
    jwt_expire_minutes: int = int(getenv("JWT_EXPIRE_MINUTES", "60"))
    log_level: str = getenv("LOG_LEVEL", "INFO")


settings: Settings = Settings()
