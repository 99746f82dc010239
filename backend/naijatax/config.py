from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    APP_NAME: str = "NaijaTax API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str | None = None  # "json" or "console"; defaults by environment

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    # Admin
    ADMIN_API_KEY: str = ""  # empty disables the X-Admin-Key check

    # Tax rule overrides
    TAX_RULES_REMOTE_URL: str = ""
    TAX_RULES_OVERRIDE_FILE: str = ""
    TAX_RULES_REFRESH_TIMEOUT: float = 5.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    return Settings()
