# app/core/settings.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List
from pydantic import field_validator

class Settings(BaseSettings):
    """
    Основные переменные окружения и настройки доски.
    Значения берутся из окружения или .env.
    """
    # Database
    DATABASE_URL: str = "sqlite:///./openclaw_board.db"

    # App meta
    ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Board rules
    DONE_COLUMN_LIMIT: int = 5
    ACTIVITY_FEED_MAX: int = 100
    TASK_ID_PREFIX: str = "OCB"

    # Real-time channel
    WS_PATH: str = "/ws"

    # CLI
    OCB_API_URL: str = "http://localhost:8000"

    # Авто-сплит строкового списка ALLOWED_ORIGINS из .env
    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def split_origins(cls, v):
        if isinstance(v, str):
            return [i.strip() for i in v.split(",") if i.strip()]
        return v

    @field_validator("DONE_COLUMN_LIMIT")
    @classmethod
    def check_done_limit(cls, v):
        if v < 1:
            raise ValueError("DONE_COLUMN_LIMIT must be at least 1")
        return v

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

settings = Settings()
