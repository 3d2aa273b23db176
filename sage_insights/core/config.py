# config.py
from functools import lru_cache
from typing import List

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

load_dotenv()


class Settings(BaseSettings):
    # Pydantic V2 configuration
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    # Upstream API that owns labs, machines, work orders and telemetry
    BACKEND_BASE_URL: str = Field(default="http://localhost:3000")

    # Routes
    LOGIN_PATH: str = Field(default="/login")
    DASHBOARD_PATH: str = Field(default="/ai-insights")

    # Session cookies (presence check only)
    SESSION_FLAG_COOKIE: str = Field(default="isLoggedIn")
    SESSION_USER_COOKIE: str = Field(default="user")

    # Statistics windows
    DOWNTIME_TIME_RANGE: str = Field(default="-7d")
    DOWNTIME_WINDOW_DAYS: int = Field(default=7)
    WORK_ORDER_LOOKBACK_MONTHS: int = Field(default=1)

    # Per-user dashboard views kept in memory (LRU)
    MAX_DASHBOARD_VIEWS: int = Field(default=1000)

    # App
    LOG_LEVEL: str = Field(default="INFO")
    APP_HOST: str = Field(default="0.0.0.0")
    APP_PORT: int = Field(default=8000)
    CORS_ORIGINS: List[str] = Field(default=["*"])  # narrow to the FE domain in production


@lru_cache()
def get_settings():
    return Settings()
