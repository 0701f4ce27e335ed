from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Загружаем .env, лежащий РЯДОМ с пакетом (важно при запуске из другого каталога)
load_dotenv(Path(__file__).with_name(".env"))

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_DB_PATH = PACKAGE_DIR / "hr_tests.db"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("true", "1", "yes")


class Settings(BaseModel):
    """Настройки приложения из переменных окружения."""

    database_url: str = Field(default=f"sqlite:///{DEFAULT_DB_PATH}")

    telegram_bot_token: Optional[str] = None
    telegram_channel_id: Optional[str] = None
    telegram_timeout: float = Field(default=10.0, gt=0)
    notification_dry_run: bool = False

    # Контакт HR для строки «Следующие шаги» в общих тестах
    hr_contact: Optional[str] = None

    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000

    @classmethod
    def from_env(cls) -> "Settings":
        values = {
            "telegram_bot_token": os.getenv("TELEGRAM_BOT_TOKEN") or None,
            "telegram_channel_id": os.getenv("TELEGRAM_CHANNEL_ID") or None,
            "notification_dry_run": _env_flag("NOTIFICATION_DRY_RUN"),
            "hr_contact": os.getenv("HR_CONTACT") or None,
            "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
            "host": os.getenv("HOST", "127.0.0.1"),
        }
        # Фолбэк на локальную SQLite, если переменная не задана
        database_url = os.getenv("DATABASE_URL")
        if database_url and database_url.strip():
            values["database_url"] = database_url.strip()
        if os.getenv("TELEGRAM_TIMEOUT"):
            values["telegram_timeout"] = os.getenv("TELEGRAM_TIMEOUT")
        if os.getenv("PORT"):
            values["port"] = os.getenv("PORT")
        return cls(**values)


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()
