"""
Process configuration.

Values come from the environment (optionally a .env file). The Settings
object is handed to the pieces that need it; scheduling defaults live on
the Season row, not here.
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


def _env_list(name: str) -> List[str]:
    raw = os.getenv(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///./league.db"
    sql_echo: bool = False
    log_level: str = "INFO"
    cors_origins: List[str] = field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"]
    )

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        return cls(
            database_url=os.getenv("DATABASE_URL", defaults.database_url),
            sql_echo=_env_bool("SQL_ECHO"),
            log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
            cors_origins=defaults.cors_origins + _env_list("CORS_ORIGINS"),
        )


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
