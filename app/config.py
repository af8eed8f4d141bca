# app/config.py
import os
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

log = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent
DEV_SECRET_KEY = "dev-only-change-me"

_dotenv_path = BASE_DIR / ".env"
if _dotenv_path.exists():
    load_dotenv(dotenv_path=_dotenv_path)


def _split_origins(raw: str) -> list[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass(frozen=True)
class Settings:
    database_url: str = f"sqlite:///{(BASE_DIR / 'farmland.db').as_posix()}"
    secret_key: str = DEV_SECRET_KEY
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    allowed_origins: list[str] = field(default_factory=lambda: ["http://localhost:3000"])
    log_level: str = "INFO"
    default_page_size: int = 10
    max_page_size: int = 100

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        return cls(
            database_url=os.getenv("DATABASE_URL", defaults.database_url),
            secret_key=os.getenv("SECRET_KEY", defaults.secret_key),
            algorithm=os.getenv("ALGORITHM", defaults.algorithm),
            access_token_expire_minutes=int(
                os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", defaults.access_token_expire_minutes)
            ),
            allowed_origins=_split_origins(os.getenv("ALLOWED_ORIGINS", ""))
            or defaults.allowed_origins,
            log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
            default_page_size=int(os.getenv("DEFAULT_PAGE_SIZE", defaults.default_page_size)),
            max_page_size=int(os.getenv("MAX_PAGE_SIZE", defaults.max_page_size)),
        )


@lru_cache
def get_settings() -> Settings:
    settings = Settings.from_env()
    if settings.secret_key == DEV_SECRET_KEY:
        log.warning("SECRET_KEY is not set; using the development signing key.")
    return settings
