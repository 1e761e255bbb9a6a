import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    database_url: str
    wiki_lang: str = "pt"
    wiki_timeout: float = 20.0
    wiki_user_agent: str = "WikiQuizBackend/1.0"
    max_attempts_factor: int = 4


def load_settings() -> Settings:
    """Read settings from the environment (and .env). DATABASE_URL is required."""
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        raise RuntimeError("DATABASE_URL is not set. Please define it in .env")

    return Settings(
        database_url=database_url,
        wiki_lang=os.getenv("WIKI_LANG", "pt"),
        wiki_timeout=float(os.getenv("WIKI_TIMEOUT", "20")),
        wiki_user_agent=os.getenv("WIKI_USER_AGENT", "WikiQuizBackend/1.0"),
        max_attempts_factor=int(os.getenv("QUIZ_MAX_ATTEMPTS_FACTOR", "4")),
    )


def cors_origins() -> Tuple[str, ...]:
    origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
    return tuple(origins) or ("*",)


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or os.getenv("LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
