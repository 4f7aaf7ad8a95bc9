import os
from dataclasses import dataclass, field
from typing import FrozenSet

from dotenv import load_dotenv


load_dotenv()


@dataclass(frozen=True)
class Settings:
    min_score: int = 30
    workers: int = 1
    trending_tickers: FrozenSet[str] = field(default_factory=frozenset)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name) or str(default)
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from None


def get_settings() -> Settings:
    min_score = _int_env("PERSONALIZATION_MIN_SCORE", 30)
    if not 0 <= min_score <= 100:
        raise RuntimeError(f"PERSONALIZATION_MIN_SCORE must be between 0 and 100, got {min_score}")

    workers = _int_env("PERSONALIZATION_WORKERS", 1)
    if workers < 1:
        raise RuntimeError(f"PERSONALIZATION_WORKERS must be at least 1, got {workers}")

    trending = os.getenv("TRENDING_TICKERS", "")

    return Settings(
        min_score=min_score,
        workers=workers,
        trending_tickers=frozenset(t.strip().upper() for t in trending.split(",") if t.strip()),
    )
