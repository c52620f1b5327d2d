"""
Runtime configuration for the career coach backend.

Settings are read from the environment once, at the edge of the application,
and then handed to the AI client and the workflows explicitly.
"""
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import FrozenSet, List, Optional

from dotenv import load_dotenv

from .ai.errors import ErrorKind
from .ai.retry import RetryPolicy

DEFAULT_FALLBACK_ON = frozenset({ErrorKind.QUOTA_EXCEEDED, ErrorKind.RATE_LIMITED})


@dataclass(frozen=True)
class Settings:
    openai_api_key: Optional[str] = None
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o-mini"
    gemini_api_key: Optional[str] = None
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model: str = "gemini-2.0-flash"
    request_timeout_s: float = 60.0
    max_retries: int = 3
    initial_delay_ms: int = 1000
    # Error kinds for which a workflow substitutes template content
    fallback_on: FrozenSet[ErrorKind] = DEFAULT_FALLBACK_ON
    database_url: str = "sqlite:///./career_coach.db"
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])
    dev_user_id: Optional[str] = None

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(max_retries=self.max_retries, initial_delay_ms=self.initial_delay_ms)

    def should_fallback(self, kind: ErrorKind) -> bool:
        return kind in self.fallback_on


def _parse_fallback_on(raw: Optional[str]) -> FrozenSet[ErrorKind]:
    if raw is None:
        return DEFAULT_FALLBACK_ON
    kinds = set()
    for name in raw.split(","):
        name = name.strip().lower()
        if not name:
            continue
        try:
            kinds.add(ErrorKind(name))
        except ValueError as e:
            raise ValueError(f"Unknown error kind in AI_FALLBACK_ON: {name!r}") from e
    return frozenset(kinds)


def load_settings() -> Settings:
    """Build Settings from the process environment (and a .env file if present)."""
    load_dotenv()
    origins_env = os.getenv("CORS_ORIGINS")
    origins = [o.strip() for o in (origins_env or "").split(",") if o.strip()]
    if not origins:
        # Local dev frontends
        origins = ["http://localhost:3000", "http://localhost:5173"]
    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        openai_base_url=os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1"),
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
        gemini_base_url=os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"),
        gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.0-flash"),
        request_timeout_s=float(os.getenv("AI_REQUEST_TIMEOUT_S", "60")),
        max_retries=int(os.getenv("AI_MAX_RETRIES", "3")),
        initial_delay_ms=int(os.getenv("AI_INITIAL_DELAY_MS", "1000")),
        fallback_on=_parse_fallback_on(os.getenv("AI_FALLBACK_ON")),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./career_coach.db"),
        cors_origins=origins,
        dev_user_id=os.getenv("DEV_USER_ID") or None,
    )


@lru_cache()
def get_settings() -> Settings:
    """FastAPI dependency; overridden in tests."""
    return load_settings()
