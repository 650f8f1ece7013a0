"""
Configuration loader for the JobSwipe core.

Loads hh.ru and LLM settings from environment variables (.env file).
Service-level knobs (MongoDB, CORS, API secret) live in swipe_service.config.
"""

import os
from typing import List
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """
    Centralized configuration for the core components.

    All values loaded from environment variables - NO SECRETS IN CODE.
    """

    # ===== hh.ru API =====
    HH_API_URL: str = os.getenv("HH_API_URL", "https://api.hh.ru")
    HH_OAUTH_URL: str = os.getenv("HH_OAUTH_URL", "https://hh.ru/oauth")
    HH_CLIENT_ID: str = os.getenv("HH_CLIENT_ID", "")
    HH_CLIENT_SECRET: str = os.getenv("HH_CLIENT_SECRET", "")
    HH_REDIRECT_URI: str = os.getenv(
        "HH_REDIRECT_URI",
        "https://jobswiper.ru/auth/hh/callback"
    )
    HH_USER_AGENT: str = os.getenv("HH_USER_AGENT", "JobSwipe/1.0 (job-search-app)")
    HH_TIMEOUT_SECONDS: float = float(os.getenv("HH_TIMEOUT_SECONDS", "15"))

    # ===== Vacancy search =====
    BATCH_SIZE: int = 30  # hh.ru per_page for one swipe batch
    DEFAULT_SEARCH_TEXT: str = os.getenv("DEFAULT_SEARCH_TEXT", "маркетинг")
    DEFAULT_AREAS: List[str] = ["1"]  # Moscow
    AREAS_CACHE_TTL_SECONDS: int = int(os.getenv("AREAS_CACHE_TTL_SECONDS", "3600"))
    MAX_TAGS: int = 6

    # ===== LLM (OpenRouter) =====
    OPENROUTER_API_KEY: str = os.getenv("OPENROUTER_API_KEY", "")
    OPENROUTER_BASE_URL: str = os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1")
    LLM_MODEL: str = os.getenv("LLM_MODEL", "openai/gpt-oss-20b:free")
    LLM_TIMEOUT_SECONDS: float = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))
    APP_REFERER: str = os.getenv("APP_REFERER", "https://jobswiper.ru")
    APP_TITLE: str = "JobSwipe"

    # Temperature settings
    COVER_LETTER_TEMPERATURE: float = 0.3
    COVER_LETTER_MAX_TOKENS: int = 700
    COMPATIBILITY_TEMPERATURE: float = 0.1
    COMPATIBILITY_MAX_TOKENS: int = 300

    # ===== Compatibility scoring =====
    COMPATIBILITY_CONCURRENCY: int = int(os.getenv("COMPATIBILITY_CONCURRENCY", "3"))
    COMPATIBILITY_MIN_RESUME_LENGTH: int = 50
    COMPATIBILITY_RESUME_CHARS: int = 3000
    GREEN_THRESHOLD: int = 75
    YELLOW_THRESHOLD: int = 40

    @classmethod
    def authorize_url_configured(cls) -> bool:
        """Check whether the OAuth client credentials are present."""
        return bool(cls.HH_CLIENT_ID and cls.HH_CLIENT_SECRET)

    @classmethod
    def summary(cls) -> str:
        """Return a summary of the current configuration (safe for logging)."""
        return f"""
Configuration Summary:
  hh.ru API: {cls.HH_API_URL}
  hh.ru OAuth: {'✓ Configured' if cls.authorize_url_configured() else '✗ Missing'}
  OpenRouter: {'✓ Configured' if cls.OPENROUTER_API_KEY else '✗ Missing'}
  LLM Model: {cls.LLM_MODEL}
  Areas cache TTL: {cls.AREAS_CACHE_TTL_SECONDS}s
  Compatibility concurrency: {cls.COMPATIBILITY_CONCURRENCY}
        """.strip()
