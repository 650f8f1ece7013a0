"""
Settings for the JobSwipe HTTP service.

Only what the web process itself needs lives here: deployment environment,
MongoDB connection, CORS, log format and the optional shared API secret.
hh.ru and OpenRouter settings are read by jobswipe.common.config.
"""

import logging
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

ENVIRONMENTS = ("development", "staging", "production")
LOG_FORMATS = ("simple", "json")
MONGODB_SCHEMES = ("mongodb://", "mongodb+srv://")
WEAK_SECRETS = {"secret", "password", "changeme", "jobswipe"}


class ServiceSettings(BaseSettings):
    """Read from environment variables of the same name (case-insensitive)."""

    model_config = SettingsConfigDict(case_sensitive=False, extra="ignore")

    environment: str = "development"

    # Bearer secret for /api routes; routes are open when unset
    swipe_api_secret: Optional[str] = Field(default=None, min_length=16)

    mongodb_uri: str = "mongodb://localhost:27017"
    mongo_db_name: str = "jobswipe"
    mongo_timeout_ms: int = Field(default=5000, ge=100, le=60000)

    # Comma separated, e.g. "https://jobswipe.ru,https://www.jobswipe.ru"
    cors_origins: str = ""

    log_format: str = "simple"

    @field_validator("environment")
    @classmethod
    def known_environment(cls, value: str) -> str:
        value = value.lower()
        if value not in ENVIRONMENTS:
            raise ValueError(f"environment must be one of {ENVIRONMENTS}")
        return value

    @field_validator("swipe_api_secret")
    @classmethod
    def strong_secret(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and (value.lower() in WEAK_SECRETS or len(set(value)) < 4):
            raise ValueError("SWIPE_API_SECRET is too weak, generate a random string")
        return value

    @field_validator("mongodb_uri")
    @classmethod
    def mongodb_scheme(cls, value: str) -> str:
        if not value.startswith(MONGODB_SCHEMES):
            raise ValueError(f"MONGODB_URI must start with one of {MONGODB_SCHEMES}")
        return value

    @field_validator("log_format")
    @classmethod
    def known_log_format(cls, value: str) -> str:
        if value not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {LOG_FORMATS}")
        return value

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def auth_required(self) -> bool:
        return self.swipe_api_secret is not None

    def validate_production_config(self) -> List[str]:
        """
        Deployment problems, each prefixed WARNING or CRITICAL.

        Empty outside production.
        """
        if not self.is_production:
            return []
        issues = []
        if "localhost" in self.mongodb_uri or "127.0.0.1" in self.mongodb_uri:
            issues.append("CRITICAL: MONGODB_URI points at a local server")
        if not self.auth_required:
            issues.append("WARNING: SWIPE_API_SECRET not set, API routes are unauthenticated")
        if not self.cors_origins_list:
            issues.append("WARNING: CORS_ORIGINS is empty, browsers on other origins are blocked")
        return issues


@lru_cache()
def get_settings() -> ServiceSettings:
    return ServiceSettings()


def validate_config_on_startup() -> ServiceSettings:
    """
    Load settings and refuse to start on a CRITICAL deployment issue.

    Raises:
        ValueError: If settings fail validation or a CRITICAL issue is found
    """
    try:
        settings = get_settings()
    except ValueError as e:
        raise ValueError(f"Invalid service settings: {e}")

    for issue in settings.validate_production_config():
        if issue.startswith("CRITICAL"):
            raise ValueError(issue)
        logger.warning(issue)

    logger.info(
        f"Service settings: environment={settings.environment} "
        f"database={settings.mongo_db_name} auth_required={settings.auth_required}"
    )
    return settings
