from dataclasses import dataclass
from pathlib import Path
import os
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]  # repo root

ENV_FILE = os.getenv("ENV_FILE", str(BASE_DIR / ".env"))


@dataclass(frozen=True)
class BootstrapTimeouts:
    """Seconds allowed for each step of the session bootstrap."""
    mount_ceiling: float = 5.0
    load_user: float = 12.0
    profile_query: float = 5.0
    employee_query: float = 5.0
    lookup: float = 2.0  # department, position and user-email lookups


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=ENV_FILE, extra="ignore")

    APP_ENV: str = "local"
    DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'hr_portal.db'}"
    CORS_ORIGINS: str = "*"  # Comma-separated list of allowed origins, or "*" for all
    LOG_LEVEL: str = "INFO"

    SESSION_COOKIE_NAME: str = "hr_portal_session"
    ACCESS_TOKEN_TTL_SECONDS: int = 3600
    PORTAL_IDLE_TTL_SECONDS: float = 1800.0
    PORTAL_MAX_SESSIONS: int = 1000

    MOUNT_CEILING_SECONDS: float = 5.0
    LOAD_USER_TIMEOUT_SECONDS: float = 12.0
    PROFILE_QUERY_TIMEOUT_SECONDS: float = 5.0
    EMPLOYEE_QUERY_TIMEOUT_SECONDS: float = 5.0
    LOOKUP_TIMEOUT_SECONDS: float = 2.0

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list, handling '*' for development"""
        if self.CORS_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    def bootstrap_timeouts(self) -> BootstrapTimeouts:
        return BootstrapTimeouts(
            mount_ceiling=self.MOUNT_CEILING_SECONDS,
            load_user=self.LOAD_USER_TIMEOUT_SECONDS,
            profile_query=self.PROFILE_QUERY_TIMEOUT_SECONDS,
            employee_query=self.EMPLOYEE_QUERY_TIMEOUT_SECONDS,
            lookup=self.LOOKUP_TIMEOUT_SECONDS,
        )


settings = Settings()
