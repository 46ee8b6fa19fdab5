from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "mailstats-proxy"
    APP_ENV: str = "local"
    LOG_LEVEL: str = "INFO"

    # Only connectivity is checked on startup; handlers never write.
    DATABASE_URL: str = "sqlite+pysqlite:///:memory:"
    CHECK_DATABASE_ON_STARTUP: bool = True

    MAILGUN_API_BASE: str = "https://api.mailgun.net"
    # Pagination links are only followed when they start with this prefix.
    MAILGUN_ALLOWED_URL_PREFIX: str = "https://api.mailgun.net/"

    # JSON object, e.g. '{"ACME": "key-..."}'. <ACCOUNT>_MAILGUN_API_KEY env vars are merged in.
    MAILGUN_API_KEYS: dict[str, str] = {}
    # Comma-separated accounts that must have a key at startup (e.g. "acme,globex")
    MAILGUN_ACCOUNTS: str = ""

    API_TIMEOUT_S: float = 10.0
    RETRY_BASE_DELAY_S: float = 0.5
    DOMAINS_MAX_RETRIES: int = 3
    EVENTS_MAX_RETRIES: int = 2
    STATS_MAX_RETRIES: int = 0

    CORS_ALLOW_ORIGINS: str = "*"

    HOST: str = "0.0.0.0"
    PORT: int = 3000

    class Config:
        env_file = ".env"
        # Keeps <ACCOUNT>_MAILGUN_API_KEY lines from .env (see CredentialResolver).
        extra = "allow"


def split_csv(value: str) -> list[str]:
    return [x.strip() for x in (value or "").split(",") if x.strip()]
