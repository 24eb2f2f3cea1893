# config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional


# Local dev servers of the browser client
DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "https://localhost:3000",
    "http://localhost:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:5174",
]


# ---------------------------------------------------------------------------
# Server config
# ---------------------------------------------------------------------------

@dataclass
class ServerConfig:
    """
    HTTP server settings.

    If api_key is None the API is open (for dev only).
    """
    host: str = "0.0.0.0"
    port: int = 5000
    api_key: Optional[str] = None
    environment: str = "development"
    allowed_origins: List[str] = field(
        default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS)
    )


# ---------------------------------------------------------------------------
# Rate limiting / validation / logging
# ---------------------------------------------------------------------------

@dataclass
class RateLimitConfig:
    enabled: bool = True

    # Every /api/v1 request, per client IP
    api_max_requests: int = 100
    api_window_seconds: int = 15 * 60

    # Stricter limit for the calculate endpoint
    calculation_max_requests: int = 20
    calculation_window_seconds: int = 60


@dataclass
class ValidationConfig:
    max_expression_length: int = 1000


@dataclass
class LoggingConfig:
    level: str = "INFO"
    log_dir: str = "logs"
    jsonl_enabled: bool = True


# ---------------------------------------------------------------------------
# App-wide config container
# ---------------------------------------------------------------------------

@dataclass
class AppConfig:
    """
    Top-level config object.

    NOTE: nested dataclasses need default_factory to avoid the
    'mutable default' error from dataclasses.
    """
    server: ServerConfig = field(default_factory=ServerConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_origins(name: str) -> List[str]:
    raw = os.getenv(name, "")
    if not raw.strip():
        return list(DEFAULT_ALLOWED_ORIGINS)
    if raw.strip() == "*":
        return ["*"]
    return [o.strip() for o in raw.split(",") if o.strip()]


def load_config() -> AppConfig:
    """
    Build an AppConfig from environment variables.

    Call load_dotenv() first if the values live in a .env file.
    """
    return AppConfig(
        server=ServerConfig(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "5000")),
            api_key=os.getenv("API_KEY") or None,
            environment=os.getenv("APP_ENV", "development"),
            allowed_origins=_env_origins("ALLOWED_ORIGINS"),
        ),
        rate_limit=RateLimitConfig(
            enabled=_env_bool("RATE_LIMIT_ENABLED", True),
        ),
        logging=LoggingConfig(
            level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_dir=os.getenv("LOG_DIR", "logs"),
            jsonl_enabled=_env_bool("LOG_JSONL", True),
        ),
    )


# Single global config instance used everywhere
config = load_config()
