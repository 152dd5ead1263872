"""
Process configuration.

All settings come from environment variables (a local `.env` file is loaded
first when present). Settings are read once and cached for the process
lifetime; the token signing secret in particular is never rotated in-process.

Usage:
    from core.config import get_settings
    settings = get_settings()
"""

import os
from dataclasses import dataclass
from functools import cache

from dotenv import load_dotenv

load_dotenv()

# Defaults mirror the values the storefront has always shipped with
DEFAULT_PASSWORD_WORK_FACTOR = 10
DEFAULT_TOKEN_TTL_SECONDS = 3600  # 1 hour
DEFAULT_STORE_TIMEOUT_SECONDS = 5.0
DEFAULT_AUTH_RATE_LIMIT_PER_MINUTE = 30

# bcrypt accepts log2 rounds in this range
MIN_WORK_FACTOR = 4
MAX_WORK_FACTOR = 31


class ConfigurationError(RuntimeError):
    """Raised at startup when required configuration is missing or invalid."""


@dataclass(frozen=True)
class Settings:
    jwt_secret: str
    password_work_factor: int = DEFAULT_PASSWORD_WORK_FACTOR
    token_ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS
    store_timeout_seconds: float = DEFAULT_STORE_TIMEOUT_SECONDS
    store_backend: str = "memory"  # memory | supabase
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    upstash_redis_rest_url: str = ""
    upstash_redis_rest_token: str = ""
    upload_dir: str = "upload/images"
    public_base_url: str = "http://localhost:5000"
    auth_rate_limit_per_minute: int = DEFAULT_AUTH_RATE_LIMIT_PER_MINUTE
    cors_origins: tuple[str, ...] = ("*",)
    trust_proxy_headers: bool = False  # honour X-Forwarded-For from a fronting proxy

    @property
    def redis_configured(self) -> bool:
        return bool(self.upstash_redis_rest_url and self.upstash_redis_rest_token)


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def _bool_env(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")


def load_settings() -> Settings:
    """Build Settings from the current environment (uncached)."""
    jwt_secret = os.environ.get("JWT_SECRET", "")
    if not jwt_secret:
        raise ConfigurationError("JWT_SECRET must be set")

    work_factor = _int_env("PASSWORD_WORK_FACTOR", DEFAULT_PASSWORD_WORK_FACTOR)
    if not MIN_WORK_FACTOR <= work_factor <= MAX_WORK_FACTOR:
        raise ConfigurationError(
            f"PASSWORD_WORK_FACTOR must be between {MIN_WORK_FACTOR} and {MAX_WORK_FACTOR}"
        )

    ttl = _int_env("TOKEN_TTL_SECONDS", DEFAULT_TOKEN_TTL_SECONDS)
    if ttl <= 0:
        raise ConfigurationError("TOKEN_TTL_SECONDS must be positive")

    timeout = _float_env("STORE_TIMEOUT_SECONDS", DEFAULT_STORE_TIMEOUT_SECONDS)
    if timeout <= 0:
        raise ConfigurationError("STORE_TIMEOUT_SECONDS must be positive")

    backend = os.environ.get("STORE_BACKEND", "memory").strip().lower()
    if backend not in ("memory", "supabase"):
        raise ConfigurationError(f"Unknown STORE_BACKEND: {backend!r}")

    origins = os.environ.get("CORS_ORIGINS", "*")

    return Settings(
        jwt_secret=jwt_secret,
        password_work_factor=work_factor,
        token_ttl_seconds=ttl,
        store_timeout_seconds=timeout,
        store_backend=backend,
        supabase_url=os.environ.get("SUPABASE_URL", ""),
        supabase_service_role_key=os.environ.get("SUPABASE_SERVICE_ROLE_KEY", ""),
        upstash_redis_rest_url=os.environ.get("UPSTASH_REDIS_REST_URL", ""),
        upstash_redis_rest_token=os.environ.get("UPSTASH_REDIS_REST_TOKEN", ""),
        upload_dir=os.environ.get("UPLOAD_DIR", "upload/images"),
        public_base_url=os.environ.get("PUBLIC_BASE_URL", "http://localhost:5000").rstrip("/"),
        auth_rate_limit_per_minute=_int_env(
            "AUTH_RATE_LIMIT_PER_MINUTE", DEFAULT_AUTH_RATE_LIMIT_PER_MINUTE
        ),
        cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
        trust_proxy_headers=_bool_env("TRUST_PROXY_HEADERS", False),
    )


@cache
def get_settings() -> Settings:
    """Process-wide settings, loaded on first use."""
    return load_settings()
