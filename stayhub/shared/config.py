from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _bool(name: str, default: str) -> bool:
    value = _env(name, default) or default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    supabase_url: str
    supabase_anon_key: str
    supabase_jwt_secret: str
    site_url: str
    api_url: str
    postgres_dsn: str
    gateway_timeout_seconds: float
    booking_api_timeout_seconds: float
    route_guard_fail_open: bool
    log_level: str


def get_settings() -> Settings:
    return Settings(
        supabase_url=_env("SUPABASE_URL", ""),
        supabase_anon_key=_env("SUPABASE_ANON_KEY", ""),
        supabase_jwt_secret=_env("SUPABASE_JWT_SECRET", ""),
        site_url=_env("SITE_URL", "http://localhost:3000"),
        api_url=_env("API_URL", ""),
        postgres_dsn=_env("POSTGRES_DSN", ""),
        gateway_timeout_seconds=float(_env("GATEWAY_TIMEOUT_SECONDS", "10")),
        booking_api_timeout_seconds=float(_env("BOOKING_API_TIMEOUT_SECONDS", "10")),
        route_guard_fail_open=_bool("ROUTE_GUARD_FAIL_OPEN", "true"),
        log_level=_env("LOG_LEVEL", "INFO"),
    )
