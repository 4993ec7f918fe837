from __future__ import annotations

from stayhub.domain.entities.user_profile import USER_ROLES
from stayhub.domain.exceptions import InvalidRoleError


AUTH_CALLBACK_PATH = "/auth/callback"
AUTH_CODE_ERROR_PATH = "/auth/auth-code-error"
APP_ROOT_PATH = "/"

MIN_PASSWORD_LENGTH = 6


def normalize_email(email: str) -> str:
    return email.strip().lower()


def build_callback_url(base_url: str) -> str:
    return f"{base_url.rstrip('/')}{AUTH_CALLBACK_PATH}"


def ensure_role(role: str) -> str:
    if role not in USER_ROLES:
        raise InvalidRoleError(f"Unknown role '{role}'.")
    return role
