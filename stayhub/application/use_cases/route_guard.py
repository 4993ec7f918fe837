from __future__ import annotations

import logging

from stayhub.application.dto.route_guard import PASS_THROUGH, GuardDecision
from stayhub.application.ports.profile_repository_port import ProfileRepositoryPort
from stayhub.domain.entities.identity import Identity

from .auth_common import APP_ROOT_PATH


logger = logging.getLogger(__name__)

ALLOWED_PATH_PREFIXES: tuple[str, ...] = (
    "/login",
    "/register",
    "/profile",
    "/auth/callback",
    "/auth/auth-code-error",
    "/reset-password",
)
OWNER_AREA_PREFIX = "/owner"
LOGIN_PATH = "/login"
PROFILE_SETUP_PATH = "/profile"


def is_allowed_path(path: str) -> bool:
    return any(path.startswith(prefix) for prefix in ALLOWED_PATH_PREFIXES)


def is_owner_area(path: str) -> bool:
    return path.startswith(OWNER_AREA_PREFIX)


def decide_without_role_lookup(*, path: str, identity: Identity | None) -> GuardDecision | None:
    """Decision reachable without the profile store, or None when the role is needed."""
    if is_allowed_path(path):
        return PASS_THROUGH

    if identity is None:
        if is_owner_area(path):
            return GuardDecision(redirect_to=LOGIN_PATH, reason="anonymous_owner_area")
        return PASS_THROUGH

    if identity.is_email_provider and not identity.has_password:
        return GuardDecision(redirect_to=PROFILE_SETUP_PATH, reason="password_setup_required")
    return None


class RouteGuardUseCase:
    """Read-only gate deciding pass-through or redirect for a page request.

    When the role lookup fails the guard fails open by default; the backend
    still enforces authorization on its own. With ``fail_open=False`` a
    failed lookup sends owner-area requests to the login page instead.
    """

    def __init__(self, *, profile_port: ProfileRepositoryPort, fail_open: bool = True):
        self._profile_port = profile_port
        self._fail_open = fail_open

    def evaluate(self, *, path: str, identity: Identity | None) -> GuardDecision:
        decision = decide_without_role_lookup(path=path, identity=identity)
        if decision is not None:
            return decision

        try:
            role = self._profile_port.get_role(user_id=identity.id)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "route_guard: role_lookup_failed user_id=%s path=%s error=%s",
                identity.id,
                path,
                exc,
            )
            if not self._fail_open and is_owner_area(path):
                return GuardDecision(redirect_to=LOGIN_PATH, reason="role_lookup_failed")
            return PASS_THROUGH

        if role == "owner" and path == APP_ROOT_PATH:
            return GuardDecision(redirect_to=OWNER_AREA_PREFIX, reason="owner_home")
        if is_owner_area(path) and role != "owner":
            return GuardDecision(redirect_to=APP_ROOT_PATH, reason="owner_only")
        return PASS_THROUGH
