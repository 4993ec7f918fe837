from __future__ import annotations

from typing import Mapping

from stayhub.application.ports.pending_role_store_port import PendingRoleStorePort


PENDING_ROLE_COOKIE = "selected_role"
PENDING_ROLE_MAX_AGE_SECONDS = 60 * 30


class CookiePendingRoleStore(PendingRoleStorePort):
    """Pending role marker kept in a browser cookie.

    Reads come from the incoming request cookies; writes are buffered and
    flushed onto the outgoing response with ``apply_to``. Read-then-delete is
    not atomic across tabs.
    """

    def __init__(self, cookies: Mapping[str, str]):
        self._value: str | None = cookies.get(PENDING_ROLE_COOKIE) or None
        self._dirty = False

    def get(self) -> str | None:
        return self._value

    def set(self, role: str) -> None:
        self._value = role
        self._dirty = True

    def remove(self) -> None:
        self._value = None
        self._dirty = True

    def apply_to(self, response) -> None:
        if not self._dirty:
            return
        if self._value is None:
            response.delete_cookie(key=PENDING_ROLE_COOKIE, path="/")
            return
        response.set_cookie(
            key=PENDING_ROLE_COOKIE,
            value=self._value,
            httponly=True,
            samesite="lax",
            max_age=PENDING_ROLE_MAX_AGE_SECONDS,
            path="/",
        )
