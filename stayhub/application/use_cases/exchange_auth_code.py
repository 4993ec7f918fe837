from __future__ import annotations

import logging

from stayhub.application.ports.identity_gateway_port import IdentityGatewayPort
from stayhub.domain.entities.identity import Session

from .auth_common import APP_ROOT_PATH, AUTH_CODE_ERROR_PATH


logger = logging.getLogger(__name__)


class ExchangeAuthCodeUseCase:
    def __init__(self, *, gateway: IdentityGatewayPort):
        self._gateway = gateway

    def execute(self, *, code: str | None, next_path: str | None = None) -> tuple[str, Session | None]:
        """Returns the path to redirect to and the session obtained, if any."""
        logger.info("auth_callback: code=%s", "present" if code else "missing")
        if not code:
            return AUTH_CODE_ERROR_PATH, None

        try:
            session = self._gateway.exchange_code_for_session(code=code)
        except Exception as exc:  # noqa: BLE001
            logger.error("auth_callback: exchange_failed error=%s", exc)
            return AUTH_CODE_ERROR_PATH, None

        logger.info("auth_callback: exchanged user_id=%s", session.identity.id)
        return _safe_next_path(next_path), session


def _safe_next_path(next_path: str | None) -> str:
    if not next_path or not next_path.startswith("/") or next_path.startswith("//"):
        return APP_ROOT_PATH
    return next_path
