from __future__ import annotations

import logging
import re
from typing import Callable

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from stayhub.api.deps import get_route_guard_use_case, get_session_decoder, request_access_token
from stayhub.application.ports.session_decoder_port import SessionDecoderPort
from stayhub.application.use_cases.route_guard import (
    RouteGuardUseCase,
    decide_without_role_lookup,
    is_allowed_path,
)
from stayhub.domain.entities.identity import Identity


logger = logging.getLogger(__name__)

EXCLUDED_PATH_PATTERN = re.compile(
    r"^/(?:_next/static|_next/image|favicon\.ico)|\.(?:svg|png|jpg|jpeg|gif|webp)$"
)
UNGUARDED_PATH_PREFIXES: tuple[str, ...] = ("/v1/", "/docs", "/redoc", "/openapi.json")


def should_guard(path: str) -> bool:
    if EXCLUDED_PATH_PATTERN.search(path):
        return False
    return not any(path.startswith(prefix) for prefix in UNGUARDED_PATH_PREFIXES)


class RouteGuardMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        *,
        guard_factory: Callable[[], RouteGuardUseCase] = get_route_guard_use_case,
        decoder_factory: Callable[[], SessionDecoderPort] = get_session_decoder,
    ):
        super().__init__(app)
        self._guard_factory = guard_factory
        self._decoder_factory = decoder_factory

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not should_guard(path) or is_allowed_path(path):
            return await call_next(request)

        try:
            identity = self._resolve_identity(request)
            decision = decide_without_role_lookup(path=path, identity=identity)
            if decision is None:
                guard = self._guard_factory()
                decision = await run_in_threadpool(guard.evaluate, path=path, identity=identity)
        except HTTPException as exc:
            return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

        if decision.redirect_to is not None:
            logger.info(
                "route_guard_middleware: redirect path=%s to=%s reason=%s",
                path,
                decision.redirect_to,
                decision.reason,
            )
            return RedirectResponse(url=decision.redirect_to, status_code=307)
        return await call_next(request)

    def _resolve_identity(self, request: Request) -> Identity | None:
        access_token = request_access_token(request)
        if not access_token:
            return None
        decoder = self._decoder_factory()
        try:
            return decoder.decode(access_token=access_token)
        except ValueError as exc:
            logger.debug("route_guard_middleware: invalid_token error=%s", exc)
            return None
