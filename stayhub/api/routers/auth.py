from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from fastapi.responses import RedirectResponse

from stayhub.api.deps import (
    ACCESS_TOKEN_COOKIE,
    CODE_VERIFIER_COOKIE,
    REFRESH_TOKEN_COOKIE,
    get_exchange_auth_code_use_case,
    get_identity_gateway,
    get_navigator,
    get_pending_role_store,
    get_session_controller,
)
from stayhub.api.navigation import RecordingNavigator
from stayhub.api.schemas.auth import (
    EmailExistsResponse,
    EmailLinkRequest,
    EmailStatusResponse,
    LoginRequest,
    OAuthSignInRequest,
    OAuthSignInResponse,
    OkResponse,
    RoleLookupResponse,
    SessionStateResponse,
    UpdatePasswordRequest,
)
from stayhub.api.serializers import session_state_response
from stayhub.application.use_cases.exchange_auth_code import ExchangeAuthCodeUseCase
from stayhub.application.use_cases.session_controller import SessionController
from stayhub.domain.entities.identity import Session
from stayhub.domain.exceptions import (
    IdentityGatewayError,
    InvalidPasswordError,
    InvalidRoleError,
    NotAuthenticatedError,
    UnsupportedProviderError,
)
from stayhub.infrastructure.clients.supabase_identity_gateway import SupabaseIdentityGateway
from stayhub.infrastructure.storage.cookie_pending_role_store import CookiePendingRoleStore


router = APIRouter()
logger = logging.getLogger(__name__)

DEFAULT_ACCESS_MAX_AGE_SECONDS = 60 * 60
REFRESH_MAX_AGE_SECONDS = 60 * 60 * 24 * 30
CODE_VERIFIER_MAX_AGE_SECONDS = 60 * 10


def _access_max_age_seconds(session: Session) -> int:
    if session.expires_at is None:
        return DEFAULT_ACCESS_MAX_AGE_SECONDS
    now = datetime.now(timezone.utc)
    return max(int((session.expires_at - now).total_seconds()), 0)


def _set_session_cookies(response: Response, session: Session) -> None:
    response.set_cookie(
        key=ACCESS_TOKEN_COOKIE,
        value=session.access_token,
        httponly=True,
        samesite="lax",
        secure=False,
        max_age=_access_max_age_seconds(session),
        path="/",
    )
    if session.refresh_token:
        response.set_cookie(
            key=REFRESH_TOKEN_COOKIE,
            value=session.refresh_token,
            httponly=True,
            samesite="lax",
            secure=False,
            max_age=REFRESH_MAX_AGE_SECONDS,
            path="/",
        )


def _clear_session_cookies(response: Response) -> None:
    response.delete_cookie(key=ACCESS_TOKEN_COOKIE, path="/")
    response.delete_cookie(key=REFRESH_TOKEN_COOKIE, path="/")


def _sync_code_verifier(response: Response, gateway: SupabaseIdentityGateway) -> None:
    if gateway.code_verifier:
        response.set_cookie(
            key=CODE_VERIFIER_COOKIE,
            value=gateway.code_verifier,
            httponly=True,
            samesite="lax",
            secure=False,
            max_age=CODE_VERIFIER_MAX_AGE_SECONDS,
            path="/",
        )
    else:
        response.delete_cookie(key=CODE_VERIFIER_COOKIE, path="/")


def _gateway_http_error(exc: IdentityGatewayError) -> HTTPException:
    if exc.status is not None and 400 <= exc.status < 500:
        return HTTPException(status_code=exc.status, detail=str(exc))
    return HTTPException(status_code=502, detail=str(exc))


@router.post("/v1/auth/oauth/{provider}", response_model=OAuthSignInResponse)
def sign_in_with_oauth(
    provider: str,
    response: Response,
    req: OAuthSignInRequest | None = None,
    controller: SessionController = Depends(get_session_controller),
    gateway: SupabaseIdentityGateway = Depends(get_identity_gateway),
    pending_role_store: CookiePendingRoleStore = Depends(get_pending_role_store),
):
    selected_role = req.selected_role if req is not None else None
    try:
        url = controller.sign_in_with_oauth(provider, selected_role=selected_role)
    except (UnsupportedProviderError, InvalidRoleError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except IdentityGatewayError as exc:
        raise _gateway_http_error(exc) from exc

    _sync_code_verifier(response, gateway)
    pending_role_store.apply_to(response)
    return OAuthSignInResponse(url=url)


@router.post("/v1/auth/email-link", response_model=OkResponse)
def sign_in_with_email(
    req: EmailLinkRequest,
    response: Response,
    controller: SessionController = Depends(get_session_controller),
    gateway: SupabaseIdentityGateway = Depends(get_identity_gateway),
):
    try:
        controller.sign_in_with_email(req.email, req.full_name, req.role)
    except InvalidRoleError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except IdentityGatewayError as exc:
        raise _gateway_http_error(exc) from exc

    _sync_code_verifier(response, gateway)
    return OkResponse(ok=True)


@router.post("/v1/auth/login", response_model=SessionStateResponse)
def sign_in_with_password(
    req: LoginRequest,
    response: Response,
    controller: SessionController = Depends(get_session_controller),
    navigator: RecordingNavigator = Depends(get_navigator),
):
    controller.start()
    try:
        session = controller.sign_in_with_password(req.email, req.password)
    except IdentityGatewayError as exc:
        if exc.status in (400, 401):
            raise HTTPException(status_code=401, detail="Invalid credentials.") from exc
        raise _gateway_http_error(exc) from exc
    finally:
        controller.stop()

    _set_session_cookies(response, session)
    return session_state_response(controller.state, redirect_to=navigator.last_path)


@router.post("/v1/auth/password", response_model=OkResponse)
def update_password(
    req: UpdatePasswordRequest,
    controller: SessionController = Depends(get_session_controller),
):
    controller.start()
    try:
        controller.update_password(req.password)
    except NotAuthenticatedError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except InvalidPasswordError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except IdentityGatewayError as exc:
        raise _gateway_http_error(exc) from exc
    finally:
        controller.stop()
    return OkResponse(ok=True)


@router.post("/v1/auth/refresh", response_model=SessionStateResponse)
def refresh_session(
    response: Response,
    controller: SessionController = Depends(get_session_controller),
):
    controller.start()
    try:
        state = controller.refresh_session()
    except NotAuthenticatedError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except IdentityGatewayError as exc:
        raise _gateway_http_error(exc) from exc
    finally:
        controller.stop()

    _set_session_cookies(response, state.session)
    return session_state_response(state)


@router.post("/v1/auth/logout", response_model=OkResponse)
def sign_out(
    response: Response,
    controller: SessionController = Depends(get_session_controller),
    navigator: RecordingNavigator = Depends(get_navigator),
):
    controller.start()
    try:
        controller.sign_out()
    except IdentityGatewayError as exc:
        logger.warning("auth_router: sign_out_failed error=%s", exc)
    finally:
        controller.stop()
    _clear_session_cookies(response)
    return OkResponse(ok=True, redirect_to=navigator.last_path)


@router.get("/v1/auth/email-exists", response_model=EmailExistsResponse)
def check_email_exists(
    email: str = Query(..., min_length=3),
    controller: SessionController = Depends(get_session_controller),
):
    return EmailExistsResponse(exists=controller.check_email_exists(email))


@router.get("/v1/auth/email-role", response_model=RoleLookupResponse)
def check_user_role(
    email: str = Query(..., min_length=3),
    controller: SessionController = Depends(get_session_controller),
):
    lookup = controller.check_user_role(email)
    return RoleLookupResponse(exists=lookup.exists, role=lookup.role)


@router.get("/v1/auth/email-status", response_model=EmailStatusResponse)
def check_email_status(
    email: str = Query(..., min_length=3),
    controller: SessionController = Depends(get_session_controller),
):
    try:
        status = controller.check_email_status(email)
    except IdentityGatewayError as exc:
        raise _gateway_http_error(exc) from exc
    return EmailStatusResponse(
        exists=status.exists,
        verified=status.verified,
        has_password=status.has_password,
    )


@router.get("/auth/callback")
def auth_callback(
    code: str | None = None,
    next_path: str | None = Query(default=None, alias="next"),
    use_case: ExchangeAuthCodeUseCase = Depends(get_exchange_auth_code_use_case),
    controller: SessionController = Depends(get_session_controller),
    gateway: SupabaseIdentityGateway = Depends(get_identity_gateway),
    pending_role_store: CookiePendingRoleStore = Depends(get_pending_role_store),
):
    redirect_to, session = use_case.execute(code=code, next_path=next_path)
    response = RedirectResponse(url=redirect_to, status_code=307)
    if session is None:
        return response

    controller.start()
    controller.stop()
    _set_session_cookies(response, gateway.current_session or session)
    _sync_code_verifier(response, gateway)
    pending_role_store.apply_to(response)
    return response
