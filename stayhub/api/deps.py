from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, Header, HTTPException, Request

from stayhub.api.navigation import RecordingNavigator
from stayhub.application.use_cases.exchange_auth_code import ExchangeAuthCodeUseCase
from stayhub.application.use_cases.get_property_detail import GetPropertyDetailUseCase
from stayhub.application.use_cases.manage_peak_seasons import ManagePeakSeasonsUseCase
from stayhub.application.use_cases.manage_rooms import ManageRoomsUseCase
from stayhub.application.use_cases.route_guard import RouteGuardUseCase
from stayhub.application.use_cases.session_controller import SessionController
from stayhub.application.use_cases.upload_profile_picture import UploadProfilePictureUseCase
from stayhub.infrastructure.clients.booking_api_client import (
    BookingApiClient,
    BookingApiClientSettings,
)
from stayhub.infrastructure.clients.supabase_identity_gateway import (
    StoredTokens,
    SupabaseGatewaySettings,
    SupabaseIdentityGateway,
)
from stayhub.infrastructure.db.engine import get_engine
from stayhub.infrastructure.db.repositories.profile_repository import SqlProfileRepository
from stayhub.infrastructure.security.jwt_session_decoder import JwtSessionDecoder
from stayhub.infrastructure.storage.cookie_pending_role_store import CookiePendingRoleStore
from stayhub.shared.config import get_settings


ACCESS_TOKEN_COOKIE = "sb-access-token"
REFRESH_TOKEN_COOKIE = "sb-refresh-token"
CODE_VERIFIER_COOKIE = "sb-code-verifier"


def bearer_token(authorization: str | None) -> str | None:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization.replace("Bearer ", "", 1).strip()
    return token or None


def request_access_token(request: Request) -> str | None:
    return bearer_token(request.headers.get("authorization")) or request.cookies.get(
        ACCESS_TOKEN_COOKIE
    )


def _get_db_engine():
    settings = get_settings()
    if not settings.postgres_dsn:
        raise HTTPException(status_code=500, detail="POSTGRES_DSN is required.")
    return get_engine(settings.postgres_dsn)


def get_profile_repository() -> SqlProfileRepository:
    return SqlProfileRepository(_get_db_engine())


@lru_cache(maxsize=1)
def get_session_decoder() -> JwtSessionDecoder:
    settings = get_settings()
    if not settings.supabase_jwt_secret:
        raise HTTPException(status_code=500, detail="SUPABASE_JWT_SECRET is required.")
    return JwtSessionDecoder(jwt_secret=settings.supabase_jwt_secret)


def get_identity_gateway(request: Request) -> SupabaseIdentityGateway:
    settings = get_settings()
    if not settings.supabase_url or not settings.supabase_anon_key:
        raise HTTPException(
            status_code=500,
            detail="SUPABASE_URL and SUPABASE_ANON_KEY are required.",
        )
    access_token = request_access_token(request)
    refresh_token = request.cookies.get(REFRESH_TOKEN_COOKIE)
    stored_tokens = None
    if access_token or refresh_token:
        stored_tokens = StoredTokens(access_token=access_token, refresh_token=refresh_token)
    return SupabaseIdentityGateway(
        SupabaseGatewaySettings(
            url=settings.supabase_url,
            anon_key=settings.supabase_anon_key,
            timeout_seconds=settings.gateway_timeout_seconds,
        ),
        stored_tokens=stored_tokens,
        code_verifier=request.cookies.get(CODE_VERIFIER_COOKIE),
    )


def get_pending_role_store(request: Request) -> CookiePendingRoleStore:
    return CookiePendingRoleStore(request.cookies)


def get_navigator() -> RecordingNavigator:
    return RecordingNavigator()


def get_session_controller(
    gateway: SupabaseIdentityGateway = Depends(get_identity_gateway),
    pending_role_store: CookiePendingRoleStore = Depends(get_pending_role_store),
    navigator: RecordingNavigator = Depends(get_navigator),
    profile_port: SqlProfileRepository = Depends(get_profile_repository),
) -> SessionController:
    settings = get_settings()
    return SessionController(
        gateway=gateway,
        profile_port=profile_port,
        pending_role_store=pending_role_store,
        navigator=navigator,
        redirect_base_url=settings.site_url,
    )


def get_exchange_auth_code_use_case(
    gateway: SupabaseIdentityGateway = Depends(get_identity_gateway),
) -> ExchangeAuthCodeUseCase:
    return ExchangeAuthCodeUseCase(gateway=gateway)


def get_route_guard_use_case() -> RouteGuardUseCase:
    settings = get_settings()
    return RouteGuardUseCase(
        profile_port=get_profile_repository(),
        fail_open=settings.route_guard_fail_open,
    )


@lru_cache(maxsize=1)
def _get_booking_api_client() -> BookingApiClient:
    settings = get_settings()
    if not settings.api_url:
        raise HTTPException(status_code=500, detail="API_URL is required.")
    return BookingApiClient(
        BookingApiClientSettings(
            api_base=settings.api_url,
            timeout_seconds=settings.booking_api_timeout_seconds,
        )
    )


def get_manage_peak_seasons_use_case() -> ManagePeakSeasonsUseCase:
    return ManagePeakSeasonsUseCase(booking_api=_get_booking_api_client())


def get_upload_profile_picture_use_case() -> UploadProfilePictureUseCase:
    return UploadProfilePictureUseCase(booking_api=_get_booking_api_client())


def get_manage_rooms_use_case() -> ManageRoomsUseCase:
    return ManageRoomsUseCase(booking_api=_get_booking_api_client())


def get_property_detail_use_case() -> GetPropertyDetailUseCase:
    return GetPropertyDetailUseCase(booking_api=_get_booking_api_client())


def require_access_token(
    authorization: str | None = Header(default=None),
) -> str:
    token = bearer_token(authorization)
    if token is None:
        raise HTTPException(status_code=401, detail="Invalid token.")
    return token
