from __future__ import annotations

import base64
import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Mapping
from urllib.parse import urlencode

import httpx

from stayhub.application.dto.session import AuthEvent, UserAuthStatus
from stayhub.application.ports.identity_gateway_port import (
    AuthStateHandler,
    IdentityGatewayPort,
    Unsubscribe,
)
from stayhub.domain.entities.identity import Identity, OAuthProvider, Session
from stayhub.domain.exceptions import AuthCodeExchangeError, IdentityGatewayError


logger = logging.getLogger(__name__)

USER_AUTH_STATUS_RPC = "get_user_auth_status"


@dataclass(frozen=True)
class SupabaseGatewaySettings:
    url: str
    anon_key: str
    timeout_seconds: float


@dataclass(frozen=True)
class StoredTokens:
    access_token: str | None
    refresh_token: str | None


class SupabaseIdentityGateway(IdentityGatewayPort):
    """Identity gateway backed by the Supabase auth (GoTrue) and PostgREST APIs.

    One instance holds at most one live session. Subscribers registered with
    ``on_auth_state_change`` get an ``INITIAL_SESSION`` replay of the current
    session as soon as they subscribe, then every later transition.
    """

    def __init__(
        self,
        settings: SupabaseGatewaySettings,
        *,
        stored_tokens: StoredTokens | None = None,
        code_verifier: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self._settings = settings
        self._stored_tokens = stored_tokens
        self._transport = transport
        self._session: Session | None = None
        self._handlers: list[AuthStateHandler] = []
        self.code_verifier = code_verifier

    @property
    def current_session(self) -> Session | None:
        return self._session

    def get_session(self) -> Session | None:
        if self._session is None and self._stored_tokens is not None:
            self._session = self._restore(self._stored_tokens)
            self._stored_tokens = None
        session = self._session
        if session is not None and _is_expired(session) and session.refresh_token:
            logger.info("supabase_gateway: session_expired user_id=%s", session.identity.id)
            self._session = self._grant("refresh_token", {"refresh_token": session.refresh_token})
            self._emit("TOKEN_REFRESHED")
        return self._session

    def get_identity(self, *, access_token: str) -> Identity | None:
        try:
            payload = self._request("GET", "/auth/v1/user", access_token=access_token)
        except IdentityGatewayError as exc:
            if exc.status in (401, 403):
                return None
            raise
        return _identity_from_user(payload)

    def sign_in_with_oauth(self, *, provider: OAuthProvider, redirect_to: str) -> str:
        verifier, challenge = _pkce_pair()
        self.code_verifier = verifier
        query = urlencode(
            {
                "provider": provider,
                "redirect_to": redirect_to,
                "code_challenge": challenge,
                "code_challenge_method": "s256",
            }
        )
        return f"{self._base_url}/auth/v1/authorize?{query}"

    def sign_in_with_otp(
        self,
        *,
        email: str,
        redirect_to: str,
        data: Mapping[str, Any],
    ) -> None:
        verifier, challenge = _pkce_pair()
        self.code_verifier = verifier
        self._request(
            "POST",
            "/auth/v1/otp",
            params={"redirect_to": redirect_to},
            json={
                "email": email,
                "data": dict(data),
                "create_user": True,
                "code_challenge": challenge,
                "code_challenge_method": "s256",
            },
        )
        logger.info("supabase_gateway: otp_sent email=%s", email)

    def sign_in_with_password(self, *, email: str, password: str) -> Session:
        self._session = self._grant("password", {"email": email, "password": password})
        self._emit("SIGNED_IN")
        return self._session

    def exchange_code_for_session(self, *, code: str) -> Session:
        if not self.code_verifier:
            raise AuthCodeExchangeError("Missing PKCE code verifier for auth code exchange.")
        self._session = self._grant(
            "pkce",
            {"auth_code": code, "code_verifier": self.code_verifier},
        )
        self.code_verifier = None
        self._emit("SIGNED_IN")
        return self._session

    def refresh_session(self) -> Session | None:
        session = self.get_session()
        if session is None or not session.refresh_token:
            return None
        self._session = self._grant("refresh_token", {"refresh_token": session.refresh_token})
        self._emit("TOKEN_REFRESHED")
        return self._session

    def update_user_attributes(self, *, data: Mapping[str, Any]) -> Identity:
        session = self._require_session()
        payload = self._request(
            "PUT",
            "/auth/v1/user",
            access_token=session.access_token,
            json={"data": dict(data)},
        )
        identity = _identity_from_user(payload)
        self._session = Session(
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            expires_at=session.expires_at,
            identity=identity,
        )
        self._emit("USER_UPDATED")
        return identity

    def rpc(self, *, function: str, params: Mapping[str, Any]) -> Any:
        access_token = self._session.access_token if self._session is not None else None
        return self._request(
            "POST",
            f"/rest/v1/rpc/{function}",
            access_token=access_token,
            json=dict(params),
        )

    def get_user_auth_status(self, *, user_id: str) -> UserAuthStatus | None:
        payload = self.rpc(function=USER_AUTH_STATUS_RPC, params={"user_id": user_id})
        if isinstance(payload, list):
            payload = payload[0] if payload else None
        if not payload:
            return None
        return UserAuthStatus(
            user_id=str(payload.get("id") or user_id),
            email_confirmed_at=payload.get("email_confirmed_at"),
            has_password=bool(payload.get("has_password")),
        )

    def sign_out(self) -> None:
        session = self.get_session()
        if session is not None:
            self._request("POST", "/auth/v1/logout", access_token=session.access_token)
        self._session = None
        self._stored_tokens = None
        self._emit("SIGNED_OUT")

    def on_auth_state_change(self, handler: AuthStateHandler) -> Unsubscribe:
        self._handlers.append(handler)
        handler("INITIAL_SESSION", self._session)

        def _unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return _unsubscribe

    @property
    def _base_url(self) -> str:
        return self._settings.url.rstrip("/")

    def _restore(self, tokens: StoredTokens) -> Session | None:
        identity = None
        if tokens.access_token:
            identity = self.get_identity(access_token=tokens.access_token)
        if identity is not None and tokens.access_token:
            return Session(
                access_token=tokens.access_token,
                refresh_token=tokens.refresh_token or "",
                expires_at=None,
                identity=identity,
            )
        if not tokens.refresh_token:
            return None
        try:
            return self._grant("refresh_token", {"refresh_token": tokens.refresh_token})
        except IdentityGatewayError as exc:
            logger.warning("supabase_gateway: restore_failed error=%s", exc)
            return None

    def _require_session(self) -> Session:
        session = self.get_session()
        if session is None:
            raise IdentityGatewayError("No active session.", code="session_missing", status=401)
        return session

    def _grant(self, grant_type: str, body: dict) -> Session:
        payload = self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": grant_type},
            json=body,
        )
        return _session_from_payload(payload)

    def _emit(self, event: AuthEvent) -> None:
        session = self._session
        for handler in list(self._handlers):
            handler(event, session)

    def _request(
        self,
        method: str,
        path: str,
        *,
        access_token: str | None = None,
        params: dict | None = None,
        json: dict | None = None,
    ) -> Any:
        headers = {
            "apikey": self._settings.anon_key,
            "Authorization": f"Bearer {access_token or self._settings.anon_key}",
        }
        try:
            with httpx.Client(
                timeout=self._settings.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = client.request(
                    method,
                    f"{self._base_url}{path}",
                    headers=headers,
                    params=params,
                    json=json,
                )
        except httpx.HTTPError as exc:
            logger.warning("supabase_gateway: request_failed path=%s error=%s", path, exc)
            raise IdentityGatewayError(f"Identity gateway unreachable: {exc}") from exc

        if response.status_code >= 400:
            raise _error_from_response(response)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()


def _error_from_response(response: httpx.Response) -> IdentityGatewayError:
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    message = (
        body.get("msg")
        or body.get("error_description")
        or body.get("message")
        or f"Identity gateway returned HTTP {response.status_code}."
    )
    code = body.get("error_code") or body.get("code") or body.get("error")
    return IdentityGatewayError(str(message), code=code, status=response.status_code)


def _identity_from_user(user: Mapping[str, Any]) -> Identity:
    app_metadata = user.get("app_metadata") or {}
    user_metadata = user.get("user_metadata") or {}
    return Identity(
        id=str(user["id"]),
        email=str(user.get("email") or ""),
        provider=app_metadata.get("provider") or "email",
        has_password=bool(app_metadata.get("has_password")),
        attributes=MappingProxyType(dict(user_metadata)),
    )


def _session_from_payload(payload: Mapping[str, Any]) -> Session:
    expires_at_raw = payload.get("expires_at")
    expires_at = (
        datetime.fromtimestamp(int(expires_at_raw), tz=timezone.utc)
        if expires_at_raw is not None
        else None
    )
    return Session(
        access_token=payload["access_token"],
        refresh_token=payload.get("refresh_token") or "",
        expires_at=expires_at,
        identity=_identity_from_user(payload["user"]),
    )


def _is_expired(session: Session) -> bool:
    if session.expires_at is None:
        return False
    return session.expires_at <= datetime.now(timezone.utc)


def _pkce_pair() -> tuple[str, str]:
    verifier = secrets.token_urlsafe(48)
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    challenge = base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")
    return verifier, challenge
