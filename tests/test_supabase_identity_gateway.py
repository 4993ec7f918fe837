from __future__ import annotations

import json
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from stayhub.domain.exceptions import AuthCodeExchangeError, IdentityGatewayError
from stayhub.infrastructure.clients.supabase_identity_gateway import (
    StoredTokens,
    SupabaseGatewaySettings,
    SupabaseIdentityGateway,
)


def _user_payload(user_id: str = "user-1", *, provider: str = "email") -> dict:
    return {
        "id": user_id,
        "email": f"{user_id}@example.com",
        "app_metadata": {"provider": provider, "has_password": provider == "email"},
        "user_metadata": {"full_name": "Alice"},
    }


def _token_payload(access_token: str = "access-1", *, expires_at: int = 4102444800) -> dict:
    return {
        "access_token": access_token,
        "refresh_token": f"refresh-{access_token}",
        "expires_at": expires_at,
        "user": _user_payload(),
    }


def _make_gateway(handler, **kwargs) -> SupabaseIdentityGateway:
    return SupabaseIdentityGateway(
        SupabaseGatewaySettings(
            url="https://project.supabase.co/",
            anon_key="anon-key",
            timeout_seconds=5,
        ),
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def test_password_sign_in_emits_signed_in_and_builds_session():
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=_token_payload())

    gateway = _make_gateway(handler)
    events: list[tuple[str, str | None]] = []
    gateway.on_auth_state_change(
        lambda event, session: events.append((event, session.access_token if session else None))
    )

    session = gateway.sign_in_with_password(email="user-1@example.com", password="secret123")

    assert session.identity.id == "user-1"
    assert session.identity.has_password is True
    assert session.identity.attributes["full_name"] == "Alice"
    assert events == [("INITIAL_SESSION", None), ("SIGNED_IN", "access-1")]
    assert requests[0].url.path == "/auth/v1/token"
    assert requests[0].url.params["grant_type"] == "password"
    assert requests[0].headers["apikey"] == "anon-key"
    assert json.loads(requests[0].content) == {
        "email": "user-1@example.com",
        "password": "secret123",
    }


def test_subscribe_replays_current_session_and_unsubscribe_stops_events():
    gateway = _make_gateway(lambda request: httpx.Response(200, json=_token_payload()))
    gateway.sign_in_with_password(email="user-1@example.com", password="secret123")
    events: list[str] = []

    unsubscribe = gateway.on_auth_state_change(lambda event, session: events.append(event))
    unsubscribe()
    gateway.refresh_session()

    assert events == ["INITIAL_SESSION"]


def test_get_session_restores_stored_access_token():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/auth/v1/user"
        assert request.headers["authorization"] == "Bearer stored-access"
        return httpx.Response(200, json=_user_payload())

    gateway = _make_gateway(
        handler,
        stored_tokens=StoredTokens(access_token="stored-access", refresh_token="stored-refresh"),
    )

    session = gateway.get_session()

    assert session.access_token == "stored-access"
    assert session.refresh_token == "stored-refresh"
    assert session.identity.email == "user-1@example.com"


def test_get_session_falls_back_to_refresh_grant_when_access_token_rejected():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/auth/v1/user":
            return httpx.Response(401, json={"msg": "JWT expired"})
        assert request.url.params["grant_type"] == "refresh_token"
        return httpx.Response(200, json=_token_payload("access-2"))

    gateway = _make_gateway(
        handler,
        stored_tokens=StoredTokens(access_token="stale", refresh_token="stored-refresh"),
    )

    assert gateway.get_session().access_token == "access-2"


def test_get_session_without_tokens_is_anonymous():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"unexpected request {request.url}")

    assert _make_gateway(handler).get_session() is None


def test_oauth_url_carries_provider_redirect_and_pkce_challenge():
    gateway = _make_gateway(lambda request: httpx.Response(500))

    url = gateway.sign_in_with_oauth(
        provider="google",
        redirect_to="https://stay.example.com/auth/callback",
    )

    parsed = urlparse(url)
    query = parse_qs(parsed.query)
    assert parsed.netloc == "project.supabase.co"
    assert parsed.path == "/auth/v1/authorize"
    assert query["provider"] == ["google"]
    assert query["redirect_to"] == ["https://stay.example.com/auth/callback"]
    assert query["code_challenge_method"] == ["s256"]
    assert gateway.code_verifier


def test_exchange_code_requires_verifier():
    gateway = _make_gateway(lambda request: httpx.Response(200, json=_token_payload()))

    with pytest.raises(AuthCodeExchangeError):
        gateway.exchange_code_for_session(code="abc")


def test_exchange_code_uses_pkce_grant_and_consumes_verifier():
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["grant_type"] == "pkce"
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json=_token_payload())

    gateway = _make_gateway(handler, code_verifier="verifier-1")

    session = gateway.exchange_code_for_session(code="abc")

    assert session.access_token == "access-1"
    assert bodies == [{"auth_code": "abc", "code_verifier": "verifier-1"}]
    assert gateway.code_verifier is None


def test_error_response_is_mapped_to_gateway_error():
    gateway = _make_gateway(
        lambda request: httpx.Response(
            400,
            json={"error_code": "invalid_credentials", "msg": "Invalid login credentials"},
        )
    )

    with pytest.raises(IdentityGatewayError) as exc_info:
        gateway.sign_in_with_password(email="user-1@example.com", password="wrong")

    assert exc_info.value.status == 400
    assert exc_info.value.code == "invalid_credentials"
    assert str(exc_info.value) == "Invalid login credentials"


def test_transport_failure_is_mapped_to_gateway_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(IdentityGatewayError):
        _make_gateway(handler).sign_in_with_password(email="a@example.com", password="secret123")


def test_user_auth_status_reads_rpc_row():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/rest/v1/rpc/get_user_auth_status"
        assert json.loads(request.content) == {"user_id": "user-1"}
        return httpx.Response(
            200,
            json=[{"id": "user-1", "email_confirmed_at": "2024-05-01T10:00:00Z", "has_password": True}],
        )

    status = _make_gateway(handler).get_user_auth_status(user_id="user-1")

    assert status.email_confirmed_at == "2024-05-01T10:00:00Z"
    assert status.has_password is True


def test_sign_out_clears_session_and_emits_signed_out():
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        if request.url.path == "/auth/v1/logout":
            return httpx.Response(204)
        return httpx.Response(200, json=_token_payload())

    gateway = _make_gateway(handler)
    gateway.sign_in_with_password(email="user-1@example.com", password="secret123")
    events: list[str] = []
    gateway.on_auth_state_change(lambda event, session: events.append(event))

    gateway.sign_out()

    assert gateway.current_session is None
    assert events == ["INITIAL_SESSION", "SIGNED_OUT"]
    assert paths[-1] == "/auth/v1/logout"
