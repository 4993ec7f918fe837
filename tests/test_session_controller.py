from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

import pytest

from stayhub.application.dto.session import SessionState, UserAuthStatus
from stayhub.application.use_cases.session_controller import SessionController
from stayhub.domain.entities.identity import Identity, Session
from stayhub.domain.entities.user_profile import UserProfile
from stayhub.domain.exceptions import (
    IdentityGatewayError,
    InvalidPasswordError,
    InvalidRoleError,
    NotAuthenticatedError,
    UnsupportedProviderError,
)


def _identity(user_id: str = "user-1", *, provider: str = "email", has_password: bool = True) -> Identity:
    return Identity(
        id=user_id,
        email=f"{user_id}@example.com",
        provider=provider,
        has_password=has_password,
    )


def _session(identity: Identity, token: str = "access-1") -> Session:
    return Session(
        access_token=token,
        refresh_token=f"refresh-{token}",
        expires_at=datetime(2030, 1, 1, tzinfo=timezone.utc),
        identity=identity,
    )


def _profile(user_id: str = "user-1", role: str | None = "traveler") -> UserProfile:
    return UserProfile(
        id=user_id,
        name="Alice",
        email=f"{user_id}@example.com",
        role=role,
        profile_picture=None,
        phone=None,
        address=None,
        created_at=None,
        updated_at=None,
    )


class FakeGateway:
    def __init__(self, session: Session | None = None, *, replay_on_subscribe: bool = True):
        self.session = session
        self.replay_on_subscribe = replay_on_subscribe
        self.handlers = []
        self.oauth_calls: list[tuple[str, str]] = []
        self.otp_calls: list[dict] = []
        self.rpc_calls: list[tuple[str, dict]] = []
        self.attribute_updates: list[dict] = []
        self.statuses: dict[str, UserAuthStatus] = {}
        self.fail_get_session = False
        self.fail_rpc = False

    def get_session(self) -> Session | None:
        if self.fail_get_session:
            raise IdentityGatewayError("gateway down", status=503)
        return self.session

    def get_identity(self, *, access_token: str) -> Identity | None:
        _ = access_token
        return self.session.identity if self.session else None

    def sign_in_with_oauth(self, *, provider: str, redirect_to: str) -> str:
        self.oauth_calls.append((provider, redirect_to))
        return f"https://auth.example.com/authorize?provider={provider}"

    def sign_in_with_otp(self, *, email: str, redirect_to: str, data) -> None:
        self.otp_calls.append({"email": email, "redirect_to": redirect_to, "data": dict(data)})

    def sign_in_with_password(self, *, email: str, password: str) -> Session:
        if password != "secret123":
            raise IdentityGatewayError("Invalid login credentials", status=400)
        self.session = _session(_identity(email.split("@")[0]), token="access-login")
        self.emit("SIGNED_IN", self.session)
        return self.session

    def exchange_code_for_session(self, *, code: str) -> Session:
        raise NotImplementedError

    def refresh_session(self) -> Session | None:
        if self.session is None:
            return None
        self.session = replace(self.session, access_token="access-refreshed")
        self.emit("TOKEN_REFRESHED", self.session)
        return self.session

    def update_user_attributes(self, *, data):
        self.attribute_updates.append(dict(data))
        return self.session.identity

    def rpc(self, *, function: str, params):
        if self.fail_rpc:
            raise IdentityGatewayError("rpc failed", status=500)
        self.rpc_calls.append((function, dict(params)))
        return None

    def get_user_auth_status(self, *, user_id: str) -> UserAuthStatus | None:
        return self.statuses.get(user_id)

    def sign_out(self) -> None:
        self.session = None
        self.emit("SIGNED_OUT", None)

    def on_auth_state_change(self, handler):
        self.handlers.append(handler)
        if self.replay_on_subscribe:
            handler("INITIAL_SESSION", self.session)
        return lambda: self.handlers.remove(handler)

    def emit(self, event: str, session: Session | None) -> None:
        for handler in list(self.handlers):
            handler(event, session)


class FakeProfilePort:
    def __init__(self, *profiles: UserProfile):
        self.profiles = {profile.id: profile for profile in profiles}
        self.fail_get_by_id = False
        self.get_by_id_calls = 0

    def get_by_id(self, *, user_id: str) -> UserProfile | None:
        self.get_by_id_calls += 1
        if self.fail_get_by_id:
            raise RuntimeError("db unavailable")
        return self.profiles.get(user_id)

    def get_by_email(self, *, email: str) -> UserProfile | None:
        for profile in self.profiles.values():
            if profile.email == email:
                return profile
        return None

    def get_role(self, *, user_id: str) -> str | None:
        profile = self.profiles.get(user_id)
        return profile.role if profile else None

    def set_role(self, *, user_id: str, role: str) -> bool:
        profile = self.profiles.get(user_id)
        if profile is None or profile.role is not None:
            return False
        self.profiles[user_id] = replace(profile, role=role)
        return True


class FakePendingRoleStore:
    def __init__(self, value: str | None = None):
        self.value = value

    def get(self) -> str | None:
        return self.value

    def set(self, role: str) -> None:
        self.value = role

    def remove(self) -> None:
        self.value = None


class FakeNavigator:
    def __init__(self):
        self.history: list[str] = []

    def push(self, path: str) -> None:
        self.history.append(path)


def _controller(
    gateway: FakeGateway,
    profile_port: FakeProfilePort,
    pending: FakePendingRoleStore | None = None,
    navigator: FakeNavigator | None = None,
) -> SessionController:
    return SessionController(
        gateway=gateway,
        profile_port=profile_port,
        pending_role_store=pending or FakePendingRoleStore(),
        navigator=navigator or FakeNavigator(),
        redirect_base_url="https://stay.example.com/",
    )


def test_start_without_session_ends_anonymous_and_not_loading():
    controller = _controller(FakeGateway(), FakeProfilePort())

    state = controller.start()

    assert state.session is None
    assert state.identity is None
    assert state.profile is None
    assert state.loading is False


def test_start_with_session_loads_profile():
    identity = _identity()
    controller = _controller(FakeGateway(_session(identity)), FakeProfilePort(_profile()))

    state = controller.start()

    assert state.identity == identity
    assert state.profile is not None
    assert state.profile.role == "traveler"
    assert state.loading is False


def test_start_keeps_session_when_profile_fetch_fails():
    profiles = FakeProfilePort(_profile())
    profiles.fail_get_by_id = True
    controller = _controller(FakeGateway(_session(_identity())), profiles)

    state = controller.start()

    assert state.session is not None
    assert state.profile is None
    assert state.loading is False


def test_start_clears_loading_when_gateway_fails():
    gateway = FakeGateway()
    gateway.fail_get_session = True
    controller = _controller(gateway, FakeProfilePort())

    state = controller.start()

    assert state.loading is False
    assert state.session is None


def test_start_reconciles_pending_role_for_oauth_identity():
    identity = _identity(provider="google", has_password=False)
    gateway = FakeGateway(_session(identity))
    profiles = FakeProfilePort(_profile(role=None))
    pending = FakePendingRoleStore("owner")
    controller = _controller(gateway, profiles, pending)

    state = controller.start()

    assert profiles.profiles["user-1"].role == "owner"
    assert gateway.attribute_updates == [{"role": "owner"}]
    assert pending.value is None
    assert controller.last_reconciliation.outcome == "committed"
    assert state.profile.role == "owner"


def test_start_skips_reconciliation_for_email_identity():
    gateway = FakeGateway(_session(_identity(provider="email")))
    profiles = FakeProfilePort(_profile(role=None))
    pending = FakePendingRoleStore("owner")
    controller = _controller(gateway, profiles, pending)

    controller.start()

    assert profiles.profiles["user-1"].role is None
    assert pending.value == "owner"
    assert controller.last_reconciliation is None


def test_replayed_notification_after_subscribe_is_discarded():
    gateway = FakeGateway(_session(_identity()))
    profiles = FakeProfilePort(_profile())
    navigator = FakeNavigator()
    controller = _controller(gateway, profiles, navigator=navigator)

    controller.start()

    assert profiles.get_by_id_calls == 1
    assert navigator.history == []
    assert controller.skip_initial_event is False


def test_first_notification_is_discarded_even_if_it_is_not_a_replay():
    gateway = FakeGateway(_session(_identity()), replay_on_subscribe=False)
    controller = _controller(gateway, FakeProfilePort(_profile()))
    before = controller.start()

    gateway.emit("SIGNED_OUT", None)
    assert controller.state == before

    gateway.emit("SIGNED_OUT", None)
    assert controller.state.session is None
    assert controller.state.profile is None


def test_signed_in_event_loads_profile_and_navigates_home():
    navigator = FakeNavigator()
    gateway = FakeGateway()
    controller = _controller(gateway, FakeProfilePort(_profile("bob")), navigator=navigator)
    controller.start()

    session = controller.sign_in_with_password("bob@example.com", "secret123")

    assert controller.state.session == session
    assert controller.state.profile.id == "bob"
    assert navigator.history == ["/"]


def test_signed_in_event_with_profile_failure_does_not_navigate():
    navigator = FakeNavigator()
    profiles = FakeProfilePort(_profile("bob"))
    profiles.fail_get_by_id = True
    controller = _controller(FakeGateway(), profiles, navigator=navigator)
    controller.start()

    controller.sign_in_with_password("bob@example.com", "secret123")

    assert controller.state.identity.id == "bob"
    assert controller.state.profile is None
    assert controller.state.loading is False
    assert navigator.history == []


def test_sign_out_always_clears_profile():
    navigator = FakeNavigator()
    gateway = FakeGateway(_session(_identity()))
    controller = _controller(gateway, FakeProfilePort(_profile()), navigator=navigator)
    controller.start()
    assert controller.state.profile is not None

    controller.sign_out()

    assert controller.state.profile is None
    assert controller.state.session is None
    assert controller.state.identity is None
    assert navigator.history == ["/"]


def test_session_implies_identity_in_every_published_state():
    seen: list[SessionState] = []
    gateway = FakeGateway(_session(_identity()))
    controller = _controller(gateway, FakeProfilePort(_profile()))
    controller.on_change(seen.append)

    controller.start()
    controller.refresh_session()
    controller.sign_out()

    assert seen
    assert all(state.session is None or state.identity is not None for state in seen)


def test_unsubscribed_listener_stops_receiving_states():
    seen: list[SessionState] = []
    controller = _controller(FakeGateway(), FakeProfilePort())
    unsubscribe = controller.on_change(seen.append)
    unsubscribe()

    controller.start()

    assert seen == []


def test_password_sign_in_failure_is_rethrown():
    controller = _controller(FakeGateway(), FakeProfilePort())
    controller.start()

    with pytest.raises(IdentityGatewayError):
        controller.sign_in_with_password("bob@example.com", "wrong")


def test_sign_in_with_oauth_stores_pending_role_and_returns_url():
    gateway = FakeGateway()
    pending = FakePendingRoleStore()
    controller = _controller(gateway, FakeProfilePort(), pending)

    url = controller.sign_in_with_oauth("facebook", selected_role="owner")

    assert url.endswith("provider=facebook")
    assert pending.value == "owner"
    assert gateway.oauth_calls == [("facebook", "https://stay.example.com/auth/callback")]


def test_sign_in_with_oauth_rejects_unknown_provider():
    controller = _controller(FakeGateway(), FakeProfilePort())

    with pytest.raises(UnsupportedProviderError):
        controller.sign_in_with_oauth("github")


def test_sign_in_with_email_attaches_name_and_role():
    gateway = FakeGateway()
    controller = _controller(gateway, FakeProfilePort())

    controller.sign_in_with_email(" New@Example.com ", "New User", "traveler")

    assert gateway.otp_calls == [
        {
            "email": "new@example.com",
            "redirect_to": "https://stay.example.com/auth/callback",
            "data": {"full_name": "New User", "role": "traveler"},
        }
    ]


def test_sign_in_with_email_rejects_unknown_role():
    controller = _controller(FakeGateway(), FakeProfilePort())

    with pytest.raises(InvalidRoleError):
        controller.sign_in_with_email("new@example.com", "New User", "admin")


def test_update_password_calls_privileged_rpc():
    gateway = FakeGateway(_session(_identity(has_password=False)))
    controller = _controller(gateway, FakeProfilePort(_profile()))
    controller.start()

    controller.update_password("secret123")

    assert gateway.rpc_calls == [
        (
            "update_user_password_and_metadata",
            {"user_id": "user-1", "new_password": "secret123"},
        )
    ]


def test_update_password_requires_identity_and_minimum_length():
    anonymous = _controller(FakeGateway(), FakeProfilePort())
    anonymous.start()
    with pytest.raises(NotAuthenticatedError):
        anonymous.update_password("secret123")

    signed_in = _controller(FakeGateway(_session(_identity())), FakeProfilePort(_profile()))
    signed_in.start()
    with pytest.raises(InvalidPasswordError):
        signed_in.update_password("12345")


def test_update_password_rethrows_rpc_failure():
    gateway = FakeGateway(_session(_identity()))
    gateway.fail_rpc = True
    controller = _controller(gateway, FakeProfilePort(_profile()))
    controller.start()

    with pytest.raises(IdentityGatewayError):
        controller.update_password("secret123")


def test_refresh_session_replaces_session_and_refetches_profile():
    gateway = FakeGateway(_session(_identity()))
    profiles = FakeProfilePort(_profile())
    controller = _controller(gateway, profiles)
    controller.start()

    state = controller.refresh_session()

    assert state.session.access_token == "access-refreshed"
    assert profiles.get_by_id_calls == 2


def test_refresh_session_without_refreshable_session_is_rejected():
    controller = _controller(FakeGateway(), FakeProfilePort())
    controller.start()

    with pytest.raises(NotAuthenticatedError):
        controller.refresh_session()

    assert controller.state.session is None


def test_lookups_by_email():
    gateway = FakeGateway()
    profiles = FakeProfilePort(_profile("ann", role="owner"), _profile("ben", role=None))
    gateway.statuses["ann"] = UserAuthStatus(
        user_id="ann",
        email_confirmed_at="2024-05-01T10:00:00Z",
        has_password=True,
    )
    controller = _controller(gateway, profiles)

    assert controller.check_email_exists("ANN@example.com") is True
    assert controller.check_email_exists("nobody@example.com") is False

    role = controller.check_user_role("ann@example.com")
    assert role.exists is True
    assert role.role == "owner"
    assert controller.check_user_role("nobody@example.com").exists is False

    status = controller.check_email_status("ann@example.com")
    assert (status.exists, status.verified, status.has_password) == (True, True, True)
    assert controller.check_has_password("ann@example.com") is True

    unverified = controller.check_email_status("ben@example.com")
    assert (unverified.exists, unverified.verified, unverified.has_password) == (True, False, False)

    missing = controller.check_email_status("nobody@example.com")
    assert missing.exists is False


def test_stop_unsubscribes_from_gateway():
    gateway = FakeGateway(_session(_identity()))
    controller = _controller(gateway, FakeProfilePort(_profile()))
    controller.start()
    assert len(gateway.handlers) == 1

    controller.stop()

    assert gateway.handlers == []
