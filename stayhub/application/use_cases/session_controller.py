from __future__ import annotations

import logging
from typing import Callable, TypeVar

from stayhub.application.dto.session import (
    AuthEvent,
    EmailStatus,
    ReconciliationResult,
    RoleLookup,
    SessionState,
)
from stayhub.application.ports.identity_gateway_port import IdentityGatewayPort, Unsubscribe
from stayhub.application.ports.navigator_port import NavigatorPort
from stayhub.application.ports.pending_role_store_port import PendingRoleStorePort
from stayhub.application.ports.profile_repository_port import ProfileRepositoryPort
from stayhub.domain.entities.identity import OAUTH_PROVIDERS, Identity, Session
from stayhub.domain.entities.user_profile import UserProfile
from stayhub.domain.exceptions import (
    InvalidPasswordError,
    NotAuthenticatedError,
    UnsupportedProviderError,
)

from .auth_common import (
    APP_ROOT_PATH,
    MIN_PASSWORD_LENGTH,
    build_callback_url,
    ensure_role,
    normalize_email,
)
from .get_user_profile import GetUserProfileUseCase
from .reconcile_role import ReconcileRoleUseCase


logger = logging.getLogger(__name__)

TResult = TypeVar("TResult")
StateListener = Callable[[SessionState], None]

UPDATE_PASSWORD_RPC = "update_user_password_and_metadata"


class SessionController:
    """Single source of truth for the current identity, profile and session.

    Lifecycle: ``start()`` resolves the stored session (Initializing), then
    subscribes to gateway notifications (Listening). The gateway replays the
    current state to every new subscriber; ``skip_initial_event`` is armed
    right before subscribing so that replay is dropped instead of being
    handled a second time.
    """

    def __init__(
        self,
        *,
        gateway: IdentityGatewayPort,
        profile_port: ProfileRepositoryPort,
        pending_role_store: PendingRoleStorePort,
        navigator: NavigatorPort,
        redirect_base_url: str,
    ):
        self._gateway = gateway
        self._profile_port = profile_port
        self._pending_role_store = pending_role_store
        self._navigator = navigator
        self._redirect_base_url = redirect_base_url
        self._get_user_profile = GetUserProfileUseCase(profile_port=profile_port)
        self._reconcile_role = ReconcileRoleUseCase(
            gateway=gateway,
            profile_port=profile_port,
            pending_role_store=pending_role_store,
        )

        self._identity: Identity | None = None
        self._profile: UserProfile | None = None
        self._session: Session | None = None
        self._loading = True
        self._listeners: list[StateListener] = []
        self._unsubscribe_gateway: Unsubscribe | None = None

        self.skip_initial_event = False
        self.last_reconciliation: ReconciliationResult | None = None

    @property
    def state(self) -> SessionState:
        return SessionState(
            identity=self._identity,
            profile=self._profile,
            session=self._session,
            loading=self._loading,
        )

    def on_change(self, handler: StateListener) -> Unsubscribe:
        self._listeners.append(handler)

        def _unsubscribe() -> None:
            if handler in self._listeners:
                self._listeners.remove(handler)

        return _unsubscribe

    def start(self) -> SessionState:
        if self._unsubscribe_gateway is not None:
            return self.state
        self._initialize()
        self.skip_initial_event = True
        self._unsubscribe_gateway = self._gateway.on_auth_state_change(self._handle_auth_event)
        return self.state

    def stop(self) -> None:
        if self._unsubscribe_gateway is None:
            return
        self._unsubscribe_gateway()
        self._unsubscribe_gateway = None
        self.skip_initial_event = False

    def sign_in_with_oauth(self, provider: str, *, selected_role: str | None = None) -> str:
        if provider not in OAUTH_PROVIDERS:
            raise UnsupportedProviderError(f"Unsupported OAuth provider '{provider}'.")
        if selected_role is not None:
            self._pending_role_store.set(ensure_role(selected_role))
        return self._guarded(
            f"sign_in_with_{provider}",
            lambda: self._gateway.sign_in_with_oauth(
                provider=provider,
                redirect_to=build_callback_url(self._redirect_base_url),
            ),
        )

    def sign_in_with_email(self, email: str, full_name: str, role: str) -> None:
        data = {"full_name": full_name, "role": ensure_role(role)}
        self._guarded(
            "sign_in_with_email",
            lambda: self._gateway.sign_in_with_otp(
                email=normalize_email(email),
                redirect_to=build_callback_url(self._redirect_base_url),
                data=data,
            ),
        )

    def sign_in_with_password(self, email: str, password: str) -> Session:
        return self._guarded(
            "sign_in_with_password",
            lambda: self._gateway.sign_in_with_password(
                email=normalize_email(email),
                password=password,
            ),
        )

    def update_password(self, password: str) -> None:
        if self._identity is None:
            raise NotAuthenticatedError("A signed-in user is required to set a password.")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidPasswordError(
                f"password must have at least {MIN_PASSWORD_LENGTH} characters."
            )
        user_id = self._identity.id
        self._guarded(
            "update_password",
            lambda: self._gateway.rpc(
                function=UPDATE_PASSWORD_RPC,
                params={"user_id": user_id, "new_password": password},
            ),
        )

    def refresh_session(self) -> SessionState:
        def _refresh() -> None:
            session = self._gateway.refresh_session()
            if session is None:
                raise NotAuthenticatedError("No refresh token.")
            self._apply_session(session)
            self._load_profile(session.identity.id)

        self._guarded("refresh_session", _refresh)
        return self.state

    def sign_out(self) -> None:
        self._guarded("sign_out", self._gateway.sign_out)

    def check_email_exists(self, email: str) -> bool:
        profile = self._guarded(
            "check_email_exists",
            lambda: self._profile_port.get_by_email(email=normalize_email(email)),
        )
        return profile is not None

    def check_user_role(self, email: str) -> RoleLookup:
        profile = self._guarded(
            "check_user_role",
            lambda: self._profile_port.get_by_email(email=normalize_email(email)),
        )
        if profile is None:
            return RoleLookup(exists=False, role=None)
        return RoleLookup(exists=True, role=profile.role)

    def check_email_status(self, email: str) -> EmailStatus:
        def _status() -> EmailStatus:
            profile = self._profile_port.get_by_email(email=normalize_email(email))
            if profile is None:
                return EmailStatus(exists=False, verified=False, has_password=False)
            status = self._gateway.get_user_auth_status(user_id=profile.id)
            if status is None:
                return EmailStatus(exists=True, verified=False, has_password=False)
            return EmailStatus(
                exists=True,
                verified=bool(status.email_confirmed_at),
                has_password=status.has_password,
            )

        return self._guarded("check_email_status", _status)

    def check_has_password(self, email: str) -> bool:
        return self.check_email_status(email).has_password

    def _initialize(self) -> None:
        self._set_loading(True)
        try:
            session = self._gateway.get_session()
            self._apply_session(session)
            if session is not None:
                identity = session.identity
                if not identity.is_email_provider:
                    self.last_reconciliation = self._reconcile_role.execute(user_id=identity.id)
                try:
                    self._load_profile(identity.id)
                except Exception as exc:  # noqa: BLE001
                    logger.error(
                        "session_controller: initial_profile_failed user_id=%s error=%s",
                        identity.id,
                        exc,
                    )
        except Exception as exc:  # noqa: BLE001
            logger.error("session_controller: initialize_failed error=%s", exc)
        finally:
            self._set_loading(False)

    def _handle_auth_event(self, event: AuthEvent, session: Session | None) -> None:
        if self.skip_initial_event:
            self.skip_initial_event = False
            logger.debug("session_controller: replayed_event_discarded event=%s", event)
            return

        try:
            self._apply_session(session)
            if event == "SIGNED_IN" and session is not None:
                try:
                    self._load_profile(session.identity.id)
                    self._navigator.push(APP_ROOT_PATH)
                except Exception as exc:  # noqa: BLE001
                    logger.error(
                        "session_controller: sign_in_profile_failed user_id=%s error=%s",
                        session.identity.id,
                        exc,
                    )
            elif event == "SIGNED_OUT":
                self._profile = None
                self._navigator.push(APP_ROOT_PATH)
        except Exception as exc:  # noqa: BLE001
            logger.error("session_controller: auth_event_failed event=%s error=%s", event, exc)
        finally:
            self._set_loading(False)

    def _apply_session(self, session: Session | None) -> None:
        self._session = session
        self._identity = session.identity if session is not None else None
        if session is None:
            self._profile = None
        self._notify()

    def _load_profile(self, user_id: str) -> None:
        try:
            self._profile = self._get_user_profile.execute(user_id=user_id)
        except Exception:
            self._profile = None
            raise
        finally:
            self._notify()

    def _set_loading(self, loading: bool) -> None:
        self._loading = loading
        self._notify()

    def _notify(self) -> None:
        state = self.state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as exc:  # noqa: BLE001
                logger.warning("session_controller: listener_failed error=%s", exc)

    def _guarded(self, operation: str, fn: Callable[[], TResult]) -> TResult:
        try:
            return fn()
        except Exception as exc:
            logger.error("session_controller: %s_failed error=%s", operation, exc)
            raise
