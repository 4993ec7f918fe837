from __future__ import annotations

from typing import Any, Callable, Mapping, Protocol

from stayhub.application.dto.session import AuthEvent, UserAuthStatus
from stayhub.domain.entities.identity import Identity, OAuthProvider, Session


AuthStateHandler = Callable[[AuthEvent, Session | None], None]
Unsubscribe = Callable[[], None]


class IdentityGatewayPort(Protocol):
    def get_session(self) -> Session | None:
        ...

    def get_identity(self, *, access_token: str) -> Identity | None:
        ...

    def sign_in_with_oauth(self, *, provider: OAuthProvider, redirect_to: str) -> str:
        ...

    def sign_in_with_otp(
        self,
        *,
        email: str,
        redirect_to: str,
        data: Mapping[str, Any],
    ) -> None:
        ...

    def sign_in_with_password(self, *, email: str, password: str) -> Session:
        ...

    def exchange_code_for_session(self, *, code: str) -> Session:
        ...

    def refresh_session(self) -> Session | None:
        ...

    def update_user_attributes(self, *, data: Mapping[str, Any]) -> Identity:
        ...

    def rpc(self, *, function: str, params: Mapping[str, Any]) -> Any:
        ...

    def get_user_auth_status(self, *, user_id: str) -> UserAuthStatus | None:
        ...

    def sign_out(self) -> None:
        ...

    def on_auth_state_change(self, handler: AuthStateHandler) -> Unsubscribe:
        ...
