from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from stayhub.domain.entities.identity import Identity, Session
from stayhub.domain.entities.user_profile import UserProfile


AuthEvent = Literal[
    "INITIAL_SESSION",
    "SIGNED_IN",
    "SIGNED_OUT",
    "TOKEN_REFRESHED",
    "USER_UPDATED",
    "PASSWORD_RECOVERY",
]

ReconciliationOutcome = Literal["no_marker", "committed", "skipped", "failed"]


@dataclass(frozen=True)
class SessionState:
    identity: Identity | None
    profile: UserProfile | None
    session: Session | None
    loading: bool

    @property
    def is_authenticated(self) -> bool:
        return self.session is not None


@dataclass(frozen=True)
class ReconciliationResult:
    outcome: ReconciliationOutcome
    role: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class RoleLookup:
    exists: bool
    role: str | None


@dataclass(frozen=True)
class EmailStatus:
    exists: bool
    verified: bool
    has_password: bool


@dataclass(frozen=True)
class UserAuthStatus:
    user_id: str
    email_confirmed_at: str | None
    has_password: bool
