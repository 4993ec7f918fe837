from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Literal, Mapping


AuthProvider = Literal["email", "google", "facebook"]
OAuthProvider = Literal["google", "facebook"]

OAUTH_PROVIDERS: tuple[str, ...] = ("google", "facebook")


@dataclass(frozen=True)
class Identity:
    id: str
    email: str
    provider: AuthProvider
    has_password: bool
    attributes: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def is_email_provider(self) -> bool:
        return self.provider == "email"


@dataclass(frozen=True)
class Session:
    access_token: str
    refresh_token: str
    expires_at: datetime | None
    identity: Identity
