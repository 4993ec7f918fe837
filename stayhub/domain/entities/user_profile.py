from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal


UserRole = Literal["traveler", "owner"]

USER_ROLES: tuple[str, ...] = ("traveler", "owner")


@dataclass(frozen=True)
class UserProfile:
    id: str
    name: str
    email: str
    role: UserRole | None
    profile_picture: str | None
    phone: str | None
    address: str | None
    created_at: datetime | None
    updated_at: datetime | None
