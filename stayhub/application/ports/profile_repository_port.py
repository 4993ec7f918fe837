from __future__ import annotations

from typing import Protocol

from stayhub.domain.entities.user_profile import UserProfile


class ProfileRepositoryPort(Protocol):
    def get_by_id(self, *, user_id: str) -> UserProfile | None:
        ...

    def get_by_email(self, *, email: str) -> UserProfile | None:
        ...

    def get_role(self, *, user_id: str) -> str | None:
        ...

    def set_role(self, *, user_id: str, role: str) -> bool:
        """Returns True only when an empty role was filled."""
        ...
