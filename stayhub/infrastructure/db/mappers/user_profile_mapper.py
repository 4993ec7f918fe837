from __future__ import annotations

from typing import Any, Mapping

from stayhub.domain.entities.user_profile import USER_ROLES, UserProfile


def _as_str(value: Any) -> str:
    return str(value)


def _role_or_none(value: Any) -> str | None:
    if value in USER_ROLES:
        return value
    return None


def map_row_to_user_profile(row: Mapping[str, Any]) -> UserProfile:
    return UserProfile(
        id=_as_str(row["id"]),
        name=row.get("name") or "",
        email=row["email"],
        role=_role_or_none(row.get("role")),
        profile_picture=row.get("profile_picture"),
        phone=row.get("phone"),
        address=row.get("address"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )
