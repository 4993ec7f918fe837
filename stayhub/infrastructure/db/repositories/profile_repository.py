from __future__ import annotations

from sqlalchemy import text

from stayhub.application.ports.profile_repository_port import ProfileRepositoryPort
from stayhub.infrastructure.db.mappers.user_profile_mapper import map_row_to_user_profile


_PROFILE_COLUMNS = """
    id, name, email, role, profile_picture, phone, address, created_at, updated_at
"""


class SqlProfileRepository(ProfileRepositoryPort):
    def __init__(self, engine):
        self._engine = engine

    def get_by_id(self, *, user_id: str):
        sql = f"""
            SELECT {_PROFILE_COLUMNS}
            FROM public.users
            WHERE id = :user_id
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"user_id": user_id}).mappings().first()
        if row is None:
            return None
        return map_row_to_user_profile(row)

    def get_by_email(self, *, email: str):
        sql = f"""
            SELECT {_PROFILE_COLUMNS}
            FROM public.users
            WHERE lower(email) = :email
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"email": email.lower()}).mappings().first()
        if row is None:
            return None
        return map_row_to_user_profile(row)

    def get_role(self, *, user_id: str) -> str | None:
        sql = """
            SELECT role
            FROM public.users
            WHERE id = :user_id
            LIMIT 1
        """
        with self._engine.connect() as conn:
            row = conn.execute(text(sql), {"user_id": user_id}).mappings().first()
        if row is None:
            return None
        return row["role"]

    def set_role(self, *, user_id: str, role: str) -> bool:
        # Only fills an empty role; a stored role is left untouched.
        sql = """
            UPDATE public.users
            SET role = :role,
                updated_at = now()
            WHERE id = :user_id
              AND role IS NULL
        """
        with self._engine.begin() as conn:
            result = conn.execute(text(sql), {"user_id": user_id, "role": role})
        return result.rowcount == 1
