from __future__ import annotations

import logging

from stayhub.application.ports.profile_repository_port import ProfileRepositoryPort
from stayhub.domain.entities.user_profile import UserProfile


logger = logging.getLogger(__name__)


class GetUserProfileUseCase:
    def __init__(self, *, profile_port: ProfileRepositoryPort):
        self._profile_port = profile_port

    def execute(self, *, user_id: str) -> UserProfile | None:
        if not user_id:
            logger.warning("get_user_profile: called without user_id")
            return None
        try:
            return self._profile_port.get_by_id(user_id=user_id)
        except Exception:
            logger.exception("get_user_profile: fetch_failed user_id=%s", user_id)
            raise
