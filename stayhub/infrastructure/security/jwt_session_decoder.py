from __future__ import annotations

from types import MappingProxyType

import jwt

from stayhub.application.ports.session_decoder_port import SessionDecoderPort
from stayhub.domain.entities.identity import Identity


class JwtSessionDecoder(SessionDecoderPort):
    """Resolves a gateway-issued access token to an identity without a network call."""

    def __init__(self, *, jwt_secret: str, audience: str = "authenticated"):
        self._jwt_secret = jwt_secret
        self._audience = audience

    def decode(self, *, access_token: str) -> Identity:
        try:
            payload = jwt.decode(
                access_token,
                self._jwt_secret,
                algorithms=["HS256"],
                audience=self._audience,
            )
        except jwt.PyJWTError as exc:
            raise ValueError("Invalid access token.") from exc

        user_id = payload.get("sub")
        if not user_id or not isinstance(user_id, str):
            raise ValueError("Invalid token subject.")

        app_metadata = payload.get("app_metadata") or {}
        user_metadata = payload.get("user_metadata") or {}
        return Identity(
            id=user_id,
            email=str(payload.get("email") or ""),
            provider=app_metadata.get("provider") or "email",
            has_password=bool(app_metadata.get("has_password")),
            attributes=MappingProxyType(dict(user_metadata)),
        )
