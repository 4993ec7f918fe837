from __future__ import annotations

from typing import Protocol

from stayhub.domain.entities.identity import Identity


class SessionDecoderPort(Protocol):
    def decode(self, *, access_token: str) -> Identity:
        ...
