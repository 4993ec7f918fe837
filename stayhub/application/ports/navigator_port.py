from __future__ import annotations

from typing import Protocol


class NavigatorPort(Protocol):
    def push(self, path: str) -> None:
        ...
