from __future__ import annotations

from typing import Protocol


class PendingRoleStorePort(Protocol):
    def get(self) -> str | None:
        ...

    def set(self, role: str) -> None:
        ...

    def remove(self) -> None:
        ...
