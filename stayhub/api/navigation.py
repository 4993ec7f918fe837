from __future__ import annotations

from stayhub.application.ports.navigator_port import NavigatorPort


class RecordingNavigator(NavigatorPort):
    """Collects navigation requests so the HTTP layer can turn them into redirects."""

    def __init__(self):
        self.history: list[str] = []

    def push(self, path: str) -> None:
        self.history.append(path)

    @property
    def last_path(self) -> str | None:
        return self.history[-1] if self.history else None
