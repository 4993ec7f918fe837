from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GuardDecision:
    redirect_to: str | None = None
    reason: str | None = None

    @property
    def passes(self) -> bool:
        return self.redirect_to is None


PASS_THROUGH = GuardDecision()
