from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class PeakSeasonDraft:
    room_id: int
    type: str
    value: Decimal
    start_date: date
    end_date: date | None = None


@dataclass(frozen=True)
class PeakSeasonPayload:
    room_id: int
    type: str
    value: Decimal
    start_date: date
    end_date: date


@dataclass(frozen=True)
class ProfilePictureUpload:
    filename: str
    content: bytes
    content_type: str
