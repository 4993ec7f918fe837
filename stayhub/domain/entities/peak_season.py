from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Literal


PeakSeasonType = Literal["percentage", "fixed"]


@dataclass(frozen=True)
class PeakSeason:
    id: int
    room_id: int
    type: PeakSeasonType
    value: Decimal
    start_date: date
    end_date: date


@dataclass(frozen=True)
class PropertySummary:
    id: int
    name: str


@dataclass(frozen=True)
class RoomSummary:
    id: int
    name: str
