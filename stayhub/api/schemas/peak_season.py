from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field


class PeakSeasonRequest(BaseModel):
    room_id: int = Field(..., gt=0)
    type: Literal["percentage", "fixed"]
    value: Decimal = Field(..., gt=0)
    start_date: date
    end_date: date | None = None


class PeakSeasonResponse(BaseModel):
    id: int
    room_id: int
    type: str
    value: Decimal
    start_date: date
    end_date: date


class PeakSeasonMonthResponse(BaseModel):
    month: str
    peak_seasons: list[PeakSeasonResponse]
    peak_dates: list[date]


class NamedItemResponse(BaseModel):
    id: int
    name: str


class ProfilePictureResponse(BaseModel):
    profile_picture: str
