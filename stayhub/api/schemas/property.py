from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field


class RoomRequest(BaseModel):
    property_id: int = Field(..., gt=0)
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    price: Decimal = Field(..., gt=0)
    max_guests: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0)


class RoomResponse(BaseModel):
    id: int
    property_id: int
    name: str
    description: str
    price: Decimal
    max_guests: int
    quantity: int


class PropertyPictureResponse(BaseModel):
    id: int
    file_path: str
    is_main: bool


class CityResponse(BaseModel):
    name: str
    type: str


class PropertyDetailResponse(BaseModel):
    property_id: int
    name: str
    description: str
    location: str
    category: str
    city: CityResponse
    check_in: date | None = None
    check_out: date | None = None
    guests: int
    main_picture: str | None = None
    property_pictures: list[PropertyPictureResponse]
    available_rooms: list[dict[str, Any]]
