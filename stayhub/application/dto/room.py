from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class RoomDraft:
    property_id: int
    name: str
    description: str
    price: Decimal
    max_guests: int
    quantity: int


@dataclass(frozen=True)
class RoomPayload:
    property_id: int
    name: str
    description: str
    price: Decimal
    max_guests: int
    quantity: int


@dataclass(frozen=True)
class PropertyDetailQuery:
    property_id: int
    check_in: date | None = None
    check_out: date | None = None
    guests: int = 1
