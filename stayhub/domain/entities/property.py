from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any


@dataclass(frozen=True)
class Room:
    id: int
    property_id: int
    name: str
    description: str
    price: Decimal
    max_guests: int
    quantity: int


@dataclass(frozen=True)
class PropertyPicture:
    id: int
    file_path: str
    is_main: bool


@dataclass(frozen=True)
class PropertyDetail:
    property_id: int
    name: str
    description: str
    location: str
    category: str
    city_name: str
    city_type: str
    pictures: list[PropertyPicture] = field(default_factory=list)
    # Room rows are passed through as the backend sends them.
    available_rooms: list[dict[str, Any]] = field(default_factory=list)

    @property
    def main_picture(self) -> PropertyPicture | None:
        for picture in self.pictures:
            if picture.is_main:
                return picture
        return self.pictures[0] if self.pictures else None
