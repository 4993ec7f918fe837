from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from stayhub.application.dto.room import RoomDraft, RoomPayload
from stayhub.application.ports.booking_api_port import BookingApiPort
from stayhub.domain.entities.property import Room
from stayhub.domain.exceptions import RoomInputError


logger = logging.getLogger(__name__)


def build_room_payload(draft: RoomDraft) -> RoomPayload:
    name = (draft.name or "").strip()
    description = (draft.description or "").strip()
    if not name:
        raise RoomInputError("name is required.")
    if not description:
        raise RoomInputError("description is required.")
    if draft.property_id <= 0:
        raise RoomInputError("property_id must be a positive integer.")
    try:
        price = Decimal(str(draft.price))
    except InvalidOperation as exc:
        raise RoomInputError("price must be a number.") from exc
    if not price.is_finite() or price <= 0:
        raise RoomInputError("price must be greater than zero.")
    if draft.max_guests <= 0:
        raise RoomInputError("max_guests must be greater than zero.")
    if draft.quantity <= 0:
        raise RoomInputError("quantity must be greater than zero.")

    return RoomPayload(
        property_id=draft.property_id,
        name=name,
        description=description,
        price=price,
        max_guests=draft.max_guests,
        quantity=draft.quantity,
    )


class ManageRoomsUseCase:
    def __init__(self, *, booking_api: BookingApiPort):
        self._booking_api = booking_api

    def create(self, *, access_token: str, draft: RoomDraft) -> Room:
        payload = build_room_payload(draft)
        room = self._booking_api.create_room(access_token=access_token, payload=payload)
        logger.info("manage_rooms: created room_id=%s property_id=%s", room.id, room.property_id)
        return room
