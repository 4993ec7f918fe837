from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any

import httpx

from stayhub.application.dto.peak_season import PeakSeasonPayload, ProfilePictureUpload
from stayhub.application.dto.room import PropertyDetailQuery, RoomPayload
from stayhub.application.ports.booking_api_port import BookingApiPort
from stayhub.domain.entities.peak_season import PeakSeason, PropertySummary, RoomSummary
from stayhub.domain.entities.property import PropertyDetail, PropertyPicture, Room
from stayhub.domain.exceptions import BookingApiError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingApiClientSettings:
    api_base: str
    timeout_seconds: float


class BookingApiClient(BookingApiPort):
    def __init__(
        self,
        settings: BookingApiClientSettings,
        *,
        transport: httpx.BaseTransport | None = None,
    ):
        self._settings = settings
        self._transport = transport

    def list_my_properties(self, *, access_token: str) -> list[PropertySummary]:
        data = self._request(
            "GET",
            "/properties/my-properties",
            access_token=access_token,
            params={"all": "true"},
        )
        return [PropertySummary(id=int(row["id"]), name=row["name"]) for row in data or []]

    def list_my_rooms(self, *, access_token: str, property_id: int) -> list[RoomSummary]:
        data = self._request(
            "GET",
            "/properties/rooms/my-rooms",
            access_token=access_token,
            params={"property_id": property_id, "all": "true"},
        )
        return [RoomSummary(id=int(row["id"]), name=row["name"]) for row in data or []]

    def list_peak_seasons(self, *, access_token: str, room_id: int, month: str) -> list[PeakSeason]:
        data = self._request(
            "GET",
            "/properties/rooms/peak-season",
            access_token=access_token,
            params={"room_id": room_id, "month": month},
        )
        return [_map_peak_season(row) for row in data or []]

    def create_peak_season(self, *, access_token: str, payload: PeakSeasonPayload) -> PeakSeason:
        data = self._request(
            "POST",
            "/properties/rooms/peak-season",
            access_token=access_token,
            json=_peak_season_body(payload),
        )
        return _map_peak_season(data)

    def update_peak_season(
        self,
        *,
        access_token: str,
        peak_season_id: int,
        payload: PeakSeasonPayload,
    ) -> PeakSeason:
        data = self._request(
            "PUT",
            f"/properties/rooms/peak-season/{peak_season_id}",
            access_token=access_token,
            json=_peak_season_body(payload),
        )
        return _map_peak_season(data)

    def delete_peak_season(self, *, access_token: str, peak_season_id: int) -> None:
        self._request(
            "DELETE",
            f"/properties/rooms/peak-season/{peak_season_id}",
            access_token=access_token,
        )

    def upload_profile_picture(self, *, access_token: str, upload: ProfilePictureUpload) -> str:
        data = self._request(
            "POST",
            "/users/profile-picture",
            access_token=access_token,
            files={"profile_picture": (upload.filename, upload.content, upload.content_type)},
        )
        return str((data or {}).get("profile_picture") or "")

    def delete_profile_picture(self, *, access_token: str) -> None:
        self._request("DELETE", "/users/profile-picture", access_token=access_token)

    def create_room(self, *, access_token: str, payload: RoomPayload) -> Room:
        data = self._request(
            "POST",
            "/properties/rooms/create",
            access_token=access_token,
            json=_room_body(payload),
        )
        return _map_room(data or {}, payload)

    def get_property_detail(self, query: PropertyDetailQuery) -> PropertyDetail | None:
        params = {
            "property_id": query.property_id,
            "check_in": query.check_in.isoformat() if query.check_in else "",
            "check_out": query.check_out.isoformat() if query.check_out else "",
            "guests": query.guests,
        }
        try:
            data = self._request("GET", "/properties/detail", params=params)
        except BookingApiError as exc:
            if exc.status == 404:
                return None
            raise
        if not data:
            return None
        return _map_property_detail(data)

    def _request(
        self,
        method: str,
        path: str,
        *,
        access_token: str | None = None,
        params: dict | None = None,
        json: dict | None = None,
        files: dict | None = None,
    ) -> Any:
        url = f"{self._settings.api_base.rstrip('/')}{path}"
        headers = {"Authorization": f"Bearer {access_token}"} if access_token else {}
        try:
            with httpx.Client(
                timeout=self._settings.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = client.request(
                    method,
                    url,
                    headers=headers,
                    params=params,
                    json=json,
                    files=files,
                )
        except httpx.HTTPError as exc:
            logger.warning("booking_api_client: request_failed method=%s path=%s error=%s", method, path, exc)
            raise BookingApiError(f"Booking API unreachable: {exc}") from exc

        try:
            body = response.json() if response.content else {}
        except ValueError:
            body = {}
        if response.status_code >= 400:
            message = body.get("message") if isinstance(body, dict) else None
            raise BookingApiError(
                message or f"Booking API returned HTTP {response.status_code}.",
                status=response.status_code,
            )
        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body


def _peak_season_body(payload: PeakSeasonPayload) -> dict:
    return {
        "room_id": payload.room_id,
        "type": payload.type,
        "value": float(payload.value),
        "start_date": payload.start_date.isoformat(),
        "end_date": payload.end_date.isoformat(),
    }


def _map_peak_season(row: dict) -> PeakSeason:
    return PeakSeason(
        id=int(row["id"]),
        room_id=int(row["room_id"]),
        type=row["type"],
        value=Decimal(str(row["value"])),
        start_date=date.fromisoformat(str(row["start_date"])[:10]),
        end_date=date.fromisoformat(str(row["end_date"])[:10]),
    )


def _room_body(payload: RoomPayload) -> dict:
    return {
        "name": payload.name,
        "description": payload.description,
        "price": float(payload.price),
        "max_guests": payload.max_guests,
        "quantity": payload.quantity,
        "property_id": payload.property_id,
    }


def _map_room(row: dict, payload: RoomPayload) -> Room:
    # The create endpoint may echo only part of the room; fill gaps from what was sent.
    price = row.get("price")
    return Room(
        id=int(row.get("id") or 0),
        property_id=int(row.get("property_id") or payload.property_id),
        name=row.get("name") or payload.name,
        description=row.get("description") or payload.description,
        price=Decimal(str(price)) if price is not None else payload.price,
        max_guests=int(row.get("max_guests") or payload.max_guests),
        quantity=int(row.get("quantity") or payload.quantity),
    )


def _map_property_detail(row: dict) -> PropertyDetail:
    city = row.get("city") or {}
    return PropertyDetail(
        property_id=int(row["property_id"]),
        name=row.get("name") or "",
        description=row.get("description") or "",
        location=row.get("location") or "",
        category=row.get("category") or "",
        city_name=city.get("name") or "",
        city_type=city.get("type") or "",
        pictures=[
            PropertyPicture(
                id=int(picture["id"]),
                file_path=picture.get("file_path") or "",
                is_main=bool(picture.get("is_main")),
            )
            for picture in row.get("property_pictures") or []
        ],
        available_rooms=list(row.get("available_rooms") or []),
    )
