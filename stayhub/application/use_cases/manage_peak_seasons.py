from __future__ import annotations

from datetime import date
from decimal import Decimal

from stayhub.application.dto.peak_season import PeakSeasonDraft, PeakSeasonPayload
from stayhub.application.ports.booking_api_port import BookingApiPort
from stayhub.domain.entities.peak_season import PeakSeason, PropertySummary, RoomSummary
from stayhub.domain.exceptions import PeakSeasonInputError
from stayhub.domain.services.peak_calendar import month_key


PEAK_SEASON_TYPES = ("percentage", "fixed")


def build_peak_season_payload(draft: PeakSeasonDraft) -> PeakSeasonPayload:
    if draft.room_id <= 0:
        raise PeakSeasonInputError("room_id must be a positive integer.")
    if draft.type not in PEAK_SEASON_TYPES:
        raise PeakSeasonInputError("type must be 'percentage' or 'fixed'.")
    value = Decimal(str(draft.value))
    if value <= 0:
        raise PeakSeasonInputError("value must be greater than zero.")
    if draft.type == "percentage" and value > 100:
        raise PeakSeasonInputError("percentage value must be at most 100.")

    end_date = draft.end_date or draft.start_date
    if end_date < draft.start_date:
        raise PeakSeasonInputError("end_date must not be before start_date.")

    return PeakSeasonPayload(
        room_id=draft.room_id,
        type=draft.type,
        value=value,
        start_date=draft.start_date,
        end_date=end_date,
    )


class ManagePeakSeasonsUseCase:
    def __init__(self, *, booking_api: BookingApiPort):
        self._booking_api = booking_api

    def list_properties(self, *, access_token: str) -> list[PropertySummary]:
        return self._booking_api.list_my_properties(access_token=access_token)

    def list_rooms(self, *, access_token: str, property_id: int) -> list[RoomSummary]:
        return self._booking_api.list_my_rooms(access_token=access_token, property_id=property_id)

    def list_for_month(self, *, access_token: str, room_id: int, month: date) -> list[PeakSeason]:
        return self._booking_api.list_peak_seasons(
            access_token=access_token,
            room_id=room_id,
            month=month_key(month),
        )

    def save(
        self,
        *,
        access_token: str,
        draft: PeakSeasonDraft,
        peak_season_id: int | None = None,
    ) -> PeakSeason:
        payload = build_peak_season_payload(draft)
        if peak_season_id is None:
            return self._booking_api.create_peak_season(access_token=access_token, payload=payload)
        return self._booking_api.update_peak_season(
            access_token=access_token,
            peak_season_id=peak_season_id,
            payload=payload,
        )

    def delete(self, *, access_token: str, peak_season_id: int) -> None:
        self._booking_api.delete_peak_season(
            access_token=access_token,
            peak_season_id=peak_season_id,
        )
