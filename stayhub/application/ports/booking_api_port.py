from __future__ import annotations

from typing import Protocol

from stayhub.application.dto.peak_season import PeakSeasonPayload, ProfilePictureUpload
from stayhub.application.dto.room import PropertyDetailQuery, RoomPayload
from stayhub.domain.entities.peak_season import PeakSeason, PropertySummary, RoomSummary
from stayhub.domain.entities.property import PropertyDetail, Room


class BookingApiPort(Protocol):
    def list_my_properties(self, *, access_token: str) -> list[PropertySummary]:
        ...

    def list_my_rooms(self, *, access_token: str, property_id: int) -> list[RoomSummary]:
        ...

    def list_peak_seasons(self, *, access_token: str, room_id: int, month: str) -> list[PeakSeason]:
        ...

    def create_peak_season(self, *, access_token: str, payload: PeakSeasonPayload) -> PeakSeason:
        ...

    def update_peak_season(
        self,
        *,
        access_token: str,
        peak_season_id: int,
        payload: PeakSeasonPayload,
    ) -> PeakSeason:
        ...

    def delete_peak_season(self, *, access_token: str, peak_season_id: int) -> None:
        ...

    def upload_profile_picture(self, *, access_token: str, upload: ProfilePictureUpload) -> str:
        ...

    def delete_profile_picture(self, *, access_token: str) -> None:
        ...

    def create_room(self, *, access_token: str, payload: RoomPayload) -> Room:
        ...

    def get_property_detail(self, query: PropertyDetailQuery) -> PropertyDetail | None:
        """Public lookup; None when the property does not exist."""
        ...
