from __future__ import annotations

from stayhub.application.dto.room import PropertyDetailQuery
from stayhub.application.ports.booking_api_port import BookingApiPort
from stayhub.domain.entities.property import PropertyDetail
from stayhub.domain.exceptions import PropertyQueryInputError


def validate_property_query(query: PropertyDetailQuery) -> None:
    if query.property_id <= 0:
        raise PropertyQueryInputError("property_id must be a positive integer.")
    if query.guests < 1:
        raise PropertyQueryInputError("guests must be at least 1.")
    if query.check_in and query.check_out and query.check_out <= query.check_in:
        raise PropertyQueryInputError("check_out must be after check_in.")


class GetPropertyDetailUseCase:
    def __init__(self, *, booking_api: BookingApiPort):
        self._booking_api = booking_api

    def execute(self, query: PropertyDetailQuery) -> PropertyDetail | None:
        validate_property_query(query)
        return self._booking_api.get_property_detail(query)
