from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from stayhub.api.deps import (
    get_manage_rooms_use_case,
    get_property_detail_use_case,
    require_access_token,
)
from stayhub.api.schemas.property import (
    CityResponse,
    PropertyDetailResponse,
    PropertyPictureResponse,
    RoomRequest,
    RoomResponse,
)
from stayhub.application.dto.room import PropertyDetailQuery, RoomDraft
from stayhub.application.use_cases.get_property_detail import GetPropertyDetailUseCase
from stayhub.application.use_cases.manage_rooms import ManageRoomsUseCase
from stayhub.domain.exceptions import BookingApiError, PropertyQueryInputError, RoomInputError


router = APIRouter()


def _backend_error(exc: BookingApiError) -> HTTPException:
    return HTTPException(status_code=exc.status or 502, detail=str(exc))


@router.post("/v1/rooms", response_model=RoomResponse, status_code=201)
def create_room(
    req: RoomRequest,
    access_token: str = Depends(require_access_token),
    use_case: ManageRoomsUseCase = Depends(get_manage_rooms_use_case),
):
    draft = RoomDraft(
        property_id=req.property_id,
        name=req.name,
        description=req.description,
        price=req.price,
        max_guests=req.max_guests,
        quantity=req.quantity,
    )
    try:
        room = use_case.create(access_token=access_token, draft=draft)
    except RoomInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except BookingApiError as exc:
        raise _backend_error(exc) from exc
    return RoomResponse(
        id=room.id,
        property_id=room.property_id,
        name=room.name,
        description=room.description,
        price=room.price,
        max_guests=room.max_guests,
        quantity=room.quantity,
    )


@router.get("/v1/properties/{property_id}", response_model=PropertyDetailResponse)
def get_property_detail(
    property_id: int,
    check_in: date | None = Query(default=None),
    check_out: date | None = Query(default=None),
    guests: int = Query(default=1),
    use_case: GetPropertyDetailUseCase = Depends(get_property_detail_use_case),
):
    query = PropertyDetailQuery(
        property_id=property_id,
        check_in=check_in,
        check_out=check_out,
        guests=guests,
    )
    try:
        detail = use_case.execute(query)
    except PropertyQueryInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except BookingApiError as exc:
        raise _backend_error(exc) from exc
    if detail is None:
        raise HTTPException(status_code=404, detail="Property not found.")

    main_picture = detail.main_picture
    return PropertyDetailResponse(
        property_id=detail.property_id,
        name=detail.name,
        description=detail.description,
        location=detail.location,
        category=detail.category,
        city=CityResponse(name=detail.city_name, type=detail.city_type),
        check_in=check_in,
        check_out=check_out,
        guests=guests,
        main_picture=main_picture.file_path if main_picture else None,
        property_pictures=[
            PropertyPictureResponse(id=picture.id, file_path=picture.file_path, is_main=picture.is_main)
            for picture in detail.pictures
        ],
        available_rooms=detail.available_rooms,
    )
