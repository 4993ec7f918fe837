from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException

from stayhub.api.deps import get_manage_peak_seasons_use_case, require_access_token
from stayhub.api.schemas.auth import OkResponse
from stayhub.api.schemas.peak_season import (
    NamedItemResponse,
    PeakSeasonMonthResponse,
    PeakSeasonRequest,
    PeakSeasonResponse,
)
from stayhub.application.dto.peak_season import PeakSeasonDraft
from stayhub.application.use_cases.manage_peak_seasons import ManagePeakSeasonsUseCase
from stayhub.domain.entities.peak_season import PeakSeason
from stayhub.domain.exceptions import BookingApiError, PeakSeasonInputError
from stayhub.domain.services.peak_calendar import expand_peak_dates, month_key


router = APIRouter()


def _peak_season_response(season: PeakSeason) -> PeakSeasonResponse:
    return PeakSeasonResponse(
        id=season.id,
        room_id=season.room_id,
        type=season.type,
        value=season.value,
        start_date=season.start_date,
        end_date=season.end_date,
    )


def _draft(req: PeakSeasonRequest) -> PeakSeasonDraft:
    return PeakSeasonDraft(
        room_id=req.room_id,
        type=req.type,
        value=req.value,
        start_date=req.start_date,
        end_date=req.end_date,
    )


def _backend_error(exc: BookingApiError) -> HTTPException:
    return HTTPException(status_code=exc.status or 502, detail=str(exc))


@router.get("/v1/my-properties", response_model=list[NamedItemResponse])
def list_my_properties(
    access_token: str = Depends(require_access_token),
    use_case: ManagePeakSeasonsUseCase = Depends(get_manage_peak_seasons_use_case),
):
    try:
        rows = use_case.list_properties(access_token=access_token)
    except BookingApiError as exc:
        raise _backend_error(exc) from exc
    return [NamedItemResponse(id=row.id, name=row.name) for row in rows]


@router.get("/v1/my-properties/{property_id}/rooms", response_model=list[NamedItemResponse])
def list_my_rooms(
    property_id: int,
    access_token: str = Depends(require_access_token),
    use_case: ManagePeakSeasonsUseCase = Depends(get_manage_peak_seasons_use_case),
):
    try:
        rows = use_case.list_rooms(access_token=access_token, property_id=property_id)
    except BookingApiError as exc:
        raise _backend_error(exc) from exc
    return [NamedItemResponse(id=row.id, name=row.name) for row in rows]


@router.get("/v1/peak-seasons", response_model=PeakSeasonMonthResponse)
def list_peak_seasons(
    room_id: int,
    month: date,
    access_token: str = Depends(require_access_token),
    use_case: ManagePeakSeasonsUseCase = Depends(get_manage_peak_seasons_use_case),
):
    try:
        seasons = use_case.list_for_month(access_token=access_token, room_id=room_id, month=month)
    except BookingApiError as exc:
        raise _backend_error(exc) from exc
    return PeakSeasonMonthResponse(
        month=month_key(month),
        peak_seasons=[_peak_season_response(season) for season in seasons],
        peak_dates=expand_peak_dates(seasons),
    )


@router.post("/v1/peak-seasons", response_model=PeakSeasonResponse)
def create_peak_season(
    req: PeakSeasonRequest,
    access_token: str = Depends(require_access_token),
    use_case: ManagePeakSeasonsUseCase = Depends(get_manage_peak_seasons_use_case),
):
    try:
        season = use_case.save(access_token=access_token, draft=_draft(req))
    except PeakSeasonInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except BookingApiError as exc:
        raise _backend_error(exc) from exc
    return _peak_season_response(season)


@router.put("/v1/peak-seasons/{peak_season_id}", response_model=PeakSeasonResponse)
def update_peak_season(
    peak_season_id: int,
    req: PeakSeasonRequest,
    access_token: str = Depends(require_access_token),
    use_case: ManagePeakSeasonsUseCase = Depends(get_manage_peak_seasons_use_case),
):
    try:
        season = use_case.save(
            access_token=access_token,
            draft=_draft(req),
            peak_season_id=peak_season_id,
        )
    except PeakSeasonInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except BookingApiError as exc:
        raise _backend_error(exc) from exc
    return _peak_season_response(season)


@router.delete("/v1/peak-seasons/{peak_season_id}", response_model=OkResponse)
def delete_peak_season(
    peak_season_id: int,
    access_token: str = Depends(require_access_token),
    use_case: ManagePeakSeasonsUseCase = Depends(get_manage_peak_seasons_use_case),
):
    try:
        use_case.delete(access_token=access_token, peak_season_id=peak_season_id)
    except BookingApiError as exc:
        raise _backend_error(exc) from exc
    return OkResponse(ok=True)
