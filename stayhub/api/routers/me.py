from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from stayhub.api.deps import (
    get_session_controller,
    get_upload_profile_picture_use_case,
    require_access_token,
)
from stayhub.api.schemas.auth import OkResponse, SessionStateResponse
from stayhub.api.schemas.peak_season import ProfilePictureResponse
from stayhub.api.serializers import session_state_response
from stayhub.application.dto.peak_season import ProfilePictureUpload
from stayhub.application.use_cases.session_controller import SessionController
from stayhub.application.use_cases.upload_profile_picture import UploadProfilePictureUseCase
from stayhub.domain.exceptions import BookingApiError, ProfilePictureInputError


router = APIRouter()


@router.get("/v1/me", response_model=SessionStateResponse)
def get_me(
    controller: SessionController = Depends(get_session_controller),
):
    state = controller.start()
    controller.stop()
    if state.session is None:
        raise HTTPException(status_code=401, detail="Not authenticated.")
    return session_state_response(state)


@router.post("/v1/me/profile-picture", response_model=ProfilePictureResponse)
def upload_profile_picture(
    file: UploadFile = File(...),
    access_token: str = Depends(require_access_token),
    use_case: UploadProfilePictureUseCase = Depends(get_upload_profile_picture_use_case),
):
    upload = ProfilePictureUpload(
        filename=file.filename or "profile-picture",
        content=file.file.read(),
        content_type=file.content_type or "",
    )
    try:
        url = use_case.execute(access_token=access_token, upload=upload)
    except ProfilePictureInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except BookingApiError as exc:
        raise HTTPException(status_code=exc.status or 502, detail=str(exc)) from exc
    return ProfilePictureResponse(profile_picture=url)


@router.delete("/v1/me/profile-picture", response_model=OkResponse)
def delete_profile_picture(
    access_token: str = Depends(require_access_token),
    use_case: UploadProfilePictureUseCase = Depends(get_upload_profile_picture_use_case),
):
    try:
        use_case.remove(access_token=access_token)
    except BookingApiError as exc:
        raise HTTPException(status_code=exc.status or 502, detail=str(exc)) from exc
    return OkResponse(ok=True)
