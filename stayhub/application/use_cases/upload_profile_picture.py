from __future__ import annotations

from stayhub.application.dto.peak_season import ProfilePictureUpload
from stayhub.application.ports.booking_api_port import BookingApiPort
from stayhub.domain.exceptions import ProfilePictureInputError


MAX_PROFILE_PICTURE_BYTES = 1024 * 1024
ALLOWED_PROFILE_PICTURE_TYPES = ("image/jpeg", "image/png", "image/gif")


def validate_profile_picture(upload: ProfilePictureUpload) -> None:
    if upload.content_type not in ALLOWED_PROFILE_PICTURE_TYPES:
        raise ProfilePictureInputError("Only JPEG, PNG or GIF images are accepted.")
    if not upload.content:
        raise ProfilePictureInputError("Image file is empty.")
    if len(upload.content) > MAX_PROFILE_PICTURE_BYTES:
        raise ProfilePictureInputError("Image must be at most 1 MB.")


class UploadProfilePictureUseCase:
    def __init__(self, *, booking_api: BookingApiPort):
        self._booking_api = booking_api

    def execute(self, *, access_token: str, upload: ProfilePictureUpload) -> str:
        validate_profile_picture(upload)
        return self._booking_api.upload_profile_picture(access_token=access_token, upload=upload)

    def remove(self, *, access_token: str) -> None:
        self._booking_api.delete_profile_picture(access_token=access_token)
