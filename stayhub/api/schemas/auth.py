from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class OAuthSignInRequest(BaseModel):
    selected_role: Literal["traveler", "owner"] | None = None


class OAuthSignInResponse(BaseModel):
    url: str


class EmailLinkRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    full_name: str = Field(..., min_length=1, max_length=120)
    role: Literal["traveler", "owner"]


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=256)


class UpdatePasswordRequest(BaseModel):
    password: str = Field(..., min_length=1, max_length=256)


class IdentityResponse(BaseModel):
    id: str
    email: str
    provider: str
    has_password: bool


class ProfileResponse(BaseModel):
    id: str
    name: str
    email: str
    role: str | None = None
    profile_picture: str | None = None
    phone: str | None = None
    address: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SessionStateResponse(BaseModel):
    identity: IdentityResponse | None
    profile: ProfileResponse | None
    access_expires_at: datetime | None = None
    redirect_to: str | None = None


class OkResponse(BaseModel):
    ok: bool
    redirect_to: str | None = None


class EmailExistsResponse(BaseModel):
    exists: bool


class RoleLookupResponse(BaseModel):
    exists: bool
    role: str | None


class EmailStatusResponse(BaseModel):
    exists: bool
    verified: bool
    has_password: bool
