from __future__ import annotations

from stayhub.api.schemas.auth import IdentityResponse, ProfileResponse, SessionStateResponse
from stayhub.application.dto.session import SessionState
from stayhub.domain.entities.identity import Identity
from stayhub.domain.entities.user_profile import UserProfile


def identity_response(identity: Identity) -> IdentityResponse:
    return IdentityResponse(
        id=identity.id,
        email=identity.email,
        provider=identity.provider,
        has_password=identity.has_password,
    )


def profile_response(profile: UserProfile) -> ProfileResponse:
    return ProfileResponse(
        id=profile.id,
        name=profile.name,
        email=profile.email,
        role=profile.role,
        profile_picture=profile.profile_picture,
        phone=profile.phone,
        address=profile.address,
        created_at=profile.created_at,
        updated_at=profile.updated_at,
    )


def session_state_response(
    state: SessionState,
    *,
    redirect_to: str | None = None,
) -> SessionStateResponse:
    return SessionStateResponse(
        identity=identity_response(state.identity) if state.identity is not None else None,
        profile=profile_response(state.profile) if state.profile is not None else None,
        access_expires_at=state.session.expires_at if state.session is not None else None,
        redirect_to=redirect_to,
    )
