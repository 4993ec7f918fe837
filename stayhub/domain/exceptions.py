from __future__ import annotations


class DomainError(Exception):
    """Base for domain errors."""


class IdentityGatewayError(DomainError):
    """The remote identity gateway rejected a call or could not be reached."""

    def __init__(self, message: str, *, code: str | None = None, status: int | None = None):
        super().__init__(message)
        self.code = code
        self.status = status


class NotAuthenticatedError(DomainError):
    """Operation requires a signed-in identity."""


class InvalidPasswordError(DomainError):
    """Password does not satisfy the minimum policy."""


class UnsupportedProviderError(DomainError):
    """OAuth provider is not one of the supported providers."""


class InvalidRoleError(DomainError):
    """Role is not one of traveler / owner."""


class AuthCodeExchangeError(DomainError):
    """Authorization code could not be exchanged for a session."""


class PeakSeasonInputError(DomainError):
    """Invalid peak season parameters."""


class ProfilePictureInputError(DomainError):
    """Profile picture rejected before upload."""


class BookingApiError(DomainError):
    """Booking backend answered with an error."""

    def __init__(self, message: str, *, status: int | None = None):
        super().__init__(message)
        self.status = status


class RoomInputError(DomainError):
    """Invalid room parameters."""


class PropertyQueryInputError(DomainError):
    """Invalid property detail query."""
