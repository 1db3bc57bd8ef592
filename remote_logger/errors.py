"""
Failure taxonomy for the remote logger.

These exceptions are raised by the wire client and handled inside the
session and delivery pipeline. None of them reach callers of ``log()``.
"""


class RemoteLoggerError(Exception):
    """Base class for all remote logger failures."""

    def __init__(self, detail: str = "", status_code: int | None = None):
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"HTTP {self.status_code}: {self.detail}"
        return self.detail


class AuthError(RemoteLoggerError):
    """Authentication did not produce a token."""


class AuthRejected(AuthError):
    """The auth endpoint answered with a non-success status."""


class AuthTransportFault(AuthError):
    """Network failure or undecodable response during authentication."""


class DeliveryError(RemoteLoggerError):
    """A batch submission failed; the batch is dropped."""


class DeliveryUnauthorized(DeliveryError):
    """The log endpoint rejected the bearer token (HTTP 401)."""


class DeliveryRejected(DeliveryError):
    """The log endpoint answered with a non-success status other than 401."""


class DeliveryTransportFault(DeliveryError):
    """Network failure while submitting a batch."""
