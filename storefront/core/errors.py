"""Error taxonomy shared by services and the HTTP layer.

Each error carries a caller-safe message and the HTTP status it maps to; the
exception handlers in storefront.main turn them into the response envelope.
"""


class StorefrontError(Exception):
    """Base class for errors that are reported to the caller as-is."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class InvalidInput(StorefrontError):
    """Malformed pagination, filter, payload or upload."""

    status_code = 400


class Unauthenticated(StorefrontError):
    """Missing or unparseable credential."""

    status_code = 401


class Forbidden(StorefrontError):
    """Credential rejected, identity mismatch, or role not sufficient."""

    status_code = 403


class NotFound(StorefrontError):
    """Referenced resource does not exist."""

    status_code = 404


class UpstreamFailure(StorefrontError):
    """Database or file storage failure. Message is always generic."""

    status_code = 500

    def __init__(self, message: str = "Internal server error.") -> None:
        super().__init__(message)
