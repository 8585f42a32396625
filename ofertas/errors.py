"""Domain errors raised by the services and translated by the API."""

from __future__ import annotations


class OfertasError(RuntimeError):
    status_code = 500
    code = "INTERNAL_SERVER_ERROR"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


class ImageNotFound(OfertasError):
    status_code = 400
    code = "IMAGE_KEY_NOT_FOUND"


class ImagePromotionFailed(OfertasError):
    status_code = 500
    code = "IMAGE_VALIDATION_ERROR"


class ClockError(OfertasError):
    status_code = 500
    code = "CLOCK_ERROR"


class Conflict(OfertasError):
    status_code = 409
    code = "CONFLICT"


class NotFound(OfertasError):
    status_code = 404
    code = "NOT_FOUND"


class Forbidden(OfertasError):
    status_code = 403
    code = "FORBIDDEN"
