# backend/clinic_api/errors.py
from typing import Any, Optional


class ConfigError(RuntimeError):
    """Fatal configuration problem detected at startup."""


class ClinicError(Exception):
    """Base of the failures repositories and services raise.

    The HTTP layer turns these into ``{"error": message, "detail": detail}``
    with ``status_code``.
    """

    status_code = 500
    default_message = "Internal server error."

    def __init__(self, message: Optional[str] = None, detail: Any = None):
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)

    def to_body(self) -> dict:
        body = {"error": self.message}
        if self.detail is not None:
            body["detail"] = self.detail
        return body


class InvalidInput(ClinicError):
    status_code = 400
    default_message = "Invalid input."


class Unauthorized(ClinicError):
    status_code = 401
    default_message = "Invalid credentials."


class NotFound(ClinicError):
    status_code = 404
    default_message = "Not found."


class Conflict(ClinicError):
    status_code = 409
    default_message = "Conflict."


class StorageError(ClinicError):
    status_code = 500
    default_message = "Database error."


class Internal(ClinicError):
    status_code = 500
