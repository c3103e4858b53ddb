"""Exception taxonomy shared by the services, the HTTP layer and the CLI."""

from __future__ import annotations

from typing import Any


class DepmanError(Exception):
    """Base class for errors reported back to the caller."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message}


class ValidationError(DepmanError):
    """The payload is missing a required field or holds a bad value."""

    status_code = 400

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or []

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"error": self.message}
        if self.errors:
            result["details"] = list(self.errors)
        return result


class NotFoundError(DepmanError):
    """No record with the requested id exists."""

    status_code = 404


class StorageError(DepmanError):
    """A document could not be written."""

    status_code = 500


class UploadError(DepmanError):
    """An upload was rejected or could not be stored."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code
