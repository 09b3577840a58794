"""
Error taxonomy shared by the lookup core and the feature routers.

Core operations raise these; `main.py` turns them into the JSON payload
`{"status": ..., "message": ..., "errors": {...}}` at the HTTP boundary.
"""

from __future__ import annotations

from typing import Any


class GardenError(RuntimeError):
    status_code = 500
    default_message = "Internal error."

    def __init__(self, message: str | None = None, *, errors: dict[str, str] | None = None) -> None:
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"status": self.status_code, "message": self.message}
        if self.errors:
            payload["errors"] = dict(self.errors)
        return payload


class MalformedIdentifier(GardenError):
    status_code = 400
    default_message = "Malformed object ID"


class NotFound(GardenError):
    status_code = 404

    def __init__(self, kind: str, missing: list[str] | None = None, message: str | None = None) -> None:
        self.kind = kind
        # Requested order; the first entry is the miss that the message reports.
        self.missing = list(missing or [])
        super().__init__(message or f"No {kind} with this ID found")


class Forbidden(GardenError):
    status_code = 403
    default_message = "You don't have access to this resource"


class ValidationFailure(GardenError):
    status_code = 400
    default_message = "Invalid data"

    def __init__(self, fields: dict[str, str], message: str | None = None) -> None:
        self.fields = dict(fields)
        super().__init__(message, errors=self.fields)


class DuplicateField(ValidationFailure):
    status_code = 409
    default_message = "Duplicate value"


class InternalFetchError(GardenError):
    status_code = 500
    default_message = "Error fetching records"
