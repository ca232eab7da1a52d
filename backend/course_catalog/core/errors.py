"""Typed failures raised by the catalog core and the record stores.

Every error carries a stable ``code`` and the HTTP status the API layer
answers with. The API renders them as ``{"message": ..., "code": ...}``.
"""

from __future__ import annotations


class CatalogError(Exception):
    code = "CATALOG_ERROR"
    http_status = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict:
        return {"message": self.message, "code": self.code}


class ValidationError(CatalogError):
    """Malformed input; raised before any store call is made."""

    code = "VALIDATION_ERROR"
    http_status = 400


class InvalidId(ValidationError):
    code = "INVALID_ID"

    def __init__(self, course_id: object) -> None:
        super().__init__(f"No course with id: {course_id}")
        self.course_id = course_id


class NotFound(CatalogError):
    code = "NOT_FOUND"
    http_status = 404

    def __init__(self, course_id: object) -> None:
        super().__init__(f"Course {course_id} not found")
        self.course_id = course_id


class Unauthenticated(CatalogError):
    # The like route turns this into a 200 {"message": "Unauthenticated"} payload.
    code = "UNAUTHENTICATED"
    http_status = 401

    def __init__(self) -> None:
        super().__init__("Unauthenticated")


class StoreUnavailable(CatalogError):
    code = "STORE_UNAVAILABLE"
    http_status = 503

    def __init__(self, operation: str, detail: str = "") -> None:
        message = f"Record store unavailable during {operation}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.operation = operation
