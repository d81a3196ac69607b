from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class DiaryError(Exception):
    """Base class for failures surfaced by the diary core."""

    status_code = 500
    detail = "Internal error"

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.detail)
        if detail:
            self.detail = detail


class Unauthenticated(DiaryError):
    status_code = 401
    detail = "Not authenticated"


class InvalidCredentials(DiaryError):
    status_code = 401
    detail = "Invalid credentials"


class ValidationError(DiaryError):
    status_code = 400
    detail = "Invalid input"


class NotFound(DiaryError):
    status_code = 404
    detail = "Not found"


class Conflict(DiaryError):
    status_code = 409
    detail = "Conflict"


class StoreUnavailable(DiaryError):
    status_code = 503
    detail = "Storage unavailable"


class ImageHostingError(DiaryError):
    status_code = 502
    detail = "Image upload failed"


@dataclass
class Outcome(Generic[T]):
    """Result of a read path that degrades to a default value instead of raising."""

    value: T
    error: Optional[DiaryError] = None

    @property
    def ok(self) -> bool:
        return self.error is None
