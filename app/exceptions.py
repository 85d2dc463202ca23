"""
Typed failures raised by the temple registry.

Each error carries the HTTP status the API layer answers with, so services
never import FastAPI.
"""

from typing import Optional


class TempleError(Exception):
    """Base class for all registry failures."""

    status_code: int = 500
    kind: str = "error"

    def __init__(self, message: str, *, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict:
        body = {"status": "error", "error": self.kind, "message": self.message}
        if self.field:
            body["field"] = self.field
        return body


class Unauthorized(TempleError):
    """Caller role or account status does not permit the operation."""
    status_code = 403
    kind = "unauthorized"


class InvalidInput(TempleError):
    """Missing or malformed field, bad id, bad index or bad date."""
    status_code = 400
    kind = "invalid_input"


class Conflict(TempleError):
    """Uniqueness violation or concurrent modification."""
    status_code = 409
    kind = "conflict"


class NotFound(TempleError):
    """Temple, sub-collection item or gallery URL absent."""
    status_code = 404
    kind = "not_found"


class UpstreamFailure(TempleError):
    """Media store or persistence operation failed."""
    status_code = 502
    kind = "upstream_failure"
