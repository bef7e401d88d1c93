"""
Domain errors raised by services.

Each error knows the HTTP status it maps to and how to render itself as the
``{field: [messages]}`` error map returned to callers. Whole-object errors use
the ``_errors`` key.
"""
from typing import Dict, List, Optional

from fastapi import status

ErrorMap = Dict[str, List[str]]

WHOLE_OBJECT = "_errors"


class ClinicError(Exception):
    """Base class for expected, caller-recoverable failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, errors: Optional[ErrorMap] = None):
        super().__init__(message)
        self.message = message
        self._errors = errors

    @property
    def errors(self) -> ErrorMap:
        if self._errors:
            return self._errors
        return {WHOLE_OBJECT: [self.message]}


class RecordValidationError(ClinicError):
    """Payload failed structural validation; ``errors`` is per field."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, errors: ErrorMap):
        super().__init__("Validation failed", errors)


class ConflictError(ClinicError):
    status_code = status.HTTP_409_CONFLICT


class NotFoundError(ClinicError):
    status_code = status.HTTP_404_NOT_FOUND


class ConfigurationError(ClinicError):
    """A startup invariant does not hold (e.g. the token counter row is missing)."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
