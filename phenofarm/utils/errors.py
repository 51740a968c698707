# phenofarm/utils/errors.py
from typing import Optional

from fastapi import HTTPException, status


class DomainError(Exception):
    """Base class for business rule violations raised by the service layer."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Field-level input error. Blocks the operation, nothing is applied."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class InventoryError(DomainError):
    """Requested quantity exceeds the available stock."""


class TransitionError(DomainError):
    """Order status change not permitted by the transition table."""


class NotFoundError(DomainError):
    pass


class ConflictError(DomainError):
    """Duplicate key or a delete blocked by dependent rows."""


class ForbiddenError(DomainError):
    """Resource exists but belongs to someone else."""


_STATUS_CODES = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (ConflictError, status.HTTP_409_CONFLICT),
)


def http_error(exc: DomainError) -> HTTPException:
    """Map a domain exception to the HTTPException a route should raise."""
    for cls, code in _STATUS_CODES:
        if isinstance(exc, cls):
            return HTTPException(status_code=code, detail=exc.message)
    # Validation, inventory and transition errors
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)
