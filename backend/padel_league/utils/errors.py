"""
Scheduling error taxonomy.

Core modules raise these; routes turn them into HTTP responses with
to_http_exception(). Batch auto-scheduling reports per-group failures as
warnings instead of raising.
"""

from fastapi import HTTPException


class SchedulingError(Exception):
    """Base exception for scheduling errors"""

    status_code = 500


class ValidationError(SchedulingError):
    """Malformed request, rejected before any mutation"""

    status_code = 400


class NotFoundError(SchedulingError):
    """Referenced group, player, court or season does not exist"""

    status_code = 404


class ConflictError(SchedulingError):
    """Slot contention that cannot be resolved (self-conflict, stale version)"""

    status_code = 409


class PersistenceError(SchedulingError):
    """Storage call failed; nothing was committed"""

    status_code = 500


def to_http_exception(exc: SchedulingError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=str(exc))
