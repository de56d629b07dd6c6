"""
Domain exceptions raised by the scheduler services.

The API layer maps each subclass to an HTTP status (see ``main.py``).
"""
from typing import Any, Dict, Optional


class SchedulerError(Exception):
    """Base exception for scheduler errors."""

    status_code = 400

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(SchedulerError):
    """Raised when an instructor, student, booking or slot does not exist."""

    status_code = 404

    def __init__(self, entity: str, entity_id: str):
        super().__init__(
            f"{entity} '{entity_id}' was not found.",
            details={"entity": entity, "id": entity_id},
        )
        self.entity = entity


class BookingConflictError(SchedulerError):
    """Raised when a requested slot overlaps an existing booking."""

    status_code = 409


class AlreadyExistsError(SchedulerError):
    """Raised when adding a record whose id is already stored."""

    status_code = 409

    def __init__(self, entity: str, entity_id: str):
        super().__init__(
            f"{entity} '{entity_id}' already exists.",
            details={"entity": entity, "id": entity_id},
        )


class StorageError(SchedulerError):
    """Raised when the backing store cannot be read."""

    status_code = 500
