# clinicxz/errors.py
from __future__ import annotations

from typing import Any, List, Optional


class ClinicError(Exception):
    """Base class for everything the data layer raises on purpose."""


class ValidationError(ClinicError):
    """A required field is missing or a value has the wrong shape."""

    def __init__(self, message: str, fields: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.fields = fields or []


class NotFoundError(ClinicError):
    def __init__(self, entity: str, entity_id: Any) -> None:
        super().__init__(f"{entity} {entity_id} does not exist")
        self.entity = entity
        self.entity_id = entity_id


class StorageFault(ClinicError):
    """The storage engine failed (disk, unexpected constraint, ...)."""
