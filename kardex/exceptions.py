# kardex/exceptions.py

from typing import Optional


class KardexError(Exception):
    """Base class for errors raised by the kardex application."""


class ValidationError(KardexError, ValueError):
    """User-correctable input error. Nothing has been written when it is raised."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class ReferentialError(KardexError, LookupError):
    """A product, person or document referenced by a write does not exist."""

    def __init__(self, message: str, entity: Optional[str] = None, entity_id: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.entity = entity
        self.entity_id = entity_id


class ConsistencyError(KardexError):
    """Stored inventory movements disagree with the document ledger."""

    def __init__(self, message: str, document_id: Optional[int] = None, details: Optional[list] = None):
        super().__init__(message)
        self.message = message
        self.document_id = document_id
        self.details = details or []


class StorageError(KardexError):
    """A database write could not be completed; the unit of work was rolled back."""
