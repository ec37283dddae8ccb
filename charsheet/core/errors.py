"""
Domain Errors
Exceptions raised by services. The API layer renders them as
``{"error": message}`` with the carried status code.
"""

from typing import Any, Optional


class CharacterSheetError(Exception):
    """Base class for every error the services raise on purpose."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(CharacterSheetError):
    status_code = 404


class ValidationFailed(CharacterSheetError):
    status_code = 400


class InvalidBackupError(ValidationFailed):
    """Backup document is missing its version marker or character block."""


class ImageQuotaExceeded(ValidationFailed):
    pass


class ConcurrentUpdateError(CharacterSheetError):
    """The character row changed underneath this transaction."""

    status_code = 409


class TransactionFailed(CharacterSheetError):
    """A persistence step failed; everything in the unit was rolled back."""

    status_code = 500
