"""
Error Taxonomy

Exceptions raised by services and translated into JSON error responses
by the handlers registered in ``foodlog.register_error_handlers``.
"""

from typing import List, Optional


class FoodLogError(Exception):
    code = "INTERNAL_ERROR"
    status = 500

    def __init__(self, message: str, **extra):
        super().__init__(message)
        self.message = message
        self.extra = extra


class ValidationError(FoodLogError):
    """Malformed or missing request fields. Never reaches storage or the food API."""

    code = "VALIDATION_ERROR"
    status = 400

    def __init__(self, message: str, fields: Optional[List[str]] = None, details=None):
        extra = {"fields": list(fields or [])}
        if details:
            extra["details"] = details
        super().__init__(message, **extra)
        self.fields = extra["fields"]


class StorageError(FoodLogError):
    code = "STORAGE_ERROR"
    status = 500


class NotFoundError(FoodLogError):
    code = "NOT_FOUND"
    status = 404
