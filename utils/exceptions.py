"""
Unified exception hierarchy for LessonLoom.

All domain exceptions inherit from LessonLoomError and carry:
- error_code: machine-readable string (e.g. "LESSON_NOT_FOUND")
- status_code: HTTP status code
- message: human-readable description
- context: optional structured metadata dict
"""

from typing import Optional, Dict, Any


class LessonLoomError(Exception):
    """Base exception for all LessonLoom domain errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.context = context or {}
        super().__init__(message)


class ValidationError(LessonLoomError):
    """400-level validation / bad-request errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "INVALID_REQUEST",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=400, context=context)


class NotFoundError(LessonLoomError):
    """404 resource-not-found errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "NOT_FOUND",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=404, context=context)


class ConflictError(LessonLoomError):
    """409 errors for entities in the wrong state for the requested transition."""

    def __init__(
        self,
        message: str,
        error_code: str = "INVALID_STATE",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=409, context=context)


class GenerationError(LessonLoomError):
    """500-level generation failures."""

    def __init__(
        self,
        message: str,
        error_code: str = "GENERATION_FAILED",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=500, context=context)


class ExtractionError(GenerationError):
    """Document text extraction produced nothing usable."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code="EXTRACTION_FAILED", context=context)


class StorageError(LessonLoomError):
    """500-level database / storage failures."""

    def __init__(
        self,
        message: str,
        error_code: str = "STORAGE_ERROR",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code=error_code, status_code=500, context=context)
