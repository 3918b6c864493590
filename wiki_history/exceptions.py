"""Exceptions raised by the wiki history engine.

Each carries the HTTP status the API answers with, so routers never
translate errors themselves; ``wiki_exception_handler`` renders them.
"""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Value of the ``error`` field in error responses."""

    PAGE_NOT_FOUND = "PAGE_NOT_FOUND"
    INVALID_MOVE = "INVALID_MOVE"
    VERSION_NOT_FOUND = "VERSION_NOT_FOUND"
    PATCH_APPLICATION_FAILED = "PATCH_APPLICATION_FAILED"
    INTEGRITY_ERROR = "INTEGRITY_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


class WikiException(Exception):
    """Base class: a message, an ``ErrorCode``, an HTTP status, and details."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class PageNotFoundError(WikiException):
    """Page not found in database."""

    def __init__(self, page_id: int):
        super().__init__(
            f"Page not found: {page_id}",
            ErrorCode.PAGE_NOT_FOUND,
            status_code=404,
            details={"page_id": page_id}
        )


class VersionNotFoundError(WikiException):
    """Requested version is out of range or its diff chain is broken."""

    def __init__(self, page_id: int, version: int, reason: str = "version unavailable"):
        super().__init__(
            f"Version {version} of page {page_id} is unavailable: {reason}",
            ErrorCode.VERSION_NOT_FOUND,
            status_code=404,
            details={"page_id": page_id, "version": version, "reason": reason}
        )


class PatchApplicationError(WikiException):
    """Patch does not match the text it is applied to (content drift or corrupt patch)."""

    def __init__(self, message: str, line: Optional[int] = None):
        details = {"line": line} if line is not None else {}
        super().__init__(
            message,
            ErrorCode.PATCH_APPLICATION_FAILED,
            status_code=422,
            details=details
        )


class InvalidMoveError(WikiException):
    """Move target is the page itself or one of its descendants."""

    def __init__(self, page_id: int, target_parent_id: int):
        super().__init__(
            f"Cannot move page {page_id} under itself or its descendant {target_parent_id}",
            ErrorCode.INVALID_MOVE,
            status_code=400,
            details={"page_id": page_id, "target_parent_id": target_parent_id}
        )


class IntegrityError(WikiException):
    """Reconstructed content does not hash to the recorded value."""

    def __init__(self, page_id: int, version: int, expected_hash: str, actual_hash: str):
        super().__init__(
            f"Content hash mismatch for page {page_id} at version {version}",
            ErrorCode.INTEGRITY_ERROR,
            status_code=500,
            details={
                "page_id": page_id,
                "version": version,
                "expected_hash": expected_hash,
                "actual_hash": actual_hash,
            }
        )


class ValidationError(WikiException):
    """Validation failed for user input."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class DatabaseError(WikiException):
    """Database operation failed."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            message,
            ErrorCode.DATABASE_ERROR,
            status_code=500,
            details=details
        )
