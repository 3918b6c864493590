"""Tests for the exception hierarchy and its JSON rendering."""

import pytest

from wiki_history.exceptions import (
    DatabaseError,
    ErrorCode,
    IntegrityError,
    InvalidMoveError,
    PageNotFoundError,
    PatchApplicationError,
    ValidationError,
    VersionNotFoundError,
    WikiException,
)


class TestExceptionHierarchy:

    @pytest.mark.parametrize("exc,status,code", [
        (PageNotFoundError(1), 404, ErrorCode.PAGE_NOT_FOUND),
        (VersionNotFoundError(1, 9), 404, ErrorCode.VERSION_NOT_FOUND),
        (PatchApplicationError("drift", line=3), 422, ErrorCode.PATCH_APPLICATION_FAILED),
        (InvalidMoveError(1, 2), 400, ErrorCode.INVALID_MOVE),
        (IntegrityError(1, 2, "aa", "bb"), 500, ErrorCode.INTEGRITY_ERROR),
        (ValidationError("bad", field="title"), 400, ErrorCode.VALIDATION_ERROR),
        (DatabaseError("down", original_error=RuntimeError("boom")), 500, ErrorCode.DATABASE_ERROR),
    ])
    def test_status_and_code(self, exc, status, code):
        assert isinstance(exc, WikiException)
        assert exc.status_code == status
        assert exc.error_code == code

    def test_to_dict(self):
        body = VersionNotFoundError(5, 3).to_dict()
        assert body["error"] == "VERSION_NOT_FOUND"
        assert "unavailable" in body["message"]
        assert body["details"] == {"page_id": 5, "version": 3, "reason": "version unavailable"}

    def test_optional_details_are_omitted(self):
        assert PatchApplicationError("x").details == {}
        assert ValidationError("x").details == {}
        assert DatabaseError("x").details == {}
