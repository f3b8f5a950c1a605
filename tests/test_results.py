"""
PlaceShare Backend: Result Type Unit Tests
==========================================

What we test:
    ✅ success / fail construction and the ok / kind accessors
    ✅ unwrap() raises the exception mapped to each ErrorKind
    ✅ cast() only re-types failures
"""

import pytest

from placeshare.exceptions import (
    BadRequestError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from placeshare.results import ErrorKind, Result


class TestResult:
    def test_success_carries_value(self):
        result = Result.success(42)
        assert result.ok
        assert result.kind is None
        assert result.unwrap() == 42

    def test_success_without_value(self):
        assert Result.success().unwrap() is None

    def test_fail_records_kind_message_and_context(self):
        result = Result.fail(ErrorKind.NOT_FOUND, "Could not find place.", place_id="abc")
        assert not result.ok
        assert result.kind is ErrorKind.NOT_FOUND
        assert result.failure.message == "Could not find place."
        assert result.failure.context == {"place_id": "abc"}

    @pytest.mark.parametrize(
        "kind, exc_type, status",
        [
            (ErrorKind.VALIDATION, ValidationError, 422),
            (ErrorKind.NOT_FOUND, NotFoundError, 404),
            (ErrorKind.UNAUTHORIZED, UnauthorizedError, 401),
            (ErrorKind.BAD_REQUEST, BadRequestError, 400),
            (ErrorKind.INTERNAL, InternalError, 500),
        ],
    )
    def test_unwrap_raises_mapped_exception(self, kind, exc_type, status):
        result = Result.fail(kind, "boom")
        with pytest.raises(exc_type) as exc_info:
            result.unwrap()
        assert exc_info.value.message == "boom"
        assert exc_info.value.status_code == status

    def test_cast_keeps_failure(self):
        failed = Result.fail(ErrorKind.UNAUTHORIZED, "nope")
        recast = failed.cast()
        assert recast.failure is failed.failure

    def test_cast_rejects_success(self):
        with pytest.raises(ValueError):
            Result.success("value").cast()
