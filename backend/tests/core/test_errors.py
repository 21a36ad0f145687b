"""Error Hierarchy - verifies codes, statuses and JSON:API rendering."""

from worktrack.core.errors import (
    BadParameterError, ErrorCategory, InternalError, NotFoundError,
    VersionConflictError, WorkTrackError,
)


def test_not_found_renders_jsonapi_document():
    error = NotFoundError("work item", "42")
    assert error.http_status == 404
    assert error.to_response() == {"errors": [{
        "status": "404",
        "code": "not_found",
        "title": "Not found error",
        "detail": "work item with id '42' not found",
    }]}


def test_bad_parameter_message_names_parameter_and_value():
    error = BadParameterError("version", "abc")
    assert error.http_status == 400
    assert error.code == "bad_parameter"
    assert error.message == "Bad value for parameter 'version': 'abc'"


def test_bad_parameter_with_expected():
    error = BadParameterError("estimate", "x", expected="an integer")
    assert error.message.endswith("(expected: 'an integer')")


def test_version_conflict_is_distinct_from_bad_parameter():
    error = VersionConflictError("version conflict")
    assert error.code == "version_conflict"
    assert error.category is ErrorCategory.CONFLICT
    assert not isinstance(error, BadParameterError)


def test_internal_error_keeps_detail_out_of_response():
    error = InternalError(detail="deadlock detected on work_items")
    assert error.http_status == 500
    assert "deadlock" not in str(error.to_response())
    assert error.context.debug_info == {"detail": "deadlock detected on work_items"}


def test_all_errors_share_the_base():
    for error in (
        NotFoundError("x", "1"), BadParameterError("p", 1),
        VersionConflictError("v"), InternalError(),
    ):
        assert isinstance(error, WorkTrackError)
