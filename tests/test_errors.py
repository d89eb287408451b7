"""Tests for the error taxonomy."""

import pytest

from agentprep.errors import (
    AgentPrepError,
    NotFoundError,
    RemoteError,
    RemoteErrorKind,
    classify_status,
)


@pytest.mark.parametrize(
    ("status", "expected"),
    [
        (200, None),
        (201, None),
        (204, None),
        (304, None),
        (400, RemoteErrorKind.VALIDATION),
        (401, RemoteErrorKind.CLIENT_ERROR),
        (403, RemoteErrorKind.CLIENT_ERROR),
        (404, RemoteErrorKind.NOT_FOUND),
        (409, RemoteErrorKind.VALIDATION),
        (422, RemoteErrorKind.VALIDATION),
        (429, RemoteErrorKind.CLIENT_ERROR),
        (500, RemoteErrorKind.SERVER_ERROR),
        (504, RemoteErrorKind.SERVER_ERROR),
    ],
)
def test_classify_status(status: int, expected: RemoteErrorKind | None) -> None:
    assert classify_status(status) is expected


def test_only_validation_is_surfaced() -> None:
    surfaced = {kind for kind in RemoteErrorKind if not kind.triggers_fallback}
    assert surfaced == {RemoteErrorKind.VALIDATION}


def test_error_hierarchy() -> None:
    error = NotFoundError("process step", "step-1")
    assert isinstance(error, AgentPrepError)
    assert str(error) == "process step 'step-1' not found"

    remote = RemoteError(RemoteErrorKind.SERVER_ERROR, "boom", status_code=503)
    assert isinstance(remote, AgentPrepError)
    assert remote.status_code == 503
