"""Error taxonomy shared by the stores, the remote client, and the CLI."""

from __future__ import annotations

from enum import StrEnum


class AgentPrepError(Exception):
    """Base exception for all AgentPrep errors."""


class NotFoundError(AgentPrepError):
    """A use case or nested entity id is absent from the store."""

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(f"{entity} {entity_id!r} not found")
        self.entity = entity
        self.entity_id = entity_id


class StorageUnavailableError(AgentPrepError):
    """The persistence medium cannot be read or written."""


class PackFileError(AgentPrepError):
    """A pack file cannot be written, read, or parsed."""


class RemoteErrorKind(StrEnum):
    NETWORK = "network"
    TIMEOUT = "timeout"
    MALFORMED_RESPONSE = "malformed_response"
    NOT_FOUND = "not_found"
    CLIENT_ERROR = "client_error"
    SERVER_ERROR = "server_error"
    VALIDATION = "validation"

    @property
    def triggers_fallback(self) -> bool:
        """Application-level validation failures are surfaced; everything else falls back."""
        return self is not RemoteErrorKind.VALIDATION


class RemoteError(AgentPrepError):
    """A call to the remote API failed. ``kind`` is assigned at the HTTP boundary."""

    def __init__(
        self, kind: RemoteErrorKind, message: str, *, status_code: int | None = None
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code


def classify_status(status_code: int) -> RemoteErrorKind | None:
    """Map an HTTP status to an error kind. Returns None for success codes."""
    if status_code < 400:
        return None
    if status_code == 404:
        return RemoteErrorKind.NOT_FOUND
    if status_code in (400, 409, 422):
        return RemoteErrorKind.VALIDATION
    if status_code < 500:
        return RemoteErrorKind.CLIENT_ERROR
    return RemoteErrorKind.SERVER_ERROR
