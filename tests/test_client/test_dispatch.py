"""Tests for the remote-first FallbackClient."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from agentprep.client import build_store, local_store_of
from agentprep.client.dispatch import FallbackClient
from agentprep.client.remote import RemoteStore
from agentprep.config import Settings
from agentprep.errors import NotFoundError, RemoteError, RemoteErrorKind
from agentprep.storage.backends import MemoryBackend
from agentprep.storage.local import LocalStore


class _Counter:
    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]) -> None:
        self.respond = respond
        self.calls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        return self.respond(request)


def _unreachable(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


def _client(handler: Callable[[httpx.Request], httpx.Response]) -> FallbackClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://api.test")
    return FallbackClient(primary=RemoteStore(client=http), fallback=LocalStore(MemoryBackend()))


@pytest.mark.asyncio
async def test_network_failure_falls_back_to_local() -> None:
    counter = _Counter(_unreachable)
    client = _client(counter)

    created = await client.create_use_case({"name": "Offline", "owner_id": "o"})
    assert client.last_source == "local"
    assert counter.calls == 1

    fetched = await client.get_use_case(created.id)
    assert fetched.name == "Offline"
    assert counter.calls == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [404, 500, 502, 401])
async def test_fallback_triggering_statuses(status: int) -> None:
    client = _client(lambda request: httpx.Response(status, json={"error": "x"}))
    listed = await client.list_use_cases("o")
    assert listed == []
    assert client.last_source == "local"


@pytest.mark.asyncio
async def test_malformed_response_falls_back() -> None:
    client = _client(lambda request: httpx.Response(200, text="<html></html>"))
    await client.list_use_cases("o")
    assert client.last_source == "local"


@pytest.mark.asyncio
async def test_validation_error_is_surfaced() -> None:
    client = _client(lambda request: httpx.Response(422, json={"error": "name required"}))
    with pytest.raises(RemoteError) as excinfo:
        await client.create_use_case({"owner_id": "o"})
    assert excinfo.value.kind is RemoteErrorKind.VALIDATION
    assert await client.fallback.list_use_cases("o") == []


@pytest.mark.asyncio
async def test_fallback_is_one_shot() -> None:
    counter = _Counter(_unreachable)
    client = _client(counter)
    with pytest.raises(NotFoundError):
        await client.get_use_case("uc-missing")
    assert counter.calls == 1
    assert client.last_source == "local"


@pytest.mark.asyncio
async def test_remote_success_does_not_touch_local() -> None:
    payload = {
        "id": "uc-remote",
        "name": "Remote",
        "owner_id": "o",
        "created_at": "2026-03-01T00:00:00Z",
    }
    client = _client(lambda request: httpx.Response(201, json=payload))
    created = await client.create_use_case({"name": "Remote", "owner_id": "o"})
    assert created.id == "uc-remote"
    assert client.last_source == "remote"
    assert await client.fallback.list_use_cases("o") == []


def test_build_store_without_api_is_local(tmp_path: Path) -> None:
    store = build_store(Settings(db_path=tmp_path / "x.db"))
    assert isinstance(store, LocalStore)
    assert local_store_of(store) is store


def test_build_store_with_api_dispatches(tmp_path: Path) -> None:
    store = build_store(Settings(api_url="http://api.test", db_path=tmp_path / "x.db"))
    assert isinstance(store, FallbackClient)
    assert isinstance(store.primary, RemoteStore)
    assert local_store_of(store) is store.fallback


@pytest.mark.asyncio
async def test_last_source_reflects_a_failing_fallback() -> None:
    payload = {
        "id": "uc-remote",
        "name": "Remote",
        "owner_id": "o",
        "created_at": "2026-03-01T00:00:00Z",
    }
    responses = iter([httpx.Response(201, json=payload)])

    def handler(request: httpx.Request) -> httpx.Response:
        response = next(responses, None)
        if response is None:
            raise httpx.ConnectError("connection refused", request=request)
        return response

    client = _client(handler)
    await client.create_use_case({"name": "Remote", "owner_id": "o"})
    assert client.last_source == "remote"

    with pytest.raises(NotFoundError):
        await client.get_use_case("uc-remote")
    assert client.last_source == "local"


@pytest.mark.asyncio
async def test_last_source_after_surfaced_validation_error() -> None:
    client = _client(_unreachable)
    await client.list_use_cases("o")
    assert client.last_source == "local"

    client.primary = RemoteStore(
        client=httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(422, json={})),
            base_url="http://api.test",
        )
    )
    with pytest.raises(RemoteError):
        await client.create_use_case({"owner_id": "o"})
    assert client.last_source == "remote"
