"""API client: remote REST store, fallback dispatcher, and the store factory."""

from __future__ import annotations

from agentprep.client.dispatch import FallbackClient
from agentprep.client.remote import RemoteStore
from agentprep.config import Settings
from agentprep.storage.backends import SQLiteBackend
from agentprep.storage.base import AgentPrepStore
from agentprep.storage.local import LocalStore


def build_store(settings: Settings) -> AgentPrepStore:
    """Remote-first client when an API URL is configured, local store otherwise.

    The returned store is not yet initialized.
    """
    local = LocalStore(SQLiteBackend(settings.db_path))
    if not settings.api_url:
        return local
    remote = RemoteStore(settings.api_url, prefix=settings.api_prefix, timeout=settings.timeout)
    return FallbackClient(primary=remote, fallback=local)


def local_store_of(store: AgentPrepStore) -> LocalStore | None:
    """The fallback LocalStore inside ``store``, if any."""
    if isinstance(store, LocalStore):
        return store
    if isinstance(store, FallbackClient) and isinstance(store.fallback, LocalStore):
        return store.fallback
    return None


__all__ = ["FallbackClient", "RemoteStore", "build_store", "local_store_of"]
