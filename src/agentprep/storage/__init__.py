"""Store interface, fallback store, and its key-value media."""

from agentprep.storage.backends import KeyValueBackend, MemoryBackend, SQLiteBackend
from agentprep.storage.base import AgentPrepStore
from agentprep.storage.local import OWNER_KEY, STORE_KEY, LocalStore

__all__ = [
    "OWNER_KEY",
    "STORE_KEY",
    "AgentPrepStore",
    "KeyValueBackend",
    "LocalStore",
    "MemoryBackend",
    "SQLiteBackend",
]
