"""Remote-first dispatcher with a one-shot local fallback.

FallbackClient wraps two AgentPrepStore implementations. Each call goes to
the primary first; when the primary raises a RemoteError whose kind triggers
fallback, the same call is made once against the fallback store and its
result (or error) is final. Validation failures and every non-remote error
propagate unchanged.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel

from agentprep.errors import RemoteError
from agentprep.models.derived import Readiness, ROIResults
from agentprep.models.pack import UseCasePack
from agentprep.models.usecase import CatalogKind, Metrics, UseCase
from agentprep.storage.base import AgentPrepStore

logger = logging.getLogger(__name__)


class FallbackClient(AgentPrepStore):
    """Unified store: primary path with transparent fallback."""

    source = "dispatch"

    def __init__(self, primary: AgentPrepStore, fallback: AgentPrepStore) -> None:
        self.primary = primary
        self.fallback = fallback
        self.last_source: str | None = None

    async def initialize(self) -> None:
        await self.primary.initialize()
        await self.fallback.initialize()

    async def close(self) -> None:
        try:
            await self.primary.close()
        finally:
            await self.fallback.close()

    async def _dispatch(self, operation: str, *args: Any, **kwargs: Any) -> Any:
        self.last_source = self.primary.source
        try:
            result = await getattr(self.primary, operation)(*args, **kwargs)
        except RemoteError as exc:
            if not exc.kind.triggers_fallback:
                raise
            logger.warning(
                "%s via %s failed (%s: %s); using %s store",
                operation,
                self.primary.source,
                exc.kind.value,
                exc,
                self.fallback.source,
            )
            self.last_source = self.fallback.source
            return await getattr(self.fallback, operation)(*args, **kwargs)
        return result

    # ----- Use cases -----

    async def create_use_case(self, data: dict[str, Any]) -> UseCase:
        return await self._dispatch("create_use_case", data)

    async def get_use_case(self, use_case_id: str) -> UseCase:
        return await self._dispatch("get_use_case", use_case_id)

    async def update_use_case(self, use_case_id: str, data: dict[str, Any]) -> UseCase:
        return await self._dispatch("update_use_case", use_case_id, data)

    async def list_use_cases(
        self,
        owner_id: str,
        *,
        status: str | None = None,
        priority: str | None = None,
        tags: list[str] | None = None,
    ) -> list[UseCase]:
        return await self._dispatch(
            "list_use_cases", owner_id, status=status, priority=priority, tags=tags
        )

    async def delete_use_case(self, use_case_id: str) -> None:
        await self._dispatch("delete_use_case", use_case_id)

    # ----- Nested catalog -----

    async def list_entities(self, use_case_id: str, kind: CatalogKind) -> list[BaseModel]:
        return await self._dispatch("list_entities", use_case_id, kind)

    async def get_entity(self, use_case_id: str, kind: CatalogKind, entity_id: str) -> BaseModel:
        return await self._dispatch("get_entity", use_case_id, kind, entity_id)

    async def create_entity(
        self, use_case_id: str, kind: CatalogKind, data: dict[str, Any]
    ) -> BaseModel:
        return await self._dispatch("create_entity", use_case_id, kind, data)

    async def update_entity(
        self, use_case_id: str, kind: CatalogKind, entity_id: str, data: dict[str, Any]
    ) -> BaseModel:
        return await self._dispatch("update_entity", use_case_id, kind, entity_id, data)

    async def delete_entity(self, use_case_id: str, kind: CatalogKind, entity_id: str) -> None:
        await self._dispatch("delete_entity", use_case_id, kind, entity_id)

    # ----- Metrics and derived views -----

    async def get_metrics(self, use_case_id: str) -> Metrics | None:
        return await self._dispatch("get_metrics", use_case_id)

    async def update_metrics(self, use_case_id: str, data: dict[str, Any]) -> Metrics:
        return await self._dispatch("update_metrics", use_case_id, data)

    async def get_roi(self, use_case_id: str) -> ROIResults | None:
        return await self._dispatch("get_roi", use_case_id)

    async def get_readiness(self, use_case_id: str) -> Readiness:
        return await self._dispatch("get_readiness", use_case_id)

    # ----- Export / import -----

    async def export_use_case(self, use_case_id: str) -> UseCasePack:
        return await self._dispatch("export_use_case", use_case_id)

    async def import_use_case(self, pack: UseCasePack, owner_id: str) -> UseCase:
        return await self._dispatch("import_use_case", pack, owner_id)
