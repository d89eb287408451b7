"""The store interface shared by the remote API client and the fallback store.

RemoteStore, LocalStore, and the FallbackClient that composes them all
implement this interface, so callers never know which path served a call.
Every method returns fresh model instances; mutating a returned value never
changes stored state.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel

from agentprep.models.derived import Readiness, ROIResults
from agentprep.models.pack import UseCasePack
from agentprep.models.usecase import CatalogKind, Metrics, UseCase


class AgentPrepStore(ABC):
    """Abstract async CRUD surface over use cases and their nested catalog."""

    #: Short label for logs and the CLI ("remote", "local", ...).
    source: str = "store"

    async def initialize(self) -> None:
        """Prepare the underlying medium or connection. No-op by default."""

    async def close(self) -> None:
        """Release the underlying medium or connection. No-op by default."""

    # ----- Use cases -----

    @abstractmethod
    async def create_use_case(self, data: dict[str, Any]) -> UseCase:
        """Create a use case. The store assigns id and created_at."""

    @abstractmethod
    async def get_use_case(self, use_case_id: str) -> UseCase:
        """Raise NotFoundError when absent."""

    @abstractmethod
    async def update_use_case(self, use_case_id: str, data: dict[str, Any]) -> UseCase:
        """Merge ``data`` into the use case and stamp updated_at."""

    @abstractmethod
    async def list_use_cases(
        self,
        owner_id: str,
        *,
        status: str | None = None,
        priority: str | None = None,
        tags: list[str] | None = None,
    ) -> list[UseCase]:
        """Use cases owned by ``owner_id``, most recently touched first."""

    @abstractmethod
    async def delete_use_case(self, use_case_id: str) -> None:
        """Delete a use case together with its whole catalog."""

    # ----- Nested catalog -----

    @abstractmethod
    async def list_entities(self, use_case_id: str, kind: CatalogKind) -> list[BaseModel]: ...

    @abstractmethod
    async def get_entity(self, use_case_id: str, kind: CatalogKind, entity_id: str) -> BaseModel: ...

    @abstractmethod
    async def create_entity(
        self, use_case_id: str, kind: CatalogKind, data: dict[str, Any]
    ) -> BaseModel: ...

    @abstractmethod
    async def update_entity(
        self, use_case_id: str, kind: CatalogKind, entity_id: str, data: dict[str, Any]
    ) -> BaseModel: ...

    @abstractmethod
    async def delete_entity(self, use_case_id: str, kind: CatalogKind, entity_id: str) -> None:
        """Delete one entity. Steps cascade to descendants; applications to connectors."""

    # ----- Metrics and derived views -----

    @abstractmethod
    async def get_metrics(self, use_case_id: str) -> Metrics | None:
        """None when metrics were never recorded."""

    @abstractmethod
    async def update_metrics(self, use_case_id: str, data: dict[str, Any]) -> Metrics: ...

    @abstractmethod
    async def get_roi(self, use_case_id: str) -> ROIResults | None:
        """Recomputed on every call. None when metrics are insufficient."""

    @abstractmethod
    async def get_readiness(self, use_case_id: str) -> Readiness:
        """Recomputed on every call."""

    # ----- Export / import -----

    @abstractmethod
    async def export_use_case(self, use_case_id: str) -> UseCasePack: ...

    @abstractmethod
    async def import_use_case(self, pack: UseCasePack, owner_id: str) -> UseCase:
        """Create a brand-new use case from ``pack`` owned by ``owner_id``."""

    # ----- Composed queries -----

    async def use_cases_by_readiness(
        self, owner_id: str, min_score: float = 0.0
    ) -> list[tuple[UseCase, Readiness]]:
        """Owner's use cases with overall readiness >= ``min_score``, best first."""
        ranked: list[tuple[UseCase, Readiness]] = []
        for use_case in await self.list_use_cases(owner_id):
            readiness = await self.get_readiness(use_case.id)
            if readiness.overall_score >= min_score:
                ranked.append((use_case, readiness))
        ranked.sort(key=lambda pair: pair[1].overall_score, reverse=True)
        return ranked
