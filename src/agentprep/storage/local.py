"""Fallback Persistence Store.

Mirrors the remote API over a local key-value medium. The whole store is one
JSON document under STORE_KEY:

    {"use_cases": {<use_case_id>: {"use_case": {...}, "metrics": {...} | null,
                                   "roles": [...], "steps": [...], ...}}}

Every operation loads the document, applies its change in memory, and writes
the document back once, so a failed write never leaves a partial change
behind. Callers receive models validated from freshly decoded JSON and never
share objects with stored state.
"""

from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel

from agentprep.errors import NotFoundError, StorageUnavailableError
from agentprep.models.derived import Readiness, ROIResults
from agentprep.models.pack import UseCasePack
from agentprep.models.usecase import (
    CatalogKind,
    Connector,
    Metrics,
    ProcessStep,
    UseCase,
)
from agentprep.scoring.compute import derive_views
from agentprep.scoring.process import collect_descendants
from agentprep.storage.backends import KeyValueBackend
from agentprep.storage.base import AgentPrepStore

logger = logging.getLogger(__name__)

STORE_KEY = "agentprep-data"
OWNER_KEY = "agentprep-owner-id"

# Fields the store owns; caller-supplied values are ignored.
_ASSIGNED_FIELDS = frozenset({"id", "use_case_id", "created_at", "updated_at"})

_ID_PREFIXES: dict[CatalogKind, str] = {
    CatalogKind.ROLES: "role",
    CatalogKind.STEPS: "step",
    CatalogKind.DATA_ASSETS: "asset",
    CatalogKind.APPLICATIONS: "app",
    CatalogKind.CONNECTORS: "conn",
    CatalogKind.RULES: "rule",
    CatalogKind.SLAS: "sla",
}


def _gen_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def _writable(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if key not in _ASSIGNED_FIELDS}


def _empty_record(use_case: dict[str, Any]) -> dict[str, Any]:
    record: dict[str, Any] = {"use_case": use_case, "metrics": None}
    for kind in CatalogKind:
        record[kind.value] = []
    return record


def _step_edges(steps: list[dict[str, Any]]) -> list[tuple[str, str | None]]:
    return [(step["id"], step.get("parent_id")) for step in steps]


class LocalStore(AgentPrepStore):
    """AgentPrepStore over a KeyValueBackend."""

    source = "local"

    def __init__(
        self,
        backend: KeyValueBackend,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._backend = backend
        self._clock = clock or (lambda: datetime.now(UTC))

    async def initialize(self) -> None:
        await self._backend.initialize()

    async def close(self) -> None:
        await self._backend.close()

    async def owner_id(self) -> str:
        """The remembered anonymous owner id, generated on first use."""
        owner = await self._backend.get(OWNER_KEY)
        if owner is None:
            owner = str(uuid.uuid4())
            await self._backend.set(OWNER_KEY, owner)
        return owner

    # ----- Document handling -----

    async def _load(self) -> dict[str, Any]:
        raw = await self._backend.get(STORE_KEY)
        if raw is None:
            return {"use_cases": {}}
        try:
            state = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageUnavailableError("Stored fallback data is not valid JSON") from exc
        if not isinstance(state, dict):
            raise StorageUnavailableError("Stored fallback data has an unexpected shape")
        state.setdefault("use_cases", {})
        return state

    async def _save(self, state: dict[str, Any]) -> None:
        await self._backend.set(STORE_KEY, json.dumps(state))

    @staticmethod
    def _record(state: dict[str, Any], use_case_id: str) -> dict[str, Any]:
        record = state["use_cases"].get(use_case_id)
        if record is None:
            raise NotFoundError("use case", use_case_id)
        return record

    @staticmethod
    def _items(record: dict[str, Any], kind: CatalogKind) -> list[dict[str, Any]]:
        return record.setdefault(kind.value, [])

    @staticmethod
    def _index_of(items: list[dict[str, Any]], kind: CatalogKind, entity_id: str) -> int:
        for index, item in enumerate(items):
            if item.get("id") == entity_id:
                return index
        raise NotFoundError(kind.label, entity_id)

    def _touch(self, record: dict[str, Any], now: datetime) -> None:
        record["use_case"]["updated_at"] = now.isoformat()

    def _pack(self, record: dict[str, Any], now: datetime) -> UseCasePack:
        return UseCasePack.model_validate(
            {
                "use_case": record["use_case"],
                "process": {
                    "roles": self._items(record, CatalogKind.ROLES),
                    "steps": self._items(record, CatalogKind.STEPS),
                },
                "data_assets": self._items(record, CatalogKind.DATA_ASSETS),
                "applications": self._items(record, CatalogKind.APPLICATIONS),
                "connectors": self._items(record, CatalogKind.CONNECTORS),
                "rules": self._items(record, CatalogKind.RULES),
                "slas": self._items(record, CatalogKind.SLAS),
                "metrics": record.get("metrics"),
                "exported_at": now,
            }
        )

    def _check_references(self, record: dict[str, Any], entity: BaseModel) -> None:
        if isinstance(entity, ProcessStep) and entity.parent_id is not None:
            steps = self._items(record, CatalogKind.STEPS)
            if not any(step["id"] == entity.parent_id for step in steps):
                raise NotFoundError("parent process step", entity.parent_id)
            below = collect_descendants(_step_edges(steps), entity.id)
            if entity.parent_id == entity.id or entity.parent_id in below:
                raise ValueError(f"Step {entity.id} cannot be nested under its own subtree")
        elif isinstance(entity, Connector):
            applications = self._items(record, CatalogKind.APPLICATIONS)
            if not any(app["id"] == entity.application_id for app in applications):
                raise NotFoundError("application", entity.application_id)

    # ----- Use cases -----

    async def create_use_case(self, data: dict[str, Any]) -> UseCase:
        state = await self._load()
        use_case = UseCase.model_validate(
            {**_writable(data), "id": _gen_id("uc"), "created_at": self._clock()}
        )
        state["use_cases"][use_case.id] = _empty_record(use_case.model_dump(mode="json"))
        await self._save(state)
        return use_case

    async def get_use_case(self, use_case_id: str) -> UseCase:
        state = await self._load()
        return UseCase.model_validate(self._record(state, use_case_id)["use_case"])

    async def update_use_case(self, use_case_id: str, data: dict[str, Any]) -> UseCase:
        state = await self._load()
        record = self._record(state, use_case_id)
        use_case = UseCase.model_validate(
            {**record["use_case"], **_writable(data), "updated_at": self._clock()}
        )
        record["use_case"] = use_case.model_dump(mode="json")
        await self._save(state)
        return use_case

    async def list_use_cases(
        self,
        owner_id: str,
        *,
        status: str | None = None,
        priority: str | None = None,
        tags: list[str] | None = None,
    ) -> list[UseCase]:
        state = await self._load()
        matches: list[UseCase] = []
        for record in state["use_cases"].values():
            use_case = UseCase.model_validate(record["use_case"])
            if use_case.owner_id != owner_id:
                continue
            if status and use_case.status != status:
                continue
            if priority and use_case.priority != priority:
                continue
            if tags and not set(tags) & set(use_case.tags):
                continue
            matches.append(use_case)
        matches.sort(key=lambda uc: uc.last_touched(), reverse=True)
        return matches

    async def delete_use_case(self, use_case_id: str) -> None:
        state = await self._load()
        self._record(state, use_case_id)
        del state["use_cases"][use_case_id]
        await self._save(state)

    # ----- Nested catalog -----

    async def list_entities(self, use_case_id: str, kind: CatalogKind) -> list[BaseModel]:
        state = await self._load()
        record = self._record(state, use_case_id)
        return [kind.model.model_validate(item) for item in self._items(record, kind)]

    async def get_entity(self, use_case_id: str, kind: CatalogKind, entity_id: str) -> BaseModel:
        state = await self._load()
        items = self._items(self._record(state, use_case_id), kind)
        return kind.model.model_validate(items[self._index_of(items, kind, entity_id)])

    async def create_entity(
        self, use_case_id: str, kind: CatalogKind, data: dict[str, Any]
    ) -> BaseModel:
        state = await self._load()
        record = self._record(state, use_case_id)
        now = self._clock()
        entity = kind.model.model_validate(
            {
                **_writable(data),
                "id": _gen_id(_ID_PREFIXES[kind]),
                "use_case_id": use_case_id,
                "created_at": now,
            }
        )
        self._check_references(record, entity)
        self._items(record, kind).append(entity.model_dump(mode="json"))
        self._touch(record, now)
        await self._save(state)
        return entity

    async def update_entity(
        self, use_case_id: str, kind: CatalogKind, entity_id: str, data: dict[str, Any]
    ) -> BaseModel:
        state = await self._load()
        record = self._record(state, use_case_id)
        items = self._items(record, kind)
        index = self._index_of(items, kind, entity_id)
        now = self._clock()
        entity = kind.model.model_validate({**items[index], **_writable(data), "updated_at": now})
        self._check_references(record, entity)
        items[index] = entity.model_dump(mode="json")
        self._touch(record, now)
        await self._save(state)
        return entity

    async def delete_entity(self, use_case_id: str, kind: CatalogKind, entity_id: str) -> None:
        state = await self._load()
        record = self._record(state, use_case_id)
        items = self._items(record, kind)
        self._index_of(items, kind, entity_id)

        if kind is CatalogKind.STEPS:
            doomed = {entity_id, *collect_descendants(_step_edges(items), entity_id)}
            record[kind.value] = [step for step in items if step["id"] not in doomed]
            if len(doomed) > 1:
                logger.debug(
                    "Cascade-deleted %d descendant steps of %s", len(doomed) - 1, entity_id
                )
        elif kind is CatalogKind.APPLICATIONS:
            record[kind.value] = [app for app in items if app["id"] != entity_id]
            connectors = self._items(record, CatalogKind.CONNECTORS)
            kept = [conn for conn in connectors if conn.get("application_id") != entity_id]
            record[CatalogKind.CONNECTORS.value] = kept
            if len(kept) != len(connectors):
                logger.debug(
                    "Cascade-deleted %d connectors of application %s",
                    len(connectors) - len(kept),
                    entity_id,
                )
        else:
            record[kind.value] = [item for item in items if item["id"] != entity_id]

        self._touch(record, self._clock())
        await self._save(state)

    # ----- Metrics and derived views -----

    async def get_metrics(self, use_case_id: str) -> Metrics | None:
        state = await self._load()
        stored = self._record(state, use_case_id).get("metrics")
        return Metrics.model_validate(stored) if stored else None

    async def update_metrics(self, use_case_id: str, data: dict[str, Any]) -> Metrics:
        state = await self._load()
        record = self._record(state, use_case_id)
        now = self._clock()
        metrics = Metrics.model_validate(
            {
                **(record.get("metrics") or {}),
                **_writable(data),
                "use_case_id": use_case_id,
                "updated_at": now,
            }
        )
        record["metrics"] = metrics.model_dump(mode="json")
        self._touch(record, now)
        await self._save(state)
        return metrics

    async def get_roi(self, use_case_id: str) -> ROIResults | None:
        state = await self._load()
        now = self._clock()
        _, roi = derive_views(self._pack(self._record(state, use_case_id), now), now=now)
        return roi

    async def get_readiness(self, use_case_id: str) -> Readiness:
        state = await self._load()
        now = self._clock()
        readiness, _ = derive_views(self._pack(self._record(state, use_case_id), now), now=now)
        return readiness

    # ----- Export / import -----

    async def export_use_case(self, use_case_id: str) -> UseCasePack:
        state = await self._load()
        now = self._clock()
        pack = self._pack(self._record(state, use_case_id), now)
        readiness, roi = derive_views(pack, now=now)
        return pack.model_copy(update={"readiness": readiness, "roi": roi})

    async def import_use_case(self, pack: UseCasePack, owner_id: str) -> UseCase:
        state = await self._load()
        now = self._clock()
        new_id = _gen_id("uc")
        use_case = pack.use_case.model_copy(
            update={"id": new_id, "owner_id": owner_id, "created_at": now, "updated_at": now}
        )
        record = _empty_record(use_case.model_dump(mode="json"))
        for kind in CatalogKind:
            record[kind.value] = [
                {**entity.model_dump(mode="json"), "use_case_id": new_id}
                for entity in pack.entities(kind)
            ]
        if pack.metrics is not None:
            record["metrics"] = {**pack.metrics.model_dump(mode="json"), "use_case_id": new_id}
        state["use_cases"][new_id] = record
        await self._save(state)
        logger.debug("Imported pack %r as use case %s", pack.use_case.name, new_id)
        return use_case
