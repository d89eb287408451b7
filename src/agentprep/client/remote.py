"""REST client for the AgentPrep use-case API.

Every failure is classified into a RemoteErrorKind here, at the HTTP
boundary, so the dispatcher can decide on fallback without inspecting
messages or status codes.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from agentprep.errors import RemoteError, RemoteErrorKind, classify_status
from agentprep.models.derived import Readiness, ROIResults
from agentprep.models.pack import UseCasePack
from agentprep.models.usecase import CatalogKind, Metrics, UseCase
from agentprep.storage.base import AgentPrepStore

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "/api/use-cases"
USER_AGENT = "AgentPrep/0.1"


class RemoteStore(AgentPrepStore):
    """AgentPrepStore backed by the remote REST API."""

    source = "remote"

    def __init__(
        self,
        base_url: str = "",
        *,
        prefix: str = DEFAULT_PREFIX,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._prefix = prefix.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        )

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ----- HTTP plumbing -----

    async def _request(
        self,
        method: str,
        path: str = "",
        *,
        json_body: Any = None,
        params: dict[str, Any] | None = None,
        expect_body: bool = True,
    ) -> Any:
        url = f"{self._prefix}{path}"
        logger.debug("%s %s", method, url)
        try:
            response = await self._client.request(method, url, json=json_body, params=params)
        except httpx.TimeoutException as exc:
            raise RemoteError(RemoteErrorKind.TIMEOUT, f"{method} {url} timed out") from exc
        except httpx.HTTPError as exc:
            raise RemoteError(RemoteErrorKind.NETWORK, f"{method} {url} failed: {exc}") from exc

        kind = classify_status(response.status_code)
        if kind is not None:
            raise RemoteError(
                kind,
                f"{method} {url} returned {response.status_code}",
                status_code=response.status_code,
            )

        if not expect_body:
            return None
        content_type = response.headers.get("content-type", "")
        if "json" not in content_type:
            raise RemoteError(
                RemoteErrorKind.MALFORMED_RESPONSE,
                f"{method} {url} returned non-JSON content ({content_type or 'no content-type'})",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteError(
                RemoteErrorKind.MALFORMED_RESPONSE,
                f"{method} {url} returned an unparseable body",
                status_code=response.status_code,
            ) from exc

    @staticmethod
    def _parse(model: type[BaseModel], payload: Any) -> Any:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise RemoteError(
                RemoteErrorKind.MALFORMED_RESPONSE,
                f"Response does not match {model.__name__}",
            ) from exc

    def _parse_list(self, model: type[BaseModel], payload: Any) -> list[Any]:
        if not isinstance(payload, list):
            raise RemoteError(
                RemoteErrorKind.MALFORMED_RESPONSE,
                f"Expected a list of {model.__name__}, got {type(payload).__name__}",
            )
        return [self._parse(model, item) for item in payload]

    # ----- Use cases -----

    async def create_use_case(self, data: dict[str, Any]) -> UseCase:
        payload = await self._request("POST", json_body=data)
        return self._parse(UseCase, payload)

    async def get_use_case(self, use_case_id: str) -> UseCase:
        payload = await self._request("GET", f"/{use_case_id}")
        return self._parse(UseCase, payload)

    async def update_use_case(self, use_case_id: str, data: dict[str, Any]) -> UseCase:
        payload = await self._request("PUT", f"/{use_case_id}", json_body=data)
        return self._parse(UseCase, payload)

    async def list_use_cases(
        self,
        owner_id: str,
        *,
        status: str | None = None,
        priority: str | None = None,
        tags: list[str] | None = None,
    ) -> list[UseCase]:
        params: dict[str, Any] = {"owner_id": owner_id}
        if status:
            params["status"] = status
        if priority:
            params["priority"] = priority
        if tags:
            params["tags"] = ",".join(tags)
        payload = await self._request("GET", params=params)
        return self._parse_list(UseCase, payload)

    async def delete_use_case(self, use_case_id: str) -> None:
        await self._request("DELETE", f"/{use_case_id}", expect_body=False)

    # ----- Nested catalog -----

    async def list_entities(self, use_case_id: str, kind: CatalogKind) -> list[BaseModel]:
        payload = await self._request("GET", f"/{use_case_id}/{kind.path}")
        return self._parse_list(kind.model, payload)

    async def get_entity(self, use_case_id: str, kind: CatalogKind, entity_id: str) -> BaseModel:
        payload = await self._request("GET", f"/{use_case_id}/{kind.path}/{entity_id}")
        return self._parse(kind.model, payload)

    async def create_entity(
        self, use_case_id: str, kind: CatalogKind, data: dict[str, Any]
    ) -> BaseModel:
        payload = await self._request("POST", f"/{use_case_id}/{kind.path}", json_body=data)
        return self._parse(kind.model, payload)

    async def update_entity(
        self, use_case_id: str, kind: CatalogKind, entity_id: str, data: dict[str, Any]
    ) -> BaseModel:
        payload = await self._request(
            "PUT", f"/{use_case_id}/{kind.path}/{entity_id}", json_body=data
        )
        return self._parse(kind.model, payload)

    async def delete_entity(self, use_case_id: str, kind: CatalogKind, entity_id: str) -> None:
        await self._request(
            "DELETE", f"/{use_case_id}/{kind.path}/{entity_id}", expect_body=False
        )

    # ----- Metrics and derived views -----

    async def get_metrics(self, use_case_id: str) -> Metrics | None:
        payload = await self._request("GET", f"/{use_case_id}/metrics")
        return None if payload is None else self._parse(Metrics, payload)

    async def update_metrics(self, use_case_id: str, data: dict[str, Any]) -> Metrics:
        payload = await self._request("PUT", f"/{use_case_id}/metrics", json_body=data)
        return self._parse(Metrics, payload)

    async def get_roi(self, use_case_id: str) -> ROIResults | None:
        payload = await self._request("GET", f"/{use_case_id}/roi")
        return None if payload is None else self._parse(ROIResults, payload)

    async def get_readiness(self, use_case_id: str) -> Readiness:
        payload = await self._request("GET", f"/{use_case_id}/readiness")
        return self._parse(Readiness, payload)

    # ----- Export / import -----

    async def export_use_case(self, use_case_id: str) -> UseCasePack:
        payload = await self._request("GET", f"/{use_case_id}/export")
        return self._parse(UseCasePack, payload)

    async def import_use_case(self, pack: UseCasePack, owner_id: str) -> UseCase:
        payload = await self._request(
            "POST",
            "/import",
            json_body={"pack": pack.model_dump(mode="json"), "owner_id": owner_id},
        )
        return self._parse(UseCase, payload)
