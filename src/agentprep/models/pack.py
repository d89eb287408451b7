"""UseCasePack: the portable, self-contained snapshot of one use case."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from agentprep.models.derived import Readiness, ROIResults
from agentprep.models.usecase import (
    SLA,
    Application,
    BusinessRule,
    CatalogKind,
    Connector,
    DataAsset,
    Metrics,
    ProcessStep,
    Role,
    UseCase,
)

PACK_VERSION = "1.0"


class ProcessSection(BaseModel):
    roles: list[Role] = Field(default_factory=list)
    steps: list[ProcessStep] = Field(default_factory=list)


class UseCasePack(BaseModel):
    """What gets exported, imported, and scored.
    readiness and roi are recomputed at export time, never read back on import."""

    use_case: UseCase
    process: ProcessSection = Field(default_factory=ProcessSection)
    data_assets: list[DataAsset] = Field(default_factory=list)
    applications: list[Application] = Field(default_factory=list)
    connectors: list[Connector] = Field(default_factory=list)
    rules: list[BusinessRule] = Field(default_factory=list)
    slas: list[SLA] = Field(default_factory=list)
    metrics: Metrics | None = None
    readiness: Readiness | None = None
    roi: ROIResults | None = None
    exported_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    version: str = PACK_VERSION

    def entities(self, kind: CatalogKind) -> list[BaseModel]:
        """Return the nested collection for ``kind``."""
        if kind is CatalogKind.ROLES:
            return list(self.process.roles)
        if kind is CatalogKind.STEPS:
            return list(self.process.steps)
        return list(getattr(self, kind.value))

    def counts(self) -> dict[CatalogKind, int]:
        return {kind: len(self.entities(kind)) for kind in CatalogKind}
