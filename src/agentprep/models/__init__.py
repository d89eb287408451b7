"""AgentPrep data models: the use case catalog, derived views, and the export pack."""

from agentprep.models.derived import CatalogSnapshot, Readiness, ROIResults
from agentprep.models.pack import PACK_VERSION, ProcessSection, UseCasePack
from agentprep.models.usecase import (
    CATALOG_MODELS,
    SLA,
    Application,
    BusinessRule,
    CatalogKind,
    Connector,
    DataAsset,
    DataField,
    Metrics,
    ObjectType,
    Priority,
    ProcessStep,
    Role,
    RoleType,
    RuleCategory,
    StepType,
    UseCase,
    UseCaseStatus,
)

__all__ = [
    "CATALOG_MODELS",
    "PACK_VERSION",
    "SLA",
    "Application",
    "BusinessRule",
    "CatalogKind",
    "CatalogSnapshot",
    "Connector",
    "DataAsset",
    "DataField",
    "Metrics",
    "ObjectType",
    "Priority",
    "ProcessSection",
    "ProcessStep",
    "ROIResults",
    "Readiness",
    "Role",
    "RoleType",
    "RuleCategory",
    "StepType",
    "UseCase",
    "UseCasePack",
    "UseCaseStatus",
]
