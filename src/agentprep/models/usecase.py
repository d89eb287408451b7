"""Use case record and the nested catalog it owns.

A UseCase is the root of one candidate business process for automation.
Every other record below is a child of exactly one UseCase, except Connector,
which additionally belongs to exactly one Application.

    UseCase
    ├── Role
    ├── ProcessStep ──(parent_id)──> ProcessStep
    ├── DataAsset (fields: DataField[])
    ├── Application
    │   └── Connector
    ├── BusinessRule
    ├── SLA
    └── Metrics (singleton)
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class UseCaseStatus(StrEnum):
    DRAFT = "draft"
    ANALYSIS = "analysis"
    APPROVED = "approved"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ON_HOLD = "on_hold"


class RoleType(StrEnum):
    HUMAN = "human"
    AGENT = "agent"
    SYSTEM = "system"


class StepType(StrEnum):
    TRIGGER = "trigger"
    TASK = "task"
    DECISION = "decision"
    APPROVAL = "approval"
    PARALLEL = "parallel"
    WAIT = "wait"


class ObjectType(StrEnum):
    TABLE = "table"
    API = "api"
    FILE = "file"
    EVENT = "event"


class RuleCategory(StrEnum):
    VALIDATION = "validation"
    ELIGIBILITY = "eligibility"
    ROUTING = "routing"
    PRICING = "pricing"
    COMPLIANCE = "compliance"


# ---------------------------------------------------------------------------
# Root record
# ---------------------------------------------------------------------------


class UseCase(BaseModel):
    """One candidate business process, owned by a single user."""

    id: str
    name: str
    objective: str = ""
    scope: str = ""
    sponsor: str = ""
    priority: Priority = Priority.MEDIUM
    status: UseCaseStatus = UseCaseStatus.DRAFT
    tags: list[str] = Field(default_factory=list)
    owner_id: str
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime | None = None

    @field_validator("tags")
    @classmethod
    def _unique_tags(cls, tags: list[str]) -> list[str]:
        # Tags behave as a set; keep first-seen order.
        return list(dict.fromkeys(tags))

    def overview_complete(self) -> bool:
        """True when the overview section has a name, objective and scope."""
        return all(value.strip() for value in (self.name, self.objective, self.scope))

    def last_touched(self) -> datetime:
        return self.updated_at or self.created_at


# ---------------------------------------------------------------------------
# Nested catalog
# ---------------------------------------------------------------------------


class Role(BaseModel):
    id: str
    use_case_id: str
    name: str
    type: RoleType = RoleType.HUMAN
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime | None = None


class ProcessStep(BaseModel):
    """A node in the process tree. Root steps have no parent_id."""

    id: str
    use_case_id: str
    parent_id: str | None = None
    title: str
    description: str = ""
    type: StepType = StepType.TASK
    role: str = ""
    level: int = 1
    order_index: int = 0
    avg_time_minutes: float | None = Field(default=None, ge=0)
    volume_per_day: float | None = Field(default=None, ge=0)
    exception_rate: float | None = Field(default=None, ge=0, le=1)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime | None = None


class DataField(BaseModel):
    name: str
    type: str = "string"
    required: bool = False


class DataAsset(BaseModel):
    id: str
    use_case_id: str
    name: str
    system: str = ""
    object_type: ObjectType = ObjectType.TABLE
    has_pii: bool = False
    quality_score: float = Field(default=3.0, ge=1, le=5)
    fields: list[DataField] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime | None = None


class Application(BaseModel):
    id: str
    use_case_id: str
    name: str
    type: str = "saas"  # "saas", "onprem", "database", "api", "custom"
    vendor: str | None = None
    auth_type: str = "none"  # "none", "apikey", "oauth", "basic", "bearer", "saml"
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime | None = None


class Connector(BaseModel):
    """Integration endpoint of an Application. Deleted together with it."""

    id: str
    use_case_id: str
    application_id: str
    name: str
    connector_type: str = "HTTP"  # "HTTP", "SQL", "GraphQL", "Search", "File"
    endpoint: str | None = None
    timeout_ms: int | None = None
    max_retries: int | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime | None = None


class BusinessRule(BaseModel):
    id: str
    use_case_id: str
    name: str
    description: str = ""
    category: RuleCategory = RuleCategory.VALIDATION
    expression: str = ""  # free-text pseudo-code
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime | None = None


class SLA(BaseModel):
    id: str
    use_case_id: str
    metric: str
    threshold: str
    unit: str  # "seconds", "minutes", "hours", "percent", "count"
    window: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime | None = None


class Metrics(BaseModel):
    """Baseline operating figures. One per use case; feeds ROI and readiness."""

    use_case_id: str
    baseline_volume: float = Field(default=0.0, ge=0)
    avg_handling_time_minutes: float = Field(default=0.0, ge=0)
    fte_cost_per_hour: float = Field(default=0.0, ge=0)
    error_rate: float = Field(default=0.0, ge=0, le=1)
    breach_cost_usd: float = Field(default=0.0, ge=0)
    updated_at: datetime | None = None

    def sufficient_for_roi(self) -> bool:
        return (
            self.baseline_volume > 0
            and self.avg_handling_time_minutes > 0
            and self.fte_cost_per_hour > 0
        )


# ---------------------------------------------------------------------------
# Catalog kinds
# ---------------------------------------------------------------------------


class CatalogKind(StrEnum):
    """The nested collections of a use case. Values double as storage keys."""

    ROLES = "roles"
    STEPS = "steps"
    DATA_ASSETS = "data_assets"
    APPLICATIONS = "applications"
    CONNECTORS = "connectors"
    RULES = "rules"
    SLAS = "slas"

    @property
    def path(self) -> str:
        """URL segment used by the remote API."""
        return self.value.replace("_", "-")

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def model(self) -> type[BaseModel]:
        return CATALOG_MODELS[self]


_LABELS: dict[CatalogKind, str] = {
    CatalogKind.ROLES: "role",
    CatalogKind.STEPS: "process step",
    CatalogKind.DATA_ASSETS: "data asset",
    CatalogKind.APPLICATIONS: "application",
    CatalogKind.CONNECTORS: "connector",
    CatalogKind.RULES: "business rule",
    CatalogKind.SLAS: "SLA",
}

CATALOG_MODELS: dict[CatalogKind, type[BaseModel]] = {
    CatalogKind.ROLES: Role,
    CatalogKind.STEPS: ProcessStep,
    CatalogKind.DATA_ASSETS: DataAsset,
    CatalogKind.APPLICATIONS: Application,
    CatalogKind.CONNECTORS: Connector,
    CatalogKind.RULES: BusinessRule,
    CatalogKind.SLAS: SLA,
}
