"""Derived views: ROI projection, readiness assessment, and the calculator input.

These are never stored as facts. They are recomputed from the current
use case state every time they are requested.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from agentprep.models.usecase import Metrics


class CatalogSnapshot(BaseModel):
    """Read-only input to the Derived-Metrics Calculator."""

    model_config = ConfigDict(frozen=True)

    use_case_id: str
    overview_complete: bool = False
    metrics: Metrics | None = None
    role_count: int = 0
    step_count: int = 0
    data_asset_count: int = 0
    application_count: int = 0
    connector_count: int = 0
    rule_count: int = 0
    sla_count: int = 0


class ROIResults(BaseModel):
    use_case_id: str
    current_annual_cost_usd: float
    future_annual_cost_usd: float
    annual_savings_usd: float
    payback_months: float  # capped at 60
    three_year_value_usd: float
    confidence_score: float  # 0.2 to 1.0
    calculated_at: datetime


class Readiness(BaseModel):
    """Composite automation readiness. Subscores are 0 to 5, higher is better."""

    use_case_id: str
    overall_score: float
    automation_fit_score: int  # 40 to 100
    api_maturity: float
    data_quality: float
    rule_clarity: float
    exception_rate: float  # exception-handling readiness, not a raw rate
    volume_stability: float
    security_posture: float
    calculated_at: datetime
