"""Derived-Metrics Calculator.

Computes ROI projections and readiness scores from a CatalogSnapshot.
Every function here is pure: no I/O, no stored state, and no exceptions for
missing data. Insufficient inputs yield ``None`` (ROI) or low-but-defined
scores (readiness).
"""

from __future__ import annotations

from datetime import UTC, datetime

from agentprep.models.derived import CatalogSnapshot, Readiness, ROIResults
from agentprep.models.pack import UseCasePack
from agentprep.models.usecase import CatalogKind, Metrics

WORKING_DAYS_PER_YEAR = 260
MIN_IMPLEMENTATION_COST_USD = 5000.0
MAX_PAYBACK_MONTHS = 60.0


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def snapshot_from_pack(pack: UseCasePack) -> CatalogSnapshot:
    """Reduce a full pack to the counts and metrics the calculator reads."""
    counts = pack.counts()
    return CatalogSnapshot(
        use_case_id=pack.use_case.id,
        overview_complete=pack.use_case.overview_complete(),
        metrics=pack.metrics,
        role_count=counts[CatalogKind.ROLES],
        step_count=counts[CatalogKind.STEPS],
        data_asset_count=counts[CatalogKind.DATA_ASSETS],
        application_count=counts[CatalogKind.APPLICATIONS],
        connector_count=counts[CatalogKind.CONNECTORS],
        rule_count=counts[CatalogKind.RULES],
        sla_count=counts[CatalogKind.SLAS],
    )


# ---------------------------------------------------------------------------
# Completion checklist
# ---------------------------------------------------------------------------


def _checklist(snapshot: CatalogSnapshot) -> list[tuple[str, bool]]:
    metrics = snapshot.metrics
    return [
        ("Overview (name, objective, scope)", snapshot.overview_complete),
        ("At least one role", snapshot.role_count >= 1),
        ("At least three process steps", snapshot.step_count >= 3),
        ("At least one data asset", snapshot.data_asset_count >= 1),
        ("At least one application", snapshot.application_count >= 1),
        ("At least one business rule or SLA", snapshot.rule_count + snapshot.sla_count >= 1),
        ("Baseline volume recorded", metrics is not None and metrics.baseline_volume > 0),
    ]


def completion_ratio(snapshot: CatalogSnapshot) -> float:
    """Fraction of the seven checklist sections that are populated. Equal weights."""
    checks = _checklist(snapshot)
    return sum(1 for _, satisfied in checks if satisfied) / len(checks)


def missing_sections(snapshot: CatalogSnapshot) -> list[str]:
    """Checklist sections still empty, in checklist order."""
    return [name for name, satisfied in _checklist(snapshot) if not satisfied]


# ---------------------------------------------------------------------------
# ROI
# ---------------------------------------------------------------------------


def compute_roi(
    metrics: Metrics | None,
    completion: float,
    *,
    now: datetime | None = None,
) -> ROIResults | None:
    """Project current vs. automated annual cost for a use case.

    Returns None unless baseline volume, handling time, and FTE cost are all
    positive. Efficiency gain scales from 60% to 80% with completion, so
    future cost never exceeds current cost. Payback is capped at 60 months.
    """
    if metrics is None or not metrics.sufficient_for_roi():
        return None

    completion = _clamp(completion, 0.0, 1.0)

    annual_hours = (
        metrics.baseline_volume * metrics.avg_handling_time_minutes * WORKING_DAYS_PER_YEAR / 60
    )
    current_cost = annual_hours * metrics.fte_cost_per_hour
    current_cost += current_cost * metrics.error_rate  # rework
    current_cost += metrics.breach_cost_usd

    efficiency_gain = 0.6 + completion * 0.2
    future_cost = current_cost * (1 - efficiency_gain)
    annual_savings = max(0.0, current_cost - future_cost)

    implementation_cost = max(MIN_IMPLEMENTATION_COST_USD, current_cost * 0.2)
    if annual_savings > 0:
        payback_months = min(MAX_PAYBACK_MONTHS, implementation_cost / annual_savings * 12)
    else:
        payback_months = MAX_PAYBACK_MONTHS
    three_year_value = max(0.0, annual_savings * 3 - implementation_cost)

    return ROIResults(
        use_case_id=metrics.use_case_id,
        current_annual_cost_usd=round(current_cost, 2),
        future_annual_cost_usd=round(future_cost, 2),
        annual_savings_usd=round(annual_savings, 2),
        payback_months=round(payback_months, 1),
        three_year_value_usd=round(three_year_value, 2),
        confidence_score=round(_clamp(completion, 0.2, 1.0), 2),
        calculated_at=now or datetime.now(UTC),
    )


# ---------------------------------------------------------------------------
# Readiness
# ---------------------------------------------------------------------------


def compute_readiness(snapshot: CatalogSnapshot, *, now: datetime | None = None) -> Readiness:
    """Score automation readiness from catalog completeness.

    Subscores (each 0 to 5, rounded to one decimal):
    - api_maturity: 2 base, +0.7 per connector (max +3)
    - data_quality: 3.5 + process richness when data assets exist, else 2
    - rule_clarity: 3.5 + 0.3 per rule (max +1.5) when rules exist, else 2
    - exception_rate: 1 + 0.4 per rule or SLA, capped at 5
    - volume_stability: 3.5 + 2 * completion (max +1.5) with a baseline volume, else 2
    - security_posture: 3.5 + 0.5 per connector (max +1.5) with applications, else 2.5
    """
    ratio = completion_ratio(snapshot)
    metrics = snapshot.metrics

    overall = _clamp(ratio * 5, 0.0, 5.0)
    automation_fit = int(round(40 + ratio * 60))

    api_maturity = min(5.0, 2 + min(3.0, snapshot.connector_count * 0.7))

    if snapshot.data_asset_count > 0:
        richness = min(1.0, (snapshot.role_count + snapshot.step_count) / 10)
        data_quality = min(5.0, 3.5 + richness)
    else:
        data_quality = 2.0

    if snapshot.rule_count > 0:
        rule_clarity = min(5.0, 3.5 + min(1.5, snapshot.rule_count * 0.3))
    else:
        rule_clarity = 2.0

    governance = snapshot.rule_count + snapshot.sla_count
    exception_handling = _clamp(1 + governance * 0.4, 1.0, 5.0)

    if metrics is not None and metrics.baseline_volume > 0:
        volume_stability = min(5.0, 3.5 + min(1.5, ratio * 2))
    else:
        volume_stability = 2.0

    if snapshot.application_count > 0:
        security_posture = min(5.0, 3.5 + min(1.5, snapshot.connector_count * 0.5))
    else:
        security_posture = 2.5

    return Readiness(
        use_case_id=snapshot.use_case_id,
        overall_score=round(overall, 1),
        automation_fit_score=automation_fit,
        api_maturity=round(api_maturity, 1),
        data_quality=round(data_quality, 1),
        rule_clarity=round(rule_clarity, 1),
        exception_rate=round(exception_handling, 1),
        volume_stability=round(volume_stability, 1),
        security_posture=round(security_posture, 1),
        calculated_at=now or datetime.now(UTC),
    )


def derive_views(
    pack: UseCasePack, *, now: datetime | None = None
) -> tuple[Readiness, ROIResults | None]:
    """Recompute readiness and ROI for a pack at the same instant."""
    now = now or datetime.now(UTC)
    snapshot = snapshot_from_pack(pack)
    readiness = compute_readiness(snapshot, now=now)
    roi = compute_roi(snapshot.metrics, completion_ratio(snapshot), now=now)
    return readiness, roi
