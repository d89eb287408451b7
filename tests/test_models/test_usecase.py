"""Tests for the use case catalog models."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from agentprep.models.usecase import (
    SLA,
    Application,
    BusinessRule,
    CatalogKind,
    Connector,
    DataAsset,
    Metrics,
    Priority,
    ProcessStep,
    Role,
    UseCase,
    UseCaseStatus,
)


def _use_case(**overrides: object) -> UseCase:
    data: dict[str, object] = {"id": "uc-1", "name": "Invoices", "owner_id": "owner-1"}
    data.update(overrides)
    return UseCase.model_validate(data)


class TestUseCase:
    def test_defaults(self) -> None:
        uc = _use_case()
        assert uc.priority == Priority.MEDIUM
        assert uc.status == UseCaseStatus.DRAFT
        assert uc.tags == []
        assert uc.updated_at is None

    def test_tags_behave_as_a_set(self) -> None:
        uc = _use_case(tags=["finance", "ap", "finance"])
        assert uc.tags == ["finance", "ap"]

    def test_rejects_unknown_priority(self) -> None:
        with pytest.raises(ValidationError):
            _use_case(priority="urgent")

    def test_overview_complete_needs_name_objective_and_scope(self) -> None:
        assert not _use_case().overview_complete()
        assert not _use_case(objective="Automate", scope="   ").overview_complete()
        assert _use_case(objective="Automate", scope="All invoices").overview_complete()

    def test_last_touched_prefers_updated_at(self) -> None:
        created = datetime(2026, 1, 1, tzinfo=UTC)
        updated = datetime(2026, 2, 1, tzinfo=UTC)
        assert _use_case(created_at=created).last_touched() == created
        assert _use_case(created_at=created, updated_at=updated).last_touched() == updated


class TestMetrics:
    def test_sufficient_for_roi(self) -> None:
        metrics = Metrics(
            use_case_id="uc-1",
            baseline_volume=10,
            avg_handling_time_minutes=5,
            fte_cost_per_hour=30,
        )
        assert metrics.sufficient_for_roi()

    @pytest.mark.parametrize(
        "field", ["baseline_volume", "avg_handling_time_minutes", "fte_cost_per_hour"]
    )
    def test_insufficient_when_a_driver_is_zero(self, field: str) -> None:
        data = {
            "use_case_id": "uc-1",
            "baseline_volume": 10,
            "avg_handling_time_minutes": 5,
            "fte_cost_per_hour": 30,
        }
        data[field] = 0
        assert not Metrics.model_validate(data).sufficient_for_roi()

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("error_rate", -3),
            ("error_rate", 1.5),
            ("baseline_volume", -1),
            ("avg_handling_time_minutes", -10),
            ("fte_cost_per_hour", -45),
            ("breach_cost_usd", -250),
        ],
    )
    def test_rejects_out_of_range_values(self, field: str, value: float) -> None:
        with pytest.raises(ValidationError):
            Metrics.model_validate({"use_case_id": "uc-1", field: value})

    def test_error_rate_bounds_are_inclusive(self) -> None:
        assert Metrics(use_case_id="uc-1", error_rate=0).error_rate == 0
        assert Metrics(use_case_id="uc-1", error_rate=1).error_rate == 1


class TestDataAsset:
    @pytest.mark.parametrize("score", [0, 0.5, 5.5])
    def test_quality_score_must_be_between_one_and_five(self, score: float) -> None:
        with pytest.raises(ValidationError):
            DataAsset(id="a1", use_case_id="uc-1", name="POs", quality_score=score)

    def test_quality_score_default(self) -> None:
        assert DataAsset(id="a1", use_case_id="uc-1", name="POs").quality_score == 3.0


class TestProcessStep:
    def test_exception_rate_is_a_fraction(self) -> None:
        with pytest.raises(ValidationError):
            ProcessStep(id="s1", use_case_id="uc-1", title="Match", exception_rate=2)


class TestCatalogKind:
    def test_paths_use_dashes(self) -> None:
        assert CatalogKind.DATA_ASSETS.path == "data-assets"
        assert CatalogKind.ROLES.path == "roles"

    def test_labels(self) -> None:
        assert CatalogKind.STEPS.label == "process step"
        assert CatalogKind.SLAS.label == "SLA"

    @pytest.mark.parametrize(
        ("kind", "model"),
        [
            (CatalogKind.ROLES, Role),
            (CatalogKind.STEPS, ProcessStep),
            (CatalogKind.DATA_ASSETS, DataAsset),
            (CatalogKind.APPLICATIONS, Application),
            (CatalogKind.CONNECTORS, Connector),
            (CatalogKind.RULES, BusinessRule),
            (CatalogKind.SLAS, SLA),
        ],
    )
    def test_model_lookup(self, kind: CatalogKind, model: type) -> None:
        assert kind.model is model

    def test_connector_requires_application(self) -> None:
        with pytest.raises(ValidationError):
            Connector.model_validate({"id": "c1", "use_case_id": "uc-1", "name": "API"})
