"""Bundled demo project: accounts-payable invoice processing.

A fully populated pack so a new owner can explore ROI and readiness without
typing in a whole catalog first. Loading goes through import_use_case, so the
demo gets a fresh id and the caller's owner id like any other import.
"""

from __future__ import annotations

from datetime import UTC, datetime

from agentprep.models.pack import ProcessSection, UseCasePack
from agentprep.models.usecase import (
    SLA,
    Application,
    BusinessRule,
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
from agentprep.storage.base import AgentPrepStore

DEMO_NAME = "Invoice Processing Automation"
_UC = "uc-demo-invoice"
_NOW = datetime.now(UTC)


def build_demo_use_case() -> UseCase:
    return UseCase(
        id=_UC,
        name=DEMO_NAME,
        objective="Automate the processing and validation of supplier invoices",
        scope=(
            "Process 500+ daily invoices from 200+ suppliers, validate against PO data, "
            "and flag exceptions for human review"
        ),
        sponsor="CFO",
        priority=Priority.HIGH,
        status=UseCaseStatus.ANALYSIS,
        tags=["finance", "accounts_payable", "automation"],
        owner_id="demo",
        created_at=_NOW,
    )


def build_demo_roles() -> list[Role]:
    return [
        Role(id="role-ap-clerk", use_case_id=_UC, name="AP Clerk", type=RoleType.HUMAN),
        Role(id="role-ap-manager", use_case_id=_UC, name="AP Manager", type=RoleType.HUMAN),
        Role(id="role-invoice-agent", use_case_id=_UC, name="Invoice Agent", type=RoleType.AGENT),
    ]


def build_demo_steps() -> list[ProcessStep]:
    return [
        ProcessStep(
            id="step-receive",
            use_case_id=_UC,
            title="Receive Invoice",
            description="Invoice arrives via the AP mailbox or the supplier portal",
            type=StepType.TRIGGER,
            role="AP Clerk",
            level=1,
            order_index=1,
            avg_time_minutes=2,
            volume_per_day=500,
            exception_rate=0.02,
        ),
        ProcessStep(
            id="step-extract",
            use_case_id=_UC,
            parent_id="step-receive",
            title="Extract Invoice Data",
            description="Capture vendor, amount, PO number, and line items",
            type=StepType.TASK,
            role="Invoice Agent",
            level=2,
            order_index=1,
            avg_time_minutes=5,
            volume_per_day=500,
            exception_rate=0.08,
        ),
        ProcessStep(
            id="step-match",
            use_case_id=_UC,
            title="Three-Way Match",
            description="Compare invoice against purchase order and goods receipt",
            type=StepType.DECISION,
            role="Invoice Agent",
            level=1,
            order_index=2,
            avg_time_minutes=6,
            volume_per_day=500,
            exception_rate=0.05,
        ),
        ProcessStep(
            id="step-approve",
            use_case_id=_UC,
            parent_id="step-match",
            title="Manager Approval",
            description="Invoices over the approval threshold wait for the AP Manager",
            type=StepType.APPROVAL,
            role="AP Manager",
            level=2,
            order_index=1,
            avg_time_minutes=2,
            volume_per_day=40,
        ),
    ]


def build_demo_data_assets() -> list[DataAsset]:
    return [
        DataAsset(
            id="asset-po",
            use_case_id=_UC,
            name="Purchase Orders",
            system="SAP ERP",
            object_type=ObjectType.TABLE,
            has_pii=False,
            quality_score=4.5,
            fields=[
                DataField(name="po_number", type="string", required=True),
                DataField(name="vendor_id", type="string", required=True),
                DataField(name="amount", type="decimal", required=True),
                DataField(name="status", type="string", required=True),
            ],
        ),
        DataAsset(
            id="asset-vendor",
            use_case_id=_UC,
            name="Vendor Master",
            system="SAP ERP",
            object_type=ObjectType.TABLE,
            has_pii=True,
            quality_score=4.0,
            fields=[
                DataField(name="vendor_id", type="string", required=True),
                DataField(name="vendor_name", type="string", required=True),
                DataField(name="payment_terms", type="string", required=True),
            ],
        ),
    ]


def build_demo_applications() -> list[Application]:
    return [
        Application(
            id="app-sap",
            use_case_id=_UC,
            name="SAP ERP",
            type="onprem",
            vendor="SAP",
            auth_type="oauth",
        ),
        Application(
            id="app-mailbox",
            use_case_id=_UC,
            name="AP Mailbox",
            type="saas",
            vendor="Microsoft",
            auth_type="oauth",
        ),
    ]


def build_demo_connectors() -> list[Connector]:
    return [
        Connector(
            id="conn-sap-po",
            use_case_id=_UC,
            application_id="app-sap",
            name="SAP Purchase Order API",
            connector_type="HTTP",
            endpoint="https://api.sap.example/po",
            timeout_ms=10000,
            max_retries=3,
        ),
        Connector(
            id="conn-mailbox",
            use_case_id=_UC,
            application_id="app-mailbox",
            name="Invoice Inbox",
            connector_type="HTTP",
            endpoint="https://graph.microsoft.example/v1.0/me/messages",
            timeout_ms=5000,
        ),
    ]


def build_demo_rules() -> list[BusinessRule]:
    return [
        BusinessRule(
            id="rule-three-way",
            use_case_id=_UC,
            name="Three-Way Match",
            description="Invoice must match PO and receipt",
            category=RuleCategory.VALIDATION,
            expression="invoice.amount == po.amount && receipt.quantity == po.quantity",
        ),
        BusinessRule(
            id="rule-threshold",
            use_case_id=_UC,
            name="Approval Threshold",
            description="Invoices over $10,000 require manager approval",
            category=RuleCategory.ROUTING,
            expression="invoice.amount > 10000 ? require_approval : auto_approve",
        ),
    ]


def build_demo_slas() -> list[SLA]:
    return [
        SLA(
            id="sla-processing",
            use_case_id=_UC,
            metric="Processing Time",
            threshold="< 2",
            unit="hours",
            window="per_invoice",
        ),
        SLA(
            id="sla-accuracy",
            use_case_id=_UC,
            metric="Accuracy Rate",
            threshold="> 98",
            unit="percent",
            window="monthly",
        ),
    ]


def build_demo_metrics() -> Metrics:
    return Metrics(
        use_case_id=_UC,
        baseline_volume=500,
        avg_handling_time_minutes=15,
        fte_cost_per_hour=45.0,
        error_rate=0.05,
        breach_cost_usd=250.0,
    )


def build_demo_pack() -> UseCasePack:
    return UseCasePack(
        use_case=build_demo_use_case(),
        process=ProcessSection(roles=build_demo_roles(), steps=build_demo_steps()),
        data_assets=build_demo_data_assets(),
        applications=build_demo_applications(),
        connectors=build_demo_connectors(),
        rules=build_demo_rules(),
        slas=build_demo_slas(),
        metrics=build_demo_metrics(),
        exported_at=_NOW,
    )


async def load_demo_project(store: AgentPrepStore, owner_id: str) -> UseCase:
    """Import the demo pack for ``owner_id``."""
    return await store.import_use_case(build_demo_pack(), owner_id)


async def has_demo_project(store: AgentPrepStore, owner_id: str) -> bool:
    return any(uc.name == DEMO_NAME for uc in await store.list_use_cases(owner_id))


async def ensure_demo_project(store: AgentPrepStore, owner_id: str) -> UseCase:
    """Return the owner's demo project, importing it first if missing."""
    for use_case in await store.list_use_cases(owner_id):
        if use_case.name == DEMO_NAME:
            return use_case
    return await load_demo_project(store, owner_id)
