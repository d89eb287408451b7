"""CLI entry point for AgentPrep."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from agentprep.client import FallbackClient, build_store, local_store_of
from agentprep.config import Settings
from agentprep.errors import AgentPrepError
from agentprep.logging_setup import configure_logging
from agentprep.models.derived import Readiness, ROIResults
from agentprep.models.usecase import CatalogKind, Priority, UseCaseStatus
from agentprep.scoring.process import ProcessNode
from agentprep.storage.base import AgentPrepStore

app = typer.Typer(
    name="agentprep",
    help="AgentPrep: catalog automation use cases, score readiness, project ROI.",
    no_args_is_help=True,
)
console = Console()

Action = Callable[[AgentPrepStore, str], Awaitable[None]]


def _ensure_db_dir(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _settings(ctx: typer.Context) -> Settings:
    return ctx.obj if isinstance(ctx.obj, Settings) else Settings.from_env()


async def _resolve_owner(store: AgentPrepStore, settings: Settings) -> str:
    if settings.owner_id:
        return settings.owner_id
    local = local_store_of(store)
    if local is None:
        return "anonymous"
    return await local.owner_id()


def _run(settings: Settings, action: Action) -> None:
    """Open the configured store, run ``action`` against it, always close it."""
    _ensure_db_dir(settings.db_path)

    async def _main() -> None:
        store = build_store(settings)
        await store.initialize()
        try:
            owner = await _resolve_owner(store, settings)
            await action(store, owner)
            if isinstance(store, FallbackClient) and store.last_source == store.fallback.source:
                console.print("[dim]Remote API unavailable; served from the local store.[/dim]")
        finally:
            await store.close()

    try:
        asyncio.run(_main())
    except (AgentPrepError, ValueError) as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def _print_roi(roi: ROIResults | None) -> None:
    console.print("\n[bold]ROI[/bold]")
    if roi is None:
        console.print(
            "  [dim]Not enough metrics (baseline volume, handling time, FTE cost).[/dim]"
        )
        return
    console.print(f"  Current annual cost:  ${roi.current_annual_cost_usd:,.2f}")
    console.print(f"  Future annual cost:   ${roi.future_annual_cost_usd:,.2f}")
    console.print(f"  Annual savings:       [green]${roi.annual_savings_usd:,.2f}[/green]")
    console.print(f"  Payback:              {roi.payback_months:.1f} months")
    console.print(f"  Three-year value:     ${roi.three_year_value_usd:,.2f}")
    console.print(f"  Confidence:           {roi.confidence_score:.0%}")


def _print_readiness(readiness: Readiness) -> None:
    score = readiness.overall_score
    color = "green" if score >= 3.5 else ("yellow" if score >= 2 else "red")
    console.print(
        f"\n[bold]Readiness[/bold] [{color}]{score:.1f}/5[/{color}] "
        f"(automation fit {readiness.automation_fit_score})"
    )
    for label, value in (
        ("API maturity", readiness.api_maturity),
        ("Data quality", readiness.data_quality),
        ("Rule clarity", readiness.rule_clarity),
        ("Exception handling", readiness.exception_rate),
        ("Volume stability", readiness.volume_stability),
        ("Security posture", readiness.security_posture),
    ):
        console.print(f"  {label:<20}{value:.1f}")


def _add_branch(parent: Tree, node: ProcessNode) -> None:
    step = node.step
    minutes = f" [dim]{step.avg_time_minutes:g} min[/dim]" if step.avg_time_minutes else ""
    branch = parent.add(f"{escape(step.title)} [dim]({step.type.value})[/dim]{minutes}")
    for child in node.children:
        _add_branch(branch, child)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.callback()
def main(
    ctx: typer.Context,
    db: Path | None = typer.Option(None, help="Path to the local SQLite store"),
    api_url: str | None = typer.Option(None, help="Base URL of the remote AgentPrep API"),
    owner: str | None = typer.Option(None, help="Owner id (defaults to the remembered local id)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Resolve settings from the environment and global options."""
    settings = Settings.from_env().with_overrides(db_path=db, api_url=api_url, owner_id=owner)
    if verbose:
        settings = settings.with_overrides(log_level="DEBUG")
    configure_logging(settings.log_level)
    ctx.obj = settings


@app.command()
def init(ctx: typer.Context) -> None:
    """Initialize the local store and print the owner id."""
    settings = _settings(ctx)

    async def _init(store: AgentPrepStore, owner: str) -> None:
        console.print(f"[green]Initialized AgentPrep store at {settings.db_path}[/green]")
        console.print(f"Owner: {owner}")

    _run(settings, _init)


@app.command()
def create(
    ctx: typer.Context,
    name: str = typer.Argument(help="Use case name"),
    objective: str = typer.Option("", help="What the automation should achieve"),
    scope: str = typer.Option("", help="What is in and out of scope"),
    sponsor: str = typer.Option("", help="Business sponsor"),
    priority: Priority = typer.Option(Priority.MEDIUM, help="Priority"),
    tag: list[str] | None = typer.Option(None, "--tag", help="Tag (repeatable)"),
) -> None:
    """Create a new use case."""

    async def _create(store: AgentPrepStore, owner: str) -> None:
        use_case = await store.create_use_case(
            {
                "name": name,
                "objective": objective,
                "scope": scope,
                "sponsor": sponsor,
                "priority": priority,
                "tags": tag or [],
                "owner_id": owner,
            }
        )
        console.print(f"[green]Created use case {use_case.id}[/green]")

    _run(_settings(ctx), _create)


@app.command(name="list")
def list_cmd(
    ctx: typer.Context,
    status: UseCaseStatus | None = typer.Option(None, help="Filter by status"),
    priority: Priority | None = typer.Option(None, help="Filter by priority"),
    tag: list[str] | None = typer.Option(None, "--tag", help="Filter by tag (any match)"),
) -> None:
    """List your use cases, most recently touched first."""

    async def _list(store: AgentPrepStore, owner: str) -> None:
        use_cases = await store.list_use_cases(
            owner,
            status=status.value if status else None,
            priority=priority.value if priority else None,
            tags=tag or None,
        )
        if not use_cases:
            console.print("[dim]No use cases found.[/dim]")
            return

        table = Table(title="Use cases")
        table.add_column("ID", no_wrap=True)
        table.add_column("Name")
        table.add_column("Status")
        table.add_column("Priority")
        table.add_column("Tags")
        for use_case in use_cases:
            table.add_row(
                use_case.id,
                escape(use_case.name),
                use_case.status.value,
                use_case.priority.value,
                ", ".join(use_case.tags),
            )
        console.print(table)

    _run(_settings(ctx), _list)


@app.command()
def show(
    ctx: typer.Context,
    use_case_id: str = typer.Argument(help="Use case id"),
) -> None:
    """Show a use case with its catalog, process tree, readiness and ROI."""
    from agentprep.scoring import (
        build_process_tree,
        missing_sections,
        snapshot_from_pack,
        total_process_time,
    )

    async def _show(store: AgentPrepStore, owner: str) -> None:
        pack = await store.export_use_case(use_case_id)
        use_case = pack.use_case

        console.print(f"\n[bold]{escape(use_case.name)}[/bold] [dim]{use_case.id}[/dim]")
        console.print(f"  Status: {use_case.status.value}   Priority: {use_case.priority.value}")
        if use_case.sponsor:
            console.print(f"  Sponsor: {escape(use_case.sponsor)}")
        if use_case.objective:
            console.print(f"  Objective: {escape(use_case.objective)}")
        if use_case.scope:
            console.print(f"  Scope: {escape(use_case.scope)}")
        if use_case.tags:
            console.print(f"  Tags: {', '.join(use_case.tags)}")

        console.print("\n[bold]Catalog[/bold]")
        for kind, count in pack.counts().items():
            console.print(f"  {kind.label}: {count}")

        if pack.process.steps:
            tree = Tree(
                f"[bold]Process[/bold] [dim]{total_process_time(pack.process.steps):g} min[/dim]"
            )
            for node in build_process_tree(pack.process.steps):
                _add_branch(tree, node)
            console.print()
            console.print(tree)

        if pack.readiness is not None:
            _print_readiness(pack.readiness)
        _print_roi(pack.roi)

        missing = missing_sections(snapshot_from_pack(pack))
        if missing:
            console.print("\n[bold]Still missing[/bold]")
            for section in missing:
                console.print(f"  [yellow]- {section}[/yellow]")

    _run(_settings(ctx), _show)


@app.command()
def add(
    ctx: typer.Context,
    use_case_id: str = typer.Argument(help="Use case id"),
    kind: CatalogKind = typer.Argument(help="Catalog collection"),
    data: str = typer.Argument(help='Entity fields as JSON, e.g. \'{"name": "AP Clerk"}\''),
) -> None:
    """Add an entity to a use case's catalog."""
    try:
        fields = json.loads(data)
    except json.JSONDecodeError as exc:
        console.print(f"[red]Invalid JSON: {escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc
    if not isinstance(fields, dict):
        console.print("[red]Entity data must be a JSON object[/red]")
        raise typer.Exit(1)

    async def _add(store: AgentPrepStore, owner: str) -> None:
        entity = await store.create_entity(use_case_id, kind, fields)
        console.print(f"[green]Added {kind.label} {entity.id}[/green]")

    _run(_settings(ctx), _add)


@app.command()
def remove(
    ctx: typer.Context,
    use_case_id: str = typer.Argument(help="Use case id"),
    kind: CatalogKind = typer.Argument(help="Catalog collection"),
    entity_id: str = typer.Argument(help="Entity id"),
) -> None:
    """Remove an entity. Steps take their sub-steps along; applications their connectors."""

    async def _remove(store: AgentPrepStore, owner: str) -> None:
        await store.delete_entity(use_case_id, kind, entity_id)
        console.print(f"[green]Removed {kind.label} {entity_id}[/green]")

    _run(_settings(ctx), _remove)


@app.command()
def metrics(
    ctx: typer.Context,
    use_case_id: str = typer.Argument(help="Use case id"),
    baseline_volume: float | None = typer.Option(None, help="Transactions per day"),
    handling_time: float | None = typer.Option(None, help="Average handling time in minutes"),
    fte_cost: float | None = typer.Option(None, help="Fully loaded FTE cost per hour (USD)"),
    error_rate: float | None = typer.Option(None, help="Share of transactions reworked, 0 to 1"),
    breach_cost: float | None = typer.Option(None, help="Annual SLA breach cost (USD)"),
) -> None:
    """Record baseline metrics, then print the recomputed ROI and readiness."""
    updates = {
        key: value
        for key, value in (
            ("baseline_volume", baseline_volume),
            ("avg_handling_time_minutes", handling_time),
            ("fte_cost_per_hour", fte_cost),
            ("error_rate", error_rate),
            ("breach_cost_usd", breach_cost),
        )
        if value is not None
    }

    async def _metrics(store: AgentPrepStore, owner: str) -> None:
        if updates:
            await store.update_metrics(use_case_id, updates)
            console.print("[green]Metrics updated[/green]")
        _print_readiness(await store.get_readiness(use_case_id))
        _print_roi(await store.get_roi(use_case_id))

    _run(_settings(ctx), _metrics)


@app.command(name="export")
def export_cmd(
    ctx: typer.Context,
    use_case_id: str = typer.Argument(help="Use case id"),
    output: Path = typer.Option(..., help="Output file path"),
    fmt: str = typer.Option("json", "--format", help="Export format: json or yaml"),
) -> None:
    """Export a use case pack."""
    if fmt not in ("json", "yaml"):
        console.print(f"[red]Unknown format {escape(fmt)!r}; use json or yaml[/red]")
        raise typer.Exit(1)

    async def _export(store: AgentPrepStore, owner: str) -> None:
        pack = await store.export_use_case(use_case_id)
        if fmt == "yaml":
            from agentprep.export.yaml import export_pack_yaml

            export_pack_yaml(pack, output)
        else:
            from agentprep.export.json import export_pack_json

            export_pack_json(pack, output)
        console.print(f"[green]Exported {escape(pack.use_case.name)} to {output}[/green]")

    _run(_settings(ctx), _export)


@app.command(name="import")
def import_cmd(
    ctx: typer.Context,
    path: Path = typer.Argument(help="Pack file (.json, .yaml or .yml)"),
) -> None:
    """Import a pack as a brand-new use case."""
    from agentprep.export import load_pack

    if not path.exists():
        console.print(f"[red]No such file: {path}[/red]")
        raise typer.Exit(1)

    async def _import(store: AgentPrepStore, owner: str) -> None:
        use_case = await store.import_use_case(load_pack(path), owner)
        console.print(f"[green]Imported {escape(use_case.name)} as {use_case.id}[/green]")

    _run(_settings(ctx), _import)


@app.command()
def delete(
    ctx: typer.Context,
    use_case_id: str = typer.Argument(help="Use case id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
) -> None:
    """Delete a use case and its whole catalog."""
    if not yes:
        typer.confirm(f"Delete use case {use_case_id}?", abort=True)

    async def _delete(store: AgentPrepStore, owner: str) -> None:
        await store.delete_use_case(use_case_id)
        console.print(f"[green]Deleted use case {use_case_id}[/green]")

    _run(_settings(ctx), _delete)


@app.command()
def demo(ctx: typer.Context) -> None:
    """Load the invoice-processing demo project (once per owner)."""
    from agentprep.demo import ensure_demo_project

    async def _demo(store: AgentPrepStore, owner: str) -> None:
        use_case = await ensure_demo_project(store, owner)
        console.print(f"[green]Demo project ready: {use_case.id}[/green]")
        _print_roi(await store.get_roi(use_case.id))

    _run(_settings(ctx), _demo)


@app.command()
def rank(
    ctx: typer.Context,
    min_score: float = typer.Option(0.0, help="Minimum overall readiness (0 to 5)"),
) -> None:
    """Rank your use cases by readiness."""

    async def _rank(store: AgentPrepStore, owner: str) -> None:
        ranked = await store.use_cases_by_readiness(owner, min_score)
        if not ranked:
            console.print("[dim]No use cases meet that readiness score.[/dim]")
            return

        table = Table(title="Readiness ranking")
        table.add_column("Score", justify="right")
        table.add_column("Fit", justify="right")
        table.add_column("ID", no_wrap=True)
        table.add_column("Name")
        for use_case, readiness in ranked:
            table.add_row(
                f"{readiness.overall_score:.1f}",
                str(readiness.automation_fit_score),
                use_case.id,
                escape(use_case.name),
            )
        console.print(table)

    _run(_settings(ctx), _rank)


if __name__ == "__main__":
    app()
