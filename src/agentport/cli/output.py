"""Rich output formatting helpers for the agentport CLI.

Provides consistent terminal output for dependency reports, steering
resolutions and validation reports.

Severity Color Mapping:
    HIGH = bold red, MEDIUM = yellow, NONE = dim
"""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from agentport.core.artifacts import ResolutionReport, SuggestionKind
from agentport.core.steering import (
    ConflictSeverity,
    SteeringResolution,
    SteeringState,
    ValidationReport,
)

_SEVERITY_STYLES: dict[ConflictSeverity, str] = {
    ConflictSeverity.HIGH: "bold red",
    ConflictSeverity.MEDIUM: "yellow",
    ConflictSeverity.NONE: "dim",
}

console = Console()


def severity_style(severity: ConflictSeverity) -> str:
    """Return the Rich style string for a conflict severity."""
    return _SEVERITY_STYLES.get(severity, "white")


def _shorten(value: object, width: int = 60) -> str:
    text = "; ".join(value) if isinstance(value, tuple) else str(value)
    text = " ".join(text.split())
    return text if len(text) <= width else text[: width - 3] + "..."


# ---------------------------------------------------------------------------
# Dependency reports
# ---------------------------------------------------------------------------


def print_dependency_reports(reports: list[ResolutionReport]) -> None:
    """Print a summary table of every agent, then details of incomplete ones."""
    table = Table(title="Agent Dependencies", show_header=True, header_style="bold")
    table.add_column("Agent", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Resolved", justify="right")
    table.add_column("Missing", justify="right")
    table.add_column("Cycles", justify="right")

    for report in reports:
        stats = report.statistics()
        status = (
            Text("COMPLETE", style="bold green")
            if report.is_complete
            else Text("INCOMPLETE", style="bold red")
        )
        table.add_row(
            report.agent_id,
            status,
            str(stats["resolved"]),
            str(stats["missing"]),
            str(stats["cycles"]),
        )
    console.print(table)

    for report in reports:
        if not report.is_complete or report.warnings:
            print_dependency_detail(report)

    complete = sum(1 for r in reports if r.is_complete)
    parts = [f"[bold]{len(reports)}[/bold] agents scanned"]
    if complete:
        parts.append(f"[green]{complete} complete[/green]")
    if len(reports) - complete:
        parts.append(f"[red]{len(reports) - complete} incomplete[/red]")
    console.print(" | ".join(parts))


def print_dependency_detail(report: ResolutionReport) -> None:
    """Print missing dependencies with suggestions, and warnings, of one agent."""
    console.print(Panel(Text(report.agent_id, style="bold"), title="Dependency Report"))

    for artifact_type, missing in report.missing.items():
        for dependency in missing:
            label = " (implicit)" if dependency.implicit else ""
            console.print(
                f"[red]missing[/red] {artifact_type.value} [bold]{dependency.name}[/bold]{label}"
            )
            for suggestion in dependency.suggestions:
                if suggestion.kind is SuggestionKind.CREATE_NEW:
                    console.print(
                        f"    create [cyan]{suggestion.candidate_dir / suggestion.candidate_name}[/cyan]"
                    )
                else:
                    console.print(
                        f"    did you mean [cyan]{suggestion.candidate_name}[/cyan] "
                        f"in {suggestion.candidate_dir} ({suggestion.confidence:.0%})"
                    )

    for warning in report.warnings:
        console.print(f"[yellow]warning[/yellow] {warning}")


# ---------------------------------------------------------------------------
# Steering
# ---------------------------------------------------------------------------


def print_steering_resolution(resolution: SteeringResolution) -> None:
    """Print the effective rule map and conflicts of one agent."""
    state_style = "bold green" if resolution.state is SteeringState.RESOLVED else "bold yellow"
    header = Text.assemble(
        ("Agent: ", "bold"),
        (resolution.agent_id, ""),
        ("  State: ", "bold"),
        (resolution.state.value, state_style),
    )
    console.print(Panel(header, title="Steering Resolution"))

    if resolution.effective:
        table = Table(title="Effective Rules", show_header=True)
        table.add_column("Key", style="bold")
        table.add_column("Value")
        table.add_column("Source", style="dim")
        table.add_column("Rank", justify="right")
        for key, rule in resolution.effective.items():
            table.add_row(key, _shorten(rule.value), rule.winning_source, str(rule.rank))
        console.print(table)
    else:
        console.print("[dim]No applicable rules.[/dim]")

    if resolution.conflicts:
        table = Table(title="Conflicts", show_header=True)
        table.add_column("Severity", justify="center")
        table.add_column("Key", style="bold")
        table.add_column("Type")
        table.add_column("Sources")
        table.add_column("Decision", style="dim")
        for conflict in resolution.conflicts:
            decision = f"{conflict.decision.strategy.value}: {conflict.decision.chosen_source}"
            if conflict.overridden_by:
                decision += f" (overridden by {conflict.overridden_by})"
            table.add_row(
                Text(conflict.severity.label.upper(), style=severity_style(conflict.severity)),
                conflict.section_key,
                conflict.conflict_type.value,
                ", ".join(conflict.sources),
                decision,
            )
        console.print(table)

    for name in resolution.invalid_documents:
        console.print(f"[red]excluded[/red] invalid rule document {name}")


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def print_validation_report(report: ValidationReport) -> None:
    """Print per-file validation results and totals."""
    if not report.files:
        console.print("[dim]No rule documents found.[/dim]")
        return

    table = Table(title="Steering Rule Validation", show_header=True, header_style="bold")
    table.add_column("File", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Errors")
    table.add_column("Warnings", style="dim")
    for name, outcome in report.files.items():
        status = Text("VALID", style="bold green") if outcome.valid else Text("INVALID", style="bold red")
        table.add_row(name, status, "\n".join(outcome.errors), "\n".join(outcome.warnings))
    console.print(table)

    verdict = "[green]PASSED[/green]" if report.valid else "[red]FAILED[/red]"
    console.print(
        f"{verdict} | {report.error_count} errors | {report.warning_count} warnings"
    )
