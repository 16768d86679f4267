"""Terminal rendering for analysis results, alerts and history entries.

Every field the service may have left out renders as "N/A" (or is simply
skipped for lists) instead of failing.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from catrisk_core.severity import NO_SEVERITY, style_of

if TYPE_CHECKING:
    from catrisk_core.models import AlertItem, AlertResult, AnalysisResult, HistoryEntry

NA = "N/A"


def fmt_number(value, suffix: str = "") -> str:
    if value is None:
        return NA
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return f"{value}{suffix}"


def fmt_text(value: str | None) -> str:
    return escape(value) if value else NA


def fmt_date(iso: str) -> str:
    """ISO-8601 → ``YYYY-MM-DD HH:MM``; anything unparsable is shown as-is."""
    try:
        return datetime.fromisoformat(iso).strftime("%Y-%m-%d %H:%M")
    except (TypeError, ValueError):
        return iso or NA


def severity_label(severity: str | None) -> str:
    style = "dim" if severity == NO_SEVERITY else style_of(severity)
    return f"[{style}]{fmt_text(severity)}[/{style}]"


def risk_style(value, maximum: float = 10) -> str:
    """Same thresholds as the gauge colours: ≥70% red, ≥40% orange, else green."""
    if value is None:
        return "dim"
    pct = min(value / maximum * 100, 100)
    if pct >= 70:
        return "red"
    if pct >= 40:
        return "dark_orange"
    return "green"


def render_analysis(console: Console, result: AnalysisResult, fallback_geography: str = "") -> None:
    geography = fmt_text(result.geography or fallback_geography)
    rating_style = risk_style(result.overall_risk_rating)
    console.print(
        Panel(
            fmt_text(result.executive_summary),
            title=f"[bold]{geography}[/bold] — overall risk "
            f"[{rating_style}]{fmt_number(result.overall_risk_rating)}/10[/{rating_style}]",
            expand=False,
        )
    )

    exposure = result.exposure_summary
    if exposure is not None:
        console.print("\n[bold]Exposure[/bold]")
        console.print(f"  Policies:             {exposure.total_policies:,}")
        console.print(f"  Total insured value:  {fmt_text(exposure.total_insured_value)}")
        console.print(f"  Concentration score:  {fmt_number(exposure.concentration_score)}/100")
        console.print(f"  Top line of business: {fmt_text(exposure.top_lob)}")
        if exposure.lob_breakdown:
            table = Table(title="Line of Business Breakdown", show_header=True, header_style="bold cyan")
            table.add_column("Line of business")
            table.add_column("Policies", justify="right")
            table.add_column("Insured value", justify="right")
            table.add_column("Share", justify="right")
            for lob in exposure.lob_breakdown:
                table.add_row(
                    fmt_text(lob.line_of_business),
                    f"{lob.policy_count:,}",
                    fmt_text(lob.insured_value),
                    fmt_number(lob.percentage, "%"),
                )
            console.print(table)
    else:
        console.print("\n[bold]Exposure[/bold]: N/A")

    cat = result.catastrophe_context
    if cat is not None:
        console.print("\n[bold]Catastrophe context[/bold]")
        console.print(f"  Risk rating:     {fmt_number(cat.risk_rating)}/10 ({fmt_text(cat.risk_trend)})")
        perils = ", ".join(cat.top_perils)
        if perils:
            console.print(f"  Top perils:      {fmt_text(perils)}")
        console.print(f"  1-in-100 year:   {fmt_text(cat.return_period_100yr)}")
        console.print(f"  1-in-250 year:   {fmt_text(cat.return_period_250yr)}")
        console.print(f"  Historical loss: {fmt_text(cat.historical_loss_summary)}")

    climate = result.climate_intelligence
    if climate is not None:
        console.print("\n[bold]Climate intelligence[/bold]")
        console.print(f"  Climate risk score: {fmt_number(climate.climate_risk_score)}/10")
        console.print(f"  Current conditions: {fmt_text(climate.current_conditions)}")
        for warning in climate.active_warnings:
            console.print(f"  [red]⚠[/red] {fmt_text(warning)}")
        for threat in climate.emerging_threats:
            console.print(f"  [yellow]↗[/yellow] {fmt_text(threat)}")
        console.print(f"  Seasonal outlook:   {fmt_text(climate.seasonal_outlook)}")

    if result.threshold_breaches:
        table = Table(
            title=f"Threshold Breaches ({len(result.threshold_breaches)})",
            show_header=True,
            header_style="bold cyan",
        )
        table.add_column("Metric")
        table.add_column("Zone")
        table.add_column("Current", justify="right")
        table.add_column("Threshold", justify="right")
        table.add_column("Severity")
        for breach in result.threshold_breaches:
            table.add_row(
                fmt_text(breach.metric),
                fmt_text(breach.zone),
                fmt_number(breach.current_value),
                fmt_number(breach.threshold),
                severity_label(breach.severity),
            )
        console.print(table)

    if result.recommendations:
        console.print("\n[bold]Recommendations[/bold]")
        for i, rec in enumerate(result.recommendations, 1):
            console.print(f"  {i}. {fmt_text(rec)}")


def render_alert_summary(console: Console, result: AlertResult, fallback_geography: str = "") -> None:
    summary = result.alert_summary
    console.print(f"\n[bold]{fmt_text(result.analysis_geography or fallback_geography)}[/bold]")
    console.print(
        f"  Risk reduction: {fmt_text(result.overall_risk_reduction)} | "
        f"Timeline: {fmt_text(result.implementation_timeline)}"
    )
    console.print(
        f"  Total [bold]{summary.total_alerts}[/bold]  "
        f"[bold red]Critical {summary.critical_count}[/bold red]  "
        f"[dark_orange]High {summary.high_count}[/dark_orange]  "
        f"[yellow]Medium {summary.medium_count}[/yellow]"
    )


def render_alerts(
    console: Console, alerts: Sequence[AlertItem], show_actions: bool = True, filtered: bool = False
) -> None:
    if not alerts:
        if filtered:
            console.print("[yellow]No alerts match the filter. Clear --severity to see all alerts.[/yellow]")
        else:
            console.print("[dim]No alerts.[/dim]")
        return
    for alert in alerts:
        console.print(
            f"\n{severity_label(alert.severity)}  [bold]{fmt_text(alert.zone)}[/bold]  "
            f"{fmt_text(alert.peril_type)}  [dim]{fmt_text(alert.alert_id)}[/dim]"
        )
        console.print(f"  Exposure: {fmt_text(alert.exposure_value)}")
        console.print(f"  {fmt_text(alert.breach_description)}")
        if not show_actions:
            console.print(f"  [dim]{len(alert.remedial_actions)} remedial action(s)[/dim]")
            continue
        for action in alert.remedial_actions:
            console.print(f"  → [bold]{fmt_text(action.action_type)}[/bold]: {fmt_text(action.description)}")
            console.print(
                f"    [dim]Timeline: {fmt_text(action.timeline)} · Impact: {fmt_text(action.expected_impact)}[/dim]"
            )


def render_history_entry(console: Console, entry: HistoryEntry) -> None:
    console.print(f"\n[bold]Analysis {entry.id}[/bold]")
    console.print(f"  Date:             {fmt_date(entry.date)}")
    console.print(f"  Geography:        {fmt_text(entry.geography)}")
    console.print(f"  Alerts:           {entry.alert_count}")
    console.print(f"  Highest severity: {severity_label(entry.highest_severity)}")
    console.print(f"  Status:           {entry.status}")

    analysis = entry.analysis_result
    if analysis is not None:
        console.print("\n[bold]Executive summary[/bold]")
        console.print(f"  {fmt_text(analysis.executive_summary)}")
        console.print(f"  Overall risk: {fmt_number(analysis.overall_risk_rating)}/10")
        if analysis.recommendations:
            console.print("\n[bold]Recommendations[/bold]")
            for i, rec in enumerate(analysis.recommendations, 1):
                console.print(f"  {i}. {fmt_text(rec)}")

    if entry.alert_result is not None:
        render_alert_summary(console, entry.alert_result, entry.geography)
