"""stats command — aggregate severity and status across history."""

from __future__ import annotations

from collections import Counter

import click
from rich.console import Console
from rich.table import Table

from catrisk_cli.commands.common import get_history
from catrisk_cli.render import fmt_text, severity_label
from catrisk_core.models import HISTORY_STATUSES
from catrisk_core.severity import NO_SEVERITY, SEVERITY_ORDER

console = Console()


@click.command("stats")
@click.option("--top", default=5, show_default=True, help="Number of geographies to show.")
@click.pass_context
def stats_cmd(ctx, top: int):
    """Show aggregated statistics across analysis history.

    Reports how many analyses are still Pending, how their highest alert
    severities are distributed, and which geographies are analysed most.
    """
    entries = get_history(ctx).entries
    if not entries:
        console.print("[yellow]No analyses found.[/yellow]")
        return

    total = len(entries)
    total_alerts = sum(e.alert_count for e in entries)
    status_counter: Counter[str] = Counter(e.status for e in entries)
    severity_counter: Counter[str] = Counter(e.highest_severity.lower() for e in entries)
    geography_counter: Counter[str] = Counter(e.geography for e in entries)

    console.print("\n[bold]Analysis history[/bold]")
    console.print(f"  Total analyses: {total}")
    console.print(f"  Total alerts:   {total_alerts}")
    console.print(f"  Avg per entry:  {total_alerts / total:.1f}")

    status_table = Table(title="Status", show_header=True)
    status_table.add_column("Status", style="bold")
    status_table.add_column("Count", justify="right")
    for status in HISTORY_STATUSES:
        status_table.add_row(status, str(status_counter.get(status, 0)))
    console.print(status_table)

    sev_table = Table(title="Highest Severity", show_header=True)
    sev_table.add_column("Severity")
    sev_table.add_column("Count", justify="right")
    sev_table.add_column("% of total", justify="right")
    for sev in [*SEVERITY_ORDER, NO_SEVERITY.lower()]:
        count = severity_counter.get(sev, 0)
        label = severity_label(sev.capitalize())
        sev_table.add_row(label, str(count), f"{count / total * 100:.1f}%")
    console.print(sev_table)

    geo_table = Table(title=f"Top {top} Geographies", show_header=True)
    geo_table.add_column("Geography")
    geo_table.add_column("Analyses", justify="right")
    for geography, count in geography_counter.most_common(top):
        geo_table.add_row(fmt_text(geography), str(count))
    console.print(geo_table)
