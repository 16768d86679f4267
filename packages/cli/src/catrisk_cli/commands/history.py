"""history command — browse, update and delete past analyses."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from catrisk_cli.commands.common import get_history
from catrisk_cli.render import fmt_date, fmt_text, render_alerts, render_history_entry, severity_label
from catrisk_core.models import ACTIONED, DISMISSED, PENDING

console = Console()

_status_style = {
    PENDING: "yellow",
    ACTIONED: "green",
    DISMISSED: "dim",
}


@click.group("history", invoke_without_command=True)
@click.option("--search", default=None, help="Only show geographies containing this text.")
@click.option("--limit", default=20, show_default=True, help="Maximum number of entries to show.")
@click.pass_context
def history_cmd(ctx, search: str | None, limit: int):
    """Show past analyses, newest first.

    History keeps the 50 most recent analyses in the configured store.
    Run `catrisk init` to choose where it is kept.
    """
    if ctx.invoked_subcommand is None:
        ctx.invoke(list_cmd, search=search, limit=limit)


@history_cmd.command("list")
@click.option("--search", default=None, help="Only show geographies containing this text.")
@click.option("--limit", default=20, show_default=True, help="Maximum number of entries to show.")
@click.pass_context
def list_cmd(ctx, search: str | None, limit: int):
    """List past analyses, newest first."""
    history = get_history(ctx)
    entries = history.search(search)
    if not entries:
        console.print("[yellow]No analyses found.[/yellow]")
        return

    table = Table(title=f"Analysis History ({len(entries)})", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold")
    table.add_column("Date", width=16)
    table.add_column("Geography", max_width=40)
    table.add_column("Alerts", justify="right")
    table.add_column("Highest", width=10)
    table.add_column("Status", width=10)

    for entry in entries[:limit]:
        style = _status_style.get(entry.status, "white")
        table.add_row(
            entry.id,
            fmt_date(entry.date),
            fmt_text(entry.geography),
            str(entry.alert_count),
            severity_label(entry.highest_severity),
            f"[{style}]{entry.status}[/{style}]",
        )

    console.print(table)


@history_cmd.command("show")
@click.argument("entry_id")
@click.option("--alerts", "with_alerts", is_flag=True, help="Also list the stored alerts.")
@click.pass_context
def show_cmd(ctx, entry_id: str, with_alerts: bool):
    """Show the stored analysis and alert summary for one entry."""
    entry = get_history(ctx).get(entry_id)
    if entry is None:
        raise click.ClickException(f"No history entry with id {entry_id}.")
    render_history_entry(console, entry)
    if with_alerts and entry.alert_result is not None:
        render_alerts(console, entry.alert_result.alerts)


@history_cmd.command("status")
@click.argument("entry_id")
@click.argument("status", type=click.Choice([PENDING, ACTIONED, DISMISSED], case_sensitive=False))
@click.pass_context
def status_cmd(ctx, entry_id: str, status: str):
    """Mark an entry Pending, Actioned or Dismissed."""
    # Choice returns the declared casing even when matched case-insensitively.
    if not get_history(ctx).set_status(entry_id, status):
        raise click.ClickException(f"No history entry with id {entry_id}.")
    console.print(f"[green]Entry {entry_id} marked {status}.[/green]")


@history_cmd.command("delete")
@click.argument("entry_id")
@click.option("--yes", "-y", is_flag=True, help="Delete without asking for confirmation.")
@click.pass_context
def delete_cmd(ctx, entry_id: str, yes: bool):
    """Delete one entry from history."""
    history = get_history(ctx)
    entry = history.get(entry_id)
    if entry is None:
        raise click.ClickException(f"No history entry with id {entry_id}.")
    if not yes and not click.confirm(f"Delete the analysis of {entry.geography} ({entry_id})?", default=False):
        console.print("[dim]Aborted.[/dim]")
        return
    history.remove(entry_id)
    console.print(f"[green]Deleted entry {entry_id}.[/green]")
