"""alerts command — generate alerts and remedial actions for a geography."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Sequence

import click
from rich.console import Console

from catrisk_cli.commands.common import build_client, get_history, join_geography
from catrisk_cli.render import render_alert_summary, render_alerts
from catrisk_core.alerts import export_alerts, filter_alerts
from catrisk_core.remediation import AlertOrchestrator
from catrisk_core.severity import SEVERITY_ORDER, severity_counts

if TYPE_CHECKING:
    from catrisk_core.analysis import AnalysisOrchestrator
    from catrisk_core.models import AlertResult, AnalysisResult
    from catrisk_core.providers.base import BaseAgentClient
    from catrisk_store.history import HistoryStore

console = Console()


def run_alert_workflow(
    client: BaseAgentClient,
    history: HistoryStore,
    geography: str,
    analysis: AnalysisOrchestrator | None = None,
    context: AnalysisResult | None = None,
    severities: Sequence[str] = (),
    show_actions: bool = True,
) -> AlertResult:
    """Run the alert workflow, render its result and return it.

    Raises ClickException when the workflow fails.
    """
    orchestrator = AlertOrchestrator(client, history, analysis=analysis)
    with console.status("Generating alerts and remedial actions..."):
        result = asyncio.run(orchestrator.run_alerts(geography, analysis_result=context))

    if result is None:
        raise click.ClickException(f"{orchestrator.error}\nRetry with: catrisk alerts \"{geography}\"")

    render_alert_summary(console, result, geography)
    counts = severity_counts(result.alerts)
    listed = [f"{sev} {counts[sev]}" for sev in SEVERITY_ORDER if counts[sev]]
    if listed:
        console.print(f"  [dim]Listed: {', '.join(listed)}[/dim]")
    active = {s.lower() for s in severities}
    shown = filter_alerts(result.alerts, active)
    if active:
        console.print(f"  [dim]Showing {len(shown)} of {len(result.alerts)} alert(s): {', '.join(sorted(active))}[/dim]")
    render_alerts(console, shown, show_actions=show_actions, filtered=bool(active))
    return result


@click.command("alerts")
@click.argument("geography", nargs=-1, required=True)
@click.option(
    "--severity",
    "severities",
    multiple=True,
    type=click.Choice(SEVERITY_ORDER, case_sensitive=False),
    help="Only show alerts of this severity. Repeat to combine.",
)
@click.option(
    "--model",
    type=click.Choice(["anthropic", "openai"]),
    default=None,
    help="AI model provider. Overrides config file.",
)
@click.option("--export", "export", is_flag=True, help="Write the full alert result to a JSON file.")
@click.option("--output-dir", default=None, help="Directory for --export. Defaults to export_dir in config.")
@click.option("--brief", is_flag=True, help="Hide remedial action details.")
@click.pass_context
def alerts_cmd(
    ctx,
    geography: tuple[str, ...],
    severities: tuple[str, ...],
    model: str | None,
    export: bool,
    output_dir: str | None,
    brief: bool,
):
    """Generate alerts and remedial actions for a geography.

    If history holds an analysis for the same geography, its risk rating,
    concentration score and breach count are passed along as context, and
    the alerts are attached to every Pending history entry for it.
    """
    geo = join_geography(geography)
    if not geo:
        console.print("[yellow]Nothing to analyze: the geography is empty.[/yellow]")
        return

    config = ctx.obj["config"]
    history = get_history(ctx)
    client = build_client(config, model)

    latest = history.latest_for(geo)
    context = latest.analysis_result if latest is not None else None
    if context is not None:
        console.print(f"[dim]Using analysis {latest.id} as context.[/dim]")

    result = run_alert_workflow(
        client,
        history,
        geo,
        context=context,
        severities=severities,
        show_actions=not brief,
    )

    if export:
        path = export_alerts(result, output_dir or config.get("export_dir") or ".")
        console.print(f"\n[green]Exported alerts to {path}[/green]")
