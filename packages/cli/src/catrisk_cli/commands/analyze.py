"""analyze command — run a concentration analysis for a geography."""

from __future__ import annotations

import asyncio

import click
from rich.console import Console

from catrisk_cli.commands.alerts import run_alert_workflow
from catrisk_cli.commands.common import build_client, get_history, join_geography
from catrisk_cli.render import render_analysis
from catrisk_core.analysis import ANALYSIS_PHASES, DEFAULT_PHASE_INTERVAL, AnalysisOrchestrator
from catrisk_core.config import load_geographies
from catrisk_core.geography import match_geographies

console = Console()


@click.command("analyze")
@click.argument("geography", nargs=-1, required=True)
@click.option(
    "--model",
    type=click.Choice(["anthropic", "openai"]),
    default=None,
    help="AI model provider. Overrides config file.",
)
@click.option(
    "--alerts",
    "with_alerts",
    is_flag=True,
    help="Generate alerts and remedial actions once the analysis succeeds.",
)
@click.pass_context
def analyze_cmd(ctx, geography: tuple[str, ...], model: str | None, with_alerts: bool):
    """Analyze risk concentration for a geography.

    Assesses exposure, catastrophe context and climate conditions, flags
    threshold breaches, and records the result in history.

    \b
    Required environment variables:
      ANTHROPIC_API_KEY    Required when using --model anthropic
      OPENAI_API_KEY       Required when using --model openai
    """
    geo = join_geography(geography)
    if not geo:
        console.print("[yellow]Nothing to analyze: the geography is empty.[/yellow]")
        return

    config = ctx.obj["config"]
    history = get_history(ctx)
    client = build_client(config, model)

    catalog = load_geographies(config)
    if geo not in catalog:
        suggestions = match_geographies(geo, catalog)
        hint = f" Did you mean: {', '.join(suggestions[:3])}?" if suggestions else ""
        console.print(f"[dim]'{geo}' is not in the geography catalog; analyzing it anyway.{hint}[/dim]")

    with console.status(ANALYSIS_PHASES[0]) as status:
        orchestrator = AnalysisOrchestrator(
            client,
            history,
            phase_interval=float(config.get("phase_interval") or DEFAULT_PHASE_INTERVAL),
            on_phase=status.update,
        )
        result = asyncio.run(orchestrator.run_analysis(geo))

    if result is None:
        raise click.ClickException(f"{orchestrator.error}\nRetry with: catrisk analyze \"{geo}\"")

    render_analysis(console, result, geo)
    console.print(f"\n[green]Saved to history ({len(history)} entr{'y' if len(history) == 1 else 'ies'}).[/green]")

    if with_alerts:
        run_alert_workflow(client, history, orchestrator.alert_geography, analysis=orchestrator)
