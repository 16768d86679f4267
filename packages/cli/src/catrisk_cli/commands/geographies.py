"""geographies command — search the geography catalog."""

from __future__ import annotations

import click
from rich.console import Console

from catrisk_core.config import load_geographies
from catrisk_core.geography import match_geographies

console = Console()


@click.command("geographies")
@click.argument("query", nargs=-1)
@click.pass_context
def geographies_cmd(ctx, query: tuple[str, ...]):
    """List catalog geographies containing QUERY (case-insensitive).

    Without a query, shows the first ten geographies.
    """
    config = ctx.obj.get("config", {}) if ctx.obj else {}
    matches = match_geographies(" ".join(query), load_geographies(config))
    if not matches:
        console.print("[yellow]No geographies match.[/yellow]")
        return
    for geography in matches:
        console.print(f"  {geography}")
