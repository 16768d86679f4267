"""init command — interactive setup wizard.

Writes .catrisk.yml with the agent provider and the history store.
"""

from __future__ import annotations

from pathlib import Path

import click
import yaml
from rich.console import Console

console = Console()


@click.command("init")
@click.pass_context
def init_cmd(ctx):
    """Set up catrisk in the current directory.

    Creates (or updates) .catrisk.yml with the AI provider and the store
    that keeps analysis history.
    """
    config_path = Path((ctx.obj or {}).get("config_path") or ".catrisk.yml")
    console.print("\n[bold cyan]catrisk init[/bold cyan] — setup wizard\n")

    provider = click.prompt(
        "AI provider",
        type=click.Choice(["anthropic", "openai"]),
        default="anthropic",
    )
    api_key_env = "ANTHROPIC_API_KEY" if provider == "anthropic" else "OPENAI_API_KEY"

    console.print("\nAnalysis history store:")
    console.print("  [bold]file[/bold]    — JSON file under .catrisk/ (default)")
    console.print("  [bold]sqlite[/bold]  — local SQLite file")
    console.print("  [bold]memory[/bold]  — no persistence")
    store_type = click.prompt(
        "Store backend",
        type=click.Choice(["file", "sqlite", "memory"]),
        default="file",
    )

    config: dict = {"model": provider, "store": store_type}

    if store_type == "file":
        directory = click.prompt("History directory", default=".catrisk")
        if directory != ".catrisk":
            config["store_path"] = directory

    elif store_type == "sqlite":
        db_path = click.prompt("SQLite database path", default=".catrisk.db")
        if db_path != ".catrisk.db":
            config["store_path"] = db_path
        console.print(f"[green]SQLite store configured at {db_path}[/green]")

    _write_config(config, config_path)
    console.print(f"[green]Wrote {config_path}[/green]")

    console.print("\n[bold green]Setup complete![/bold green]")
    console.print(f"Set [bold]{api_key_env}[/bold], then run: [bold]catrisk analyze \"Florida - Southeast\"[/bold]")


def _write_config(config: dict, path: Path) -> None:
    """Write or update the config file, preserving any existing keys."""
    existing: dict = {}
    if path.exists():
        existing = yaml.safe_load(path.read_text()) or {}
    existing.update(config)
    path.write_text(yaml.dump(existing, default_flow_style=False, sort_keys=False))
