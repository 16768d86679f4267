"""CLI entry point for catrisk.

Commands:
  analyze      — run a concentration analysis for a geography
  alerts       — generate alerts and remedial actions for a geography
  geographies  — list catalog geographies matching a query
  history      — browse, update and delete past analyses
  stats        — aggregate severity and status across history
  init         — interactive setup wizard
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from catrisk_cli.commands.alerts import alerts_cmd
from catrisk_cli.commands.analyze import analyze_cmd
from catrisk_cli.commands.geographies import geographies_cmd
from catrisk_cli.commands.history import history_cmd
from catrisk_cli.commands.init import init_cmd
from catrisk_cli.commands.stats import stats_cmd

console = Console()


def _build_store(config: dict):
    """Instantiate the configured key-value backend from .catrisk.yml settings.

    Store selection hierarchy:
      store: sqlite → SQLiteStore (uses store_path or .catrisk.db)
      store: memory → MemoryStore (history lasts for this process only)
      (default)     → FileStore   (uses store_path or .catrisk/)

    This factory lives in cli.py so neither catrisk_core nor catrisk_store
    know about the CLI config format.
    """
    from catrisk_store.file import FileStore
    from catrisk_store.memory import MemoryStore

    store_type = config.get("store", "file")

    if store_type == "sqlite":
        from catrisk_store.sqlite import SQLiteStore

        return SQLiteStore(db_path=config.get("store_path") or ".catrisk.db")

    if store_type == "memory":
        return MemoryStore()

    if store_type != "file":
        console.print(f"[yellow]Unknown store '{store_type}'. Using the file store.[/yellow]")
    return FileStore(directory=config.get("store_path") or ".catrisk")


@click.group()
@click.version_option(
    version=importlib.metadata.version("catrisk"),
    prog_name="catrisk",
)
@click.option(
    "--config",
    "config_path",
    default=".catrisk.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="CATRISK_CONFIG",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity.",
)
@click.pass_context
def main(ctx: click.Context, config_path: str, log_level: str):
    """Catastrophe risk concentration analysis for property portfolios."""
    from catrisk_core.config import load_config
    from catrisk_store.history import HistoryStore

    logging.basicConfig(
        level=log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )

    ctx.ensure_object(dict)

    config = load_config(config_path)
    ctx.obj["config_path"] = config_path

    store = _build_store(config)
    history = HistoryStore(store)
    history.load()
    ctx.obj["store"] = store
    ctx.obj["history"] = history
    ctx.obj["config"] = config
    ctx.call_on_close(store.close)


main.add_command(analyze_cmd)
main.add_command(alerts_cmd)
main.add_command(geographies_cmd)
main.add_command(history_cmd)
main.add_command(stats_cmd)
main.add_command(init_cmd)
