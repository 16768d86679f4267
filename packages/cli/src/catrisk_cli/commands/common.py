"""Helpers shared by the workflow commands."""

from __future__ import annotations

import click


def join_geography(words: tuple[str, ...]) -> str:
    """Geographies may be passed unquoted: ``catrisk analyze Florida - Southeast``."""
    return " ".join(words).strip()


def get_history(ctx: click.Context):
    history = ctx.obj.get("history") if ctx.obj else None
    if history is None:
        raise click.UsageError("History store is not initialised.")
    return history


def build_client(config: dict, model: str | None = None):
    """Validate provider credentials and return the configured agent client."""
    from catrisk_core.orchestrator import get_agent_client

    if model:
        config = {**config, "model": model}

    if config["model"] == "anthropic" and not config.get("anthropic_api_key"):
        raise click.UsageError("ANTHROPIC_API_KEY environment variable is not set.")
    if config["model"] == "openai" and not config.get("openai_api_key"):
        raise click.UsageError("OPENAI_API_KEY environment variable is not set.")

    try:
        return get_agent_client(config)
    except (ImportError, ValueError) as e:
        raise click.UsageError(str(e))
