import os
from pathlib import Path
from typing import Optional

import yaml

from catrisk_core.geography import GEOGRAPHIES

DEFAULT_CONFIG: dict = {
    "model": "anthropic",
    "store": "file",  # file | sqlite | memory
    "store_path": None,  # None = .catrisk/ (file) or .catrisk.db (sqlite)
    "phase_interval": 3.0,  # seconds between progress phases
    "geographies": None,  # None = built-in catalog; set to a list to override
    "export_dir": ".",
}


def load_config(config_path: str = ".catrisk.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .catrisk.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Resolve credentials from environment variables
    config["anthropic_api_key"] = os.environ.get("ANTHROPIC_API_KEY")
    config["openai_api_key"] = os.environ.get("OPENAI_API_KEY")

    return config


def load_geographies(config: dict) -> list[str]:
    """
    Return the geography catalog.

    A ``geographies`` list in config replaces the built-in catalog; blank
    and non-string entries are dropped.
    """
    custom = config.get("geographies")
    if isinstance(custom, list):
        catalog = [g.strip() for g in custom if isinstance(g, str) and g.strip()]
        if catalog:
            return catalog
    return list(GEOGRAPHIES)
