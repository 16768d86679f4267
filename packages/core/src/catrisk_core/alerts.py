"""Alert list filtering and JSON export."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING, AbstractSet, Sequence

if TYPE_CHECKING:
    from catrisk_core.models import AlertItem, AlertResult


def filter_alerts(alerts: Sequence[AlertItem], active_severities: AbstractSet[str]) -> list[AlertItem]:
    """Return the alerts whose lowercased severity is in ``active_severities``.

    An empty filter shows everything, not nothing.
    """
    if not active_severities:
        return list(alerts)
    return [a for a in alerts if (a.severity or "").lower() in active_severities]


def export_filename(result: AlertResult, today: date | None = None) -> str:
    """``alerts-<geography>-<YYYY-MM-DD>.json``; path separators in the geography become dashes."""
    today = today or date.today()
    geography = (result.analysis_geography or "report").replace("/", "-").replace("\\", "-")
    return f"alerts-{geography}-{today.isoformat()}.json"


def export_alerts(result: AlertResult, directory: str | Path = ".", today: date | None = None) -> Path:
    """Write the alert result as indented JSON and return the file path."""
    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / export_filename(result, today)
    path.write_text(json.dumps(result.to_dict(), indent=2), encoding="utf-8")
    return path
