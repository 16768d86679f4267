"""Severity ranking shared by the orchestrators, the history store and the CLI.

The analysis service is not consistent about capitalisation ("critical" vs
"Critical"), so every comparison here is case-insensitive while the label
itself is always returned exactly as the service emitted it.
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING, Iterable, Sequence

if TYPE_CHECKING:
    from catrisk_core.models import AlertItem, AlertSummary

SEVERITY_WEIGHTS: dict[str, int] = {"critical": 3, "high": 2, "medium": 1, "low": 0}

# Ranked order, highest first. Used for display ordering and stats tables.
SEVERITY_ORDER: tuple[str, ...] = ("critical", "high", "medium", "low")

NO_SEVERITY = "None"

SEVERITY_STYLES: dict[str, str] = {
    "critical": "bold red",
    "high": "dark_orange",
    "medium": "yellow",
    "low": "green",
}


def severity_weight(label: str | None) -> int:
    """Return the numeric weight of a severity label; unknown labels weigh 0."""
    return SEVERITY_WEIGHTS.get((label or "").strip().lower(), 0)


def is_ranked(label: str | None) -> bool:
    return (label or "").strip().lower() in SEVERITY_WEIGHTS


def max_severity(labels: Sequence[str]) -> str:
    """Return the label with the greatest weight.

    Ties keep the first-encountered label: the fold only replaces the
    running maximum on a strictly greater weight.
    """
    if not labels:
        raise ValueError("max_severity() requires at least one label.")
    best = labels[0]
    for label in labels[1:]:
        if severity_weight(label) > severity_weight(best):
            best = label
    return best


def style_of(label: str | None) -> str:
    """Map a severity label to a rich style. Unknown labels get the medium style."""
    return SEVERITY_STYLES.get((label or "").strip().lower(), SEVERITY_STYLES["medium"])


def summary_severity(summary: AlertSummary) -> str:
    """Highest severity implied by an alert summary's counts.

    A summary with no critical or high alerts reports "Medium", including
    the zero-alert case.
    """
    if summary.critical_count > 0:
        return "Critical"
    if summary.high_count > 0:
        return "High"
    return "Medium"


def severity_counts(alerts: Iterable[AlertItem]) -> Counter[str]:
    """Count alerts per lowercased severity label."""
    return Counter((a.severity or "").lower() for a in alerts)
