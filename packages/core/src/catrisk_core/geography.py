"""Geography catalog and the suggestion matcher used by the CLI."""

from __future__ import annotations

from typing import Sequence

GEOGRAPHIES: tuple[str, ...] = (
    "Florida - Southeast",
    "Florida - Gulf Coast",
    "Florida - Panhandle",
    "California - North",
    "California - Southern",
    "California - Bay Area",
    "Texas - Gulf Coast",
    "Texas - North",
    "Texas - Central",
    "Louisiana",
    "Mississippi",
    "Alabama - Gulf",
    "New York - Metro",
    "New York - Long Island",
    "New Jersey - Coast",
    "South Carolina - Coast",
    "North Carolina - Coast",
    "Georgia - Coast",
    "Virginia - Coast",
    "Oklahoma",
    "Kansas",
    "Nebraska",
    "Colorado - Front Range",
    "Arizona - Phoenix Metro",
    "Washington - Puget Sound",
    "Oregon - Coast",
    "Hawaii",
    "Puerto Rico",
    "Midwest Tornado Alley",
    "Northeast Corridor",
)

DEFAULT_SUGGESTIONS = 10


def match_geographies(query: str | None, catalog: Sequence[str] = GEOGRAPHIES) -> list[str]:
    """Return catalog entries containing ``query``, case-insensitively, in catalog order.

    A blank query returns the first ten entries so there is always something
    to pick from.
    """
    if not query or not query.strip():
        return list(catalog[:DEFAULT_SUGGESTIONS])
    needle = query.lower()
    return [g for g in catalog if needle in g.lower()]
