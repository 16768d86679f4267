"""Tests for the geography matcher."""

from catrisk_core.geography import DEFAULT_SUGGESTIONS, GEOGRAPHIES, match_geographies


def test_blank_query_returns_first_ten():
    assert match_geographies("") == list(GEOGRAPHIES[:DEFAULT_SUGGESTIONS])
    assert match_geographies("   ") == list(GEOGRAPHIES[:DEFAULT_SUGGESTIONS])
    assert match_geographies(None) == list(GEOGRAPHIES[:DEFAULT_SUGGESTIONS])


def test_substring_match_is_case_insensitive():
    matches = match_geographies("FLORIDA")
    assert matches
    assert all("florida" in m.lower() for m in matches)


def test_keeps_catalog_order():
    catalog = ["Texas - Gulf Coast", "Florida - Miami-Dade", "Gulf of Mexico"]
    assert match_geographies("gulf", catalog) == ["Texas - Gulf Coast", "Gulf of Mexico"]


def test_no_match_returns_empty():
    assert match_geographies("Atlantis") == []


def test_custom_catalog_blank_query_capped():
    catalog = [f"Zone {i}" for i in range(25)]
    assert match_geographies("", catalog) == catalog[:10]
