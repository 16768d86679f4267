"""Tests for the CLI entry point and commands."""

import json

from click.testing import CliRunner

from catrisk_cli.cli import _build_store, main
from catrisk_core.models import ACTIONED, AgentResponse, HistoryEntry
from catrisk_core.providers.base import ALERT_REMEDIATION_AGENT_ID, RISK_COORDINATOR_AGENT_ID
from catrisk_store.file import FileStore
from catrisk_store.history import HISTORY_KEY
from catrisk_store.memory import MemoryStore
from catrisk_store.sqlite import SQLiteStore

ANALYSIS_PAYLOAD = {
    "geography": "Hawaii",
    "overall_risk_rating": 6,
    "executive_summary": "Volcanic and wind exposure on Oahu.",
    "exposure_summary": {"total_policies": 1200, "concentration_score": 55},
    "threshold_breaches": [{"metric": "TIV", "severity": "high", "zone": "96815"}],
    "recommendations": ["Review wind deductibles"],
}

ALERT_PAYLOAD = {
    "analysis_geography": "Hawaii",
    "alert_summary": {"total_alerts": 2, "critical_count": 1, "high_count": 1, "medium_count": 0},
    "alerts": [
        {"alert_id": "HI-001", "severity": "critical", "zone": "96815", "peril_type": "Hurricane"},
        {"alert_id": "HI-002", "severity": "high", "zone": "96701", "peril_type": "Wildfire"},
    ],
}


def _make_config(model="anthropic", anthropic_key="ant", openai_key=None, **overrides):
    config = {
        "model": model,
        "anthropic_api_key": anthropic_key,
        "openai_api_key": openai_key,
        "store": "memory",
        "store_path": None,
        "phase_interval": 0.01,
        "geographies": None,
        "export_dir": ".",
    }
    config.update(overrides)
    return config


class _FakeClient:
    def __init__(self, responses=None):
        self.responses = responses or {
            RISK_COORDINATOR_AGENT_ID: AgentResponse(success=True, result=ANALYSIS_PAYLOAD),
            ALERT_REMEDIATION_AGENT_ID: AgentResponse(success=True, result=ALERT_PAYLOAD),
        }
        self.calls = []

    async def call(self, prompt, agent_id):
        self.calls.append((prompt, agent_id))
        return self.responses[agent_id]


def _patch_common(mocker, config=None, entries=None, client=None):
    """Patch load_config, _build_store and the agent client for most tests."""
    cfg = config or _make_config()
    mocker.patch("catrisk_core.config.load_config", return_value=cfg)
    initial = {}
    if entries:
        initial[HISTORY_KEY] = json.dumps([e.to_dict() for e in entries]).encode()
    store = MemoryStore(initial)
    mocker.patch("catrisk_cli.cli._build_store", return_value=store)
    client = client or _FakeClient()
    mocker.patch("catrisk_core.orchestrator.get_agent_client", return_value=client)
    return store, client


def _stored(store):
    blob = store.get(HISTORY_KEY)
    return json.loads(blob) if blob else []


class TestAnalyze:
    def test_missing_anthropic_key(self, mocker):
        _patch_common(mocker, config=_make_config(anthropic_key=None))
        result = CliRunner().invoke(main, ["analyze", "Hawaii"])
        assert result.exit_code != 0
        assert "ANTHROPIC_API_KEY" in result.output

    def test_missing_openai_key(self, mocker):
        _patch_common(mocker, config=_make_config(model="openai"))
        result = CliRunner().invoke(main, ["analyze", "Hawaii"])
        assert result.exit_code != 0
        assert "OPENAI_API_KEY" in result.output

    def test_model_flag_overrides_config(self, mocker):
        _patch_common(mocker, config=_make_config(anthropic_key=None, openai_key="oai"))
        result = CliRunner().invoke(main, ["analyze", "Hawaii", "--model", "openai"])
        assert result.exit_code == 0, result.output

    def test_success_saves_history(self, mocker):
        store, client = _patch_common(mocker)
        result = CliRunner().invoke(main, ["analyze", "Hawaii"])

        assert result.exit_code == 0, result.output
        assert "Hawaii" in result.output
        assert "Saved to history" in result.output
        assert client.calls[0][1] == RISK_COORDINATOR_AGENT_ID

        records = _stored(store)
        assert len(records) == 1
        assert records[0]["geography"] == "Hawaii"
        assert records[0]["alert_count"] == 1
        assert records[0]["highest_severity"] == "high"
        assert records[0]["status"] == "Pending"

    def test_unquoted_multiword_geography(self, mocker):
        _, client = _patch_common(mocker)
        result = CliRunner().invoke(main, ["analyze", "Florida", "-", "Southeast"])
        assert result.exit_code == 0, result.output
        assert "Florida - Southeast" in client.calls[0][0]

    def test_blank_geography_does_nothing(self, mocker):
        store, client = _patch_common(mocker)
        result = CliRunner().invoke(main, ["analyze", "  "])
        assert result.exit_code == 0
        assert client.calls == []
        assert _stored(store) == []

    def test_failure_reports_error(self, mocker):
        client = _FakeClient({RISK_COORDINATOR_AGENT_ID: AgentResponse(success=False, error="quota exceeded")})
        store, _ = _patch_common(mocker, client=client)
        result = CliRunner().invoke(main, ["analyze", "Hawaii"])

        assert result.exit_code == 1
        assert "quota exceeded" in result.output
        assert "Retry with" in result.output
        assert _stored(store) == []

    def test_with_alerts_attaches_to_new_entry(self, mocker):
        store, client = _patch_common(mocker)
        result = CliRunner().invoke(main, ["analyze", "Hawaii", "--alerts"])

        assert result.exit_code == 0, result.output
        assert [agent for _, agent in client.calls] == [RISK_COORDINATOR_AGENT_ID, ALERT_REMEDIATION_AGENT_ID]
        assert "Context: Overall risk rating 6/10, concentration score 55" in client.calls[1][0]
        assert "HI-001" in result.output

        record = _stored(store)[0]
        assert record["alert_count"] == 2
        assert record["highest_severity"] == "Critical"
        assert record["alert_result"]["alert_summary"]["critical_count"] == 1


class TestAlerts:
    def test_uses_latest_analysis_as_context(self, mocker):
        from catrisk_core.models import AnalysisResult

        entry = HistoryEntry(id="1", geography="Hawaii", analysis_result=AnalysisResult.from_dict(ANALYSIS_PAYLOAD))
        store, client = _patch_common(mocker, entries=[entry])
        result = CliRunner().invoke(main, ["alerts", "Hawaii"])

        assert result.exit_code == 0, result.output
        assert "Context:" in client.calls[0][0]
        assert _stored(store)[0]["alert_count"] == 2

    def test_without_history_has_no_context(self, mocker):
        _, client = _patch_common(mocker)
        result = CliRunner().invoke(main, ["alerts", "Hawaii"])
        assert result.exit_code == 0, result.output
        assert "Context:" not in client.calls[0][0]

    def test_severity_filter(self, mocker):
        _patch_common(mocker)
        result = CliRunner().invoke(main, ["alerts", "Hawaii", "--severity", "HIGH"])
        assert result.exit_code == 0, result.output
        assert "HI-002" in result.output
        assert "HI-001" not in result.output
        assert "Showing 1 of 2" in result.output

    def test_filter_with_no_matches(self, mocker):
        _patch_common(mocker)
        result = CliRunner().invoke(main, ["alerts", "Hawaii", "--severity", "low"])
        assert result.exit_code == 0, result.output
        assert "No alerts match" in result.output

    def test_zero_alerts_without_filter(self, mocker):
        empty = {"analysis_geography": "Hawaii", "alert_summary": {"total_alerts": 0}, "alerts": []}
        client = _FakeClient({ALERT_REMEDIATION_AGENT_ID: AgentResponse(success=True, result=empty)})
        _patch_common(mocker, client=client)
        result = CliRunner().invoke(main, ["alerts", "Hawaii"])
        assert result.exit_code == 0, result.output
        assert "No alerts." in result.output
        assert "match the filter" not in result.output

    def test_export(self, mocker, tmp_path):
        _patch_common(mocker)
        result = CliRunner().invoke(main, ["alerts", "Hawaii", "--export", "--output-dir", str(tmp_path)])

        assert result.exit_code == 0, result.output
        files = list(tmp_path.glob("alerts-Hawaii-*.json"))
        assert len(files) == 1
        assert json.loads(files[0].read_text())["alert_summary"]["total_alerts"] == 2

    def test_failure(self, mocker):
        client = _FakeClient({ALERT_REMEDIATION_AGENT_ID: AgentResponse(success=False, message="agent offline")})
        _patch_common(mocker, client=client)
        result = CliRunner().invoke(main, ["alerts", "Hawaii"])
        assert result.exit_code == 1
        assert "agent offline" in result.output


class TestGeographies:
    def test_query(self, mocker):
        _patch_common(mocker)
        result = CliRunner().invoke(main, ["geographies", "texas"])
        assert result.exit_code == 0
        assert "Texas - Gulf Coast" in result.output
        assert "Florida" not in result.output

    def test_no_match(self, mocker):
        _patch_common(mocker)
        result = CliRunner().invoke(main, ["geographies", "atlantis"])
        assert "No geographies match" in result.output

    def test_custom_catalog(self, mocker):
        _patch_common(mocker, config=_make_config(geographies=["Zone A", "Zone B"]))
        result = CliRunner().invoke(main, ["geographies"])
        assert "Zone A" in result.output
        assert "Hawaii" not in result.output


class TestHistory:
    ENTRIES = [
        HistoryEntry(id="2", geography="Kansas", alert_count=3, highest_severity="Critical"),
        HistoryEntry(id="1", geography="Hawaii"),
    ]

    def test_empty(self, mocker):
        _patch_common(mocker)
        result = CliRunner().invoke(main, ["history"])
        assert result.exit_code == 0
        assert "No analyses found" in result.output

    def test_lists_entries(self, mocker):
        _patch_common(mocker, entries=self.ENTRIES)
        result = CliRunner().invoke(main, ["history"])
        assert result.exit_code == 0, result.output
        assert "Kansas" in result.output
        assert "Hawaii" in result.output

    def test_search(self, mocker):
        _patch_common(mocker, entries=self.ENTRIES)
        result = CliRunner().invoke(main, ["history", "list", "--search", "kan"])
        assert "Kansas" in result.output
        assert "Hawaii" not in result.output

    def test_show(self, mocker):
        _patch_common(mocker, entries=self.ENTRIES)
        result = CliRunner().invoke(main, ["history", "show", "2"])
        assert result.exit_code == 0, result.output
        assert "Kansas" in result.output

    def test_show_unknown_id(self, mocker):
        _patch_common(mocker, entries=self.ENTRIES)
        result = CliRunner().invoke(main, ["history", "show", "99"])
        assert result.exit_code == 1
        assert "No history entry" in result.output

    def test_status(self, mocker):
        store, _ = _patch_common(mocker, entries=self.ENTRIES)
        result = CliRunner().invoke(main, ["history", "status", "1", "actioned"])
        assert result.exit_code == 0, result.output
        assert _stored(store)[1]["status"] == ACTIONED

    def test_invalid_status_rejected(self, mocker):
        _patch_common(mocker, entries=self.ENTRIES)
        result = CliRunner().invoke(main, ["history", "status", "1", "archived"])
        assert result.exit_code == 2

    def test_delete_with_yes(self, mocker):
        store, _ = _patch_common(mocker, entries=self.ENTRIES)
        result = CliRunner().invoke(main, ["history", "delete", "2", "--yes"])
        assert result.exit_code == 0, result.output
        assert [r["id"] for r in _stored(store)] == ["1"]

    def test_delete_declined(self, mocker):
        store, _ = _patch_common(mocker, entries=self.ENTRIES)
        result = CliRunner().invoke(main, ["history", "delete", "2"], input="n\n")
        assert result.exit_code == 0
        assert "Aborted" in result.output
        assert len(_stored(store)) == 2


class TestStats:
    def test_empty(self, mocker):
        _patch_common(mocker)
        result = CliRunner().invoke(main, ["stats"])
        assert "No analyses found" in result.output

    def test_aggregates(self, mocker):
        entries = [
            HistoryEntry(id="3", geography="Kansas", alert_count=2, highest_severity="Critical", status=ACTIONED),
            HistoryEntry(id="2", geography="Kansas", alert_count=1, highest_severity="High"),
            HistoryEntry(id="1", geography="Hawaii"),
        ]
        _patch_common(mocker, entries=entries)
        result = CliRunner().invoke(main, ["stats"])
        assert result.exit_code == 0, result.output
        assert "Total analyses: 3" in result.output
        assert "Total alerts:   3" in result.output
        assert "Kansas" in result.output


class TestInit:
    def test_writes_config(self, mocker):
        _patch_common(mocker)
        runner = CliRunner()
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["init"], input="openai\nsqlite\nrisk.db\n")
            assert result.exit_code == 0, result.output
            with open(".catrisk.yml") as f:
                written = f.read()
        assert "model: openai" in written
        assert "store: sqlite" in written
        assert "store_path: risk.db" in written

    def test_preserves_existing_keys(self, mocker):
        _patch_common(mocker)
        runner = CliRunner()
        with runner.isolated_filesystem():
            with open(".catrisk.yml", "w") as f:
                f.write("export_dir: reports\n")
            result = runner.invoke(main, ["init"], input="anthropic\nmemory\n")
            assert result.exit_code == 0, result.output
            with open(".catrisk.yml") as f:
                written = f.read()
        assert "export_dir: reports" in written
        assert "store: memory" in written


class TestBuildStore:
    def test_memory(self):
        assert isinstance(_build_store({"store": "memory"}), MemoryStore)

    def test_default_is_file(self, tmp_path):
        assert isinstance(_build_store({"store_path": str(tmp_path)}), FileStore)

    def test_sqlite(self, tmp_path):
        store = _build_store({"store": "sqlite", "store_path": str(tmp_path / "h.db")})
        assert isinstance(store, SQLiteStore)
        store.close()

    def test_unknown_store_falls_back_to_file(self, tmp_path):
        assert isinstance(_build_store({"store": "postgres", "store_path": str(tmp_path)}), FileStore)
