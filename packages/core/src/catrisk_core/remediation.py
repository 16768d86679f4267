"""Alert & remediation workflow."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from catrisk_core.models import PENDING, AlertResult, AnalysisResult, HistoryEntry
from catrisk_core.orchestrator import BaseOrchestrator, exception_error, response_error
from catrisk_core.providers.base import ALERT_REMEDIATION_AGENT_ID
from catrisk_core.severity import summary_severity

if TYPE_CHECKING:
    from catrisk_core.analysis import AnalysisOrchestrator
    from catrisk_core.providers.base import BaseAgentClient
    from catrisk_store.history import HistoryStore

logger = logging.getLogger(__name__)


def _fmt(value) -> str:
    if value is None:
        return "N/A"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_alert_prompt(geography: str, analysis: AnalysisResult | None = None) -> str:
    """Build the alert instruction, carrying the analysis figures when there are any."""
    prompt = f"Analyze concentration risk profile and generate alerts with remedial actions for {geography}."
    if analysis is None:
        return prompt
    score = analysis.exposure_summary.concentration_score if analysis.exposure_summary else None
    return (
        f"{prompt} Context: Overall risk rating {_fmt(analysis.overall_risk_rating)}/10, "
        f"concentration score {_fmt(score)}, "
        f"{len(analysis.threshold_breaches)} threshold breaches detected."
    )


def attach_alert_result(entry: HistoryEntry, result: AlertResult) -> HistoryEntry:
    """Return ``entry`` enriched with an alert result; status is left alone."""
    return replace(
        entry,
        alert_result=result,
        alert_count=result.alert_summary.total_alerts,
        highest_severity=summary_severity(result.alert_summary),
    )


class AlertOrchestrator(BaseOrchestrator[AlertResult]):
    """Runs the alert-remediation agent and merges the result into history.

    History entries are correlated by geography string: every Pending entry
    whose geography equals the requested one receives the new result.
    """

    FAILURE_MESSAGE = "Alert generation failed. Please try again."
    CANCELLED_MESSAGE = "Alert generation was cancelled."

    def __init__(
        self,
        client: BaseAgentClient,
        history: HistoryStore,
        analysis: AnalysisOrchestrator | None = None,
    ):
        super().__init__(client, history)
        self._analysis = analysis
        self.geography = ""

    def context(self, override: AnalysisResult | None = None) -> AnalysisResult | None:
        if override is not None:
            return override
        return self._analysis.result if self._analysis is not None else None

    async def run_alerts(self, geography: str, analysis_result: AnalysisResult | None = None) -> AlertResult | None:
        """Request alerts and remedial actions for ``geography``.

        ``analysis_result`` overrides the linked AnalysisOrchestrator's
        current result as prompt context. Blank input is ignored.
        """
        geography = (geography or "").strip()
        if not geography:
            return None

        token = self._begin()
        self.geography = geography
        prompt = build_alert_prompt(geography, self.context(analysis_result))
        try:
            response = await self._client.call(prompt, ALERT_REMEDIATION_AGENT_ID)
        except asyncio.CancelledError:
            if self._is_current(token):
                self._fail(self.CANCELLED_MESSAGE)
            raise
        except Exception as e:
            if self._is_current(token):
                self._fail(exception_error(e))
            return None

        if not self._is_current(token):
            return None

        if not response.success or not isinstance(response.result, dict):
            self._fail(response_error(response, self.FAILURE_MESSAGE))
            return None

        try:
            result = AlertResult.from_dict(response.result)
            updated = self._history.update_where(
                lambda h: h.geography == geography and h.status == PENDING,
                lambda h: attach_alert_result(h, result),
            )
        except Exception as e:
            logger.exception("Could not record alerts for %s", geography)
            self._fail(exception_error(e))
            return None

        self._succeed(result)
        logger.info("Attached %d alert(s) for %s to %d pending history entries", len(result.alerts), geography, updated)
        return result
