"""Concentration analysis workflow."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Callable

from catrisk_core.models import PENDING, AnalysisResult, HistoryEntry
from catrisk_core.orchestrator import BaseOrchestrator, exception_error, response_error
from catrisk_core.providers.base import RISK_COORDINATOR_AGENT_ID
from catrisk_core.severity import NO_SEVERITY, is_ranked, max_severity

if TYPE_CHECKING:
    from catrisk_core.providers.base import BaseAgentClient
    from catrisk_store.history import HistoryStore

logger = logging.getLogger(__name__)

ANALYSIS_PHASES: tuple[str, ...] = (
    "Analyzing exposure data...",
    "Fetching catastrophe context...",
    "Checking climate conditions...",
    "Aggregating risk profile...",
)

DEFAULT_PHASE_INTERVAL = 3.0


def build_analysis_prompt(geography: str) -> str:
    return (
        f"Analyze risk concentration for {geography}. Provide complete exposure data, "
        "catastrophe context, and climate intelligence with threshold breach analysis."
    )


def breach_severity(result: AnalysisResult) -> str:
    """Highest severity across the threshold breaches, or "None" when there are none.

    A winning label the ranking does not know carries the same weight as
    "low" and is recorded as such.
    """
    labels = [b.severity for b in result.threshold_breaches]
    if not labels:
        return NO_SEVERITY
    highest = max_severity(labels)
    return highest if is_ranked(highest) else "low"


def build_history_entry(entry_id: str, geography: str, result: AnalysisResult) -> HistoryEntry:
    """Map a successful analysis to the history entry that records it."""
    return HistoryEntry(
        id=entry_id,
        geography=result.geography.strip() or geography,
        alert_count=len(result.threshold_breaches),
        highest_severity=breach_severity(result),
        status=PENDING,
        analysis_result=result,
    )


class AnalysisOrchestrator(BaseOrchestrator[AnalysisResult]):
    """Runs the risk-coordinator agent and records each success in history.

    While a run is in flight ``phase`` cycles through ANALYSIS_PHASES every
    ``phase_interval`` seconds. The phases are progress feedback only and
    stop the moment the call settles.
    """

    FAILURE_MESSAGE = "Analysis failed. Please try again."
    CANCELLED_MESSAGE = "Analysis was cancelled."

    def __init__(
        self,
        client: BaseAgentClient,
        history: HistoryStore,
        phase_interval: float = DEFAULT_PHASE_INTERVAL,
        on_phase: Callable[[str], None] | None = None,
    ):
        super().__init__(client, history)
        self.phase_interval = phase_interval
        self.on_phase = on_phase
        self.phase: str | None = None
        self.geography = ""

    @property
    def alert_geography(self) -> str:
        """Geography the alert workflow should use after this analysis."""
        if self.result is not None and self.result.geography.strip():
            return self.result.geography.strip()
        return self.geography

    async def run_analysis(self, geography: str) -> AnalysisResult | None:
        """Request a concentration analysis for ``geography``.

        Blank input is ignored. Returns the parsed result on success and
        None on failure (see ``error``) or when a newer run overtook this one.
        """
        geography = (geography or "").strip()
        if not geography:
            return None

        token = self._begin()
        self.geography = geography
        self._set_phase(ANALYSIS_PHASES[0])
        ticker = asyncio.create_task(self._advance_phases(token))
        try:
            response = await self._client.call(build_analysis_prompt(geography), RISK_COORDINATOR_AGENT_ID)
        except asyncio.CancelledError:
            if self._is_current(token):
                self._fail(self.CANCELLED_MESSAGE)
            raise
        except Exception as e:
            if self._is_current(token):
                self._fail(exception_error(e))
            return None
        finally:
            self._stop_phases(ticker, token)

        if not self._is_current(token):
            return None

        if not response.success or not isinstance(response.result, dict):
            self._fail(response_error(response, self.FAILURE_MESSAGE))
            return None

        try:
            result = AnalysisResult.from_dict(response.result)
            entry = build_history_entry(self._history.next_id(), geography, result)
            self._history.insert_front(entry)
        except Exception as e:
            logger.exception("Could not record analysis for %s", geography)
            self._fail(exception_error(e))
            return None

        self._succeed(result)
        logger.info(
            "Recorded analysis %s for %s (%d breach(es), highest %s)",
            entry.id,
            entry.geography,
            entry.alert_count,
            entry.highest_severity,
        )
        return result

    async def _advance_phases(self, token: int) -> None:
        for label in ANALYSIS_PHASES[1:]:
            await asyncio.sleep(self.phase_interval)
            if token != self._seq:
                return
            self._set_phase(label)
        # The last phase stays up until the call settles.

    def _set_phase(self, label: str) -> None:
        self.phase = label
        if self.on_phase is not None:
            self.on_phase(label)

    def _stop_phases(self, ticker: asyncio.Task, token: int) -> None:
        ticker.cancel()
        if token == self._seq:
            self.phase = None
