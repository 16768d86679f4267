"""Shared request lifecycle for the analysis and alert workflows.

Both workflows are the same small state machine:

    IDLE → RUNNING → SUCCEEDED | FAILED

and a new run may start from any state, clearing the previous result and
error first. A run that is overtaken by a newer run of the same
orchestrator is stale: when it finally settles its outcome is dropped
without touching state, result, error or history.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Generic, TypeVar

from catrisk_core.providers.anthropic import AnthropicAgentClient
from catrisk_core.providers.openai import OpenAIAgentClient

if TYPE_CHECKING:
    from catrisk_core.models import AgentResponse
    from catrisk_core.providers.base import BaseAgentClient
    from catrisk_store.history import HistoryStore

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR = "An unexpected error occurred."

ResultT = TypeVar("ResultT")


class WorkflowState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def get_agent_client(config: dict) -> BaseAgentClient:
    model = config["model"]
    if model == "anthropic":
        return AnthropicAgentClient(api_key=config["anthropic_api_key"])
    if model == "openai":
        return OpenAIAgentClient(api_key=config["openai_api_key"])
    raise ValueError(f"Unknown model provider: {model!r}. Choose 'anthropic' or 'openai'.")


def response_error(response: AgentResponse, fallback: str) -> str:
    """Pick the most specific message a failed reply carries."""
    return response.error or response.message or fallback


def exception_error(exc: BaseException) -> str:
    return str(exc) or UNEXPECTED_ERROR


class BaseOrchestrator(Generic[ResultT]):
    """State holder shared by AnalysisOrchestrator and AlertOrchestrator.

    Subclasses own the request itself; this class owns the bookkeeping:
    the current state, the last result or error, and the sequence number
    that tells a live run from a stale one.
    """

    FAILURE_MESSAGE = "The request failed. Please try again."

    def __init__(self, client: BaseAgentClient, history: HistoryStore):
        self._client = client
        self._history = history
        self._seq = 0
        self.state = WorkflowState.IDLE
        self.result: ResultT | None = None
        self.error = ""

    @property
    def running(self) -> bool:
        return self.state is WorkflowState.RUNNING

    def _begin(self) -> int:
        """Enter RUNNING, clear the previous outcome and return this run's token."""
        self._seq += 1
        self.state = WorkflowState.RUNNING
        self.result = None
        self.error = ""
        return self._seq

    def _is_current(self, token: int) -> bool:
        if token != self._seq:
            logger.debug(
                "%s: discarding outcome of stale run %d (latest is %d)",
                self.__class__.__name__,
                token,
                self._seq,
            )
            return False
        return True

    def _succeed(self, result: ResultT) -> None:
        self.result = result
        self.state = WorkflowState.SUCCEEDED

    def _fail(self, message: str) -> None:
        logger.warning("%s failed: %s", self.__class__.__name__, message)
        self.error = message
        self.state = WorkflowState.FAILED
