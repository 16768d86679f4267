"""Base agent client implementing the Template Method pattern.

Every provider answers the same two agent personas the same way:
    call() → _build_system_prompt(agent_id)
           → _call_api()   ← only this differs per provider
           → _parse()

Subclasses implement two things only:
  - __init__: validate and store the async SDK client
  - _call_api: make one raw API call and return the text response

There is deliberately no retry here: a failed call surfaces as a failed
workflow and the user decides whether to run it again.
"""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod

from catrisk_core.models import AgentResponse

logger = logging.getLogger(__name__)

RISK_COORDINATOR_AGENT_ID = "risk_coordinator"
ALERT_REMEDIATION_AGENT_ID = "alert_remediation"

_MAX_TOKENS = 4096

_RISK_COORDINATOR_PROMPT = """You are a catastrophe risk coordinator for a property & casualty insurer.
For the requested geography, assess portfolio exposure concentration, the
catastrophe context and current climate intelligence, and flag every metric
that breaches its concentration threshold.

Respond with **only** a valid JSON object:

{
  "geography": "<geography analysed>",
  "overall_risk_rating": <number 0-10>,
  "executive_summary": "<two or three sentences>",
  "exposure_summary": {
    "total_policies": <integer>,
    "total_insured_value": "<e.g. $42.3B>",
    "concentration_score": <number 0-100>,
    "top_lob": "<line of business>",
    "lob_breakdown": [
      {"line_of_business": "<name>", "policy_count": <integer>, "insured_value": "<amount>", "percentage": <number>}
    ]
  },
  "catastrophe_context": {
    "risk_rating": <number 0-10>,
    "risk_trend": "<Increasing|Stable|Decreasing>",
    "top_perils": ["<peril>"],
    "historical_loss_summary": "<text>",
    "return_period_100yr": "<estimated loss>",
    "return_period_250yr": "<estimated loss>"
  },
  "climate_intelligence": {
    "climate_risk_score": <number 0-10>,
    "current_conditions": "<text>",
    "active_warnings": ["<warning>"],
    "emerging_threats": ["<threat>"],
    "seasonal_outlook": "<text>"
  },
  "threshold_breaches": [
    {"metric": "<metric>", "current_value": <number>, "threshold": <number>,
     "severity": "<critical|high|medium|low>", "zone": "<zone>"}
  ],
  "recommendations": ["<actionable recommendation>"]
}

Do not return any text outside the JSON object."""

_ALERT_REMEDIATION_PROMPT = """You are an exposure alerting and remediation specialist for a property & casualty insurer.
For the requested geography, turn concentration threshold breaches into
prioritised alerts, each with concrete remedial actions.

Respond with **only** a valid JSON object:

{
  "analysis_geography": "<geography analysed>",
  "alert_summary": {
    "total_alerts": <integer>,
    "critical_count": <integer>,
    "high_count": <integer>,
    "medium_count": <integer>
  },
  "alerts": [
    {
      "alert_id": "<unique id>",
      "severity": "<critical|high|medium|low>",
      "zone": "<zone>",
      "peril_type": "<peril>",
      "exposure_value": "<amount>",
      "breach_description": "<what was breached and by how much>",
      "remedial_actions": [
        {"action_type": "<Reinsurance|Underwriting|Pricing|Portfolio>", "description": "<text>",
         "timeline": "<text>", "expected_impact": "<text>"}
      ]
    }
  ],
  "implementation_timeline": "<text>",
  "overall_risk_reduction": "<text>"
}

Do not return any text outside the JSON object."""

AGENT_PERSONAS: dict[str, str] = {
    RISK_COORDINATOR_AGENT_ID: _RISK_COORDINATOR_PROMPT,
    ALERT_REMEDIATION_AGENT_ID: _ALERT_REMEDIATION_PROMPT,
}


class BaseAgentClient(ABC):
    MAX_TOKENS: int = _MAX_TOKENS

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    async def call(self, prompt: str, agent_id: str) -> AgentResponse:
        """Send one natural-language instruction to an agent persona.

        Returns a failed AgentResponse for an unknown agent or an
        unparseable reply. Transport errors from _call_api propagate so the
        orchestrator can report them.
        """
        system = self._build_system_prompt(agent_id)
        if system is None:
            return AgentResponse(success=False, error=f"Unknown agent: {agent_id!r}.")
        raw = await self._call_api(system, prompt)
        payload = self._parse(raw)
        if payload is None:
            return AgentResponse(success=False, error="The agent returned a response that is not a JSON object.")
        return AgentResponse(success=True, result=payload)

    # ------------------------------------------------------------------ #
    # Abstract — implement in each provider                               #
    # ------------------------------------------------------------------ #

    @abstractmethod
    async def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        """Make a single API call and return the raw text response.

        Should raise on failure; the caller turns the exception into a
        failed workflow.
        """

    # ------------------------------------------------------------------ #
    # Shared implementations                                               #
    # ------------------------------------------------------------------ #

    def _build_system_prompt(self, agent_id: str) -> str | None:
        return AGENT_PERSONAS.get(agent_id)

    def _parse(self, raw: str | None) -> dict | None:
        """Parse the model's raw text into a JSON object, or None."""
        if not raw:
            return None
        try:
            # Strip only the outer ```json ... ``` fence around the reply.
            cleaned = re.sub(r"^```(?:json)?\s*", "", raw.strip())
            cleaned = re.sub(r"\s*```$", "", cleaned.strip())
            payload = json.loads(cleaned)
        except json.JSONDecodeError:
            logger.warning(
                "%s: failed to parse response as JSON: %s",
                self.__class__.__name__,
                raw[:200],
            )
            return None
        if not isinstance(payload, dict):
            logger.warning("%s: expected a JSON object, got %s", self.__class__.__name__, type(payload).__name__)
            return None
        return payload
