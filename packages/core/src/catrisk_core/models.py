"""Data models for analysis payloads, alert payloads and history entries.

The analysis service returns loosely structured JSON: any field may be
missing or have the wrong shape. ``from_dict`` on every record validates
shape only (is it a dict, a list, a number) and falls back to an empty
default instead of raising, so the CLI can render "N/A" for whatever the
service left out.

Field names match the service's snake_case payload keys so ``to_dict()``
produces the same document the service sent.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any

PENDING = "Pending"
ACTIONED = "Actioned"
DISMISSED = "Dismissed"
HISTORY_STATUSES: tuple[str, ...] = (PENDING, ACTIONED, DISMISSED)


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _as_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return value if isinstance(value, str) else str(value)


def _as_number(value: Any) -> float | int | None:
    # bool is an int subclass but never a meaningful score; inf and nan are
    # what json.loads makes of 1e999, Infinity and NaN.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def _as_int(value: Any, default: int = 0) -> int:
    number = _as_number(value)
    return int(number) if number is not None else default


def _str_list(value: Any) -> list[str]:
    return [_as_str(v) for v in _as_list(value) if v is not None]


# --------------------------------------------------------------------------- #
# Concentration analysis payload                                              #
# --------------------------------------------------------------------------- #


@dataclass
class LobBreakdown:
    """Exposure for one line of business within a geography."""

    line_of_business: str = ""
    policy_count: int = 0
    insured_value: str = ""
    percentage: float | int | None = None

    @classmethod
    def from_dict(cls, d: Any) -> LobBreakdown:
        d = _as_dict(d)
        return cls(
            line_of_business=_as_str(d.get("line_of_business")),
            policy_count=_as_int(d.get("policy_count")),
            insured_value=_as_str(d.get("insured_value")),
            percentage=_as_number(d.get("percentage")),
        )


@dataclass
class ExposureSummary:
    total_policies: int = 0
    total_insured_value: str = ""
    concentration_score: float | int | None = None  # 0-100
    top_lob: str = ""
    lob_breakdown: list[LobBreakdown] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Any) -> ExposureSummary:
        d = _as_dict(d)
        return cls(
            total_policies=_as_int(d.get("total_policies")),
            total_insured_value=_as_str(d.get("total_insured_value")),
            concentration_score=_as_number(d.get("concentration_score")),
            top_lob=_as_str(d.get("top_lob")),
            lob_breakdown=[LobBreakdown.from_dict(b) for b in _as_list(d.get("lob_breakdown"))],
        )


@dataclass
class CatastropheContext:
    risk_rating: float | int | None = None
    risk_trend: str = ""
    top_perils: list[str] = field(default_factory=list)
    historical_loss_summary: str = ""
    return_period_100yr: str = ""
    return_period_250yr: str = ""

    @classmethod
    def from_dict(cls, d: Any) -> CatastropheContext:
        d = _as_dict(d)
        return cls(
            risk_rating=_as_number(d.get("risk_rating")),
            risk_trend=_as_str(d.get("risk_trend")),
            top_perils=_str_list(d.get("top_perils")),
            historical_loss_summary=_as_str(d.get("historical_loss_summary")),
            return_period_100yr=_as_str(d.get("return_period_100yr")),
            return_period_250yr=_as_str(d.get("return_period_250yr")),
        )


@dataclass
class ClimateIntelligence:
    climate_risk_score: float | int | None = None
    current_conditions: str = ""
    active_warnings: list[str] = field(default_factory=list)
    emerging_threats: list[str] = field(default_factory=list)
    seasonal_outlook: str = ""

    @classmethod
    def from_dict(cls, d: Any) -> ClimateIntelligence:
        d = _as_dict(d)
        return cls(
            climate_risk_score=_as_number(d.get("climate_risk_score")),
            current_conditions=_as_str(d.get("current_conditions")),
            active_warnings=_str_list(d.get("active_warnings")),
            emerging_threats=_str_list(d.get("emerging_threats")),
            seasonal_outlook=_as_str(d.get("seasonal_outlook")),
        )


@dataclass
class ThresholdBreach:
    """A metric that exceeded its limit for a zone."""

    metric: str = ""
    current_value: float | int | None = None
    threshold: float | int | None = None
    severity: str = ""
    zone: str = ""

    @classmethod
    def from_dict(cls, d: Any) -> ThresholdBreach:
        d = _as_dict(d)
        return cls(
            metric=_as_str(d.get("metric")),
            current_value=_as_number(d.get("current_value")),
            threshold=_as_number(d.get("threshold")),
            severity=_as_str(d.get("severity")),
            zone=_as_str(d.get("zone")),
        )


@dataclass
class AnalysisResult:
    """Output of the concentration-analysis workflow.

    Nested sections are ``None`` when the service omitted them.
    """

    geography: str = ""
    overall_risk_rating: float | int | None = None  # nominal 0-10
    executive_summary: str = ""
    exposure_summary: ExposureSummary | None = None
    catastrophe_context: CatastropheContext | None = None
    climate_intelligence: ClimateIntelligence | None = None
    threshold_breaches: list[ThresholdBreach] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Any) -> AnalysisResult:
        d = _as_dict(d)
        return cls(
            geography=_as_str(d.get("geography")),
            overall_risk_rating=_as_number(d.get("overall_risk_rating")),
            executive_summary=_as_str(d.get("executive_summary")),
            exposure_summary=(
                ExposureSummary.from_dict(d["exposure_summary"])
                if isinstance(d.get("exposure_summary"), dict)
                else None
            ),
            catastrophe_context=(
                CatastropheContext.from_dict(d["catastrophe_context"])
                if isinstance(d.get("catastrophe_context"), dict)
                else None
            ),
            climate_intelligence=(
                ClimateIntelligence.from_dict(d["climate_intelligence"])
                if isinstance(d.get("climate_intelligence"), dict)
                else None
            ),
            threshold_breaches=[ThresholdBreach.from_dict(b) for b in _as_list(d.get("threshold_breaches"))],
            recommendations=_str_list(d.get("recommendations")),
        )

    def to_dict(self) -> dict:
        return asdict(self)


# --------------------------------------------------------------------------- #
# Alert & remediation payload                                                 #
# --------------------------------------------------------------------------- #


@dataclass
class RemedialAction:
    action_type: str = ""
    description: str = ""
    timeline: str = ""
    expected_impact: str = ""

    @classmethod
    def from_dict(cls, d: Any) -> RemedialAction:
        d = _as_dict(d)
        return cls(
            action_type=_as_str(d.get("action_type")),
            description=_as_str(d.get("description")),
            timeline=_as_str(d.get("timeline")),
            expected_impact=_as_str(d.get("expected_impact")),
        )


@dataclass
class AlertItem:
    alert_id: str = ""
    severity: str = ""
    zone: str = ""
    peril_type: str = ""
    exposure_value: str = ""
    breach_description: str = ""
    remedial_actions: list[RemedialAction] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Any) -> AlertItem:
        d = _as_dict(d)
        return cls(
            alert_id=_as_str(d.get("alert_id")),
            severity=_as_str(d.get("severity")),
            zone=_as_str(d.get("zone")),
            peril_type=_as_str(d.get("peril_type")),
            exposure_value=_as_str(d.get("exposure_value")),
            breach_description=_as_str(d.get("breach_description")),
            remedial_actions=[RemedialAction.from_dict(a) for a in _as_list(d.get("remedial_actions"))],
        )


@dataclass
class AlertSummary:
    total_alerts: int = 0
    critical_count: int = 0
    high_count: int = 0
    medium_count: int = 0

    @classmethod
    def from_dict(cls, d: Any) -> AlertSummary:
        d = _as_dict(d)
        return cls(
            total_alerts=_as_int(d.get("total_alerts")),
            critical_count=_as_int(d.get("critical_count")),
            high_count=_as_int(d.get("high_count")),
            medium_count=_as_int(d.get("medium_count")),
        )


@dataclass
class AlertResult:
    """Output of the alert & remediation workflow."""

    analysis_geography: str = ""
    alert_summary: AlertSummary = field(default_factory=AlertSummary)
    alerts: list[AlertItem] = field(default_factory=list)
    implementation_timeline: str = ""
    overall_risk_reduction: str = ""

    @classmethod
    def from_dict(cls, d: Any) -> AlertResult:
        d = _as_dict(d)
        return cls(
            analysis_geography=_as_str(d.get("analysis_geography")),
            alert_summary=AlertSummary.from_dict(d.get("alert_summary")),
            alerts=[AlertItem.from_dict(a) for a in _as_list(d.get("alerts"))],
            implementation_timeline=_as_str(d.get("implementation_timeline")),
            overall_risk_reduction=_as_str(d.get("overall_risk_reduction")),
        )

    def to_dict(self) -> dict:
        return asdict(self)


# --------------------------------------------------------------------------- #
# History                                                                     #
# --------------------------------------------------------------------------- #


@dataclass
class HistoryEntry:
    """One completed concentration analysis, optionally enriched with alerts.

    Created by AnalysisOrchestrator on success; the alert workflow later
    attaches ``alert_result`` to matching Pending entries.
    """

    id: str
    geography: str
    date: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())  # ISO-8601 UTC
    alert_count: int = 0
    highest_severity: str = "None"  # one of the ranked labels, or "None"
    status: str = PENDING  # "Pending" | "Actioned" | "Dismissed"
    analysis_result: AnalysisResult | None = None
    alert_result: AlertResult | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date,
            "geography": self.geography,
            "alert_count": self.alert_count,
            "highest_severity": self.highest_severity,
            "status": self.status,
            "analysis_result": self.analysis_result.to_dict() if self.analysis_result else None,
            "alert_result": self.alert_result.to_dict() if self.alert_result else None,
        }

    @classmethod
    def from_dict(cls, d: dict) -> HistoryEntry:
        status = d.get("status")
        return cls(
            id=_as_str(d.get("id")),
            date=_as_str(d.get("date")),
            geography=_as_str(d.get("geography")),
            alert_count=_as_int(d.get("alert_count")),
            highest_severity=_as_str(d.get("highest_severity"), "None") or "None",
            status=status if status in HISTORY_STATUSES else PENDING,
            analysis_result=(
                AnalysisResult.from_dict(d["analysis_result"]) if isinstance(d.get("analysis_result"), dict) else None
            ),
            alert_result=AlertResult.from_dict(d["alert_result"]) if isinstance(d.get("alert_result"), dict) else None,
        )


# --------------------------------------------------------------------------- #
# Service reply                                                               #
# --------------------------------------------------------------------------- #


@dataclass
class AgentResponse:
    """Reply from the external analysis service.

    ``result`` is the raw payload; orchestrators parse it into
    AnalysisResult or AlertResult.
    """

    success: bool
    result: Any = None
    message: str | None = None
    error: str | None = None

    @classmethod
    def from_dict(cls, d: Any) -> AgentResponse:
        """Build from the wire shape ``{success, response: {result, message}, error}``."""
        d = _as_dict(d)
        response = _as_dict(d.get("response"))
        return cls(
            success=bool(d.get("success")),
            result=response.get("result"),
            message=response.get("message") or None,
            error=d.get("error") or None,
        )
