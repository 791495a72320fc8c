"""
ESG facility models read by the ESG priority engines.

``ESGKPI`` is a sustainability KPI with its yearly targets. ``ESGReport`` is
one periodic ESG report owed to lenders. ``FacilityAtRisk`` summarises a
sustainability-linked facility whose at-risk KPIs could trigger a margin
step-up.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ESGLoanType = Literal[
    "sustainability_linked",
    "green_loan",
    "social_loan",
    "transition_loan",
    "esg_linked_hybrid",
]

TargetStatus = Literal["achieved", "on_track", "at_risk", "off_track", "missed", "pending"]

ReportStatus = Literal["draft", "submitted", "verified", "overdue"]

ReportType = Literal["annual", "semi_annual", "quarterly"]


class ESGTarget(BaseModel):
    model_config = ConfigDict(frozen=True)

    target_year: int
    target_value: float = 0.0
    target_status: TargetStatus = "pending"
    actual_value: Optional[float] = None


class ESGKPI(BaseModel):
    """Sustainability KPI tracked against yearly targets.

    Attributes:
        id: KPI identifier.
        kpi_name: Display name, e.g. ``"Scope 1 emissions"``.
        kpi_category: Category slug, e.g. ``"environmental_emissions"``.
        unit: Measurement unit.
        baseline_value: Value in the baseline year.
        current_value: Latest measured value.
        weight: Share of the margin adjustment this KPI drives, 0–100.
        is_active: Inactive KPIs are kept for history but not scored.
        targets: Yearly targets, earliest first.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    kpi_name: str = ""
    kpi_category: str = ""
    unit: str = ""
    baseline_value: Optional[float] = None
    current_value: Optional[float] = None
    weight: float = Field(default=0.0, ge=0, le=100)
    is_active: bool = True
    targets: tuple[ESGTarget, ...] = ()

    @property
    def current_target(self) -> Optional[ESGTarget]:
        """First target not yet achieved, or ``None`` when all are met."""
        return next((t for t in self.targets if t.target_status != "achieved"), None)


class ESGReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    report_type: ReportType = "quarterly"
    status: ReportStatus = "draft"
    period_end: Optional[str] = None
    submitted_at: Optional[str] = None


class FacilityAtRisk(BaseModel):
    """Facility with KPIs at risk of missing target.

    ``margin_impact_bps`` is the worst-case margin increase if every at-risk
    KPI misses its target.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    facility_name: str = ""
    borrower_name: str = ""
    esg_loan_type: ESGLoanType = "sustainability_linked"
    at_risk_kpis: int = Field(default=0, ge=0)
    next_deadline: Optional[str] = None
    margin_impact_bps: float = Field(default=0.0, ge=0)
