"""
Facility compliance models read by the compliance priority engines.

``UpcomingItem`` is one entry on the compliance calendar. ``Covenant`` is a
financial covenant with its latest test and optional waiver. ``Obligation``
is a recurring reporting obligation with its next due event.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict

ItemType = Literal[
    "compliance_event",
    "covenant_test",
    "notification_due",
    "waiver_expiration",
]

ItemStatus = Literal["upcoming", "pending", "overdue", "completed"]

CovenantStatus = Literal["active", "waived", "breached"]

ObligationFrequency = Literal["monthly", "quarterly", "annually"]


class UpcomingItem(BaseModel):
    """One dated entry on the compliance calendar."""

    model_config = ConfigDict(frozen=True)

    id: str
    date: Optional[str] = None
    type: ItemType
    title: str = ""
    facility_name: str = ""
    borrower_name: str = ""
    status: ItemStatus = "upcoming"


class CovenantTestResult(BaseModel):
    """Outcome of the most recent covenant test.

    ``headroom_percentage`` is the cushion to the threshold: positive means
    room before breach, negative means already through it.
    """

    model_config = ConfigDict(frozen=True)

    test_date: Optional[str] = None
    calculated_ratio: Optional[float] = None
    test_result: Literal["pass", "fail"] = "pass"
    headroom_percentage: Optional[float] = None


class CovenantWaiver(BaseModel):
    model_config = ConfigDict(frozen=True)

    expiration_date: Optional[str] = None


class Covenant(BaseModel):
    """Financial covenant on a facility."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    covenant_type: str = ""
    facility_id: str = ""
    facility_name: str = ""
    borrower_name: str = ""
    status: CovenantStatus = "active"
    next_test_date: Optional[str] = None
    latest_test: Optional[CovenantTestResult] = None
    waiver: Optional[CovenantWaiver] = None


class ObligationEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    deadline_date: Optional[str] = None
    status: ItemStatus = "upcoming"


class Obligation(BaseModel):
    """Recurring reporting obligation and its next due event."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    obligation_type: str = ""
    frequency: ObligationFrequency = "quarterly"
    deadline_days_after_period: int = 0
    is_active: bool = True
    upcoming_event: ObligationEvent = ObligationEvent()
