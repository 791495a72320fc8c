"""
Secondary loan trading models read by the trading priority engines.

``Trade`` is the inbox-level summary of a secondary trade. ``TradeDetail``
adds consent tracking used on the trade detail page. ``Settlement`` is one
scheduled cash settlement.

Date fields are kept as raw strings: deadline factors parse them leniently,
so a malformed date degrades to "no deadline" instead of rejecting the record.

All models are frozen — engines score items, they never modify them.
"""

from __future__ import annotations

from typing import Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field

TradeStatus = Literal[
    "draft",
    "agreed",
    "in_due_diligence",
    "documentation",
    "pending_consent",
    "pending_settlement",
    "settled",
    "cancelled",
    "failed",
]
VALID_TRADE_STATUSES: frozenset[str] = frozenset(get_args(TradeStatus))


class Trade(BaseModel):
    """Inbox summary of a secondary loan trade.

    Attributes:
        id: Trade identifier.
        trade_reference: Human reference, e.g. ``"TR-2024-001"``.
        facility_name: Facility being traded.
        borrower_name: Borrower on the facility.
        seller_name: Selling institution.
        buyer_name: Buying institution.
        is_buyer: ``True`` when our side is the buyer.
        status: Lifecycle state.
        trade_amount: Par amount traded.
        trade_price: Price as a percentage of par.
        trade_date: ISO trade date.
        settlement_date: ISO settlement date, or ``None`` if not yet set.
        dd_progress: Due-diligence checklist completion, 0–100.
        flagged_items: DD checklist items flagged for review.
        open_questions: Unanswered counterparty questions.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    trade_reference: str = ""
    facility_name: str = ""
    borrower_name: str = ""
    seller_name: str = ""
    buyer_name: str = ""
    is_buyer: bool = False
    status: TradeStatus = "draft"
    trade_amount: float = Field(default=0.0, ge=0)
    trade_price: Optional[float] = None
    trade_date: Optional[str] = None
    settlement_date: Optional[str] = None
    dd_progress: float = Field(default=0.0, ge=0, le=100)
    flagged_items: int = Field(default=0, ge=0)
    open_questions: int = Field(default=0, ge=0)


class TradeDetail(Trade):
    """Trade plus the consent state shown on the trade detail page."""

    consent_required: bool = False
    consent_received: bool = False


class Settlement(BaseModel):
    """One scheduled settlement of a trade.

    Attributes:
        trade_id: FK to ``Trade.id``.
        trade_reference: Human reference of the parent trade.
        settlement_date: ISO settlement date, or ``None``.
        amount: Cash amount to settle.
        counterparty: Institution on the other side.
        is_buyer: ``True`` when we pay, ``False`` when we receive.
    """

    model_config = ConfigDict(frozen=True)

    trade_id: str
    trade_reference: str = ""
    settlement_date: Optional[str] = None
    amount: float = Field(default=0.0, ge=0)
    counterparty: str = ""
    is_buyer: bool = False
