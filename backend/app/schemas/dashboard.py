"""
Dashboard Schemas.
"""

import datetime
from typing import List, Optional
from pydantic import Field
from backend.app.models.ledger_enums import PaymentMode, PaymentStatus, RecordStatus
from backend.app.schemas.common import CamelModel


class DashboardSummary(CamelModel):
    """Totals over active entries whose auction date is in range."""
    total_amount: int
    received_amount: int
    pending_amount: int
    pending_entries: int
    partial_entries: int
    completed_entries: int
    total_advance_payments: int


class OverallSummary(CamelModel):
    corpus_value: int
    total_received: int
    total_advance_payments: int
    total_expenses: int
    total_received_outstanding: int
    cash_in_bank: int


class RecentEntry(CamelModel):
    id: int
    serial_number: int
    user_name: str
    description: str
    auction_date: datetime.date
    total_amount: int
    pending_amount: int
    status: PaymentStatus


class DashboardResponse(CamelModel):
    summary: DashboardSummary
    overall_summary: OverallSummary
    recent_activity: List[RecentEntry]


class CorpusSettingsUpdate(CamelModel):
    corpus_value: int = Field(..., ge=0)
    base_date: datetime.date


class CorpusSettingsResponse(CamelModel):
    corpus_value: int
    base_date: datetime.date
    updated_by: str
    updated_at: datetime.datetime


class BoliPaymentListItem(CamelModel):
    """One payment row with the entry it belongs to."""
    id: int
    entry_id: int
    serial_number: int
    user_id: int
    user_name: str
    entry_description: str
    payment_index: int
    date: datetime.date
    amount: int
    mode: PaymentMode
    file_url: Optional[str]
    receipt_no: str
    updated_by: Optional[str]
    status: RecordStatus
    created_at: datetime.datetime


class OutstandingPaymentListItem(CamelModel):
    id: int
    record_id: int
    serial_number: str
    user_id: int
    user_name: str
    outstanding_amount: int
    pending_amount: int
    record_payment_status: PaymentStatus
    payment_index: int
    date: datetime.date
    amount: int
    mode: PaymentMode
    file_url: Optional[str]
    receipt_no: str
    updated_by: Optional[str]
    status: RecordStatus
    created_at: datetime.datetime
