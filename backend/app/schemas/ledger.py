"""
Ledger Schemas.

Entries, previous outstanding records, their payments, advance payments
and transaction logs. Amounts are integer rupees. Amount range checks are
left to the domain layer so they surface as ledger validation errors.
"""

import datetime
from typing import Optional, List, Dict, Any
from pydantic import Field
from backend.app.models.ledger_enums import (
    PaymentMode, PaymentStatus, RecordStatus, TransactionType, ReceiptCategory
)
from backend.app.schemas.common import CamelModel


# Payments

class PaymentCreate(CamelModel):
    """Schema for recording a payment."""
    amount: int
    date: datetime.date
    mode: PaymentMode
    file_url: Optional[str] = Field(None, max_length=500)


class PaymentUpdate(CamelModel):
    """Schema for correcting a payment. Only supplied fields change."""
    amount: Optional[int] = None
    date: Optional[datetime.date] = None
    mode: Optional[PaymentMode] = None
    file_url: Optional[str] = Field(None, min_length=1, max_length=500)


class PaymentResponse(CamelModel):
    payment_index: int
    date: datetime.date
    amount: int
    mode: PaymentMode
    file_url: Optional[str]
    receipt_no: str
    updated_by: Optional[str]
    status: RecordStatus


class AdvanceApply(CamelModel):
    """Apply advance credit. Without an amount, min(balance, pending) is applied."""
    amount: Optional[int] = None
    date: Optional[datetime.date] = None


# Entries

class EntryCreate(CamelModel):
    """Schema for creating a boli entry."""
    user_id: int
    description: str = Field(..., min_length=1)
    amount: int
    quantity: int = 1
    auction_date: datetime.date
    occasion: Optional[str] = Field(None, max_length=255)
    bedi_number: Optional[str] = Field(None, max_length=50)


class EntryUpdate(CamelModel):
    """Descriptive fields and donor only. amount and quantity are fixed at creation."""
    description: Optional[str] = Field(None, min_length=1)
    occasion: Optional[str] = Field(None, max_length=255)
    bedi_number: Optional[str] = Field(None, max_length=50)
    auction_date: Optional[datetime.date] = None
    user_id: Optional[int] = None


class EntryResponse(CamelModel):
    id: int
    user_id: int
    user_name: str
    description: str
    occasion: Optional[str]
    bedi_number: Optional[str]
    serial_number: int
    auction_date: datetime.date
    amount: int
    quantity: int
    total_amount: int
    received_amount: int
    pending_amount: int
    status: PaymentStatus
    entry_status: RecordStatus
    receipt_numbers: str
    deleted_receipt_numbers: str
    created_by: str
    created_at: datetime.datetime
    updated_at: datetime.datetime
    payments: List[PaymentResponse] = []


# Previous outstanding records

class OutstandingCreate(CamelModel):
    user_id: int
    outstanding_amount: int
    description: Optional[str] = None
    attachment_url: Optional[str] = Field(None, max_length=500)
    attachment_name: Optional[str] = Field(None, max_length=255)


class OutstandingUpdate(CamelModel):
    outstanding_amount: Optional[int] = None
    description: Optional[str] = None
    user_id: Optional[int] = None
    attachment_url: Optional[str] = Field(None, max_length=500)
    attachment_name: Optional[str] = Field(None, max_length=255)


class OutstandingResponse(CamelModel):
    id: int
    serial_number: str
    record_number: int
    user_id: int
    user_name: str
    outstanding_amount: int
    received_amount: int
    pending_amount: int
    status: PaymentStatus
    record_status: RecordStatus
    description: Optional[str]
    attachment_url: Optional[str]
    attachment_name: Optional[str]
    receipt_numbers: str
    deleted_receipt_numbers: str
    created_by: str
    created_at: datetime.datetime
    updated_at: datetime.datetime
    payments: List[PaymentResponse] = []


# Advance payments

class AdvancePaymentCreate(CamelModel):
    user_id: int
    amount: int
    date: datetime.date
    payment_mode: PaymentMode
    attachment_url: Optional[str] = Field(None, max_length=500)


class AdvancePaymentResponse(CamelModel):
    id: int
    user_id: int
    user_name: str
    date: datetime.date
    amount: int
    payment_mode: PaymentMode
    attachment_url: Optional[str]
    receipt_no: str
    status: RecordStatus
    created_by: str
    created_at: datetime.datetime


# Transaction logs

class TransactionLogResponse(CamelModel):
    id: int
    entry_id: Optional[int]
    entry_category: ReceiptCategory
    user_id: Optional[int]
    username: Optional[str]
    transaction_type: TransactionType
    amount: int
    description: str
    details: Optional[Dict[str, Any]]
    date: datetime.date
    timestamp: datetime.datetime
