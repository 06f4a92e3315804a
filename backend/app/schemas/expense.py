"""
Expense Schemas.
"""

import datetime
from typing import Optional
from pydantic import Field
from backend.app.models.ledger_enums import PaymentMode
from backend.app.schemas.common import CamelModel


class ExpenseCreate(CamelModel):
    firm_name: str = Field(..., min_length=1, max_length=255)
    bill_no: Optional[str] = Field(None, max_length=100)
    bill_date: Optional[datetime.date] = None
    description: str = Field(..., min_length=1)
    amount: int = Field(..., gt=0)
    quantity: int = Field(1, gt=0)
    reason: Optional[str] = None
    expense_date: datetime.date
    payment_mode: PaymentMode
    attachment_url: Optional[str] = Field(None, max_length=500)
    approved_by: Optional[str] = Field(None, max_length=100)
    paid_by: Optional[str] = Field(None, max_length=100)


class ExpenseUpdate(CamelModel):
    """Only supplied fields change."""
    firm_name: Optional[str] = Field(None, min_length=1, max_length=255)
    bill_no: Optional[str] = Field(None, max_length=100)
    bill_date: Optional[datetime.date] = None
    description: Optional[str] = Field(None, min_length=1)
    amount: Optional[int] = Field(None, gt=0)
    quantity: Optional[int] = Field(None, gt=0)
    reason: Optional[str] = None
    expense_date: Optional[datetime.date] = None
    payment_mode: Optional[PaymentMode] = None
    attachment_url: Optional[str] = Field(None, max_length=500)
    approved_by: Optional[str] = Field(None, max_length=100)
    paid_by: Optional[str] = Field(None, max_length=100)


class ExpenseResponse(CamelModel):
    id: int
    firm_name: str
    bill_no: Optional[str]
    bill_date: Optional[datetime.date]
    description: str
    amount: int
    quantity: int
    reason: Optional[str]
    expense_date: datetime.date
    payment_mode: PaymentMode
    attachment_url: Optional[str]
    approved_by: Optional[str]
    paid_by: Optional[str]
    created_by: str
    created_at: datetime.datetime
