"""
Expense entry database model.

Money paid out of the fund. Only consumed by the dashboard's
cash-in-bank figure.
"""

from sqlalchemy import Column, Integer, String, Date, DateTime, Enum, Text
from backend.app.db.session import Base, utcnow
from backend.app.models.ledger_enums import PaymentMode


class ExpenseEntry(Base):
    __tablename__ = "expense_entries"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    firm_name = Column(String(255), nullable=False)
    bill_no = Column(String(100), nullable=True)
    bill_date = Column(Date, nullable=True)
    description = Column(Text, nullable=False)
    amount = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    reason = Column(Text, nullable=True)
    expense_date = Column(Date, nullable=False, index=True)
    payment_mode = Column(Enum(PaymentMode), nullable=False)
    attachment_url = Column(String(500), nullable=True)
    approved_by = Column(String(100), nullable=True)
    paid_by = Column(String(100), nullable=True)

    created_by = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<ExpenseEntry(id={self.id}, firm='{self.firm_name}', amount={self.amount})>"
