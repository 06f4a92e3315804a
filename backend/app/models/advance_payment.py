"""
Advance payment database models.

AdvancePayment rows are credits a donor pre-paid. AdvancePaymentUsage rows
record credit applied to an entry. A donor's balance is always
Σ active AdvancePayment.amount − Σ AdvancePaymentUsage.amount.
"""

from sqlalchemy import Column, Integer, String, Date, DateTime, Enum, ForeignKey
from backend.app.db.session import Base, utcnow
from backend.app.models.ledger_enums import PaymentMode, RecordStatus


class AdvancePayment(Base):
    """Advance credit deposited by a donor."""
    __tablename__ = "advance_payments"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    user_name = Column(String(255), nullable=False)

    date = Column(Date, nullable=False)
    amount = Column(Integer, nullable=False)
    payment_mode = Column(Enum(PaymentMode), nullable=False)
    attachment_url = Column(String(500), nullable=True)
    receipt_no = Column(String(50), unique=True, nullable=False)  # AP-YYYY-NNNNN
    status = Column(Enum(RecordStatus), default=RecordStatus.ACTIVE, nullable=False)

    created_by = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<AdvancePayment(id={self.id}, user_id={self.user_id}, amount={self.amount}, receipt='{self.receipt_no}')>"


class AdvancePaymentUsage(Base):
    """
    Advance credit applied to an entry.

    Append-only. Reversing an advance-funded payment inserts a row with a
    negative amount; existing rows are never updated or deleted.
    """
    __tablename__ = "advance_payment_usage"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    entry_id = Column(Integer, ForeignKey("entries.id"), nullable=False, index=True)

    amount = Column(Integer, nullable=False)
    date = Column(Date, nullable=False)
    receipt_no = Column(String(50), nullable=True)  # Receipt of the entry payment it funded

    created_by = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self):
        return f"<AdvancePaymentUsage(id={self.id}, user_id={self.user_id}, entry_id={self.entry_id}, amount={self.amount})>"
