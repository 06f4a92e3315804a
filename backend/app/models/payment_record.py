"""
Payment record database models.

A payment belongs to exactly one parent (an Entry or a
PreviousOutstandingRecord). Both parents get their own child table with the
same columns. Rows are never removed; deletion flips `status`.
"""

from sqlalchemy import Column, Integer, String, Date, DateTime, Enum, ForeignKey, UniqueConstraint
from backend.app.db.session import Base, utcnow
from backend.app.models.ledger_enums import PaymentMode, RecordStatus


class PaymentRecordMixin:
    """Columns shared by every payment table."""

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # 0-based insertion order within the parent, exposed as the payment index
    position = Column(Integer, nullable=False)

    date = Column(Date, nullable=False)
    amount = Column(Integer, nullable=False)
    mode = Column(Enum(PaymentMode), nullable=False)
    file_url = Column(String(500), nullable=True)
    receipt_no = Column(String(50), unique=True, nullable=False)
    updated_by = Column(String(100), nullable=True)
    status = Column(Enum(RecordStatus), default=RecordStatus.ACTIVE, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    @property
    def payment_index(self) -> int:
        return self.position

    @property
    def is_active(self) -> bool:
        return self.status == RecordStatus.ACTIVE

    def snapshot(self) -> dict:
        """JSON-safe view used in transaction log details."""
        return {
            "date": self.date.isoformat() if self.date else None,
            "amount": self.amount,
            "mode": self.mode.value,
            "file_url": self.file_url,
            "receipt_no": self.receipt_no,
            "status": self.status.value,
        }


class BoliPayment(PaymentRecordMixin, Base):
    """Payment against an Entry."""
    __tablename__ = "boli_payments"
    __table_args__ = (
        UniqueConstraint("entry_id", "position", name="uq_boli_payment_position"),
    )

    entry_id = Column(Integer, ForeignKey("entries.id"), nullable=False, index=True)

    def __repr__(self):
        return f"<BoliPayment(entry_id={self.entry_id}, index={self.position}, amount={self.amount}, receipt='{self.receipt_no}')>"


class OutstandingPayment(PaymentRecordMixin, Base):
    """Payment against a PreviousOutstandingRecord."""
    __tablename__ = "outstanding_payments"
    __table_args__ = (
        UniqueConstraint("record_id", "position", name="uq_outstanding_payment_position"),
    )

    record_id = Column(Integer, ForeignKey("previous_outstanding_records.id"), nullable=False, index=True)

    def __repr__(self):
        return f"<OutstandingPayment(record_id={self.record_id}, index={self.position}, amount={self.amount}, receipt='{self.receipt_no}')>"
