"""
Transaction Log Database Model.

Append-only audit trail of every state-changing ledger operation.
"""

from sqlalchemy import Column, Integer, String, Date, DateTime, Enum, JSON, Text
from backend.app.db.session import Base, utcnow
from backend.app.models.ledger_enums import TransactionType, ReceiptCategory


class TransactionLog(Base):
    """
    Transaction log model.

    NO updates or deletions allowed. `entry_id` points into the table named
    by `entry_category` (entries, advance_payments or
    previous_outstanding_records).
    """
    __tablename__ = "transaction_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # What the row is about
    entry_id = Column(Integer, nullable=True, index=True)
    entry_category = Column(Enum(ReceiptCategory), nullable=False, default=ReceiptCategory.BOLI)

    # Who performed the operation
    user_id = Column(Integer, nullable=True, index=True)
    username = Column(String(100), nullable=True)

    transaction_type = Column(Enum(TransactionType), nullable=False, index=True)
    amount = Column(Integer, nullable=False, default=0)
    description = Column(Text, nullable=False)

    # Free-form context (before/after snapshots, status transitions)
    details = Column(JSON, nullable=True)

    # Business date of the operation and the wall-clock write time
    date = Column(Date, nullable=False)
    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<TransactionLog(id={self.id}, type='{self.transaction_type.value}', entry={self.entry_id}, amount={self.amount})>"
