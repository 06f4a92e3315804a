"""
Previous outstanding record database model.

A legacy balance migrated from the paper ledger. Reconciled with the same
rules as an Entry, `outstanding_amount` playing the role of the total.
"""

from sqlalchemy import Column, Integer, String, DateTime, Enum, ForeignKey, Text
from sqlalchemy.orm import relationship, synonym
from backend.app.db.session import Base, utcnow
from backend.app.models.ledger_enums import PaymentStatus, RecordStatus, ReceiptCategory
from backend.app.models.payment_record import OutstandingPayment


class PreviousOutstandingRecord(Base):
    """Previous outstanding record model."""
    __tablename__ = "previous_outstanding_records"

    category = ReceiptCategory.PREVIOUS_OUTSTANDING

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # PO-YYYY-NNN display serial and global record number
    serial_number = Column(String(20), unique=True, nullable=False)
    record_number = Column(Integer, unique=True, nullable=False)

    # Owner
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    user_name = Column(String(255), nullable=False)

    # Money (integer rupees)
    outstanding_amount = Column(Integer, nullable=False)
    received_amount = Column(Integer, nullable=False, default=0)
    pending_amount = Column(Integer, nullable=False)
    status = Column(Enum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False)
    record_status = Column(Enum(RecordStatus), default=RecordStatus.ACTIVE, nullable=False)

    description = Column(Text, nullable=True)
    attachment_url = Column(String(500), nullable=True)
    attachment_name = Column(String(255), nullable=True)

    receipt_numbers = Column(Text, nullable=False, default="")
    deleted_receipt_numbers = Column(Text, nullable=False, default="")

    created_by = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    payments = relationship(
        OutstandingPayment,
        order_by=OutstandingPayment.position,
        lazy="selectin",
        cascade="save-update, merge",
    )

    # Shared name used by the reconciliation rules
    total_amount = synonym("outstanding_amount")

    @property
    def is_active(self) -> bool:
        return self.record_status == RecordStatus.ACTIVE

    def new_payment(self, **fields) -> OutstandingPayment:
        return OutstandingPayment(record_id=self.id, position=len(self.payments), **fields)

    def __repr__(self):
        return f"<PreviousOutstandingRecord(id={self.id}, serial='{self.serial_number}', outstanding={self.outstanding_amount})>"
