"""
Entry (boli) database model.

A pledged donation amount owed by a donor, tracked until settled.
"""

from sqlalchemy import Column, Integer, String, Date, DateTime, Enum, ForeignKey, Text
from sqlalchemy.orm import relationship
from backend.app.db.session import Base, utcnow
from backend.app.models.ledger_enums import PaymentStatus, RecordStatus, ReceiptCategory
from backend.app.models.payment_record import BoliPayment


class Entry(Base):
    """
    Entry model.

    amount and quantity are fixed at creation. received_amount,
    pending_amount, status and the two receipt-number strings are derived
    from `payments` and rewritten after every payment mutation; nothing
    else may set them.
    """
    __tablename__ = "entries"

    category = ReceiptCategory.BOLI

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Owner
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    user_name = Column(String(255), nullable=False)

    # Pledge details
    description = Column(Text, nullable=False)
    occasion = Column(String(255), nullable=True)
    bedi_number = Column(String(50), nullable=True)
    serial_number = Column(Integer, unique=True, nullable=False)
    auction_date = Column(Date, nullable=False, index=True)

    # Money (integer rupees)
    amount = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    total_amount = Column(Integer, nullable=False)
    received_amount = Column(Integer, nullable=False, default=0)
    pending_amount = Column(Integer, nullable=False)

    # State
    status = Column(Enum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False, index=True)
    entry_status = Column(Enum(RecordStatus), default=RecordStatus.ACTIVE, nullable=False, index=True)

    # Comma-joined receipt numbers of active / deleted payments
    receipt_numbers = Column(Text, nullable=False, default="")
    deleted_receipt_numbers = Column(Text, nullable=False, default="")

    created_by = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    payments = relationship(
        BoliPayment,
        order_by=BoliPayment.position,
        lazy="selectin",
        cascade="save-update, merge",
    )

    @property
    def is_active(self) -> bool:
        return self.entry_status == RecordStatus.ACTIVE

    def new_payment(self, **fields) -> BoliPayment:
        return BoliPayment(entry_id=self.id, position=len(self.payments), **fields)

    def __repr__(self):
        return f"<Entry(id={self.id}, serial={self.serial_number}, total={self.total_amount}, status='{self.status.value}')>"
