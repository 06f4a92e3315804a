"""
Ledger subjects: the rows payments are recorded against.

Entries and previous outstanding records share these helpers for locking,
payment lookup and appending a payment. All of them expect to run inside
`atomic()`.
"""

from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import NotFoundError, ValidationError
from backend.app.db.session import utcnow
from backend.app.domain.ledger import receipt_allocator
from backend.app.domain.ledger.rules import reconcile
from backend.app.models.entry import Entry
from backend.app.models.previous_outstanding import PreviousOutstandingRecord
from backend.app.models.user import User
from backend.app.models.ledger_enums import (
    PaymentMode, ReceiptCategory, RecordStatus, TransactionType
)
from backend.app.services import transaction_log

SUBJECT_MODELS = {
    ReceiptCategory.BOLI: Entry,
    ReceiptCategory.PREVIOUS_OUTSTANDING: PreviousOutstandingRecord,
}

SUBJECT_LABELS = {
    ReceiptCategory.BOLI: "Entry",
    ReceiptCategory.PREVIOUS_OUTSTANDING: "Previous outstanding record",
}


def subject_model(kind: ReceiptCategory):
    if kind not in SUBJECT_MODELS:
        raise ValidationError(f"Payments cannot be recorded against category '{kind.value}'")
    return SUBJECT_MODELS[kind]


async def lock_subject(db: AsyncSession, kind: ReceiptCategory, subject_id: int):
    """Load an Entry / PreviousOutstandingRecord with a row lock and fresh payments."""
    model = subject_model(kind)
    result = await db.execute(
        select(model)
        .where(model.id == subject_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    subject = result.scalar_one_or_none()
    if subject is None:
        raise NotFoundError(SUBJECT_LABELS[kind], subject_id)
    return subject


async def lock_user(db: AsyncSession, user_id: int) -> User:
    """Lock a donor row. Serializes everything that spends the donor's advance credit."""
    result = await db.execute(
        select(User)
        .where(User.id == user_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise NotFoundError("User", user_id)
    return user


def ensure_active(subject) -> None:
    if not subject.is_active:
        raise ValidationError(
            f"{SUBJECT_LABELS[subject.category]} {subject.id} is deleted",
            details={"id": subject.id}
        )


def validate_amount(amount: int) -> None:
    if amount is None or amount <= 0:
        raise ValidationError("Amount must be greater than zero", details={"amount": amount})


def get_active_payment(subject, payment_index: int):
    """
    Raises:
        NotFoundError: index out of range or payment already deleted
    """
    if payment_index < 0 or payment_index >= len(subject.payments):
        raise NotFoundError("Payment", payment_index)

    payment = subject.payments[payment_index]
    if payment.status == RecordStatus.DELETED:
        raise NotFoundError(
            "Payment",
            payment_index,
            message=f"Payment at index {payment_index} is already deleted"
        )
    return payment


async def log_status_change(db: AsyncSession, subject, previous_status, actor: dict) -> None:
    """Extra update_payment row when a payment mutation moved the settlement status."""
    if subject.status == previous_status:
        return
    await transaction_log.append(
        db,
        TransactionType.UPDATE_PAYMENT,
        f"Payment status changed from {previous_status.value} to {subject.status.value}",
        actor,
        entry_id=subject.id,
        entry_category=subject.category,
        details={"from": previous_status.value, "to": subject.status.value},
    )


async def append_payment(
    db: AsyncSession,
    subject,
    amount: int,
    payment_date: date,
    mode: PaymentMode,
    file_url,
    actor: dict,
):
    """
    Allocate a receipt, append an active payment, reconcile and log.

    Callers validate the amount against the subject first.
    """
    receipt_no = await receipt_allocator.allocate(db, subject.category, payment_date.year)
    previous_status = subject.status

    payment = subject.new_payment(
        date=payment_date,
        amount=amount,
        mode=mode,
        file_url=file_url,
        receipt_no=receipt_no,
        updated_by=actor.get("sub"),
        status=RecordStatus.ACTIVE,
    )
    subject.payments.append(payment)
    subject.updated_at = utcnow()
    reconcile(subject)
    await db.flush()

    if mode == PaymentMode.ADVANCE_PAYMENT:
        description = f"Advance credit of {amount} applied, receipt {receipt_no}"
    else:
        description = f"Payment of {amount} recorded ({mode.value}), receipt {receipt_no}"

    await transaction_log.append(
        db,
        TransactionType.DEBIT,
        description,
        actor,
        entry_id=subject.id,
        entry_category=subject.category,
        amount=amount,
        details={
            "payment_index": payment.position,
            "receipt_no": receipt_no,
            "mode": mode.value,
            "received_amount": subject.received_amount,
            "pending_amount": subject.pending_amount,
        },
        on_date=payment_date,
    )
    await log_status_change(db, subject, previous_status, actor)

    return payment
