"""
Payment Ledger (Domain Logic).

Owns the lifecycle of payment records attached to an Entry or a
PreviousOutstandingRecord: record, soft-delete and edit. Each operation is
one transaction that locks the parent row, validates against fresh state,
writes the payment change, re-derives received/pending/status, writes the
transaction log rows and commits. Notification happens only after commit.
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import LedgerIntegrityError, ValidationError
from backend.app.core.reliability import retry_on_conflict
from backend.app.db.session import utcnow
from backend.app.db.transaction import atomic
from backend.app.domain.ledger.advance_balance import AdvanceBalanceManager
from backend.app.domain.ledger.rules import reconcile, requires_proof
from backend.app.domain.ledger.subjects import (
    lock_subject, ensure_active, validate_amount, get_active_payment,
    append_payment, log_status_change
)
from backend.app.models.advance_payment import AdvancePaymentUsage
from backend.app.models.ledger_enums import (
    PaymentMode, ReceiptCategory, RecordStatus, TransactionType
)
from backend.app.services import transaction_log
from backend.app.services.notification_service import NotificationService

logger = logging.getLogger("ledger.payments")


class PaymentLedger:

    @staticmethod
    async def record_payment(
        db: AsyncSession,
        kind: ReceiptCategory,
        subject_id: int,
        amount: int,
        payment_date: date,
        mode: PaymentMode,
        actor: dict,
        file_url: Optional[str] = None,
    ):
        """
        Record a payment against an entry or outstanding record.

        Preconditions:
        - subject is active
        - 0 < amount <= pending_amount
        - proof (file_url) present for upi / cheque / netbanking

        An advance_payment-mode payment on an entry is funded from the
        owner's advance credit and goes through AdvanceBalanceManager.

        Returns:
            The updated subject
        """
        if mode == PaymentMode.ADVANCE_PAYMENT:
            if kind != ReceiptCategory.BOLI:
                raise ValidationError("Advance credit can only be applied to boli entries")
            return await AdvanceBalanceManager.apply_advance(
                db, subject_id, actor, amount=amount, payment_date=payment_date
            )

        validate_amount(amount)
        if requires_proof(mode) and not file_url:
            raise ValidationError(f"Payment proof is required for {mode.value} payments", details={"mode": mode.value})

        subject, payment = await PaymentLedger._record(db, kind, subject_id, amount, payment_date, mode, actor, file_url)

        logger.info(
            "Payment recorded",
            extra={"subject_id": subject_id, "category": kind.value, "receipt_no": payment.receipt_no, "amount": amount}
        )
        await NotificationService.dispatch(NotificationService.notify_payment_recorded, subject, payment)
        return subject

    @staticmethod
    @retry_on_conflict
    async def _record(db, kind, subject_id, amount, payment_date, mode, actor, file_url):
        async with atomic(db):
            subject = await lock_subject(db, kind, subject_id)
            ensure_active(subject)
            if amount > subject.pending_amount:
                raise ValidationError(
                    f"Amount {amount} exceeds pending amount {subject.pending_amount}",
                    details={"amount": amount, "pending_amount": subject.pending_amount}
                )
            payment = await append_payment(db, subject, amount, payment_date, mode, file_url, actor)
        return subject, payment

    @staticmethod
    @retry_on_conflict
    async def delete_payment(
        db: AsyncSession,
        kind: ReceiptCategory,
        subject_id: int,
        payment_index: int,
        actor: dict,
    ):
        """
        Soft-delete a payment. Its receipt number moves to
        deleted_receipt_numbers and is never issued again.

        Deleting an advance-funded payment returns the credit to the donor
        through a negative usage row.

        Raises:
            NotFoundError: index out of range or payment already deleted
        """
        async with atomic(db):
            subject = await lock_subject(db, kind, subject_id)
            ensure_active(subject)
            payment = get_active_payment(subject, payment_index)
            previous_status = subject.status

            payment.status = RecordStatus.DELETED
            payment.updated_by = actor.get("sub")
            payment.updated_at = utcnow()
            subject.updated_at = utcnow()
            reconcile(subject)

            if payment.mode == PaymentMode.ADVANCE_PAYMENT:
                credited_user_id = await db.scalar(
                    select(AdvancePaymentUsage.user_id).where(
                        AdvancePaymentUsage.receipt_no == payment.receipt_no,
                        AdvancePaymentUsage.amount > 0
                    )
                )
                if credited_user_id is None:
                    raise LedgerIntegrityError(
                        f"No advance usage found for receipt {payment.receipt_no}",
                        details={"receipt_no": payment.receipt_no, "entry_id": subject.id}
                    )
                db.add(AdvancePaymentUsage(
                    user_id=credited_user_id,
                    entry_id=subject.id,
                    amount=-payment.amount,
                    date=date.today(),
                    receipt_no=payment.receipt_no,
                    created_by=actor.get("sub"),
                ))
            await db.flush()

            await transaction_log.append(
                db,
                TransactionType.CREDIT,
                f"Payment of {payment.amount} deleted, receipt {payment.receipt_no} voided",
                actor,
                entry_id=subject.id,
                entry_category=subject.category,
                amount=payment.amount,
                details={
                    "payment_index": payment_index,
                    "receipt_no": payment.receipt_no,
                    "payment": payment.snapshot(),
                    "received_amount": subject.received_amount,
                    "pending_amount": subject.pending_amount,
                },
            )
            await log_status_change(db, subject, previous_status, actor)

        logger.info(
            "Payment deleted",
            extra={"subject_id": subject_id, "category": kind.value, "receipt_no": payment.receipt_no}
        )
        return subject

    @staticmethod
    @retry_on_conflict
    async def edit_payment(
        db: AsyncSession,
        kind: ReceiptCategory,
        subject_id: int,
        payment_index: int,
        actor: dict,
        amount: Optional[int] = None,
        mode: Optional[PaymentMode] = None,
        payment_date: Optional[date] = None,
        file_url: Optional[str] = None,
    ):
        """
        Correct an active payment in place. The receipt number is kept.

        Rules:
        - a new amount must be > 0 and keep Σ active <= total
        - switching from a mode without proof to upi/cheque/netbanking needs a new file_url
        - a upi/cheque/netbanking payment never ends up without a file_url
        - advance-funded payments keep their amount and mode, and no payment
          can be switched to or from advance_payment

        Who may change which field is decided by the caller.
        """
        async with atomic(db):
            subject = await lock_subject(db, kind, subject_id)
            ensure_active(subject)
            payment = get_active_payment(subject, payment_index)
            before = payment.snapshot()
            previous_status = subject.status
            changes = []

            amount_changed = amount is not None and amount != payment.amount
            mode_changed = mode is not None and mode != payment.mode

            if payment.mode == PaymentMode.ADVANCE_PAYMENT and (amount_changed or mode_changed):
                raise ValidationError("Advance-funded payments cannot change amount or mode, delete and re-apply instead")
            if mode_changed and mode == PaymentMode.ADVANCE_PAYMENT:
                raise ValidationError("Advance credit is applied through the advance payment operation")

            if amount_changed:
                validate_amount(amount)
                new_received = subject.received_amount - payment.amount + amount
                if new_received > subject.total_amount:
                    raise ValidationError(
                        f"Amount {amount} would bring received to {new_received}, above total {subject.total_amount}",
                        details={"amount": amount, "total_amount": subject.total_amount}
                    )
                payment.amount = amount
                changes.append("amount")

            if mode_changed:
                if requires_proof(mode) and not requires_proof(payment.mode) and not file_url:
                    raise ValidationError(
                        f"Payment proof is required when changing mode to {mode.value}",
                        details={"mode": mode.value}
                    )
                payment.mode = mode
                changes.append("mode")

            if payment_date is not None and payment_date != payment.date:
                payment.date = payment_date
                changes.append("date")

            if file_url is not None and file_url != payment.file_url:
                payment.file_url = file_url
                changes.append("file_url")

            if requires_proof(payment.mode) and not payment.file_url:
                raise ValidationError(
                    f"Payment proof is required for {payment.mode.value} payments",
                    details={"mode": payment.mode.value}
                )

            if not changes:
                raise ValidationError("No changes to apply")

            payment.updated_by = actor.get("sub")
            payment.updated_at = utcnow()
            subject.updated_at = utcnow()
            reconcile(subject)
            await db.flush()

            await transaction_log.append(
                db,
                TransactionType.UPDATE_PAYMENT,
                f"Payment {payment.receipt_no} updated: {', '.join(changes)}",
                actor,
                entry_id=subject.id,
                entry_category=subject.category,
                amount=payment.amount,
                details={
                    "payment_index": payment_index,
                    "receipt_no": payment.receipt_no,
                    "before": before,
                    "after": payment.snapshot(),
                    "changes": changes,
                },
            )
            await log_status_change(db, subject, previous_status, actor)

        logger.info(
            "Payment updated",
            extra={"subject_id": subject_id, "category": kind.value, "receipt_no": payment.receipt_no, "changes": changes}
        )
        return subject
