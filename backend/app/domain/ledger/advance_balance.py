"""
Advance Balance Manager.

Tracks a donor's unspent advance credit and applies it to pending entries.
The balance is never stored: it is recomputed from advance_payments and
advance_payment_usage on every read. Every operation that can lower the
balance locks the donor row first, so the balance check and the usage
insert cannot interleave with another spend for the same donor.
"""

import logging
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy import select, func, desc
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import ConflictError, NotFoundError, ValidationError
from backend.app.core.reliability import retry_on_conflict
from backend.app.db.transaction import atomic
from backend.app.domain.ledger import receipt_allocator
from backend.app.domain.ledger.rules import requires_proof
from backend.app.domain.ledger.subjects import (
    lock_subject, lock_user, ensure_active, validate_amount, append_payment
)
from backend.app.models.advance_payment import AdvancePayment, AdvancePaymentUsage
from backend.app.models.entry import Entry
from backend.app.models.ledger_enums import (
    PaymentMode, ReceiptCategory, RecordStatus, TransactionType
)
from backend.app.services import transaction_log
from backend.app.services.notification_service import NotificationService

logger = logging.getLogger("ledger.advance")


class AdvanceBalanceManager:

    @staticmethod
    async def get_balance(db: AsyncSession, user_id: int) -> int:
        """Σ active advance payments − Σ usage for the donor."""
        deposited = await db.scalar(
            select(func.coalesce(func.sum(AdvancePayment.amount), 0)).where(
                AdvancePayment.user_id == user_id,
                AdvancePayment.status == RecordStatus.ACTIVE
            )
        )
        used = await db.scalar(
            select(func.coalesce(func.sum(AdvancePaymentUsage.amount), 0)).where(
                AdvancePaymentUsage.user_id == user_id
            )
        )
        return int(deposited) - int(used)

    @staticmethod
    async def get_all_balances(db: AsyncSession) -> Dict[int, int]:
        """Balance per donor, for every donor that ever had an advance payment."""
        deposited_rows = await db.execute(
            select(AdvancePayment.user_id, func.sum(AdvancePayment.amount))
            .where(AdvancePayment.status == RecordStatus.ACTIVE)
            .group_by(AdvancePayment.user_id)
        )
        used_rows = await db.execute(
            select(AdvancePaymentUsage.user_id, func.sum(AdvancePaymentUsage.amount))
            .group_by(AdvancePaymentUsage.user_id)
        )

        balances: Dict[int, int] = {}
        for user_id, total in deposited_rows.all():
            balances[user_id] = int(total or 0)
        for user_id, total in used_rows.all():
            balances[user_id] = balances.get(user_id, 0) - int(total or 0)
        return balances

    @staticmethod
    async def list_advance_payments(
        db: AsyncSession,
        user_id: Optional[int] = None,
        include_deleted: bool = False
    ) -> List[AdvancePayment]:
        query = select(AdvancePayment).order_by(desc(AdvancePayment.date), desc(AdvancePayment.id))
        if user_id is not None:
            query = query.where(AdvancePayment.user_id == user_id)
        if not include_deleted:
            query = query.where(AdvancePayment.status == RecordStatus.ACTIVE)
        result = await db.execute(query)
        return result.scalars().all()

    @staticmethod
    async def list_usage(db: AsyncSession, user_id: int) -> List[AdvancePaymentUsage]:
        result = await db.execute(
            select(AdvancePaymentUsage)
            .where(AdvancePaymentUsage.user_id == user_id)
            .order_by(AdvancePaymentUsage.id)
        )
        return result.scalars().all()

    @staticmethod
    @retry_on_conflict
    async def create_advance_payment(
        db: AsyncSession,
        user_id: int,
        amount: int,
        payment_date: date,
        mode: PaymentMode,
        actor: dict,
        attachment_url: Optional[str] = None,
    ) -> AdvancePayment:
        """Record credit pre-paid by a donor and issue an advance receipt."""
        validate_amount(amount)
        if mode == PaymentMode.ADVANCE_PAYMENT:
            raise ValidationError("An advance payment cannot itself be paid from advance credit")
        if requires_proof(mode) and not attachment_url:
            raise ValidationError(f"Payment proof is required for {mode.value} payments")

        async with atomic(db):
            user = await lock_user(db, user_id)
            receipt_no = await receipt_allocator.allocate(db, ReceiptCategory.ADVANCE, payment_date.year)

            advance = AdvancePayment(
                user_id=user.id,
                user_name=user.name,
                date=payment_date,
                amount=amount,
                payment_mode=mode,
                attachment_url=attachment_url,
                receipt_no=receipt_no,
                status=RecordStatus.ACTIVE,
                created_by=actor.get("sub"),
            )
            db.add(advance)
            await db.flush()

            await transaction_log.append(
                db,
                TransactionType.CREDIT,
                f"Advance payment of {amount} received from {user.name}, receipt {receipt_no}",
                actor,
                entry_id=advance.id,
                entry_category=ReceiptCategory.ADVANCE,
                amount=amount,
                details={"user_id": user.id, "receipt_no": receipt_no, "mode": mode.value},
                on_date=payment_date,
            )

        logger.info("Advance payment recorded", extra={"user_id": user_id, "receipt_no": receipt_no, "amount": amount})
        return advance

    @staticmethod
    @retry_on_conflict
    async def void_advance_payment(db: AsyncSession, advance_id: int, actor: dict) -> AdvancePayment:
        """
        Soft-delete an advance payment.

        Only allowed while the donor's unspent balance still covers it, so a
        void can never push the balance below zero.
        """
        async with atomic(db):
            owner_id = await db.scalar(select(AdvancePayment.user_id).where(AdvancePayment.id == advance_id))
            if owner_id is None:
                raise NotFoundError("Advance payment", advance_id)

            await lock_user(db, owner_id)
            result = await db.execute(
                select(AdvancePayment)
                .where(AdvancePayment.id == advance_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            advance = result.scalar_one()

            if advance.status == RecordStatus.DELETED:
                raise NotFoundError("Advance payment", advance_id, message=f"Advance payment {advance_id} is already deleted")

            balance = await AdvanceBalanceManager.get_balance(db, owner_id)
            if balance < advance.amount:
                raise ValidationError(
                    "Advance payment has already been applied to entries",
                    details={"balance": balance, "amount": advance.amount}
                )

            advance.status = RecordStatus.DELETED
            await db.flush()

            await transaction_log.append(
                db,
                TransactionType.DEBIT,
                f"Advance payment {advance.receipt_no} deleted",
                actor,
                entry_id=advance.id,
                entry_category=ReceiptCategory.ADVANCE,
                amount=advance.amount,
                details={"user_id": owner_id, "receipt_no": advance.receipt_no, "balance_after": balance - advance.amount},
            )

        return advance

    @staticmethod
    @retry_on_conflict
    async def apply_advance(
        db: AsyncSession,
        entry_id: int,
        actor: dict,
        amount: Optional[int] = None,
        payment_date: Optional[date] = None,
    ) -> Entry:
        """
        Apply the entry owner's advance credit to the entry's pending amount.

        Applies min(balance, pending) unless `amount` is given, in which case
        it may not exceed either. The usage row and the advance_payment-mode
        payment commit together or not at all.

        Raises:
            ValidationError: no balance, nothing pending, entry deleted, bad amount
            ConflictError: the entry changed owner while waiting for locks
        """
        if amount is not None:
            validate_amount(amount)
        on_date = payment_date or date.today()

        async with atomic(db):
            owner_id = await db.scalar(select(Entry.user_id).where(Entry.id == entry_id))
            if owner_id is None:
                raise NotFoundError("Entry", entry_id)

            # Lock order: donor, then entry
            user = await lock_user(db, owner_id)
            entry = await lock_subject(db, ReceiptCategory.BOLI, entry_id)
            if entry.user_id != user.id:
                raise ConflictError("Entry owner changed during the operation", details={"entry_id": entry_id})
            ensure_active(entry)

            balance = await AdvanceBalanceManager.get_balance(db, user.id)
            if balance <= 0:
                raise ValidationError("No advance balance available", details={"user_id": user.id, "balance": balance})
            if entry.pending_amount <= 0:
                raise ValidationError("Entry has no pending amount", details={"entry_id": entry_id})

            apply_amount = min(balance, entry.pending_amount)
            if amount is not None:
                if amount > balance:
                    raise ValidationError(
                        f"Amount {amount} exceeds advance balance {balance}",
                        details={"amount": amount, "balance": balance}
                    )
                if amount > entry.pending_amount:
                    raise ValidationError(
                        f"Amount {amount} exceeds pending amount {entry.pending_amount}",
                        details={"amount": amount, "pending_amount": entry.pending_amount}
                    )
                apply_amount = amount

            payment = await append_payment(
                db, entry, apply_amount, on_date, PaymentMode.ADVANCE_PAYMENT, None, actor
            )
            db.add(AdvancePaymentUsage(
                user_id=user.id,
                entry_id=entry.id,
                amount=apply_amount,
                date=on_date,
                receipt_no=payment.receipt_no,
                created_by=actor.get("sub"),
            ))
            await db.flush()

        logger.info(
            "Advance credit applied",
            extra={"entry_id": entry_id, "user_id": owner_id, "amount": apply_amount, "balance_after": balance - apply_amount}
        )
        await NotificationService.dispatch(NotificationService.notify_payment_recorded, entry, payment)
        return entry
