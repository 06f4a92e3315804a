"""
Entry Service (Domain Logic).

Lifecycle of boli entries and previous outstanding records outside of
payments: creation, descriptive edits, soft delete and restore. Payment
changes go through PaymentLedger.

A deleted entry is frozen. Its payments and amounts are left as they were
(its own invariants stay checkable), every ledger mutation on it is
rejected, and it is excluded from default listings and from all dashboard
aggregates until restored.
"""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import settings
from backend.app.core.exceptions import NotFoundError, ValidationError
from backend.app.core.reliability import retry_on_conflict
from backend.app.db.sequences import next_value
from backend.app.db.session import utcnow
from backend.app.db.transaction import atomic
from backend.app.domain.ledger.rules import check_invariants, reconcile
from backend.app.domain.ledger.subjects import lock_subject, ensure_active, validate_amount
from backend.app.models.entry import Entry
from backend.app.models.previous_outstanding import PreviousOutstandingRecord
from backend.app.models.user import User
from backend.app.models.ledger_enums import (
    PaymentStatus, ReceiptCategory, RecordStatus, TransactionType
)
from backend.app.services import transaction_log
from backend.app.services.notification_service import NotificationService

logger = logging.getLogger("ledger.entries")

ENTRY_SERIAL_SEQUENCE = "entry:serial"
OUTSTANDING_RECORD_SEQUENCE = "outstanding:record"


async def get_user(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


def format_outstanding_serial(year: int, sequence: int) -> str:
    return f"{settings.outstanding_serial_prefix}-{year:04d}-{sequence:03d}"


class EntryService:

    # Entries

    @staticmethod
    async def get_entry(db: AsyncSession, entry_id: int) -> Entry:
        entry = await db.get(Entry, entry_id)
        if entry is None:
            raise NotFoundError("Entry", entry_id)
        return entry

    @staticmethod
    async def list_entries(
        db: AsyncSession,
        user_id: Optional[int] = None,
        status: Optional[PaymentStatus] = None,
        include_deleted: bool = False
    ) -> List[Entry]:
        query = select(Entry).order_by(desc(Entry.serial_number))
        if user_id is not None:
            query = query.where(Entry.user_id == user_id)
        if status is not None:
            query = query.where(Entry.status == status)
        if not include_deleted:
            query = query.where(Entry.entry_status == RecordStatus.ACTIVE)
        result = await db.execute(query)
        return result.scalars().all()

    @staticmethod
    async def list_deleted_entries(db: AsyncSession) -> List[Entry]:
        result = await db.execute(
            select(Entry)
            .where(Entry.entry_status == RecordStatus.DELETED)
            .order_by(desc(Entry.updated_at))
        )
        return result.scalars().all()

    @staticmethod
    @retry_on_conflict
    async def create_entry(
        db: AsyncSession,
        user_id: int,
        description: str,
        amount: int,
        quantity: int,
        auction_date: date,
        actor: dict,
        occasion: Optional[str] = None,
        bedi_number: Optional[str] = None,
    ) -> Entry:
        """
        Create a pledge for a donor.

        Takes the next global serial number and starts with nothing received.
        amount and quantity are fixed from here on.
        """
        validate_amount(amount)
        if quantity is None or quantity <= 0:
            raise ValidationError("Quantity must be greater than zero", details={"quantity": quantity})

        async with atomic(db):
            user = await get_user(db, user_id)
            serial_number = await next_value(db, ENTRY_SERIAL_SEQUENCE)
            total = amount * quantity

            entry = Entry(
                user_id=user.id,
                user_name=user.name,
                description=description,
                occasion=occasion,
                bedi_number=bedi_number,
                serial_number=serial_number,
                auction_date=auction_date,
                amount=amount,
                quantity=quantity,
                total_amount=total,
                received_amount=0,
                pending_amount=total,
                status=PaymentStatus.PENDING,
                entry_status=RecordStatus.ACTIVE,
                receipt_numbers="",
                deleted_receipt_numbers="",
                created_by=actor.get("sub"),
                payments=[],
            )
            check_invariants(entry)
            db.add(entry)
            await db.flush()

            await transaction_log.append(
                db,
                TransactionType.CREDIT,
                f"Entry #{serial_number} created for {user.name}: {description}",
                actor,
                entry_id=entry.id,
                amount=total,
                details={
                    "serial_number": serial_number,
                    "user_id": user.id,
                    "amount": amount,
                    "quantity": quantity,
                    "auction_date": auction_date.isoformat(),
                },
            )

        logger.info("Entry created", extra={"entry_id": entry.id, "serial_number": serial_number, "total_amount": total})
        await NotificationService.dispatch(NotificationService.notify_entry_created, entry)
        return entry

    @staticmethod
    @retry_on_conflict
    async def update_entry(
        db: AsyncSession,
        entry_id: int,
        actor: dict,
        description: Optional[str] = None,
        occasion: Optional[str] = None,
        bedi_number: Optional[str] = None,
        auction_date: Optional[date] = None,
        user_id: Optional[int] = None,
    ) -> Entry:
        """Edit descriptive fields or reassign the donor. Amounts are not editable."""
        async with atomic(db):
            entry = await lock_subject(db, ReceiptCategory.BOLI, entry_id)
            ensure_active(entry)

            before, after = {}, {}

            def change(field, value):
                current = getattr(entry, field)
                if value is None or value == current:
                    return
                before[field] = current.isoformat() if isinstance(current, date) else current
                after[field] = value.isoformat() if isinstance(value, date) else value
                setattr(entry, field, value)

            change("description", description)
            change("occasion", occasion)
            change("bedi_number", bedi_number)
            change("auction_date", auction_date)
            if user_id is not None and user_id != entry.user_id:
                user = await get_user(db, user_id)
                change("user_id", user.id)
                change("user_name", user.name)

            if not after:
                raise ValidationError("No changes to apply")

            entry.updated_at = utcnow()
            await db.flush()

            await transaction_log.append(
                db,
                TransactionType.UPDATE_ENTRY,
                f"Entry #{entry.serial_number} updated: {', '.join(after)}",
                actor,
                entry_id=entry.id,
                amount=entry.total_amount,
                details={"before": before, "after": after},
            )

        return entry

    @staticmethod
    @retry_on_conflict
    async def delete_entry(db: AsyncSession, entry_id: int, actor: dict) -> Entry:
        """Soft-delete an entry. Payments and amounts are left untouched."""
        async with atomic(db):
            entry = await lock_subject(db, ReceiptCategory.BOLI, entry_id)
            if not entry.is_active:
                raise ValidationError(f"Entry {entry_id} is already deleted", details={"id": entry_id})

            entry.entry_status = RecordStatus.DELETED
            entry.updated_at = utcnow()
            await db.flush()

            await transaction_log.append(
                db,
                TransactionType.DEBIT,
                f"Entry #{entry.serial_number} deleted",
                actor,
                entry_id=entry.id,
                amount=entry.total_amount,
                details={
                    "received_amount": entry.received_amount,
                    "pending_amount": entry.pending_amount,
                    "status": entry.status.value,
                },
            )

        logger.info("Entry deleted", extra={"entry_id": entry_id})
        return entry

    @staticmethod
    @retry_on_conflict
    async def restore_entry(db: AsyncSession, entry_id: int, actor: dict) -> Entry:
        async with atomic(db):
            entry = await lock_subject(db, ReceiptCategory.BOLI, entry_id)
            if entry.is_active:
                raise ValidationError(f"Entry {entry_id} is not deleted", details={"id": entry_id})

            entry.entry_status = RecordStatus.ACTIVE
            entry.updated_at = utcnow()
            check_invariants(entry)
            await db.flush()

            await transaction_log.append(
                db,
                TransactionType.CREDIT,
                f"Entry #{entry.serial_number} restored",
                actor,
                entry_id=entry.id,
                amount=entry.total_amount,
                details={"pending_amount": entry.pending_amount},
            )

        logger.info("Entry restored", extra={"entry_id": entry_id})
        return entry

    # Previous outstanding records

    @staticmethod
    async def get_outstanding_record(db: AsyncSession, record_id: int) -> PreviousOutstandingRecord:
        record = await db.get(PreviousOutstandingRecord, record_id)
        if record is None:
            raise NotFoundError("Previous outstanding record", record_id)
        return record

    @staticmethod
    async def list_outstanding_records(
        db: AsyncSession,
        user_id: Optional[int] = None
    ) -> List[PreviousOutstandingRecord]:
        query = select(PreviousOutstandingRecord).where(
            PreviousOutstandingRecord.record_status == RecordStatus.ACTIVE
        ).order_by(desc(PreviousOutstandingRecord.record_number))
        if user_id is not None:
            query = query.where(PreviousOutstandingRecord.user_id == user_id)
        result = await db.execute(query)
        return result.scalars().all()

    @staticmethod
    @retry_on_conflict
    async def create_outstanding_record(
        db: AsyncSession,
        user_id: int,
        outstanding_amount: int,
        actor: dict,
        description: Optional[str] = None,
        attachment_url: Optional[str] = None,
        attachment_name: Optional[str] = None,
    ) -> PreviousOutstandingRecord:
        """Register a legacy balance. Serial is PO-<year>-<NNN>, per-year sequence."""
        validate_amount(outstanding_amount)

        async with atomic(db):
            user = await get_user(db, user_id)
            year = date.today().year
            serial_number = format_outstanding_serial(year, await next_value(db, f"outstanding:serial:{year}"))
            record_number = await next_value(db, OUTSTANDING_RECORD_SEQUENCE)

            record = PreviousOutstandingRecord(
                serial_number=serial_number,
                record_number=record_number,
                user_id=user.id,
                user_name=user.name,
                outstanding_amount=outstanding_amount,
                received_amount=0,
                pending_amount=outstanding_amount,
                status=PaymentStatus.PENDING,
                record_status=RecordStatus.ACTIVE,
                description=description,
                attachment_url=attachment_url,
                attachment_name=attachment_name,
                receipt_numbers="",
                deleted_receipt_numbers="",
                created_by=actor.get("sub"),
                payments=[],
            )
            check_invariants(record)
            db.add(record)
            await db.flush()

            await transaction_log.append(
                db,
                TransactionType.CREDIT,
                f"Previous outstanding {serial_number} created for {user.name}",
                actor,
                entry_id=record.id,
                entry_category=ReceiptCategory.PREVIOUS_OUTSTANDING,
                amount=outstanding_amount,
                details={"serial_number": serial_number, "record_number": record_number, "user_id": user.id},
            )

        logger.info("Outstanding record created", extra={"record_id": record.id, "serial_number": serial_number})
        return record

    @staticmethod
    @retry_on_conflict
    async def edit_outstanding_record(
        db: AsyncSession,
        record_id: int,
        actor: dict,
        outstanding_amount: Optional[int] = None,
        description: Optional[str] = None,
        user_id: Optional[int] = None,
        attachment_url: Optional[str] = None,
        attachment_name: Optional[str] = None,
    ) -> PreviousOutstandingRecord:
        """
        Edit an outstanding record. The outstanding amount may be corrected
        but never below what has already been received; pending and status
        are re-derived.
        """
        async with atomic(db):
            record = await lock_subject(db, ReceiptCategory.PREVIOUS_OUTSTANDING, record_id)
            ensure_active(record)
            previous_status = record.status
            before, after = {}, {}

            if outstanding_amount is not None and outstanding_amount != record.outstanding_amount:
                validate_amount(outstanding_amount)
                if outstanding_amount < record.received_amount:
                    raise ValidationError(
                        f"Outstanding amount cannot be less than the received amount {record.received_amount}",
                        details={"outstanding_amount": outstanding_amount, "received_amount": record.received_amount}
                    )
                before["outstanding_amount"] = record.outstanding_amount
                after["outstanding_amount"] = outstanding_amount
                record.outstanding_amount = outstanding_amount

            for field, value in (
                ("description", description),
                ("attachment_url", attachment_url),
                ("attachment_name", attachment_name),
            ):
                if value is not None and value != getattr(record, field):
                    before[field] = getattr(record, field)
                    after[field] = value
                    setattr(record, field, value)

            if user_id is not None and user_id != record.user_id:
                user = await get_user(db, user_id)
                before.update(user_id=record.user_id, user_name=record.user_name)
                after.update(user_id=user.id, user_name=user.name)
                record.user_id = user.id
                record.user_name = user.name

            if not after:
                raise ValidationError("No changes to apply")

            record.updated_at = utcnow()
            reconcile(record)
            await db.flush()

            details = {"before": before, "after": after}
            if record.status != previous_status:
                details["status"] = {"from": previous_status.value, "to": record.status.value}

            await transaction_log.append(
                db,
                TransactionType.UPDATE_ENTRY,
                f"Previous outstanding {record.serial_number} updated: {', '.join(after)}",
                actor,
                entry_id=record.id,
                entry_category=ReceiptCategory.PREVIOUS_OUTSTANDING,
                amount=record.outstanding_amount,
                details=details,
            )

        return record
