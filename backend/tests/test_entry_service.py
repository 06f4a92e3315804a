"""
Entry lifecycle tests: creation, edits, soft delete / restore and previous
outstanding records.
"""

import pytest
from datetime import date

from backend.app.core.exceptions import NotFoundError, ValidationError
from backend.app.domain.ledger.entry_service import EntryService
from backend.app.domain.ledger.payment_ledger import PaymentLedger
from backend.app.models.entry import Entry
from backend.app.models.enums import UserRole
from backend.app.models.ledger_enums import (
    PaymentMode, PaymentStatus, ReceiptCategory, RecordStatus, TransactionType
)
from backend.app.models.previous_outstanding import PreviousOutstandingRecord
from backend.app.services import transaction_log
from backend.tests.utils import make_user, reload


@pytest.mark.asyncio
async def test_create_entry(db_session, admin_actor, make_entry):
    entry = await make_entry(amount=25000, quantity=3)

    assert entry.total_amount == 75000
    assert entry.received_amount == 0
    assert entry.pending_amount == 75000
    assert entry.status == PaymentStatus.PENDING
    assert entry.entry_status == RecordStatus.ACTIVE
    assert entry.user_name == "Ramesh Shah"
    assert entry.created_by == "admin"
    assert entry.payments == []

    logs = await transaction_log.list_logs_for_entry(db_session, entry.id)
    assert len(logs) == 1
    assert logs[0].transaction_type == TransactionType.CREDIT
    assert logs[0].amount == 75000


@pytest.mark.asyncio
async def test_serial_numbers_are_sequential(make_entry):
    serials = [(await make_entry()).serial_number for _ in range(3)]
    assert serials == [1, 2, 3]


@pytest.mark.asyncio
async def test_create_entry_validations(db_session, admin_actor, make_entry):
    with pytest.raises(ValidationError):
        await make_entry(amount=0)
    with pytest.raises(ValidationError):
        await make_entry(quantity=0)
    with pytest.raises(NotFoundError):
        await make_entry(user_id=9999)

    # Failed creations do not consume serial numbers
    entry = await make_entry()
    assert entry.serial_number == 1


@pytest.mark.asyncio
async def test_update_entry_fields(db_session, admin_actor, make_entry):
    entry = await make_entry()
    entry_id = entry.id
    other = await make_user(db_session, "donor2", UserRole.VIEWER, "Suresh Jain")

    entry = await EntryService.update_entry(
        db_session, entry_id, actor=admin_actor,
        description="Pratham Abhishek boli", auction_date=date(2025, 9, 1), user_id=other.id
    )

    assert entry.description == "Pratham Abhishek boli"
    assert entry.auction_date == date(2025, 9, 1)
    assert entry.user_id == other.id
    assert entry.user_name == "Suresh Jain"
    assert entry.total_amount == 100000

    logs = await transaction_log.list_logs_for_entry(db_session, entry_id)
    update = next(log for log in logs if log.transaction_type == TransactionType.UPDATE_ENTRY)
    assert update.details["before"]["description"] == "Shanti Dhara boli"
    assert update.details["after"]["auction_date"] == "2025-09-01"
    assert update.details["after"]["user_name"] == "Suresh Jain"


@pytest.mark.asyncio
async def test_update_without_changes_is_rejected(db_session, admin_actor, make_entry):
    entry = await make_entry()

    with pytest.raises(ValidationError):
        await EntryService.update_entry(db_session, entry.id, actor=admin_actor, description="Shanti Dhara boli")


@pytest.mark.asyncio
async def test_delete_and_restore_entry(db_session, admin_actor, make_entry):
    entry = await make_entry(amount=1000)
    entry_id = entry.id
    await PaymentLedger.record_payment(
        db_session, ReceiptCategory.BOLI, entry_id, amount=400, payment_date=date(2025, 8, 20),
        mode=PaymentMode.CASH, actor=admin_actor
    )

    entry = await EntryService.delete_entry(db_session, entry_id, actor=admin_actor)
    assert entry.entry_status == RecordStatus.DELETED
    # Amounts are left as they were
    assert entry.received_amount == 400
    assert entry.pending_amount == 600

    assert await EntryService.list_entries(db_session) == []
    assert [e.id for e in await EntryService.list_entries(db_session, include_deleted=True)] == [entry_id]
    assert [e.id for e in await EntryService.list_deleted_entries(db_session)] == [entry_id]

    with pytest.raises(ValidationError):
        await EntryService.delete_entry(db_session, entry_id, actor=admin_actor)
    with pytest.raises(ValidationError):
        await EntryService.update_entry(db_session, entry_id, actor=admin_actor, description="Changed")

    entry = await EntryService.restore_entry(db_session, entry_id, actor=admin_actor)
    assert entry.entry_status == RecordStatus.ACTIVE
    assert entry.status == PaymentStatus.PARTIAL

    with pytest.raises(ValidationError):
        await EntryService.restore_entry(db_session, entry_id, actor=admin_actor)

    logs = sorted(await transaction_log.list_logs_for_entry(db_session, entry_id), key=lambda log: log.id)
    assert [log.transaction_type for log in logs][-2:] == [TransactionType.DEBIT, TransactionType.CREDIT]


@pytest.mark.asyncio
async def test_list_entries_filters(db_session, admin_actor, donor, make_entry):
    other = await make_user(db_session, "donor2", UserRole.VIEWER, "Suresh Jain")
    first = await make_entry(amount=1000)
    second = await make_entry(amount=1000, user_id=other.id)
    first_id, second_id = first.id, second.id
    await PaymentLedger.record_payment(
        db_session, ReceiptCategory.BOLI, first_id, amount=1000, payment_date=date(2025, 8, 20),
        mode=PaymentMode.CASH, actor=admin_actor
    )

    # Newest serial first
    assert [e.id for e in await EntryService.list_entries(db_session)] == [second_id, first_id]
    assert [e.id for e in await EntryService.list_entries(db_session, user_id=other.id)] == [second_id]
    assert [e.id for e in await EntryService.list_entries(db_session, status=PaymentStatus.FULL)] == [first_id]


@pytest.mark.asyncio
async def test_get_missing_entry(db_session):
    with pytest.raises(NotFoundError):
        await EntryService.get_entry(db_session, 9999)


@pytest.mark.asyncio
async def test_outstanding_record_numbering(db_session, admin_actor, donor):
    donor_id = donor.id
    year = date.today().year

    first = await EntryService.create_outstanding_record(
        db_session, user_id=donor_id, outstanding_amount=5000, actor=admin_actor, description="2024 dues"
    )
    second = await EntryService.create_outstanding_record(
        db_session, user_id=donor_id, outstanding_amount=800, actor=admin_actor
    )

    assert first.serial_number == f"PO-{year}-001"
    assert second.serial_number == f"PO-{year}-002"
    assert (first.record_number, second.record_number) == (1, 2)
    assert first.total_amount == 5000
    assert first.pending_amount == 5000
    assert first.status == PaymentStatus.PENDING

    records = await EntryService.list_outstanding_records(db_session, user_id=donor_id)
    assert [r.id for r in records] == [second.id, first.id]


@pytest.mark.asyncio
async def test_edit_outstanding_amount(db_session, admin_actor, donor):
    record = await EntryService.create_outstanding_record(
        db_session, user_id=donor.id, outstanding_amount=5000, actor=admin_actor
    )
    record_id = record.id
    await PaymentLedger.record_payment(
        db_session, ReceiptCategory.PREVIOUS_OUTSTANDING, record_id, amount=3000,
        payment_date=date(2025, 8, 20), mode=PaymentMode.CASH, actor=admin_actor
    )

    with pytest.raises(ValidationError):
        await EntryService.edit_outstanding_record(db_session, record_id, actor=admin_actor, outstanding_amount=2999)

    record = await reload(db_session, PreviousOutstandingRecord, record_id)
    assert record.outstanding_amount == 5000

    # Lowering to exactly what was received settles the record
    record = await EntryService.edit_outstanding_record(db_session, record_id, actor=admin_actor, outstanding_amount=3000)
    assert record.pending_amount == 0
    assert record.status == PaymentStatus.FULL

    logs = await transaction_log.list_logs_for_entry(db_session, record_id, ReceiptCategory.PREVIOUS_OUTSTANDING)
    update = next(log for log in logs if log.transaction_type == TransactionType.UPDATE_ENTRY)
    assert update.details["before"]["outstanding_amount"] == 5000
    assert update.details["status"] == {"from": "partial", "to": "full"}


@pytest.mark.asyncio
async def test_entry_reload_matches_returned_state(db_session, admin_actor, make_entry):
    entry = await make_entry(amount=1000)
    entry_id = entry.id
    await PaymentLedger.record_payment(
        db_session, ReceiptCategory.BOLI, entry_id, amount=250, payment_date=date(2025, 8, 20),
        mode=PaymentMode.CASH, actor=admin_actor
    )

    stored = await reload(db_session, Entry, entry_id)
    assert stored.received_amount == 250
    assert stored.receipt_numbers == "SPDJMSJ-2025-00001"
    assert len(stored.payments) == 1
