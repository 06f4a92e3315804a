"""
Dashboard Aggregator tests.
"""

import pytest
from datetime import date

from backend.app.domain.ledger.advance_balance import AdvanceBalanceManager
from backend.app.domain.ledger.entry_service import EntryService
from backend.app.domain.ledger.payment_ledger import PaymentLedger
from backend.app.models.enums import UserRole
from backend.app.models.expense_entry import ExpenseEntry
from backend.app.models.ledger_enums import PaymentMode, PaymentStatus, ReceiptCategory, RecordStatus
from backend.app.services.dashboard import DashboardService
from backend.tests.utils import make_user

PAID_ON = date(2025, 8, 20)


async def pay(db, actor, subject_id, amount, kind=ReceiptCategory.BOLI):
    await PaymentLedger.record_payment(
        db, kind, subject_id, amount=amount, payment_date=PAID_ON, mode=PaymentMode.CASH, actor=actor
    )


@pytest.fixture
async def ledger(db_session, admin_actor, donor, make_entry):
    """
    Two live entries (one partial, one full), one deleted entry, advance
    credit, an expense, a partly paid outstanding record and a corpus.
    """
    other = await make_user(db_session, "donor2", UserRole.VIEWER, "Suresh Jain")

    august = await make_entry(amount=10000, auction_date=date(2025, 8, 15))
    september = await make_entry(amount=5000, auction_date=date(2025, 9, 10))
    removed = await make_entry(amount=7000, auction_date=date(2025, 9, 20))
    await pay(db_session, admin_actor, august.id, 4000)
    await pay(db_session, admin_actor, september.id, 5000)
    await pay(db_session, admin_actor, removed.id, 1000)
    await EntryService.delete_entry(db_session, removed.id, actor=admin_actor)

    await AdvanceBalanceManager.create_advance_payment(
        db_session, user_id=other.id, amount=3000, payment_date=PAID_ON, mode=PaymentMode.CASH, actor=admin_actor
    )

    db_session.add(ExpenseEntry(
        firm_name="Shree Caterers",
        description="Prasad",
        amount=1500,
        expense_date=PAID_ON,
        payment_mode=PaymentMode.CASH,
        created_by="admin",
    ))
    await db_session.commit()

    record = await EntryService.create_outstanding_record(
        db_session, user_id=donor.id, outstanding_amount=2000, actor=admin_actor
    )
    await pay(db_session, admin_actor, record.id, 500, kind=ReceiptCategory.PREVIOUS_OUTSTANDING)

    await DashboardService.update_corpus(db_session, 100000, date(2025, 7, 31), actor=admin_actor)
    return {"august": august.id, "september": september.id, "removed": removed.id}


@pytest.mark.asyncio
async def test_dashboard_totals(db_session, ledger):
    dashboard = await DashboardService.get_dashboard(db_session)
    summary = dashboard.summary

    # Deleted entry does not count
    assert summary.total_amount == 15000
    assert summary.received_amount == 9000
    assert summary.pending_amount == 6000
    assert (summary.pending_entries, summary.partial_entries, summary.completed_entries) == (0, 1, 1)
    assert summary.total_advance_payments == 3000

    overall = dashboard.overall_summary
    assert overall.corpus_value == 100000
    assert overall.total_expenses == 1500
    assert overall.total_received_outstanding == 500
    assert overall.cash_in_bank == 100000 + 9000 + 3000 - 1500 + 500

    assert [e.id for e in dashboard.recent_activity] == [ledger["september"], ledger["august"]]
    assert dashboard.recent_activity[1].status == PaymentStatus.PARTIAL


@pytest.mark.asyncio
async def test_dashboard_auction_date_range(db_session, ledger):
    dashboard = await DashboardService.get_dashboard(
        db_session, start_date=date(2025, 9, 1), end_date=date(2025, 9, 30)
    )

    assert dashboard.summary.total_amount == 5000
    assert dashboard.summary.received_amount == 5000
    assert dashboard.summary.completed_entries == 1
    assert dashboard.summary.partial_entries == 0
    assert dashboard.overall_summary.cash_in_bank == 100000 + 5000 + 3000 - 1500 + 500


@pytest.mark.asyncio
async def test_daily_payments_count_active_payments_only(db_session, admin_actor, ledger):
    august = ledger["august"]
    for day, amount in ((25, 1000), (26, 2000)):
        await PaymentLedger.record_payment(
            db_session, ReceiptCategory.BOLI, august, amount=amount,
            payment_date=date(2025, 8, day), mode=PaymentMode.CASH, actor=admin_actor
        )
    await PaymentLedger.delete_payment(db_session, ReceiptCategory.BOLI, august, 1, actor=admin_actor)

    # The deleted entry's 1000 and the deleted 1000 payment are left out
    daily = await DashboardService.get_daily_payments(db_session, 2025)
    assert daily == {"2025-08-20": 9000, "2025-08-26": 2000}
    assert await DashboardService.get_daily_payments(db_session, 2024) == {}


@pytest.mark.asyncio
async def test_daily_earnings_by_auction_date(db_session, ledger):
    daily = await DashboardService.get_daily_earnings(db_session, 2025)

    assert daily == {"2025-08-15": 10000, "2025-09-10": 5000}
    assert await DashboardService.get_daily_earnings(db_session, 2026) == {}


@pytest.mark.asyncio
async def test_flat_payment_listings(db_session, admin_actor, ledger):
    payments = await DashboardService.list_boli_payments(db_session)
    assert sorted((p.entry_id, p.receipt_no) for p in payments) == [
        (ledger["august"], "SPDJMSJ-2025-00001"),
        (ledger["september"], "SPDJMSJ-2025-00002"),
    ]
    assert all(p.user_name == "Ramesh Shah" for p in payments)

    await PaymentLedger.delete_payment(db_session, ReceiptCategory.BOLI, ledger["august"], 0, actor=admin_actor)

    active = await DashboardService.list_boli_payments(db_session, status=RecordStatus.ACTIVE)
    deleted = await DashboardService.list_boli_payments(db_session, status=RecordStatus.DELETED)
    assert [p.receipt_no for p in active] == ["SPDJMSJ-2025-00002"]
    assert [(p.receipt_no, p.payment_index, p.updated_by) for p in deleted] == [("SPDJMSJ-2025-00001", 0, "admin")]

    outstanding = await DashboardService.list_outstanding_payments(db_session)
    assert len(outstanding) == 1
    assert outstanding[0].receipt_no == "OSP-2025-00001"
    assert outstanding[0].amount == 500
    assert outstanding[0].pending_amount == 1500
    assert outstanding[0].record_payment_status == PaymentStatus.PARTIAL
    assert outstanding[0].serial_number.startswith("PO-")


@pytest.mark.asyncio
async def test_spent_credit_leaves_advance_total(db_session, admin_actor, donor, make_entry):
    """Only unspent credit counts, a spent advance shows up as received instead."""
    await AdvanceBalanceManager.create_advance_payment(
        db_session, user_id=donor.id, amount=5000, payment_date=PAID_ON, mode=PaymentMode.CASH, actor=admin_actor
    )
    entry = await make_entry(amount=3000)
    await AdvanceBalanceManager.apply_advance(db_session, entry.id, actor=admin_actor)

    dashboard = await DashboardService.get_dashboard(db_session)
    assert dashboard.summary.total_advance_payments == 2000
    assert dashboard.summary.received_amount == 3000
    assert dashboard.overall_summary.cash_in_bank == 5000


@pytest.mark.asyncio
async def test_empty_dashboard(db_session):
    dashboard = await DashboardService.get_dashboard(db_session)

    assert dashboard.summary.total_amount == 0
    assert dashboard.overall_summary.corpus_value == 0
    assert dashboard.overall_summary.cash_in_bank == 0
    assert dashboard.recent_activity == []


@pytest.mark.asyncio
async def test_corpus_is_a_single_row(db_session, admin_actor):
    await DashboardService.update_corpus(db_session, 100000, date(2025, 7, 31), actor=admin_actor)
    corpus = await DashboardService.update_corpus(db_session, 250000, date(2025, 8, 31), actor=admin_actor)

    stored = await DashboardService.get_corpus(db_session)
    assert stored.id == corpus.id
    assert stored.corpus_value == 250000
    assert stored.updated_by == "admin"
