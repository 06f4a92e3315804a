"""
Dashboard Service.

Read-only aggregation over entries, advance balances, expenses and
previous outstanding records. Deleted entries and records never count.
"""

from datetime import date
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, desc

from backend.app.db.session import utcnow
from backend.app.domain.ledger.advance_balance import AdvanceBalanceManager
from backend.app.models.corpus_settings import CorpusSettings
from backend.app.models.entry import Entry
from backend.app.models.expense_entry import ExpenseEntry
from backend.app.models.payment_record import BoliPayment, OutstandingPayment
from backend.app.models.previous_outstanding import PreviousOutstandingRecord
from backend.app.models.ledger_enums import PaymentStatus, RecordStatus
from backend.app.schemas.dashboard import (
    BoliPaymentListItem, DashboardResponse, DashboardSummary, OutstandingPaymentListItem,
    OverallSummary, RecentEntry
)

DEFAULT_CORPUS_BASE_DATE = date(2025, 7, 31)
RECENT_ACTIVITY_LIMIT = 5


class DashboardService:

    @staticmethod
    async def get_corpus(db: AsyncSession) -> Optional[CorpusSettings]:
        result = await db.execute(select(CorpusSettings).order_by(CorpusSettings.id).limit(1))
        return result.scalar_one_or_none()

    @staticmethod
    async def update_corpus(db: AsyncSession, corpus_value: int, base_date: date, actor: dict) -> CorpusSettings:
        """Single settings row, created on first update."""
        corpus = await DashboardService.get_corpus(db)
        if corpus is None:
            corpus = CorpusSettings()
            db.add(corpus)

        corpus.corpus_value = corpus_value
        corpus.base_date = base_date
        corpus.updated_by = actor.get("sub")
        corpus.updated_at = utcnow()

        await db.commit()
        return corpus

    @staticmethod
    async def get_total_advance_balance(db: AsyncSession) -> int:
        """Sum of positive per-donor balances."""
        balances = await AdvanceBalanceManager.get_all_balances(db)
        return sum(balance for balance in balances.values() if balance > 0)

    @staticmethod
    async def get_dashboard(
        db: AsyncSession,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> DashboardResponse:
        """
        Entry totals for the auction-date range plus the overall cash position.

        cash_in_bank = corpus + received (in range) + advance balances
                       - expenses + received on previous outstanding
        """
        # 1. Entry totals and status counts in range
        filters = [Entry.entry_status == RecordStatus.ACTIVE]
        if start_date:
            filters.append(Entry.auction_date >= start_date)
        if end_date:
            filters.append(Entry.auction_date <= end_date)

        totals = (await db.execute(
            select(
                func.coalesce(func.sum(Entry.total_amount), 0),
                func.coalesce(func.sum(Entry.received_amount), 0),
                func.coalesce(func.sum(Entry.pending_amount), 0),
            ).where(*filters)
        )).one()
        total_amount, received_amount, pending_amount = (int(value) for value in totals)

        status_rows = await db.execute(
            select(Entry.status, func.count(Entry.id)).where(*filters).group_by(Entry.status)
        )
        counts = {status: count for status, count in status_rows.all()}

        # 2. Advance credit still held for donors
        total_advance = await DashboardService.get_total_advance_balance(db)

        # 3. Overall position
        corpus = await DashboardService.get_corpus(db)
        corpus_value = corpus.corpus_value if corpus else 0

        total_expenses = int(await db.scalar(
            select(func.coalesce(func.sum(ExpenseEntry.amount), 0))
        ))
        total_received_outstanding = int(await db.scalar(
            select(func.coalesce(func.sum(PreviousOutstandingRecord.received_amount), 0)).where(
                PreviousOutstandingRecord.record_status == RecordStatus.ACTIVE
            )
        ))

        cash_in_bank = corpus_value + received_amount + total_advance - total_expenses + total_received_outstanding

        # 4. Most recent pledges by auction date
        recent = await db.execute(
            select(Entry)
            .where(Entry.entry_status == RecordStatus.ACTIVE)
            .order_by(desc(Entry.auction_date), desc(Entry.serial_number))
            .limit(RECENT_ACTIVITY_LIMIT)
        )

        return DashboardResponse(
            summary=DashboardSummary(
                total_amount=total_amount,
                received_amount=received_amount,
                pending_amount=pending_amount,
                pending_entries=counts.get(PaymentStatus.PENDING, 0),
                partial_entries=counts.get(PaymentStatus.PARTIAL, 0),
                completed_entries=counts.get(PaymentStatus.FULL, 0),
                total_advance_payments=total_advance,
            ),
            overall_summary=OverallSummary(
                corpus_value=corpus_value,
                total_received=received_amount,
                total_advance_payments=total_advance,
                total_expenses=total_expenses,
                total_received_outstanding=total_received_outstanding,
                cash_in_bank=cash_in_bank,
            ),
            recent_activity=[RecentEntry.model_validate(entry) for entry in recent.scalars().all()],
        )

    @staticmethod
    async def get_daily_payments(db: AsyncSession, year: int) -> Dict[str, int]:
        """Active payments on active entries, summed per payment date."""
        result = await db.execute(
            select(BoliPayment.date, func.sum(BoliPayment.amount))
            .join(Entry, BoliPayment.entry_id == Entry.id)
            .where(
                BoliPayment.status == RecordStatus.ACTIVE,
                Entry.entry_status == RecordStatus.ACTIVE,
                BoliPayment.date.between(date(year, 1, 1), date(year, 12, 31)),
            )
            .group_by(BoliPayment.date)
            .order_by(BoliPayment.date)
        )
        return {day.isoformat(): int(total) for day, total in result.all()}

    @staticmethod
    async def get_daily_earnings(db: AsyncSession, year: int) -> Dict[str, int]:
        """Pledged totals of active entries per auction date."""
        result = await db.execute(
            select(Entry.auction_date, func.sum(Entry.total_amount))
            .where(
                Entry.entry_status == RecordStatus.ACTIVE,
                Entry.auction_date.between(date(year, 1, 1), date(year, 12, 31)),
            )
            .group_by(Entry.auction_date)
            .order_by(Entry.auction_date)
        )
        return {day.isoformat(): int(total) for day, total in result.all()}

    @staticmethod
    async def list_boli_payments(
        db: AsyncSession,
        status: Optional[RecordStatus] = None
    ) -> List[BoliPaymentListItem]:
        """Every payment across active entries, newest first."""
        query = (
            select(BoliPayment, Entry)
            .join(Entry, BoliPayment.entry_id == Entry.id)
            .where(Entry.entry_status == RecordStatus.ACTIVE)
            .order_by(desc(BoliPayment.created_at), desc(BoliPayment.id))
        )
        if status:
            query = query.where(BoliPayment.status == status)

        result = await db.execute(query)
        return [
            BoliPaymentListItem(
                id=payment.id,
                entry_id=entry.id,
                serial_number=entry.serial_number,
                user_id=entry.user_id,
                user_name=entry.user_name,
                entry_description=entry.description,
                payment_index=payment.payment_index,
                date=payment.date,
                amount=payment.amount,
                mode=payment.mode,
                file_url=payment.file_url,
                receipt_no=payment.receipt_no,
                updated_by=payment.updated_by,
                status=payment.status,
                created_at=payment.created_at,
            )
            for payment, entry in result.all()
        ]

    @staticmethod
    async def list_outstanding_payments(
        db: AsyncSession,
        status: Optional[RecordStatus] = None
    ) -> List[OutstandingPaymentListItem]:
        query = (
            select(OutstandingPayment, PreviousOutstandingRecord)
            .join(PreviousOutstandingRecord, OutstandingPayment.record_id == PreviousOutstandingRecord.id)
            .where(PreviousOutstandingRecord.record_status == RecordStatus.ACTIVE)
            .order_by(desc(OutstandingPayment.created_at), desc(OutstandingPayment.id))
        )
        if status:
            query = query.where(OutstandingPayment.status == status)

        result = await db.execute(query)
        return [
            OutstandingPaymentListItem(
                id=payment.id,
                record_id=record.id,
                serial_number=record.serial_number,
                user_id=record.user_id,
                user_name=record.user_name,
                outstanding_amount=record.outstanding_amount,
                pending_amount=record.pending_amount,
                record_payment_status=record.status,
                payment_index=payment.payment_index,
                date=payment.date,
                amount=payment.amount,
                mode=payment.mode,
                file_url=payment.file_url,
                receipt_no=payment.receipt_no,
                updated_by=payment.updated_by,
                status=payment.status,
                created_at=payment.created_at,
            )
            for payment, record in result.all()
        ]
