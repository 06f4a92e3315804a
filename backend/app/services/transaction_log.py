"""
Transaction log service.

Append-only writer used by every ledger mutation, plus read helpers for the
audit views. `append` only flushes: the row commits or rolls back together
with the operation that produced it.
"""

from datetime import date
from typing import Optional, Dict, Any, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc

from backend.app.models.transaction_log import TransactionLog
from backend.app.models.ledger_enums import TransactionType, ReceiptCategory


async def append(
    db: AsyncSession,
    transaction_type: TransactionType,
    description: str,
    actor: dict,
    entry_id: Optional[int] = None,
    entry_category: ReceiptCategory = ReceiptCategory.BOLI,
    amount: int = 0,
    details: Optional[Dict[str, Any]] = None,
    on_date: Optional[date] = None,
) -> TransactionLog:
    """
    Write one transaction log row inside the caller's transaction.

    Args:
        db: Database session (transaction managed by caller)
        transaction_type: credit / debit / update_payment / update_entry
        description: Human readable summary
        actor: Authenticated user payload performing the operation
        entry_id: ID of the entry, advance payment or outstanding record
        entry_category: Which table entry_id refers to
        amount: Amount moved by the operation (0 for pure state changes)
        details: Free-form JSON context
        on_date: Business date, defaults to today

    Returns:
        The flushed TransactionLog row
    """
    log = TransactionLog(
        entry_id=entry_id,
        entry_category=entry_category,
        user_id=actor.get("user_id"),
        username=actor.get("sub"),
        transaction_type=transaction_type,
        amount=amount,
        description=description,
        details=details,
        date=on_date or date.today(),
    )

    db.add(log)
    await db.flush()  # A failed log write must fail the whole operation

    return log


async def list_logs(
    db: AsyncSession,
    transaction_type: Optional[TransactionType] = None,
    limit: int = 500
) -> List[TransactionLog]:
    """All transaction logs, most recent first."""
    query = select(TransactionLog).order_by(desc(TransactionLog.timestamp), desc(TransactionLog.id))

    if transaction_type:
        query = query.where(TransactionLog.transaction_type == transaction_type)

    result = await db.execute(query.limit(limit))
    return result.scalars().all()


async def list_logs_for_entry(
    db: AsyncSession,
    entry_id: int,
    entry_category: ReceiptCategory = ReceiptCategory.BOLI
) -> List[TransactionLog]:
    """Audit trail of a single entry / record, most recent first."""
    query = select(TransactionLog).where(
        TransactionLog.entry_id == entry_id,
        TransactionLog.entry_category == entry_category
    ).order_by(desc(TransactionLog.timestamp), desc(TransactionLog.id))

    result = await db.execute(query)
    return result.scalars().all()
