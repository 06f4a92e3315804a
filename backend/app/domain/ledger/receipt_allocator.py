"""
Receipt Number Allocator.

Issues `<PREFIX>-<YYYY>-<NNNNN>` receipt numbers, one sequence per category
per year. Numbers come from the sequence_counters table inside the caller's
transaction: a rolled-back payment releases its number together with the
counter increment, a committed one consumes it for good (a later soft
delete leaves a gap).
"""

from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import settings
from backend.app.db.sequences import next_value
from backend.app.models.ledger_enums import ReceiptCategory


def receipt_prefix(category: ReceiptCategory) -> str:
    return {
        ReceiptCategory.BOLI: settings.boli_receipt_prefix,
        ReceiptCategory.ADVANCE: settings.advance_receipt_prefix,
        ReceiptCategory.PREVIOUS_OUTSTANDING: settings.outstanding_receipt_prefix,
    }[category]


def format_receipt_number(category: ReceiptCategory, year: int, sequence: int) -> str:
    return f"{receipt_prefix(category)}-{year:04d}-{sequence:05d}"


async def allocate(db: AsyncSession, category: ReceiptCategory, year: int) -> str:
    """
    Allocate the next receipt number for `category` in `year`.

    Must be called inside an open transaction (see `atomic`); concurrent
    callers serialize on the counter row until the transaction ends.
    """
    sequence = await next_value(db, f"receipt:{category.value}:{year}")
    return format_receipt_number(category, year, sequence)
