"""
Receipt Number Allocator tests.
"""

import pytest
from backend.app.db.sequences import next_value
from backend.app.db.transaction import atomic
from backend.app.domain.ledger import receipt_allocator
from backend.app.models.ledger_enums import ReceiptCategory


def test_format_per_category():
    assert receipt_allocator.format_receipt_number(ReceiptCategory.BOLI, 2025, 1) == "SPDJMSJ-2025-00001"
    assert receipt_allocator.format_receipt_number(ReceiptCategory.ADVANCE, 2025, 42) == "AP-2025-00042"
    assert receipt_allocator.format_receipt_number(ReceiptCategory.PREVIOUS_OUTSTANDING, 2026, 12345) == "OSP-2026-12345"


@pytest.mark.asyncio
async def test_sequence_is_per_category_and_year(db_session):
    """Each (category, year) pair counts from 1 independently."""
    async with atomic(db_session):
        first = await receipt_allocator.allocate(db_session, ReceiptCategory.BOLI, 2025)
        second = await receipt_allocator.allocate(db_session, ReceiptCategory.BOLI, 2025)
        advance = await receipt_allocator.allocate(db_session, ReceiptCategory.ADVANCE, 2025)
        next_year = await receipt_allocator.allocate(db_session, ReceiptCategory.BOLI, 2026)

    assert first == "SPDJMSJ-2025-00001"
    assert second == "SPDJMSJ-2025-00002"
    assert advance == "AP-2025-00001"
    assert next_year == "SPDJMSJ-2026-00001"


@pytest.mark.asyncio
async def test_rolled_back_allocation_is_released(db_session):
    """A number taken by a failed transaction is handed out again."""
    with pytest.raises(RuntimeError):
        async with atomic(db_session):
            taken = await receipt_allocator.allocate(db_session, ReceiptCategory.BOLI, 2025)
            assert taken == "SPDJMSJ-2025-00001"
            raise RuntimeError("payment write failed")

    async with atomic(db_session):
        again = await receipt_allocator.allocate(db_session, ReceiptCategory.BOLI, 2025)

    assert again == "SPDJMSJ-2025-00001"


@pytest.mark.asyncio
async def test_committed_allocation_is_consumed(db_session):
    async with atomic(db_session):
        await receipt_allocator.allocate(db_session, ReceiptCategory.BOLI, 2025)

    async with atomic(db_session):
        assert await next_value(db_session, "receipt:boli:2025") == 2
