"""
Entry API endpoints.

Boli entries, their payments, advance credit application and audit trail.
"""

from fastapi import APIRouter, Depends, status, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from backend.app.db.session import get_db
from backend.app.core.dependencies import get_current_user
from backend.app.core.guards import require_admin, require_staff, enforce_payment_edit_permissions
from backend.app.domain.ledger.advance_balance import AdvanceBalanceManager
from backend.app.domain.ledger.entry_service import EntryService
from backend.app.domain.ledger.payment_ledger import PaymentLedger
from backend.app.models.ledger_enums import PaymentStatus, ReceiptCategory
from backend.app.schemas.ledger import (
    EntryCreate, EntryUpdate, EntryResponse,
    PaymentCreate, PaymentUpdate, AdvanceApply,
    TransactionLogResponse
)
from backend.app.services import transaction_log

router = APIRouter(prefix="/entries", tags=["Entries"])


@router.post("", response_model=EntryResponse, status_code=status.HTTP_201_CREATED)
async def create_entry(
    body: EntryCreate,
    current_user: dict = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    return await EntryService.create_entry(
        db,
        user_id=body.user_id,
        description=body.description,
        amount=body.amount,
        quantity=body.quantity,
        auction_date=body.auction_date,
        actor=current_user,
        occasion=body.occasion,
        bedi_number=body.bedi_number,
    )


@router.get("", response_model=List[EntryResponse])
async def list_entries(
    user_id: Optional[int] = Query(None, alias="userId"),
    payment_status: Optional[PaymentStatus] = Query(None, alias="status"),
    include_deleted: bool = Query(False, alias="includeDeleted"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await EntryService.list_entries(
        db, user_id=user_id, status=payment_status, include_deleted=include_deleted
    )


@router.get("/deleted", response_model=List[EntryResponse])
async def list_deleted_entries(
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await EntryService.list_deleted_entries(db)


@router.get("/{entry_id}", response_model=EntryResponse)
async def get_entry(
    entry_id: int = Path(..., description="Entry ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await EntryService.get_entry(db, entry_id)


@router.put("/{entry_id}", response_model=EntryResponse)
async def update_entry(
    body: EntryUpdate,
    entry_id: int = Path(..., description="Entry ID"),
    current_user: dict = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    return await EntryService.update_entry(
        db,
        entry_id,
        actor=current_user,
        description=body.description,
        occasion=body.occasion,
        bedi_number=body.bedi_number,
        auction_date=body.auction_date,
        user_id=body.user_id,
    )


@router.delete("/{entry_id}", response_model=EntryResponse)
async def delete_entry(
    entry_id: int = Path(..., description="Entry ID"),
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Soft delete. The entry keeps its payments and is excluded from totals."""
    return await EntryService.delete_entry(db, entry_id, actor=current_user)


@router.put("/{entry_id}/restore", response_model=EntryResponse)
async def restore_entry(
    entry_id: int = Path(..., description="Entry ID"),
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await EntryService.restore_entry(db, entry_id, actor=current_user)


# Payments

@router.post("/{entry_id}/payments", response_model=EntryResponse, status_code=status.HTTP_201_CREATED)
async def record_payment(
    body: PaymentCreate,
    entry_id: int = Path(..., description="Entry ID"),
    current_user: dict = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    return await PaymentLedger.record_payment(
        db,
        ReceiptCategory.BOLI,
        entry_id,
        amount=body.amount,
        payment_date=body.date,
        mode=body.mode,
        actor=current_user,
        file_url=body.file_url,
    )


@router.patch("/{entry_id}/payments/{payment_index}", response_model=EntryResponse)
async def edit_payment(
    body: PaymentUpdate,
    entry_id: int = Path(..., description="Entry ID"),
    payment_index: int = Path(..., description="0-based payment index"),
    current_user: dict = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    """Admins may correct every field, operators only mode and proof."""
    enforce_payment_edit_permissions(current_user, body.model_fields_set)
    return await PaymentLedger.edit_payment(
        db,
        ReceiptCategory.BOLI,
        entry_id,
        payment_index,
        actor=current_user,
        amount=body.amount,
        mode=body.mode,
        payment_date=body.date,
        file_url=body.file_url,
    )


@router.delete("/{entry_id}/payments/{payment_index}", response_model=EntryResponse)
async def delete_payment(
    entry_id: int = Path(..., description="Entry ID"),
    payment_index: int = Path(..., description="0-based payment index"),
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await PaymentLedger.delete_payment(
        db, ReceiptCategory.BOLI, entry_id, payment_index, actor=current_user
    )


@router.post("/{entry_id}/advance-payment", response_model=EntryResponse)
async def apply_advance(
    body: Optional[AdvanceApply] = None,
    entry_id: int = Path(..., description="Entry ID"),
    current_user: dict = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    """Settle the entry from the owner's advance credit."""
    body = body or AdvanceApply()
    return await AdvanceBalanceManager.apply_advance(
        db, entry_id, actor=current_user, amount=body.amount, payment_date=body.date
    )


@router.get("/{entry_id}/transaction-logs", response_model=List[TransactionLogResponse])
async def get_entry_logs(
    entry_id: int = Path(..., description="Entry ID"),
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await EntryService.get_entry(db, entry_id)
    return await transaction_log.list_logs_for_entry(db, entry_id, ReceiptCategory.BOLI)
