"""
Previous Outstanding API endpoints.

Legacy balances migrated from the paper ledger and their payments.
"""

from fastapi import APIRouter, Depends, status, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from backend.app.db.session import get_db
from backend.app.core.dependencies import get_current_user
from backend.app.core.guards import require_admin, require_staff, enforce_payment_edit_permissions
from backend.app.domain.ledger.entry_service import EntryService
from backend.app.domain.ledger.payment_ledger import PaymentLedger
from backend.app.models.ledger_enums import ReceiptCategory
from backend.app.schemas.ledger import (
    OutstandingCreate, OutstandingUpdate, OutstandingResponse,
    PaymentCreate, PaymentUpdate, TransactionLogResponse
)
from backend.app.services import transaction_log

router = APIRouter(prefix="/previous-outstanding", tags=["Previous Outstanding"])


@router.post("", response_model=OutstandingResponse, status_code=status.HTTP_201_CREATED)
async def create_outstanding_record(
    body: OutstandingCreate,
    current_user: dict = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    return await EntryService.create_outstanding_record(
        db,
        user_id=body.user_id,
        outstanding_amount=body.outstanding_amount,
        actor=current_user,
        description=body.description,
        attachment_url=body.attachment_url,
        attachment_name=body.attachment_name,
    )


@router.get("", response_model=List[OutstandingResponse])
async def list_outstanding_records(
    user_id: Optional[int] = Query(None, alias="userId"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await EntryService.list_outstanding_records(db, user_id=user_id)


@router.get("/{record_id}", response_model=OutstandingResponse)
async def get_outstanding_record(
    record_id: int = Path(..., description="Record ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await EntryService.get_outstanding_record(db, record_id)


@router.patch("/{record_id}", response_model=OutstandingResponse)
async def edit_outstanding_record(
    body: OutstandingUpdate,
    record_id: int = Path(..., description="Record ID"),
    current_user: dict = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    return await EntryService.edit_outstanding_record(
        db,
        record_id,
        actor=current_user,
        outstanding_amount=body.outstanding_amount,
        description=body.description,
        user_id=body.user_id,
        attachment_url=body.attachment_url,
        attachment_name=body.attachment_name,
    )


@router.post("/{record_id}/payments", response_model=OutstandingResponse, status_code=status.HTTP_201_CREATED)
async def record_outstanding_payment(
    body: PaymentCreate,
    record_id: int = Path(..., description="Record ID"),
    current_user: dict = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    return await PaymentLedger.record_payment(
        db,
        ReceiptCategory.PREVIOUS_OUTSTANDING,
        record_id,
        amount=body.amount,
        payment_date=body.date,
        mode=body.mode,
        actor=current_user,
        file_url=body.file_url,
    )


@router.patch("/{record_id}/payments/{payment_index}", response_model=OutstandingResponse)
async def edit_outstanding_payment(
    body: PaymentUpdate,
    record_id: int = Path(..., description="Record ID"),
    payment_index: int = Path(..., description="0-based payment index"),
    current_user: dict = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    enforce_payment_edit_permissions(current_user, body.model_fields_set)
    return await PaymentLedger.edit_payment(
        db,
        ReceiptCategory.PREVIOUS_OUTSTANDING,
        record_id,
        payment_index,
        actor=current_user,
        amount=body.amount,
        mode=body.mode,
        payment_date=body.date,
        file_url=body.file_url,
    )


@router.delete("/{record_id}/payments/{payment_index}", response_model=OutstandingResponse)
async def delete_outstanding_payment(
    record_id: int = Path(..., description="Record ID"),
    payment_index: int = Path(..., description="0-based payment index"),
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await PaymentLedger.delete_payment(
        db, ReceiptCategory.PREVIOUS_OUTSTANDING, record_id, payment_index, actor=current_user
    )


@router.get("/{record_id}/transaction-logs", response_model=List[TransactionLogResponse])
async def get_outstanding_logs(
    record_id: int = Path(..., description="Record ID"),
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await EntryService.get_outstanding_record(db, record_id)
    return await transaction_log.list_logs_for_entry(db, record_id, ReceiptCategory.PREVIOUS_OUTSTANDING)
