"""
Advance Payment API endpoints.

Credits donors pre-pay, later applied to entries.
"""

from fastapi import APIRouter, Depends, status, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from backend.app.db.session import get_db
from backend.app.core.dependencies import get_current_user
from backend.app.core.guards import require_admin, require_staff
from backend.app.domain.ledger.advance_balance import AdvanceBalanceManager
from backend.app.schemas.ledger import AdvancePaymentCreate, AdvancePaymentResponse

router = APIRouter(prefix="/advance-payments", tags=["Advance Payments"])


@router.post("", response_model=AdvancePaymentResponse, status_code=status.HTTP_201_CREATED)
async def create_advance_payment(
    body: AdvancePaymentCreate,
    current_user: dict = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    return await AdvanceBalanceManager.create_advance_payment(
        db,
        user_id=body.user_id,
        amount=body.amount,
        payment_date=body.date,
        mode=body.payment_mode,
        actor=current_user,
        attachment_url=body.attachment_url,
    )


@router.get("", response_model=List[AdvancePaymentResponse])
async def list_advance_payments(
    user_id: Optional[int] = Query(None, alias="userId"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await AdvanceBalanceManager.list_advance_payments(db, user_id=user_id)


@router.delete("/{advance_id}", response_model=AdvancePaymentResponse)
async def void_advance_payment(
    advance_id: int = Path(..., description="Advance payment ID"),
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Only possible while the donor's unspent balance still covers the amount."""
    return await AdvanceBalanceManager.void_advance_payment(db, advance_id, actor=current_user)
