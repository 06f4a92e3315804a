"""
Transaction Log API endpoints (read-only).
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from backend.app.db.session import get_db
from backend.app.core.guards import require_admin
from backend.app.models.ledger_enums import TransactionType
from backend.app.schemas.ledger import TransactionLogResponse
from backend.app.services import transaction_log

router = APIRouter(prefix="/transaction-logs", tags=["Transaction Logs"])


@router.get("", response_model=List[TransactionLogResponse])
async def list_transaction_logs(
    transaction_type: Optional[TransactionType] = Query(None, alias="type"),
    limit: int = Query(500, ge=1, le=5000),
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await transaction_log.list_logs(db, transaction_type=transaction_type, limit=limit)
