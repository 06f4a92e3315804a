"""
Dashboard API endpoints.

Summary figures, daily totals, flat payment listings and the corpus
setting behind the cash-in-bank figure.
"""

from datetime import date
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict, List, Optional

from backend.app.db.session import get_db, utcnow
from backend.app.core.guards import require_admin, require_staff
from backend.app.services.dashboard import DashboardService, DEFAULT_CORPUS_BASE_DATE
from backend.app.models.ledger_enums import RecordStatus
from backend.app.schemas.dashboard import (
    DashboardResponse, CorpusSettingsUpdate, CorpusSettingsResponse,
    BoliPaymentListItem, OutstandingPaymentListItem
)

router = APIRouter(tags=["Dashboard"])


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    current_user: dict = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    """Totals for entries auctioned in [startDate, endDate] plus the overall position."""
    return await DashboardService.get_dashboard(db, start_date=start_date, end_date=end_date)


@router.get("/daily-payments", response_model=Dict[str, int])
async def get_daily_payments(
    year: Optional[int] = Query(None, ge=1900, le=9999),
    current_user: dict = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    """Amount received per payment date, keyed by ISO date. Defaults to the current year."""
    return await DashboardService.get_daily_payments(db, year or date.today().year)


@router.get("/daily-earnings", response_model=Dict[str, int])
async def get_daily_earnings(
    year: Optional[int] = Query(None, ge=1900, le=9999),
    current_user: dict = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    """Amount pledged per auction date, keyed by ISO date."""
    return await DashboardService.get_daily_earnings(db, year or date.today().year)


@router.get("/boli-payments", response_model=List[BoliPaymentListItem])
async def list_boli_payments(
    payment_status: Optional[RecordStatus] = Query(None, alias="status"),
    current_user: dict = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    return await DashboardService.list_boli_payments(db, status=payment_status)


@router.get("/previous-outstanding-payments", response_model=List[OutstandingPaymentListItem])
async def list_outstanding_payments(
    payment_status: Optional[RecordStatus] = Query(None, alias="status"),
    current_user: dict = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    return await DashboardService.list_outstanding_payments(db, status=payment_status)


@router.get("/corpus-settings", response_model=CorpusSettingsResponse)
async def get_corpus_settings(
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    corpus = await DashboardService.get_corpus(db)
    if corpus is None:
        return CorpusSettingsResponse(
            corpus_value=0,
            base_date=DEFAULT_CORPUS_BASE_DATE,
            updated_by="system",
            updated_at=utcnow(),
        )
    return corpus


@router.put("/corpus-settings", response_model=CorpusSettingsResponse)
async def update_corpus_settings(
    body: CorpusSettingsUpdate,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await DashboardService.update_corpus(db, body.corpus_value, body.base_date, actor=current_user)
