"""
Expense API endpoints.

Fund outflows, consumed by the dashboard's cash-in-bank figure.
"""

from datetime import date
from fastapi import APIRouter, Depends, status, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from typing import List, Optional

from backend.app.db.session import get_db, utcnow
from backend.app.core.exceptions import NotFoundError, ValidationError
from backend.app.core.guards import require_admin, require_staff
from backend.app.models.expense_entry import ExpenseEntry
from backend.app.schemas.expense import ExpenseCreate, ExpenseResponse, ExpenseUpdate

router = APIRouter(prefix="/expense-entries", tags=["Expenses"])


async def get_expense_or_404(db: AsyncSession, expense_id: int) -> ExpenseEntry:
    expense = await db.get(ExpenseEntry, expense_id)
    if expense is None:
        raise NotFoundError("Expense entry", expense_id)
    return expense


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    body: ExpenseCreate,
    current_user: dict = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    expense = ExpenseEntry(**body.model_dump(), created_by=current_user["sub"])
    db.add(expense)
    await db.commit()
    return expense


@router.get("", response_model=List[ExpenseResponse])
async def list_expenses(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    current_user: dict = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    query = select(ExpenseEntry).order_by(desc(ExpenseEntry.expense_date), desc(ExpenseEntry.id))
    if start_date:
        query = query.where(ExpenseEntry.expense_date >= start_date)
    if end_date:
        query = query.where(ExpenseEntry.expense_date <= end_date)

    result = await db.execute(query)
    return result.scalars().all()


@router.get("/{expense_id}", response_model=ExpenseResponse)
async def get_expense(
    expense_id: int = Path(..., description="Expense entry ID"),
    current_user: dict = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    return await get_expense_or_404(db, expense_id)


@router.patch("/{expense_id}", response_model=ExpenseResponse)
async def update_expense(
    body: ExpenseUpdate,
    expense_id: int = Path(..., description="Expense entry ID"),
    current_user: dict = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    """Correct an expense. Fields left out or sent as null keep their value."""
    expense = await get_expense_or_404(db, expense_id)

    changes = {
        field: value for field, value in body.model_dump(exclude_none=True).items()
        if value != getattr(expense, field)
    }
    if not changes:
        raise ValidationError("No changes to apply")

    for field, value in changes.items():
        setattr(expense, field, value)
    expense.updated_at = utcnow()

    await db.commit()
    return expense


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    expense_id: int = Path(..., description="Expense entry ID"),
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Expenses carry no receipts, so they are removed outright."""
    expense = await get_expense_or_404(db, expense_id)
    await db.delete(expense)
    await db.commit()
