"""
User API endpoints.

Donor and staff records, plus a donor's advance balance.
"""

from fastapi import APIRouter, Depends, HTTPException, status, Path
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from typing import List

from backend.app.db.session import get_db
from backend.app.models.user import User
from backend.app.core.dependencies import get_current_user
from backend.app.core.guards import require_admin
from backend.app.core.exceptions import NotFoundError
from backend.app.domain.ledger.advance_balance import AdvanceBalanceManager
from backend.app.schemas.user import UserCreate, UserResponse, AdvanceBalanceResponse

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Create a donor (viewer) or staff user."""
    conditions = [User.username == user_data.username]
    if user_data.email:
        conditions.append(User.email == user_data.email)

    result = await db.execute(select(User).where(or_(*conditions)))
    existing_user = result.scalars().first()

    if existing_user:
        detail = "Username already registered" if existing_user.username == user_data.username else "Email already registered"
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

    user = User(
        username=user_data.username,
        name=user_data.name,
        email=user_data.email,
        mobile=user_data.mobile,
        address=user_data.address,
        role=user_data.role,
        is_active=True,
    )
    db.add(user)
    await db.commit()

    return user


@router.get("", response_model=List[UserResponse])
async def list_users(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(select(User).order_by(User.name))
    return result.scalars().all()


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int = Path(..., description="User ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user


@router.get("/{user_id}/advance-balance", response_model=AdvanceBalanceResponse)
async def get_advance_balance(
    user_id: int = Path(..., description="User ID"),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Unspent advance credit, recomputed from advance payments and usage."""
    if await db.get(User, user_id) is None:
        raise NotFoundError("User", user_id)

    balance = await AdvanceBalanceManager.get_balance(db, user_id)
    return AdvanceBalanceResponse(user_id=user_id, balance=balance)
