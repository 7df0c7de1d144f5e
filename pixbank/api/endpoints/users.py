from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pixbank.core.dependencies import get_current_user
from pixbank.database import get_db
from pixbank.models.transaction import Transaction
from pixbank.models.user import User
from pixbank.schemas.auth import UserResponse
from pixbank.schemas.transaction import TransactionResponse
from pixbank.schemas.withdrawal import WithdrawalResponse
from pixbank.services.withdrawals import list_user_withdrawals

router = APIRouter()


@router.get("/profile", response_model=UserResponse)
async def get_profile(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Current user's profile with a freshly read balance."""
    result = await db.execute(select(User).where(User.id == current_user.id))
    return result.scalar_one()


@router.get("/transactions", response_model=list[TransactionResponse])
async def list_transactions(
    limit: int = Query(50, ge=1, le=200, description="Max rows (newest first)"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Statement of completed money movements, newest first."""
    result = await db.execute(
        select(Transaction)
        .where(Transaction.user_id == current_user.id)
        .order_by(Transaction.created_at.desc(), Transaction.id.desc())
        .limit(limit)
    )
    return result.scalars().all()


@router.get("/withdrawals", response_model=list[WithdrawalResponse])
async def list_withdrawals(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await list_user_withdrawals(db, current_user.id)
