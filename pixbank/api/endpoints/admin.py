"""Admin endpoints. Every route is gated by require_admin at router level."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pixbank.core.dependencies import get_request_meta, require_admin
from pixbank.database import get_db
from pixbank.models.user import User
from pixbank.schemas.admin import AdminStats
from pixbank.schemas.auth import UserResponse
from pixbank.schemas.withdrawal import (
    PendingWithdrawalResponse,
    WithdrawalDecision,
    WithdrawalDecisionResponse,
)
from pixbank.services.activity import RequestMeta
from pixbank.services.admin_stats import get_admin_stats, list_customers
from pixbank.services.withdrawals import decide_withdrawal, list_pending_withdrawals

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/stats", response_model=AdminStats)
async def stats(db: AsyncSession = Depends(get_db)):
    return await get_admin_stats(db)


@router.get("/users", response_model=list[UserResponse])
async def users(db: AsyncSession = Depends(get_db)):
    return await list_customers(db)


@router.get("/withdrawals", response_model=list[PendingWithdrawalResponse])
async def pending_withdrawals(db: AsyncSession = Depends(get_db)):
    return await list_pending_withdrawals(db)


@router.patch("/withdrawals/{withdrawal_id}", response_model=WithdrawalDecisionResponse)
async def decide(
    withdrawal_id: int,
    decision: WithdrawalDecision,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    meta: RequestMeta = Depends(get_request_meta),
):
    """
    Approve or reject a pending withdrawal.

    - **status**: "approved" debits amount + fee; "rejected" leaves the balance alone
    - **notes**: Optional reason stored with the decision
    """
    withdrawal = await decide_withdrawal(
        db, withdrawal_id, admin.id, decision.status, decision.notes, meta
    )
    return WithdrawalDecisionResponse(
        message=f"Withdrawal {withdrawal.status}", withdrawal=withdrawal
    )
