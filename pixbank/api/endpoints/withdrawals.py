from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from pixbank.core.dependencies import get_current_user, get_request_meta
from pixbank.database import get_db
from pixbank.models.user import User
from pixbank.schemas.withdrawal import WithdrawalCreate, WithdrawalResponse
from pixbank.services.activity import RequestMeta
from pixbank.services.withdrawals import request_withdrawal

router = APIRouter()


@router.post("", response_model=WithdrawalResponse, status_code=status.HTTP_201_CREATED)
async def create_withdrawal(
    payload: WithdrawalCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    meta: RequestMeta = Depends(get_request_meta),
):
    """
    Request a payout to a PIX key. A fixed 2.00 fee applies.

    The request stays pending until an admin decides it; the balance is
    debited only on approval.
    """
    return await request_withdrawal(
        db, current_user.id, payload.amount, payload.pix_key, meta
    )
