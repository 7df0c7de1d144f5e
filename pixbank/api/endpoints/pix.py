"""PIX receipt endpoints."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from pixbank.core.dependencies import get_current_user, get_request_meta
from pixbank.database import get_db
from pixbank.models.user import User
from pixbank.schemas.pix import (
    PixChargeResponse,
    PixGenerateRequest,
    PixPaymentResponse,
    PixVerifyResponse,
)
from pixbank.services.activity import RequestMeta
from pixbank.services.pix_gateway import PixGateway, get_pix_gateway
from pixbank.services.pix_receipts import generate_receipt, get_receipt, verify_receipt

router = APIRouter()


@router.post(
    "/generate", response_model=PixChargeResponse, status_code=status.HTTP_201_CREATED
)
async def generate_pix(
    payload: PixGenerateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    gateway: PixGateway = Depends(get_pix_gateway),
    meta: RequestMeta = Depends(get_request_meta),
):
    """
    Generate a PIX charge the user can pay into their account.

    - **amount**: Gross amount, minimum 10.00; 8% is retained as fee on receipt
    - **description**: Optional free text kept with the charge
    """
    return await generate_receipt(
        db, gateway, current_user.id, payload.amount, payload.description, meta
    )


@router.post("/verify/{pix_id}", response_model=PixVerifyResponse)
async def verify_pix(
    pix_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    gateway: PixGateway = Depends(get_pix_gateway),
    meta: RequestMeta = Depends(get_request_meta),
):
    """
    Poll the gateway for a charge and credit the account once it is paid.

    Repeated calls after payment report paid without crediting again.
    Admins may verify any charge; users only their own.
    """
    owner_id = None if current_user.is_admin else current_user.id
    result = await verify_receipt(db, gateway, pix_id, owner_id, meta)
    return PixVerifyResponse(paid=result.paid, status=result.status)


@router.get("/{pix_id}", response_model=PixPaymentResponse)
async def get_pix(
    pix_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await get_receipt(db, pix_id, current_user.id)
