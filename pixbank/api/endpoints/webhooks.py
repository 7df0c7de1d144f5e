"""Gateway callbacks."""
import hashlib
import hmac

from fastapi import APIRouter, Depends, Header, HTTPException, Request, Response, status
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from pixbank.config import settings
from pixbank.core.dependencies import get_request_meta
from pixbank.database import get_db
from pixbank.schemas.pix import PixWebhookPayload
from pixbank.services.activity import RequestMeta
from pixbank.services.pix_gateway import PixGateway, get_pix_gateway
from pixbank.services.pix_receipts import verify_receipt

router = APIRouter()


def verify_signature(raw_body: bytes, signature: str | None) -> None:
    if not signature:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Missing signature")
    expected = hmac.new(
        settings.PIX_WEBHOOK_SECRET.encode(), raw_body, hashlib.sha256
    ).hexdigest()
    if not hmac.compare_digest(expected, signature):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid signature")


@router.post("/pix", status_code=status.HTTP_204_NO_CONTENT)
async def pix_webhook(
    request: Request,
    x_signature: str | None = Header(default=None, alias="X-Signature"),
    db: AsyncSession = Depends(get_db),
    gateway: PixGateway = Depends(get_pix_gateway),
    meta: RequestMeta = Depends(get_request_meta),
):
    """
    Payment notification from the gateway.

    The body only names the charge. Its state is re-read from the gateway
    through the same path as a client poll, so a forged or replayed
    notification can never credit anything by itself.
    """
    if not settings.PIX_WEBHOOK_SECRET:
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Not found")

    raw = await request.body()
    verify_signature(raw, x_signature)

    try:
        payload = PixWebhookPayload.model_validate_json(raw)
    except PydanticValidationError:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Invalid payload")

    await verify_receipt(db, gateway, payload.pix_id, meta=meta)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
