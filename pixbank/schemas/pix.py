from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from pixbank.schemas.money import AmountIn, Money


class PixGenerateRequest(BaseModel):
    # Minimum amount is enforced by the workflow so it surfaces as BelowMinimum
    amount: AmountIn
    description: str | None = Field(default=None, max_length=255)


class PixChargeResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    pix_id: str
    qr_code: str
    amount: Money
    expires_at: datetime


class PixPaymentResponse(PixChargeResponse):
    status: str
    description: str | None = None
    paid_at: datetime | None = None
    created_at: datetime


class PixVerifyResponse(BaseModel):
    paid: bool
    status: str


class PixWebhookPayload(BaseModel):
    """Provider callback body. Only the id is used; state is re-read from the gateway."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    pix_id: str = Field(alias="IDPagamento", min_length=1)
