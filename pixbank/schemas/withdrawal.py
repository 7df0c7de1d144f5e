from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from pixbank.schemas.auth import UserResponse
from pixbank.schemas.money import AmountIn, Money


class WithdrawalCreate(BaseModel):
    amount: AmountIn = Field(gt=0)
    pix_key: str = Field(max_length=255)

    @field_validator("pix_key")
    def validate_pix_key(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("PIX key is required")
        return v


class WithdrawalResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    user_id: int
    amount: Money
    fee: Money
    pix_key: str
    status: str
    admin_notes: str | None = None
    processed_at: datetime | None = None
    processed_by: int | None = None
    created_at: datetime


class PendingWithdrawalResponse(WithdrawalResponse):
    user: UserResponse


class WithdrawalDecision(BaseModel):
    # Checked by the workflow so a bad value surfaces as InvalidStatus
    status: str
    notes: str | None = Field(default=None, max_length=1000)


class WithdrawalDecisionResponse(BaseModel):
    message: str
    withdrawal: WithdrawalResponse
