from datetime import datetime

from pydantic import BaseModel

from pixbank.schemas.money import Money


class TransactionResponse(BaseModel):
    """Ledger row as shown in the user's statement."""

    model_config = {"from_attributes": True}

    id: int
    type: str
    amount: Money
    fee: Money
    description: str | None = None
    pix_id: str | None = None
    pix_key: str | None = None
    status: str
    created_at: datetime
