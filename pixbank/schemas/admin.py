from pydantic import BaseModel

from pixbank.schemas.money import Money


class AdminStats(BaseModel):
    total_revenue: Money
    active_users: int
    pending_withdrawals: int
    today_transactions: int
