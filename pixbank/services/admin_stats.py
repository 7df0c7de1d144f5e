"""Read-only aggregates for the admin dashboard."""
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pixbank.core.constants import TransactionStatus, UserRole, WithdrawalStatus
from pixbank.core.timeutils import local_midnight_utc
from pixbank.models.transaction import Transaction
from pixbank.models.user import User
from pixbank.models.withdrawal import Withdrawal
from pixbank.schemas.admin import AdminStats
from pixbank.services.balance import to_money


async def get_admin_stats(db: AsyncSession) -> AdminStats:
    """
    Compute revenue and activity counters.

    Every aggregate is coalesced so an empty ledger reports zeros.
    """
    revenue = await db.execute(
        select(func.coalesce(func.sum(Transaction.fee), 0)).where(
            Transaction.status == TransactionStatus.COMPLETED.value
        )
    )
    active_users = await db.execute(
        select(func.count())
        .select_from(User)
        .where(User.role == UserRole.USER.value, User.is_active.is_(True))
    )
    pending = await db.execute(
        select(func.count())
        .select_from(Withdrawal)
        .where(Withdrawal.status == WithdrawalStatus.PENDING.value)
    )
    today = await db.execute(
        select(func.count())
        .select_from(Transaction)
        .where(Transaction.created_at >= local_midnight_utc())
    )

    return AdminStats(
        total_revenue=to_money(revenue.scalar_one()),
        active_users=active_users.scalar_one() or 0,
        pending_withdrawals=pending.scalar_one() or 0,
        today_transactions=today.scalar_one() or 0,
    )


async def list_customers(db: AsyncSession) -> list[User]:
    """Non-admin accounts, newest first."""
    result = await db.execute(
        select(User)
        .where(User.role == UserRole.USER.value)
        .order_by(User.created_at.desc(), User.id.desc())
    )
    return list(result.scalars().all())
