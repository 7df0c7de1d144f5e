"""
Withdrawal workflow: users request payouts, admins approve or reject them.

A Withdrawal moves pending -> approved or pending -> rejected exactly once.
Requests check funds under the account row lock and count other pending
withdrawals as reserved; approvals re-check the balance while debiting, so a
balance that dropped in the meantime fails the decision as a whole.
"""
from decimal import Decimal

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from pixbank.config import settings
from pixbank.core.constants import (
    WITHDRAWAL_TRANSITIONS,
    ActivityAction,
    TransactionStatus,
    TransactionType,
    WithdrawalStatus,
    ensure_transition,
)
from pixbank.core.exceptions import (
    AlreadyProcessed,
    InsufficientFunds,
    InvalidStatus,
    ValidationError,
    WithdrawalNotFound,
)
from pixbank.core.logging import app_logger
from pixbank.core.timeutils import utcnow
from pixbank.models.transaction import Transaction
from pixbank.models.withdrawal import Withdrawal
from pixbank.services.activity import SYSTEM, RequestMeta, record_activity
from pixbank.services.balance import adjust_balance, lock_account, to_money

DECISIONS = {WithdrawalStatus.APPROVED.value, WithdrawalStatus.REJECTED.value}


async def reserved_funds(db: AsyncSession, user_id: int) -> Decimal:
    """Sum of amount + fee over the user's still-pending withdrawals."""
    result = await db.execute(
        select(func.coalesce(func.sum(Withdrawal.amount + Withdrawal.fee), 0)).where(
            Withdrawal.user_id == user_id,
            Withdrawal.status == WithdrawalStatus.PENDING.value,
        )
    )
    return to_money(result.scalar_one())


async def request_withdrawal(
    db: AsyncSession,
    user_id: int,
    amount: Decimal,
    pix_key: str,
    meta: RequestMeta = SYSTEM,
) -> Withdrawal:
    """
    Create a pending withdrawal if the account can cover amount + fee.

    The balance is not touched here; it is debited on approval.

    Raises:
        ValidationError: non-positive amount or empty pix_key
        InsufficientFunds: amount + fee exceeds the unreserved balance
        UserNotFound: unknown account
    """
    amount = to_money(amount)
    pix_key = (pix_key or "").strip()
    if amount <= 0:
        raise ValidationError("Amount must be positive")
    if not pix_key:
        raise ValidationError("PIX key is required")

    fee = to_money(settings.WITHDRAWAL_FEE)
    total = amount + fee

    try:
        user = await lock_account(db, user_id)
        available = to_money(user.balance) - await reserved_funds(db, user_id)
        if total > available:
            raise InsufficientFunds()

        withdrawal = Withdrawal(
            user_id=user_id,
            amount=amount,
            fee=fee,
            pix_key=pix_key,
            status=WithdrawalStatus.PENDING.value,
        )
        db.add(withdrawal)
        record_activity(
            db,
            user_id,
            ActivityAction.WITHDRAWAL_REQUESTED,
            f"Withdrawal requested: {amount} (fee: {fee})",
            meta,
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    app_logger.info(f"Withdrawal {withdrawal.id} of {amount} requested by user {user_id}")
    return withdrawal


async def get_withdrawal(db: AsyncSession, withdrawal_id: int) -> Withdrawal:
    result = await db.execute(
        select(Withdrawal)
        .where(Withdrawal.id == withdrawal_id)
        .execution_options(populate_existing=True)
    )
    withdrawal = result.scalar_one_or_none()
    if withdrawal is None:
        raise WithdrawalNotFound()
    return withdrawal


async def decide_withdrawal(
    db: AsyncSession,
    withdrawal_id: int,
    admin_id: int,
    status: str,
    notes: str | None = None,
    meta: RequestMeta = SYSTEM,
) -> Withdrawal:
    """
    Approve or reject a pending withdrawal.

    Approval debits amount + fee and records a completed withdraw Transaction;
    rejection only stamps the decision. Either way the change is committed as a
    single unit, and any failure leaves the withdrawal pending.

    Raises:
        InvalidStatus: status is not approved/rejected
        WithdrawalNotFound: unknown withdrawal_id
        AlreadyProcessed: the withdrawal was already decided
        InsufficientFunds: approval would overdraw the account
    """
    if status not in DECISIONS:
        raise InvalidStatus("Status must be 'approved' or 'rejected'")
    target = WithdrawalStatus(status)

    withdrawal = await get_withdrawal(db, withdrawal_id)
    if withdrawal.status != WithdrawalStatus.PENDING.value:
        raise AlreadyProcessed()
    ensure_transition(WITHDRAWAL_TRANSITIONS, WithdrawalStatus(withdrawal.status), target)

    owner_id = withdrawal.user_id
    amount = to_money(withdrawal.amount)
    fee = to_money(withdrawal.fee)
    pix_key = withdrawal.pix_key

    try:
        result = await db.execute(
            update(Withdrawal)
            .where(
                Withdrawal.id == withdrawal_id,
                Withdrawal.status == WithdrawalStatus.PENDING.value,
            )
            .values(
                status=target.value,
                admin_notes=notes,
                processed_at=utcnow(),
                processed_by=admin_id,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise AlreadyProcessed()

        if target is WithdrawalStatus.APPROVED:
            new_balance = await adjust_balance(db, owner_id, -(amount + fee))
            db.add(
                Transaction(
                    user_id=owner_id,
                    type=TransactionType.WITHDRAW.value,
                    amount=amount,
                    fee=fee,
                    description=f"Withdrawal approved - PIX: {pix_key}",
                    pix_key=pix_key,
                    status=TransactionStatus.COMPLETED.value,
                )
            )
            record_activity(
                db,
                owner_id,
                ActivityAction.WITHDRAWAL_APPROVED,
                f"Withdrawal {withdrawal_id} approved by admin {admin_id}: {amount} to {pix_key}",
                meta,
            )
        else:
            record_activity(
                db,
                owner_id,
                ActivityAction.WITHDRAWAL_REJECTED,
                f"Withdrawal {withdrawal_id} rejected by admin {admin_id}: "
                f"{notes or 'no reason given'}",
                meta,
            )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    if target is WithdrawalStatus.APPROVED:
        app_logger.info(
            f"Withdrawal {withdrawal_id} approved, debited {amount + fee} from user "
            f"{owner_id}, balance now {new_balance}"
        )
    else:
        app_logger.info(f"Withdrawal {withdrawal_id} rejected by admin {admin_id}")

    return await get_withdrawal(db, withdrawal_id)


async def list_user_withdrawals(db: AsyncSession, user_id: int) -> list[Withdrawal]:
    result = await db.execute(
        select(Withdrawal)
        .where(Withdrawal.user_id == user_id)
        .order_by(Withdrawal.created_at.desc(), Withdrawal.id.desc())
    )
    return list(result.scalars().all())


async def list_pending_withdrawals(db: AsyncSession) -> list[Withdrawal]:
    """Pending withdrawals, newest first, with their owners loaded."""
    result = await db.execute(
        select(Withdrawal)
        .options(selectinload(Withdrawal.user))
        .where(Withdrawal.status == WithdrawalStatus.PENDING.value)
        .order_by(Withdrawal.created_at.desc(), Withdrawal.id.desc())
    )
    return list(result.scalars().all())
