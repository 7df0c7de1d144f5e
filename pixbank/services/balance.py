"""
Account balance manager.

`adjust_balance` is the only code path allowed to change ``User.balance``.
It locks the account row for the rest of the caller's transaction, so every
read-validate-write on one account is serialized while other accounts proceed
in parallel. It never commits: the caller owns the unit of work and commits
once the balance change and its ledger rows are staged together.
"""
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pixbank.core.constants import CENT
from pixbank.core.exceptions import InsufficientFunds, UserNotFound
from pixbank.models.user import User


def to_money(value) -> Decimal:
    """Coerce a stored or computed amount to a 2-digit Decimal."""
    return Decimal(str(value)).quantize(CENT)


async def lock_account(db: AsyncSession, user_id: int) -> User:
    """
    Load the user row with SELECT ... FOR UPDATE.

    Raises:
        UserNotFound: if no such account exists
    """
    result = await db.execute(
        select(User)
        .where(User.id == user_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise UserNotFound()
    return user


async def adjust_balance(db: AsyncSession, user_id: int, delta: Decimal) -> Decimal:
    """
    Apply a signed delta to the user's balance inside the caller's transaction.

    Args:
        db: Session whose transaction the change joins
        user_id: Account to mutate
        delta: Positive for credits, negative for debits

    Returns:
        Decimal: The new balance

    Raises:
        UserNotFound: if the account does not exist
        InsufficientFunds: if a debit would leave the balance below zero
    """
    user = await lock_account(db, user_id)
    current = to_money(user.balance)
    new_balance = (current + to_money(delta)).quantize(CENT)
    if new_balance < 0:
        raise InsufficientFunds(
            f"Insufficient funds: balance {current}, required {-to_money(delta)}"
        )
    user.balance = new_balance
    await db.flush()
    return new_balance
