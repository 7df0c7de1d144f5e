"""Status vocabularies and the transition tables that govern them."""
from decimal import Decimal
from enum import Enum

from pixbank.core.exceptions import InvalidTransition

CENT = Decimal("0.01")


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class TransactionType(str, Enum):
    RECEIVE = "receive"
    WITHDRAW = "withdraw"
    FEE = "fee"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    APPROVED = "approved"
    REJECTED = "rejected"


class PixStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    EXPIRED = "expired"


class WithdrawalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ActivityAction(str, Enum):
    USER_REGISTERED = "user_registered"
    USER_LOGIN = "user_login"
    PIX_GENERATED = "pix_generated"
    PAYMENT_RECEIVED = "payment_received"
    PIX_EXPIRED = "pix_expired"
    WITHDRAWAL_REQUESTED = "withdrawal_requested"
    WITHDRAWAL_APPROVED = "withdrawal_approved"
    WITHDRAWAL_REJECTED = "withdrawal_rejected"


PIX_TRANSITIONS: dict[PixStatus, frozenset[PixStatus]] = {
    PixStatus.PENDING: frozenset({PixStatus.PAID, PixStatus.EXPIRED}),
    PixStatus.PAID: frozenset(),
    PixStatus.EXPIRED: frozenset(),
}

WITHDRAWAL_TRANSITIONS: dict[WithdrawalStatus, frozenset[WithdrawalStatus]] = {
    WithdrawalStatus.PENDING: frozenset(
        {WithdrawalStatus.APPROVED, WithdrawalStatus.REJECTED}
    ),
    WithdrawalStatus.APPROVED: frozenset(),
    WithdrawalStatus.REJECTED: frozenset(),
}


def ensure_transition(table: dict, current: Enum, target: Enum) -> None:
    """
    Raise InvalidTransition unless `current -> target` is listed in `table`.

    Args:
        table: One of the *_TRANSITIONS mappings
        current: Status the record is in now
        target: Status the caller wants to move it to
    """
    allowed = table.get(current, frozenset())
    if target not in allowed:
        raise InvalidTransition(
            f"Cannot move from '{current.value}' to '{target.value}'"
        )
