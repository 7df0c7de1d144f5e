"""Domain errors raised by the banking workflows.

Each error carries the HTTP status the API answers with, so endpoints can let
them propagate and the handler registered in ``pixbank.main`` renders them.
"""
from fastapi import status


class BankingError(Exception):
    """Base class for every expected, caller-visible failure."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request could not be processed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(BankingError):
    default_message = "Invalid request"


class BelowMinimum(ValidationError):
    default_message = "Amount is below the minimum allowed"


class InvalidStatus(ValidationError):
    default_message = "Invalid status"


class InvalidTransition(BankingError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Status transition not allowed"


class InsufficientFunds(BankingError):
    default_message = "Insufficient funds"


class GatewayError(BankingError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Payment gateway unavailable"


class AlreadyProcessed(BankingError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Withdrawal already processed"


class NotFound(BankingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class UserNotFound(NotFound):
    default_message = "User not found"


class WithdrawalNotFound(NotFound):
    default_message = "Withdrawal not found"


class PixPaymentNotFound(NotFound):
    default_message = "Payment not found"


class PermissionDenied(BankingError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class AccountDisabled(BankingError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Account disabled"
