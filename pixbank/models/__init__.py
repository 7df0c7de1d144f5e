from pixbank.database import Base

# Import all models here so Base.metadata knows every table
from pixbank.models.user import User
from pixbank.models.transaction import Transaction
from pixbank.models.withdrawal import Withdrawal
from pixbank.models.pix_payment import PixPayment
from pixbank.models.activity_log import ActivityLog

__all__ = ["Base", "User", "Transaction", "Withdrawal", "PixPayment", "ActivityLog"]
