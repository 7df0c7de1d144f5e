from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from pixbank.core.constants import TransactionStatus
from pixbank.core.timeutils import utcnow
from pixbank.database import Base


class Transaction(Base):
    """Append-only record of a money movement. Completed rows are never edited."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(10), nullable=False)  # receive, withdraw, fee
    amount = Column(Numeric(12, 2), nullable=False)
    fee = Column(Numeric(12, 2), nullable=False, default=0)
    description = Column(Text)
    pix_id = Column(String(128), index=True)  # Gateway id for receipts
    pix_key = Column(String(255))  # Destination key for withdrawals
    status = Column(String(10), nullable=False, default=TransactionStatus.PENDING.value)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    # Relationship to User
    user = relationship("User", back_populates="transactions")
