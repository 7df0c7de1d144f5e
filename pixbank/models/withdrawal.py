from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from pixbank.core.constants import WithdrawalStatus
from pixbank.core.timeutils import utcnow
from pixbank.database import Base


class Withdrawal(Base):
    __tablename__ = "withdrawals"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    fee = Column(Numeric(12, 2), nullable=False)
    pix_key = Column(String(255), nullable=False)
    status = Column(
        String(10), nullable=False, default=WithdrawalStatus.PENDING.value, index=True
    )
    admin_notes = Column(Text)
    processed_at = Column(DateTime(timezone=True))
    processed_by = Column(Integer, ForeignKey("users.id"))
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    user = relationship("User", back_populates="withdrawals", foreign_keys=[user_id])
    processed_by_user = relationship("User", foreign_keys=[processed_by])
