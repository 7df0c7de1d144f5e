from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from pixbank.core.constants import PixStatus
from pixbank.core.timeutils import utcnow
from pixbank.database import Base


class PixPayment(Base):
    __tablename__ = "pix_payments"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)  # Gross amount requested
    pix_id = Column(String(128), unique=True, nullable=False, index=True)
    qr_code = Column(Text, nullable=False)  # Copy-and-paste payable code
    description = Column(Text)
    status = Column(String(10), nullable=False, default=PixStatus.PENDING.value)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    paid_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    user = relationship("User", back_populates="pix_payments")
