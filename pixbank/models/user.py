from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String
from sqlalchemy.orm import relationship

from pixbank.core.constants import UserRole
from pixbank.core.timeutils import utcnow
from pixbank.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    cpf = Column(String(11), unique=True, nullable=False, index=True)  # Digits only
    phone = Column(String(20), nullable=False)
    role = Column(String(10), nullable=False, default=UserRole.USER.value)
    # Mutated only through services.balance.adjust_balance
    balance = Column(Numeric(12, 2), nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    transactions = relationship("Transaction", back_populates="user")
    withdrawals = relationship(
        "Withdrawal",
        back_populates="user",
        foreign_keys="Withdrawal.user_id",
    )
    pix_payments = relationship("PixPayment", back_populates="user")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value
