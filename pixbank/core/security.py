from datetime import timedelta
from typing import Any

import jwt
from pwdlib import PasswordHash

from pixbank.config import settings
from pixbank.core.timeutils import utcnow

# Argon2 hasher shared by registration, login and the admin seed script
pwd_context = PasswordHash.recommended()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(user_id: int, role: str) -> str:
    """Issue a JWT whose subject is the user id; role is informational only."""
    payload = {
        "sub": str(user_id),
        "role": role,
        "exp": utcnow() + timedelta(minutes=settings.JWT_EXPIRY_MINUTES),
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and validate a JWT. Raises jwt.PyJWTError on any problem."""
    return jwt.decode(
        token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM]
    )
