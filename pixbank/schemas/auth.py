import re
from datetime import datetime

from pydantic import BaseModel, field_validator

from pixbank.schemas.money import Money


class UserRegister(BaseModel):
    email: str
    password: str
    full_name: str
    cpf: str
    phone: str

    @field_validator("email")
    def validate_email(cls, v):
        if not re.match(r"^[^@]+@[^@]+\.[^@]+$", v):
            raise ValueError("Invalid email format")
        return v.lower().strip()

    @field_validator("password")
    def validate_password(cls, v):
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters")
        if not re.search(r"[A-Z]", v):
            raise ValueError("Password must contain uppercase letter")
        if not re.search(r"[a-z]", v):
            raise ValueError("Password must contain lowercase letter")
        if not re.search(r"\d", v):
            raise ValueError("Password must contain digit")
        if not re.search(r'[!@#$%^&*(),.?":{}|<>]', v):
            raise ValueError("Password must contain special character")
        return v

    @field_validator("full_name")
    def validate_full_name(cls, v):
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Full name is required")
        return v

    @field_validator("cpf")
    def validate_cpf(cls, v):
        """Accept formatted input (123.456.789-09) and keep digits only."""
        digits = re.sub(r"\D", "", v)
        if len(digits) != 11:
            raise ValueError("CPF must have 11 digits")
        return digits

    @field_validator("phone")
    def validate_phone(cls, v):
        digits = re.sub(r"\D", "", v)
        if not 10 <= len(digits) <= 13:
            raise ValueError("Invalid phone number")
        return digits


class UserLogin(BaseModel):
    email: str
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str


class UserResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    email: str
    full_name: str
    cpf: str
    phone: str
    role: str
    balance: Money
    is_active: bool
    created_at: datetime
