from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pixbank.core.constants import ActivityAction, UserRole
from pixbank.core.dependencies import get_request_meta
from pixbank.core.exceptions import AccountDisabled
from pixbank.core.security import create_access_token, get_password_hash, verify_password
from pixbank.database import get_db
from pixbank.models.user import User
from pixbank.schemas.auth import Token, UserLogin, UserRegister, UserResponse
from pixbank.services.activity import RequestMeta, record_activity

router = APIRouter()


async def registration_conflict(db: AsyncSession, email: str, cpf: str) -> str | None:
    """Return the 400 detail for an email or CPF that is already taken, else None."""
    result = await db.execute(select(User).where(or_(User.email == email, User.cpf == cpf)))
    existing = result.scalars().first()
    if existing is None:
        return None
    if existing.email == email:
        return "Email already registered"
    return "CPF already registered"


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db),
    meta: RequestMeta = Depends(get_request_meta),
):
    """Register a new customer account with a zero balance."""
    detail = await registration_conflict(db, user_data.email, user_data.cpf)
    if detail is not None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

    new_user = User(
        email=user_data.email,
        hashed_password=get_password_hash(user_data.password),
        full_name=user_data.full_name,
        cpf=user_data.cpf,
        phone=user_data.phone,
        role=UserRole.USER.value,
        balance=0,
        is_active=True,
    )
    try:
        db.add(new_user)
        await db.flush()
        record_activity(
            db,
            new_user.id,
            ActivityAction.USER_REGISTERED,
            f"User {user_data.full_name} registered",
            meta,
        )
        await db.commit()
    except IntegrityError:
        # A concurrent registration took the email or CPF after the check above
        await db.rollback()
        detail = await registration_conflict(db, user_data.email, user_data.cpf)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail or "Email or CPF already registered",
        )
    await db.refresh(new_user)

    return new_user


@router.post("/login", response_model=Token)
async def login(
    user_data: UserLogin,
    db: AsyncSession = Depends(get_db),
    meta: RequestMeta = Depends(get_request_meta),
):
    """Login endpoint. Accepts JSON with email and password, returns JWT token."""
    result = await db.execute(
        select(User).where(User.email == user_data.email.lower().strip())
    )
    user = result.scalar_one_or_none()

    if not user or not verify_password(user_data.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise AccountDisabled()

    record_activity(
        db, user.id, ActivityAction.USER_LOGIN, f"User {user.full_name} logged in", meta
    )
    await db.commit()

    access_token = create_access_token(user.id, user.role)
    return {"access_token": access_token, "token_type": "bearer"}
