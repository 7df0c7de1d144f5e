"""
PIX receipt workflow: generate a charge, poll the gateway, credit exactly once.

A PixPayment moves pending -> paid or pending -> expired. The pending -> paid
move is a conditional UPDATE that can succeed for one caller only; the credit,
the Transaction row and the audit entry are staged in the same transaction and
committed together, so concurrent polls and webhooks never double-credit.
"""
from dataclasses import dataclass
from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from pixbank.config import settings
from pixbank.core.constants import (
    CENT,
    PIX_TRANSITIONS,
    ActivityAction,
    PixStatus,
    TransactionStatus,
    TransactionType,
    ensure_transition,
)
from pixbank.core.exceptions import BelowMinimum, GatewayError, PixPaymentNotFound
from pixbank.core.logging import app_logger
from pixbank.core.timeutils import as_utc, utcnow
from pixbank.models.pix_payment import PixPayment
from pixbank.models.transaction import Transaction
from pixbank.services.activity import SYSTEM, RequestMeta, record_activity
from pixbank.services.balance import adjust_balance, to_money
from pixbank.services.pix_gateway import PixGateway


@dataclass(frozen=True)
class VerifyResult:
    paid: bool
    status: str


def split_fee(amount: Decimal) -> tuple[Decimal, Decimal]:
    """Return (fee, net) for a gross receipt amount."""
    gross = to_money(amount)
    fee = (gross * settings.PIX_FEE_RATE).quantize(CENT, rounding=ROUND_HALF_UP)
    return fee, gross - fee


async def generate_receipt(
    db: AsyncSession,
    gateway: PixGateway,
    user_id: int,
    amount: Decimal,
    description: str | None = None,
    meta: RequestMeta = SYSTEM,
) -> PixPayment:
    """
    Create a charge at the gateway and persist it as a pending PixPayment.

    Raises:
        BelowMinimum: amount under PIX_MIN_AMOUNT, nothing is persisted
        GatewayError: gateway failed or refused, nothing is persisted
    """
    amount = to_money(amount)
    if amount < settings.PIX_MIN_AMOUNT:
        raise BelowMinimum(f"Minimum amount is {settings.PIX_MIN_AMOUNT}")

    charge, error = await gateway.create(amount, str(user_id))
    if error is not None:
        app_logger.error(f"PIX charge creation failed for user {user_id}: {error}")
        raise GatewayError("Could not generate PIX charge")

    payment = PixPayment(
        user_id=user_id,
        amount=amount,
        pix_id=charge.external_id,
        qr_code=charge.payable_code,
        description=description,
        status=PixStatus.PENDING.value,
        expires_at=utcnow() + timedelta(minutes=settings.PIX_EXPIRY_MINUTES),
    )
    try:
        db.add(payment)
        record_activity(
            db,
            user_id,
            ActivityAction.PIX_GENERATED,
            f"PIX charge {charge.external_id} generated for {amount}",
            meta,
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    app_logger.info(f"PIX charge {payment.pix_id} created for user {user_id}")
    return payment


async def get_receipt(
    db: AsyncSession, pix_id: str, owner_id: int | None = None
) -> PixPayment:
    """Load a PixPayment by gateway id, optionally restricted to its owner."""
    query = select(PixPayment).where(PixPayment.pix_id == pix_id)
    if owner_id is not None:
        query = query.where(PixPayment.user_id == owner_id)
    result = await db.execute(query.execution_options(populate_existing=True))
    payment = result.scalar_one_or_none()
    if payment is None:
        raise PixPaymentNotFound()
    return payment


async def verify_receipt(
    db: AsyncSession,
    gateway: PixGateway,
    pix_id: str,
    owner_id: int | None = None,
    meta: RequestMeta = SYSTEM,
) -> VerifyResult:
    """
    Report a receipt's state, crediting the owner if the gateway approved it.

    Safe to call any number of times, concurrently or not; the credit happens
    at most once per pix_id.

    Raises:
        PixPaymentNotFound: unknown pix_id (or not owned by owner_id)
        GatewayError: the gateway could not be queried
    """
    payment = await get_receipt(db, pix_id, owner_id)

    if payment.status != PixStatus.PENDING.value:
        return VerifyResult(paid=payment.status == PixStatus.PAID.value, status=payment.status)

    if as_utc(payment.expires_at) < utcnow():
        return await _expire(db, payment, meta)

    gateway_status, error = await gateway.check(pix_id)
    if error is not None:
        app_logger.error(f"PIX verification failed for {pix_id}: {error}")
        raise GatewayError("Could not verify PIX payment")

    if gateway_status.state != "approved":
        return VerifyResult(paid=False, status=gateway_status.label)

    return await _mark_paid(db, payment, meta)


async def _mark_paid(
    db: AsyncSession, payment: PixPayment, meta: RequestMeta
) -> VerifyResult:
    ensure_transition(PIX_TRANSITIONS, PixStatus(payment.status), PixStatus.PAID)
    payment_id, user_id, pix_id = payment.id, payment.user_id, payment.pix_id
    now = utcnow()

    try:
        result = await db.execute(
            update(PixPayment)
            .where(
                PixPayment.id == payment_id,
                PixPayment.status == PixStatus.PENDING.value,
                PixPayment.expires_at >= now,
            )
            .values(status=PixStatus.PAID.value, paid_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            # Another caller committed first, or the charge just expired
            await db.rollback()
            current = await _current_status(db, payment_id)
            app_logger.info(f"PIX {pix_id} not credited here, record is '{current}'")
            return VerifyResult(paid=current == PixStatus.PAID.value, status=current)

        fee, net = split_fee(payment.amount)
        gross = to_money(payment.amount)
        new_balance = await adjust_balance(db, user_id, net)
        db.add(
            Transaction(
                user_id=user_id,
                type=TransactionType.RECEIVE.value,
                amount=gross,
                fee=fee,
                description="PIX receipt",
                pix_id=pix_id,
                status=TransactionStatus.COMPLETED.value,
            )
        )
        record_activity(
            db,
            user_id,
            ActivityAction.PAYMENT_RECEIVED,
            f"PIX receipt of {gross} (fee: {fee})",
            meta,
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    app_logger.info(
        f"PIX {pix_id} credited {net} to user {user_id}, balance now {new_balance}"
    )
    return VerifyResult(paid=True, status=PixStatus.PAID.value)


async def _expire(
    db: AsyncSession, payment: PixPayment, meta: RequestMeta
) -> VerifyResult:
    ensure_transition(PIX_TRANSITIONS, PixStatus(payment.status), PixStatus.EXPIRED)
    payment_id, user_id, pix_id = payment.id, payment.user_id, payment.pix_id

    try:
        result = await db.execute(
            update(PixPayment)
            .where(
                PixPayment.id == payment_id,
                PixPayment.status == PixStatus.PENDING.value,
            )
            .values(status=PixStatus.EXPIRED.value)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            record_activity(
                db, user_id, ActivityAction.PIX_EXPIRED, f"PIX charge {pix_id} expired", meta
            )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    current = await _current_status(db, payment_id)
    return VerifyResult(paid=current == PixStatus.PAID.value, status=current)


async def _current_status(db: AsyncSession, payment_id: int) -> str:
    result = await db.execute(
        select(PixPayment.status).where(PixPayment.id == payment_id)
    )
    return result.scalar_one()
