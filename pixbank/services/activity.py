"""Audit trail writer. Entries join the caller's unit of work and are never read back."""
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from pixbank.core.constants import ActivityAction
from pixbank.models.activity_log import ActivityLog


@dataclass(frozen=True)
class RequestMeta:
    ip_address: str | None = None
    user_agent: str | None = None


SYSTEM = RequestMeta()


def record_activity(
    db: AsyncSession,
    user_id: int | None,
    action: ActivityAction,
    details: str,
    meta: RequestMeta = SYSTEM,
) -> ActivityLog:
    """Stage an ActivityLog row; it is persisted when the caller commits."""
    entry = ActivityLog(
        user_id=user_id,
        action=action.value,
        details=details,
        ip_address=meta.ip_address,
        user_agent=meta.user_agent,
    )
    db.add(entry)
    return entry
