"""Tests for admin statistics and listings."""
from datetime import timedelta
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from pixbank.core.constants import TransactionStatus, TransactionType, UserRole
from pixbank.core.timeutils import local_midnight_utc
from pixbank.models.transaction import Transaction
from pixbank.services.admin_stats import get_admin_stats


@pytest.mark.asyncio
async def test_stats_empty_ledger(client: AsyncClient, admin_headers: dict):
    response = await client.get("/admin/stats", headers=admin_headers)

    assert response.status_code == 200
    assert response.json() == {
        "total_revenue": "0.00",
        "active_users": 0,
        "pending_withdrawals": 0,
        "today_transactions": 0,
    }


@pytest.mark.asyncio
async def test_stats_after_money_movement(
    client: AsyncClient, user, auth_headers: dict, admin_headers: dict, gateway_stub
):
    gateway_stub.charge(pix_id="PIX-STATS")
    gateway_stub.payment_status()
    await client.post("/pix/generate", json={"amount": "50.00"}, headers=auth_headers)
    await client.post("/pix/verify/PIX-STATS", headers=auth_headers)

    withdrawal = await client.post(
        "/withdrawals", json={"amount": "10.00", "pix_key": "k1"}, headers=auth_headers
    )
    await client.patch(
        f"/admin/withdrawals/{withdrawal.json()['id']}",
        json={"status": "approved"},
        headers=admin_headers,
    )
    await client.post(
        "/withdrawals", json={"amount": "5.00", "pix_key": "k2"}, headers=auth_headers
    )

    response = await client.get("/admin/stats", headers=admin_headers)

    assert response.json() == {
        "total_revenue": "6.00",  # 4.00 receipt fee + 2.00 withdrawal fee
        "active_users": 1,
        "pending_withdrawals": 1,
        "today_transactions": 2,
    }


@pytest.mark.asyncio
async def test_stats_counting_rules(db_session: AsyncSession, make_user, admin):
    active = await make_user("active@example.com")
    await make_user("inactive@example.com", is_active=False)
    await make_user("second-admin@example.com", role=UserRole.ADMIN)

    db_session.add_all(
        [
            Transaction(
                user_id=active.id,
                type=TransactionType.RECEIVE.value,
                amount=Decimal("100.00"),
                fee=Decimal("8.00"),
                status=TransactionStatus.COMPLETED.value,
            ),
            Transaction(
                user_id=active.id,
                type=TransactionType.RECEIVE.value,
                amount=Decimal("100.00"),
                fee=Decimal("8.00"),
                status=TransactionStatus.FAILED.value,
                created_at=local_midnight_utc() - timedelta(hours=1),
            ),
        ]
    )
    await db_session.commit()

    stats = await get_admin_stats(db_session)

    assert stats.total_revenue == Decimal("8.00")
    assert stats.active_users == 1
    assert stats.pending_withdrawals == 0
    assert stats.today_transactions == 1


@pytest.mark.asyncio
async def test_admin_routes_require_admin(client: AsyncClient, auth_headers: dict):
    for path in ("/admin/stats", "/admin/users", "/admin/withdrawals"):
        response = await client.get(path, headers=auth_headers)
        assert response.status_code == 403

    response = await client.get("/admin/stats")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_list_users_excludes_admins(
    client: AsyncClient, user, admin_headers: dict
):
    response = await client.get("/admin/users", headers=admin_headers)

    assert response.status_code == 200
    emails = [u["email"] for u in response.json()]
    assert emails == [user.email]
    assert "hashed_password" not in response.json()[0]


@pytest.mark.asyncio
async def test_pending_withdrawals_include_owner(
    client: AsyncClient, make_user, headers_for, admin_headers: dict
):
    owner = await make_user("owner@example.com", balance="50.00")
    await client.post(
        "/withdrawals", json={"amount": "20.00", "pix_key": "key"}, headers=headers_for(owner)
    )

    response = await client.get("/admin/withdrawals", headers=admin_headers)

    assert response.status_code == 200
    items = response.json()
    assert len(items) == 1
    assert items[0]["user"]["email"] == "owner@example.com"
    assert items[0]["user"]["balance"] == "50.00"
