"""
Tests for notification endpoints.
"""

import uuid

import pytest
from fastapi import status

from conftest import auth_headers


async def seed_notifications(async_client, seed, count=2):
    for amount in range(1, count + 1):
        await async_client.post(
            "/api/expenses",
            json={"budgetId": str(seed.budget.id), "amount": amount, "description": "Coffee"},
            headers=auth_headers(seed.employee),
        )


@pytest.mark.asyncio
async def test_list_and_unread_count(async_client, seed):
    await seed_notifications(async_client, seed)
    headers = auth_headers(seed.manager)

    response = await async_client.get("/api/notifications", headers=headers)
    body = response.json()
    assert body["total"] == 2
    assert all(n["type"] == "ACTION" for n in body["data"])
    assert all(n["read"] is False for n in body["data"])

    response = await async_client.get("/api/notifications/unread-count", headers=headers)
    assert response.json() == {"unreadCount": 2}


@pytest.mark.asyncio
async def test_mark_read_and_filter(async_client, seed):
    await seed_notifications(async_client, seed)
    headers = auth_headers(seed.manager)
    first = (await async_client.get("/api/notifications", headers=headers)).json()["data"][0]

    response = await async_client.patch(f"/api/notifications/{first['id']}/read", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["read"] is True

    unread = (
        await async_client.get("/api/notifications", params={"read": "false"}, headers=headers)
    ).json()
    assert unread["total"] == 1


@pytest.mark.asyncio
async def test_mark_all_read(async_client, seed):
    await seed_notifications(async_client, seed, count=3)
    headers = auth_headers(seed.admin)

    response = await async_client.patch("/api/notifications/mark-all-read", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"] == 3

    response = await async_client.get("/api/notifications/unread-count", headers=headers)
    assert response.json() == {"unreadCount": 0}


@pytest.mark.asyncio
async def test_other_users_notifications_are_not_found(async_client, seed):
    await seed_notifications(async_client, seed, count=1)
    notification = (
        await async_client.get("/api/notifications", headers=auth_headers(seed.manager))
    ).json()["data"][0]
    intruder = auth_headers(seed.employee)

    response = await async_client.patch(
        f"/api/notifications/{notification['id']}/read", headers=intruder
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND

    response = await async_client.delete(f"/api/notifications/{notification['id']}", headers=intruder)
    assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.asyncio
async def test_delete_notification(async_client, seed):
    await seed_notifications(async_client, seed, count=1)
    headers = auth_headers(seed.manager)
    notification = (await async_client.get("/api/notifications", headers=headers)).json()["data"][0]

    response = await async_client.delete(f"/api/notifications/{notification['id']}", headers=headers)
    assert response.status_code == status.HTTP_200_OK

    response = await async_client.delete(f"/api/notifications/{uuid.uuid4()}", headers=headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert (await async_client.get("/api/notifications", headers=headers)).json()["total"] == 0
