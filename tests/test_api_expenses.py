"""
Tests for expense and approval endpoints.
"""

import uuid

import pytest
from fastapi import status

from conftest import auth_headers


async def submit(async_client, user, budget, amount=150, description="Conference travel"):
    return await async_client.post(
        "/api/expenses",
        json={"budgetId": str(budget.id), "amount": amount, "description": description},
        headers=auth_headers(user),
    )


@pytest.mark.asyncio
async def test_submit_expense(async_client, seed):
    response = await submit(async_client, seed.employee, seed.budget)
    assert response.status_code == status.HTTP_201_CREATED

    body = response.json()
    assert body["success"] is True
    assert body["data"]["status"] == "PENDING"
    assert body["data"]["amount"] == 150.0
    assert body["data"]["userId"] == str(seed.employee.id)
    assert body["data"]["budget"]["name"] == "Engineering Travel"
    assert body["data"]["user"]["name"] == "Sam Staff"


@pytest.mark.asyncio
async def test_submit_notifies_approvers(async_client, seed):
    await submit(async_client, seed.employee, seed.budget)

    for approver in (seed.manager, seed.admin):
        response = await async_client.get("/api/notifications", headers=auth_headers(approver))
        titles = [n["title"] for n in response.json()["data"]]
        assert titles == ["Expense Awaiting Approval"]

    response = await async_client.get("/api/notifications", headers=auth_headers(seed.other_manager))
    assert response.json()["total"] == 0


@pytest.mark.asyncio
async def test_submit_rejects_non_positive_amount(async_client, seed):
    response = await submit(async_client, seed.employee, seed.budget, amount=-5)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "VALIDATION_ERROR"
    assert any(error["field"] == "amount" for error in body["errors"])


@pytest.mark.asyncio
async def test_submit_against_invisible_budget_is_forbidden(async_client, seed):
    response = await submit(async_client, seed.employee, seed.ops_budget)
    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
async def test_requires_authentication(async_client, seed):
    response = await async_client.get("/api/expenses")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_approval_scenario(async_client, seed):
    """Budget 1000/200, expense 150 approved twice by an in-scope manager."""
    expense_id = (await submit(async_client, seed.employee, seed.budget)).json()["data"]["id"]
    headers = auth_headers(seed.manager)

    response = await async_client.patch(f"/api/expenses/{expense_id}/approve", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["message"] == "Expense approved"
    assert body["data"]["status"] == "APPROVED"
    assert body["data"]["approvedBy"] == str(seed.manager.id)
    assert body["data"]["approver"]["name"] == "Morgan Manager"

    budget = (await async_client.get(f"/api/budgets/{seed.budget.id}", headers=headers)).json()
    assert budget["data"]["spent"] == 350.0
    assert budget["data"]["remaining"] == 650.0

    response = await async_client.patch(f"/api/expenses/{expense_id}/approve", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["message"] == "Expense already approved"
    assert response.json()["data"]["status"] == "APPROVED"

    budget = (await async_client.get(f"/api/budgets/{seed.budget.id}", headers=headers)).json()
    assert budget["data"]["spent"] == 350.0


@pytest.mark.asyncio
async def test_user_cannot_approve(async_client, seed):
    expense_id = (await submit(async_client, seed.manager, seed.budget)).json()["data"]["id"]

    response = await async_client.patch(
        f"/api/expenses/{expense_id}/approve", headers=auth_headers(seed.employee)
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json() == {"success": False, "message": "Insufficient permissions"}

    detail = await async_client.get(f"/api/expenses/{expense_id}", headers=auth_headers(seed.admin))
    assert detail.json()["data"]["status"] == "PENDING"


@pytest.mark.asyncio
async def test_reject_then_approve_conflicts(async_client, seed):
    expense_id = (await submit(async_client, seed.employee, seed.budget)).json()["data"]["id"]
    headers = auth_headers(seed.admin)

    response = await async_client.patch(
        f"/api/expenses/{expense_id}/reject",
        json={"reason": "duplicate receipt"},
        headers=headers,
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["rejectionReason"] == "duplicate receipt"

    response = await async_client.patch(f"/api/expenses/{expense_id}/approve", headers=headers)
    assert response.status_code == status.HTTP_409_CONFLICT
    body = response.json()
    assert body["code"] == "INVALID_STATE"
    assert body["errors"] == {"current_status": "REJECTED"}


@pytest.mark.asyncio
async def test_reject_without_body(async_client, seed):
    expense_id = (await submit(async_client, seed.employee, seed.budget)).json()["data"]["id"]

    response = await async_client.patch(
        f"/api/expenses/{expense_id}/reject", headers=auth_headers(seed.manager)
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["status"] == "REJECTED"
    assert response.json()["data"]["rejectionReason"] is None


@pytest.mark.asyncio
async def test_approvals_queue_and_post_routes(async_client, seed):
    first = (await submit(async_client, seed.employee, seed.budget, 10)).json()["data"]["id"]
    second = (await submit(async_client, seed.employee, seed.budget, 20)).json()["data"]["id"]
    await submit(async_client, seed.outsider, seed.ops_budget, 30)
    headers = auth_headers(seed.manager)

    queue = (await async_client.get("/api/approvals", headers=headers)).json()
    assert queue["total"] == 2
    assert [e["id"] for e in queue["data"]] == [second, first]

    response = await async_client.post(f"/api/approvals/{first}/approve", headers=headers)
    assert response.status_code == status.HTTP_200_OK
    response = await async_client.post(
        f"/api/approvals/{second}/reject", json={"reason": "out of policy"}, headers=headers
    )
    assert response.json()["data"]["status"] == "REJECTED"

    queue = (await async_client.get("/api/approvals", headers=headers)).json()
    assert queue["total"] == 0


@pytest.mark.asyncio
async def test_approvals_queue_forbidden_for_users(async_client, seed):
    response = await async_client.get("/api/approvals", headers=auth_headers(seed.employee))
    assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.asyncio
async def test_list_expenses_is_role_scoped(async_client, seed):
    await submit(async_client, seed.employee, seed.budget, 10)
    await submit(async_client, seed.manager, seed.budget, 20)
    await submit(async_client, seed.outsider, seed.ops_budget, 30)

    mine = (await async_client.get("/api/expenses", headers=auth_headers(seed.employee))).json()
    assert mine["total"] == 1
    assert mine["data"][0]["amount"] == 10.0

    dept = (await async_client.get("/api/expenses", headers=auth_headers(seed.manager))).json()
    assert dept["total"] == 2

    everything = (await async_client.get("/api/expenses", headers=auth_headers(seed.admin))).json()
    assert everything["total"] == 3

    page = (
        await async_client.get(
            "/api/expenses", params={"page": 2, "limit": 2}, headers=auth_headers(seed.admin)
        )
    ).json()
    assert page["page"] == 2
    assert page["totalPages"] == 2
    assert page["hasPrevPage"] is True
    assert page["hasNextPage"] is False
    assert len(page["data"]) == 1


@pytest.mark.asyncio
async def test_get_expense_scope(async_client, seed):
    expense_id = (await submit(async_client, seed.employee, seed.budget)).json()["data"]["id"]

    response = await async_client.get(
        f"/api/expenses/{expense_id}", headers=auth_headers(seed.other_manager)
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN

    response = await async_client.get(
        f"/api/expenses/{uuid.uuid4()}", headers=auth_headers(seed.admin)
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["message"] == "Expense not found"


@pytest.mark.asyncio
async def test_edit_pending_then_locked(async_client, seed):
    expense_id = (await submit(async_client, seed.employee, seed.budget)).json()["data"]["id"]
    owner = auth_headers(seed.employee)

    response = await async_client.patch(
        f"/api/expenses/{expense_id}",
        json={"amount": 175.5, "description": "Conference travel and hotel"},
        headers=owner,
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["amount"] == 175.5

    await async_client.patch(f"/api/expenses/{expense_id}/approve", headers=auth_headers(seed.manager))

    response = await async_client.patch(
        f"/api/expenses/{expense_id}", json={"amount": 1}, headers=owner
    )
    assert response.status_code == status.HTTP_409_CONFLICT

    budget = (
        await async_client.get(f"/api/budgets/{seed.budget.id}", headers=auth_headers(seed.admin))
    ).json()
    assert budget["data"]["spent"] == 375.5


@pytest.mark.asyncio
async def test_edit_rejects_null_fields(async_client, seed):
    expense_id = (await submit(async_client, seed.employee, seed.budget)).json()["data"]["id"]
    owner = auth_headers(seed.employee)

    response = await async_client.patch(
        f"/api/expenses/{expense_id}", json={"amount": None}, headers=owner
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    body = response.json()
    assert body["success"] is False
    assert any(error["field"] == "amount" for error in body["errors"])

    response = await async_client.patch(
        f"/api/expenses/{expense_id}", json={"receiptUrl": None}, headers=owner
    )
    assert response.status_code == status.HTTP_200_OK

    response = await async_client.get(f"/api/expenses/{expense_id}", headers=owner)
    assert response.json()["data"]["amount"] == 150.0
