import pytest
from httpx import AsyncClient
from sqlalchemy.exc import IntegrityError


@pytest.mark.asyncio
async def test_court_expense_crud(auth_client: AsyncClient) -> None:
    created = await auth_client.post(
        "/api/v1/finance/court-expenses", json={"amount": "400.00", "reference_month": "2024-03"}
    )
    assert created.status_code == 201
    expense = created.json()
    assert expense["due_date"] == "2024-03-01"

    updated = await auth_client.put(
        f"/api/v1/finance/court-expenses/{expense['id']}",
        json={"amount": "450.00", "due_date": "2024-04-20"},
    )
    assert updated.status_code == 200
    assert updated.json()["amount"] == "450.00"
    assert updated.json()["due_date"] == "2024-04-01"

    deleted = await auth_client.delete(f"/api/v1/finance/court-expenses/{expense['id']}")
    assert deleted.status_code == 204
    assert (await auth_client.get("/api/v1/finance/court-expenses")).json() == []


@pytest.mark.asyncio
async def test_court_expense_requires_month(auth_client: AsyncClient) -> None:
    response = await auth_client.post("/api/v1/finance/court-expenses", json={"amount": 400})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_extra_expense_payment_date_defaults_to_date(auth_client: AsyncClient) -> None:
    response = await auth_client.post(
        "/api/v1/finance/extra-expenses",
        json={"amount": "59.90", "date": "2024-03-12", "description": " Bolas novas "},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["payment_date"] == "2024-03-12"
    assert data["description"] == "Bolas novas"


@pytest.mark.asyncio
async def test_extra_expense_requires_description(auth_client: AsyncClient) -> None:
    response = await auth_client.post(
        "/api/v1/finance/extra-expenses", json={"amount": 10, "date": "2024-03-12", "description": "  "}
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_additional_income_list_by_range(auth_client: AsyncClient) -> None:
    for day in ("2024-01-10", "2024-02-10", "2024-03-10"):
        await auth_client.post(
            "/api/v1/finance/additional-income",
            json={"amount": 50, "date": day, "description": "Torneio"},
        )

    listed = (
        await auth_client.get(
            "/api/v1/finance/additional-income", params={"date_from": "2024-02-01", "date_to": "2024-02-29"}
        )
    ).json()
    assert [i["date"] for i in listed] == ["2024-02-10"]


@pytest.mark.asyncio
async def test_unknown_ledger_row_is_404(auth_client: AsyncClient) -> None:
    response = await auth_client.delete("/api/v1/finance/extra-expenses/00000000-0000-0000-0000-000000000000")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_extra_expense_update_keeps_description(auth_client: AsyncClient) -> None:
    created = await auth_client.post(
        "/api/v1/finance/extra-expenses",
        json={"amount": "59.90", "date": "2024-03-12", "description": "Bolas novas"},
    )
    expense_id = created.json()["id"]

    for description in (None, "   "):
        response = await auth_client.put(
            f"/api/v1/finance/extra-expenses/{expense_id}", json={"description": description}
        )
        assert response.status_code == 422

    renamed = await auth_client.put(
        f"/api/v1/finance/extra-expenses/{expense_id}", json={"description": " Rede nova "}
    )
    assert renamed.status_code == 200
    assert renamed.json()["description"] == "Rede nova"


@pytest.mark.asyncio
async def test_additional_income_update_keeps_description(auth_client: AsyncClient) -> None:
    created = await auth_client.post(
        "/api/v1/finance/additional-income",
        json={"amount": 50, "date": "2024-03-10", "description": "Torneio"},
    )
    income_id = created.json()["id"]

    for description in (None, ""):
        response = await auth_client.put(
            f"/api/v1/finance/additional-income/{income_id}", json={"description": description}
        )
        assert response.status_code == 422

    listed = (await auth_client.get("/api/v1/finance/additional-income")).json()
    assert listed[0]["description"] == "Torneio"


@pytest.mark.asyncio
async def test_extra_expense_payment_date_follows_new_date(auth_client: AsyncClient) -> None:
    created = await auth_client.post(
        "/api/v1/finance/extra-expenses",
        json={"amount": 20, "date": "2024-01-10", "description": "Rede"},
    )
    expense_id = created.json()["id"]

    moved = await auth_client.put(f"/api/v1/finance/extra-expenses/{expense_id}", json={"date": "2024-02-20"})
    assert moved.json()["date"] == "2024-02-20"
    assert moved.json()["payment_date"] == "2024-02-20"

    explicit = await auth_client.put(
        f"/api/v1/finance/extra-expenses/{expense_id}",
        json={"date": "2024-03-01", "payment_date": "2024-03-05"},
    )
    assert explicit.json()["date"] == "2024-03-01"
    assert explicit.json()["payment_date"] == "2024-03-05"

    amount_only = await auth_client.put(f"/api/v1/finance/extra-expenses/{expense_id}", json={"amount": 25})
    assert amount_only.json()["payment_date"] == "2024-03-05"


@pytest.mark.asyncio
async def test_failed_delete_is_rolled_back(auth_client: AsyncClient, db_session, monkeypatch) -> None:
    created = await auth_client.post(
        "/api/v1/finance/court-expenses", json={"amount": 400, "reference_month": "2024-03"}
    )
    expense_id = created.json()["id"]

    async def failing_commit():
        raise IntegrityError("DELETE FROM court_expenses", {}, Exception("constraint failed"))

    monkeypatch.setattr(db_session, "commit", failing_commit)
    response = await auth_client.delete(f"/api/v1/finance/court-expenses/{expense_id}")
    assert response.status_code == 409
    monkeypatch.undo()

    listed = (await auth_client.get("/api/v1/finance/court-expenses")).json()
    assert [e["id"] for e in listed] == [expense_id]
