from datetime import date

import pytest
from httpx import AsyncClient


def student_payload(**overrides):
    payload = {"name": "Ana Souza", "email": "ana@gmail.com", "phone": "11999990000"}
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_create_and_get_student(auth_client: AsyncClient) -> None:
    response = await auth_client.post("/api/v1/students", json=student_payload(name="  Ana Souza "))
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Ana Souza"
    assert data["active"] is True
    assert data["inactive_date"] is None

    fetched = await auth_client.get(f"/api/v1/students/{data['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["email"] == "ana@gmail.com"


@pytest.mark.asyncio
async def test_create_requires_email_and_phone(auth_client: AsyncClient) -> None:
    response = await auth_client.post("/api/v1/students", json={"name": "Bia", "email": "not-an-email", "phone": "1"})
    assert response.status_code == 422
    response = await auth_client.post("/api/v1/students", json={"name": "Bia", "email": "bia@gmail.com", "phone": " "})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_created_inactive_gets_inactive_date(auth_client: AsyncClient) -> None:
    response = await auth_client.post(
        "/api/v1/students",
        json=student_payload(active=False, inactive_reason="Mudou de cidade"),
    )
    data = response.json()
    assert data["active"] is False
    assert data["inactive_reason"] == "Mudou de cidade"
    assert data["inactive_date"] == date.today().isoformat()


@pytest.mark.asyncio
async def test_deactivate_and_reactivate(auth_client: AsyncClient) -> None:
    created = (await auth_client.post("/api/v1/students", json=student_payload())).json()

    response = await auth_client.put(
        f"/api/v1/students/{created['id']}",
        json={"active": False, "inactive_reason": "Lesão", "inactive_date": "2024-03-10"},
    )
    assert response.status_code == 200
    assert response.json()["inactive_date"] == "2024-03-10"
    assert response.json()["inactive_reason"] == "Lesão"

    response = await auth_client.put(f"/api/v1/students/{created['id']}", json={"active": True})
    data = response.json()
    assert data["active"] is True
    assert data["inactive_reason"] is None
    assert data["inactive_date"] is None


@pytest.mark.asyncio
async def test_deactivate_defaults_date_to_today(auth_client: AsyncClient) -> None:
    created = (await auth_client.post("/api/v1/students", json=student_payload())).json()
    response = await auth_client.put(f"/api/v1/students/{created['id']}", json={"active": False})
    assert response.json()["inactive_date"] == date.today().isoformat()


@pytest.mark.asyncio
async def test_list_filters_and_count(auth_client: AsyncClient) -> None:
    await auth_client.post("/api/v1/students", json=student_payload(name="Carla"))
    await auth_client.post("/api/v1/students", json=student_payload(name="Bruno", email="bruno@gmail.com"))
    await auth_client.post(
        "/api/v1/students", json=student_payload(name="Diego", email="diego@gmail.com", active=False)
    )

    active = (await auth_client.get("/api/v1/students")).json()
    assert [s["name"] for s in active] == ["Bruno", "Carla"]

    inactive = (await auth_client.get("/api/v1/students", params={"status": "inactive"})).json()
    assert [s["name"] for s in inactive] == ["Diego"]

    everyone = (await auth_client.get("/api/v1/students", params={"status": "all"})).json()
    assert len(everyone) == 3

    count = (await auth_client.get("/api/v1/students/count")).json()
    assert count == {"total": 3, "active": 2, "inactive": 1}


@pytest.mark.asyncio
async def test_unknown_student_is_404(auth_client: AsyncClient) -> None:
    response = await auth_client.get("/api/v1/students/00000000-0000-0000-0000-000000000000")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_students_cannot_be_deleted(auth_client: AsyncClient) -> None:
    created = (await auth_client.post("/api/v1/students", json=student_payload())).json()
    response = await auth_client.delete(f"/api/v1/students/{created['id']}")
    assert response.status_code == 405
