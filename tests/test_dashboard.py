from datetime import date
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from volei.api.v1.dashboard import service as dashboard_service
from volei.core.cache import FINANCIAL_OVERVIEW, QueryCache
from volei.core.models import CourtExpense, Payment, Student

THIS_MONTH = date.today().replace(day=1).isoformat()


async def make_student(client: AsyncClient, name: str, **extra) -> str:
    payload = {"name": name, "email": f"{name.lower()}@gmail.com", "phone": "11999990000"}
    payload.update(extra)
    response = await client.post("/api/v1/students", json=payload)
    return response.json()["id"]


@pytest.mark.asyncio
async def test_march_balance_end_to_end(db_session: AsyncSession) -> None:
    student = Student(name="Ana", email="ana@gmail.com", phone="1", active=True)
    db_session.add(student)
    await db_session.flush()
    db_session.add(
        Payment(
            student_id=student.id,
            amount=Decimal("100"),
            due_date=date(2024, 3, 1),
            payment_date=date(2024, 3, 5),
            status="paid",
        )
    )
    db_session.add(CourtExpense(amount=Decimal("40"), due_date=date(2024, 3, 1)))
    await db_session.commit()

    overview = await dashboard_service.get_financial_overview(
        db_session, QueryCache(), months=6, today=date(2024, 3, 20)
    )
    assert len(overview.buckets) == 6
    march = overview.buckets[-1]
    assert march.key == "2024-03"
    assert march.label == "mar"
    assert march.revenue == Decimal("100")
    assert march.expenses == Decimal("40")
    assert march.balance == Decimal("60")
    assert march.students_paid == 1


@pytest.mark.asyncio
async def test_summary_totals(auth_client: AsyncClient) -> None:
    ana = await make_student(auth_client, "Ana")
    await make_student(auth_client, "Bruno", active=False)
    await auth_client.post(
        "/api/v1/payments", json={"student_id": ana, "amount": 100, "due_date": THIS_MONTH, "status": "paid"}
    )
    await auth_client.post("/api/v1/payments", json={"student_id": ana, "amount": 100, "due_date": "2024-01-01"})
    await auth_client.post(
        "/api/v1/finance/additional-income", json={"amount": 30, "date": "2024-01-10", "description": "Rifa"}
    )
    await auth_client.post("/api/v1/finance/court-expenses", json={"amount": 40, "due_date": THIS_MONTH})
    await auth_client.post(
        "/api/v1/finance/extra-expenses", json={"amount": 15, "date": "2024-01-10", "description": "Rede"}
    )

    summary = (await auth_client.get("/api/v1/dashboard/summary")).json()
    assert summary["student_count"] == 2
    assert Decimal(summary["total_revenue"]) == Decimal("130")
    assert Decimal(summary["total_expenses"]) == Decimal("55")
    assert Decimal(summary["balance"]) == Decimal("75")


@pytest.mark.asyncio
async def test_writes_invalidate_cached_sections(auth_client: AsyncClient, app) -> None:
    ana = await make_student(auth_client, "Ana")
    before = (await auth_client.get("/api/v1/dashboard/financial-overview", params={"months": 3})).json()
    assert len(before["buckets"]) == 3
    assert Decimal(before["buckets"][-1]["revenue"]) == 0
    assert app.state.query_cache.get(FINANCIAL_OVERVIEW, {"months": 3, "today": date.today()}) is not None

    await auth_client.post(
        "/api/v1/payments", json={"student_id": ana, "amount": 100, "due_date": THIS_MONTH, "status": "paid"}
    )
    after = (await auth_client.get("/api/v1/dashboard/financial-overview", params={"months": 3})).json()
    assert Decimal(after["buckets"][-1]["revenue"]) == Decimal("100")


@pytest.mark.asyncio
async def test_financial_overview_months_bounds(auth_client: AsyncClient) -> None:
    assert (await auth_client.get("/api/v1/dashboard/financial-overview", params={"months": 0})).status_code == 422
    assert (await auth_client.get("/api/v1/dashboard/financial-overview", params={"months": 25})).status_code == 422
    default = (await auth_client.get("/api/v1/dashboard/financial-overview")).json()
    assert default["months"] == 6


@pytest.mark.asyncio
async def test_student_status(auth_client: AsyncClient) -> None:
    ana = await make_student(auth_client, "Ana")
    bruno = await make_student(auth_client, "Bruno")
    await make_student(auth_client, "Carla")
    await make_student(auth_client, "Diego", active=False)
    await auth_client.post(
        "/api/v1/payments", json={"student_id": ana, "amount": 100, "due_date": THIS_MONTH, "status": "paid"}
    )
    await auth_client.post(
        "/api/v1/payments", json={"student_id": bruno, "amount": 100, "due_date": THIS_MONTH, "status": "overdue"}
    )

    data = (await auth_client.get("/api/v1/dashboard/student-status")).json()
    rows = {s["name"]: s for s in data["students"]}
    assert list(rows) == ["Ana", "Bruno", "Carla"]
    assert (rows["Ana"]["standing"], rows["Ana"]["needs_attention"]) == ("current", False)
    assert rows["Ana"]["label"] == "Em dia"
    assert (rows["Bruno"]["standing"], rows["Bruno"]["needs_attention"]) == ("overdue", True)
    assert (rows["Carla"]["standing"], rows["Carla"]["needs_attention"]) == ("no-payments", True)


@pytest.mark.asyncio
async def test_inactive_students_summary(auth_client: AsyncClient) -> None:
    await make_student(auth_client, "Ana")
    for index in range(6):
        sid = await make_student(auth_client, f"Aluno{index}")
        await auth_client.put(
            f"/api/v1/students/{sid}",
            json={"active": False, "inactive_date": f"2023-0{index + 1}-15"},
        )
    await make_student(auth_client, "Recente", active=False)

    data = (await auth_client.get("/api/v1/dashboard/inactive-students")).json()
    assert data["inactive_count"] == 7
    assert data["active_count"] == 1
    assert data["total_count"] == 8
    assert data["retention_rate"] == 13
    assert [s["name"] for s in data["inactive_students"]] == ["Recente", "Aluno5", "Aluno4", "Aluno3", "Aluno2"]
    assert data["remaining_count"] == 2
    assert [s["name"] for s in data["recent_inactive"]] == ["Recente"]


@pytest.mark.asyncio
async def test_combined_dashboard(auth_client: AsyncClient) -> None:
    await make_student(auth_client, "Ana")
    data = (await auth_client.get("/api/v1/dashboard")).json()
    assert data["unavailable"] == []
    assert data["summary"]["student_count"] == 1
    assert len(data["financial_overview"]["buckets"]) == 6
    assert data["attendance"]["students"][0]["student_name"] == "Ana"


@pytest.mark.asyncio
async def test_failed_section_is_reported_unavailable(auth_client: AsyncClient, app, monkeypatch) -> None:
    async def broken(db):
        raise OperationalError("SELECT 1", {}, Exception("connection lost"))

    monkeypatch.setattr(dashboard_service, "load_summary", broken)

    data = (await auth_client.get("/api/v1/dashboard")).json()
    assert data["summary"] is None
    assert data["unavailable"] == ["summary"]
    assert data["student_status"] is not None

    response = await auth_client.get("/api/v1/dashboard/summary")
    assert response.status_code == 503
