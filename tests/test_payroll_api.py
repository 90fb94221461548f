"""Payroll API tests — role gating, generation, lifecycle, payslips."""

from __future__ import annotations

import uuid
from decimal import Decimal

import pytest

from hris.common.constants import UserRole
from tests.conftest import auth_headers_for, create_user

BASE = "/api/v1/payroll"


async def _generate(client, headers, employee_id, month=1, year=2024):
    return await client.post(
        f"{BASE}/generate",
        json={"employee_id": str(employee_id), "month": month, "year": year},
        headers=headers,
    )


async def _set_status(client, headers, payroll_id, status):
    return await client.put(
        f"{BASE}/{payroll_id}/status", json={"status": status}, headers=headers,
    )


# ═════════════════════════════════════════════════════════════════════
# Generation
# ═════════════════════════════════════════════════════════════════════


async def test_hr_generates_draft_payroll(client, db, test_employee, hr_headers):
    await db.commit()

    resp = await _generate(client, hr_headers, test_employee.id)
    assert resp.status_code == 201
    data = resp.json()
    assert data["status"] == "draft"
    assert data["period_month"] == 1
    assert data["period_year"] == 2024
    assert data["working_days"] == 23
    assert Decimal(data["gross_salary"]) == Decimal("5500000")
    assert Decimal(data["total_deductions"]) == Decimal("250000")
    assert Decimal(data["net_salary"]) == Decimal("5250000")
    assert data["employee"]["display_name"] == "Budi Santoso"
    assert data["paid_at"] is None


async def test_employee_cannot_generate(client, db, test_employee, employee_headers):
    await db.commit()

    resp = await _generate(client, employee_headers, test_employee.id)
    assert resp.status_code == 403
    assert resp.json()["type"].endswith("/forbidden")


async def test_duplicate_generation_conflicts(client, db, test_employee, admin_headers):
    await db.commit()

    assert (await _generate(client, admin_headers, test_employee.id)).status_code == 201
    resp = await _generate(client, admin_headers, test_employee.id)
    assert resp.status_code == 409
    assert resp.json()["type"].endswith("/conflict")

    resp = await client.get(BASE + "/", headers=admin_headers)
    assert resp.json()["meta"]["total"] == 1


async def test_invalid_month_returns_field_error(client, db, test_employee, hr_headers):
    await db.commit()

    resp = await _generate(client, hr_headers, test_employee.id, month=13)
    assert resp.status_code == 422
    assert resp.headers["content-type"].startswith("application/problem+json")
    assert "month" in resp.json()["errors"]


async def test_unknown_employee_returns_404(client, hr_headers):
    resp = await _generate(client, hr_headers, uuid.uuid4())
    assert resp.status_code == 404
    assert resp.json()["type"].endswith("/not-found")


# ═════════════════════════════════════════════════════════════════════
# Lifecycle and adjustments
# ═════════════════════════════════════════════════════════════════════


async def test_status_moves_forward_one_step(client, db, test_employee, admin_headers):
    await db.commit()
    payroll_id = (await _generate(client, admin_headers, test_employee.id)).json()["id"]

    resp = await _set_status(client, admin_headers, payroll_id, "paid")
    assert resp.status_code == 409
    assert resp.json()["type"].endswith("/invalid-transition")

    resp = await _set_status(client, admin_headers, payroll_id, "processed")
    assert resp.status_code == 200
    assert resp.json()["status"] == "processed"
    assert resp.json()["paid_at"] is None

    resp = await _set_status(client, admin_headers, payroll_id, "paid")
    assert resp.status_code == 200
    assert resp.json()["status"] == "paid"
    assert resp.json()["paid_at"] is not None


async def test_hr_cannot_change_status(client, db, test_employee, hr_headers):
    await db.commit()
    payroll_id = (await _generate(client, hr_headers, test_employee.id)).json()["id"]

    resp = await _set_status(client, hr_headers, payroll_id, "processed")
    assert resp.status_code == 403


async def test_admin_adjustment_recomputes(client, db, test_employee, admin_headers):
    await db.commit()
    payroll_id = (await _generate(client, admin_headers, test_employee.id)).json()["id"]

    resp = await client.put(
        f"{BASE}/{payroll_id}",
        json={"thr": "2500000", "other_deductions": "100000"},
        headers=admin_headers,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert Decimal(data["gross_salary"]) == Decimal("8000000")
    assert Decimal(data["total_deductions"]) == Decimal("350000")
    assert Decimal(data["net_salary"]) == Decimal("7650000")


async def test_admin_prices_thr(client, db, test_employee, admin_headers):
    await db.commit()
    payroll_id = (await _generate(client, admin_headers, test_employee.id)).json()["id"]

    resp = await client.put(
        f"{BASE}/{payroll_id}", json={"price_thr": True}, headers=admin_headers,
    )
    assert resp.status_code == 200
    assert Decimal(resp.json()["thr"]) == Decimal("5500000")
    assert Decimal(resp.json()["net_salary"]) == Decimal("10750000")


async def test_negative_adjustment_rejected(client, db, test_employee, admin_headers):
    await db.commit()
    payroll_id = (await _generate(client, admin_headers, test_employee.id)).json()["id"]

    resp = await client.put(
        f"{BASE}/{payroll_id}", json={"thr": "-1"}, headers=admin_headers,
    )
    assert resp.status_code == 422


async def test_delete_draft_only(client, db, test_employee, admin_headers):
    await db.commit()
    first = (await _generate(client, admin_headers, test_employee.id, month=1)).json()["id"]
    second = (await _generate(client, admin_headers, test_employee.id, month=2)).json()["id"]

    resp = await client.delete(f"{BASE}/{first}", headers=admin_headers)
    assert resp.status_code == 204
    resp = await client.get(f"{BASE}/{first}", headers=admin_headers)
    assert resp.status_code == 404

    await _set_status(client, admin_headers, second, "processed")
    resp = await client.delete(f"{BASE}/{second}", headers=admin_headers)
    assert resp.status_code == 409


# ═════════════════════════════════════════════════════════════════════
# Listing and payslips
# ═════════════════════════════════════════════════════════════════════


async def test_list_filters_by_period(client, db, test_employee, hr_headers):
    await db.commit()
    for month in (1, 2, 3):
        await _generate(client, hr_headers, test_employee.id, month=month)

    resp = await client.get(BASE + "/", headers=hr_headers)
    assert resp.status_code == 200
    assert [p["period_month"] for p in resp.json()["data"]] == [3, 2, 1]

    resp = await client.get(BASE + "/", params={"month": 2, "year": 2024}, headers=hr_headers)
    body = resp.json()
    assert body["meta"]["total"] == 1
    assert body["data"][0]["period_month"] == 2


async def test_employee_cannot_list_all(client, employee_headers):
    resp = await client.get(BASE + "/", headers=employee_headers)
    assert resp.status_code == 403


async def test_my_payslips_shows_paid_only(
    client, db, test_employee, admin_headers, employee_headers,
):
    await db.commit()
    paid = (await _generate(client, admin_headers, test_employee.id, month=1)).json()["id"]
    await _generate(client, admin_headers, test_employee.id, month=2)
    await _set_status(client, admin_headers, paid, "processed")
    await _set_status(client, admin_headers, paid, "paid")

    resp = await client.get(f"{BASE}/my-payslips", headers=employee_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 1
    assert body["data"][0]["id"] == paid


@pytest.mark.parametrize("role", [UserRole.hr, UserRole.admin])
async def test_my_payslips_without_employee_record(client, db, role):
    user = await create_user(db, role=role)
    headers = await auth_headers_for(db, user)

    resp = await client.get(f"{BASE}/my-payslips", headers=headers)
    assert resp.status_code == 404
