"""API client tests — explicit-context calls against the in-process app."""

from __future__ import annotations

import uuid
from decimal import Decimal

import httpx
import pytest
from httpx import ASGITransport

from hris.auth.service import open_session
from hris.client import HrisApiClient, problem_to_exception
from hris.common.constants import MenuKey, PayrollStatus, ROLE_DEFAULTS, UserRole
from hris.common.exceptions import (
    AppException,
    ConflictError,
    ForbiddenException,
    InvalidTransitionError,
    NotFoundException,
    TransportError,
    ValidationException,
)
from hris.menu_access.resolver import OverrideAccess, RoleDefaultAccess

API_BASE = "http://test/api/v1"


async def _client_for(db, app, user) -> HrisApiClient:
    token = await open_session(db, user)
    await db.commit()
    return HrisApiClient(token, base_url=API_BASE, transport=ASGITransport(app=app))


# ═════════════════════════════════════════════════════════════════════
# Menu access
# ═════════════════════════════════════════════════════════════════════


async def test_load_session_access_role_default(app, db, employee_user):
    async with await _client_for(db, app, employee_user) as api:
        access = await api.load_session_access()

    assert isinstance(access, RoleDefaultAccess)
    assert access.keys == ROLE_DEFAULTS[UserRole.employee]


async def test_admin_manages_override_through_client(app, db, admin_user, employee_user):
    async with await _client_for(db, app, admin_user) as admin_api:
        out = await admin_api.set_user_access(employee_user.id, [MenuKey.payslips, "dashboard"])
        assert out.menu_keys == ["dashboard", "payslips"]
        assert await admin_api.get_override(employee_user.id) == frozenset(
            {MenuKey.dashboard, MenuKey.payslips}
        )
        overrides = await admin_api.list_overrides()
        assert [o.user_id for o in overrides] == [employee_user.id]

    async with await _client_for(db, app, employee_user) as api:
        access = await api.load_session_access()
        assert isinstance(access, OverrideAccess)
        assert await api.get_my_menu_keys() == [MenuKey.dashboard, MenuKey.payslips]

    async with await _client_for(db, app, admin_user) as admin_api:
        await admin_api.reset_user_access(employee_user.id)
        assert await admin_api.get_override(employee_user.id) is None


async def test_role_defaults_lookup(app, db, hr_user):
    async with await _client_for(db, app, hr_user) as api:
        keys = await api.get_role_defaults("admin")
    assert keys == list(ROLE_DEFAULTS[UserRole.admin])


async def test_invalid_keys_raise_validation_exception(app, db, admin_user, employee_user):
    async with await _client_for(db, app, admin_user) as api:
        with pytest.raises(ValidationException) as exc_info:
            await api.set_user_access(employee_user.id, ["reports"])
    assert exc_info.value.status_code == 422
    assert "menu_keys" in exc_info.value.errors


async def test_non_admin_gets_forbidden(app, db, hr_user, employee_user):
    async with await _client_for(db, app, hr_user) as api:
        with pytest.raises(ForbiddenException):
            await api.set_user_access(employee_user.id, ["leaves"])


# ═════════════════════════════════════════════════════════════════════
# Payroll
# ═════════════════════════════════════════════════════════════════════


async def test_payroll_round_trip(app, db, admin_user, test_employee):
    await db.commit()

    async with await _client_for(db, app, admin_user) as api:
        payroll = await api.generate_payroll(test_employee.id, 1, 2024)
        assert payroll.status == PayrollStatus.draft
        assert payroll.net_salary == Decimal("5250000")

        with pytest.raises(ConflictError):
            await api.generate_payroll(test_employee.id, 1, 2024)

        with pytest.raises(InvalidTransitionError):
            await api.update_payroll_status(payroll.id, PayrollStatus.paid)

        processed = await api.update_payroll_status(payroll.id, "processed")
        assert processed.status == PayrollStatus.processed

        page = await api.list_payroll(year=2024, status="processed")
        assert page.meta.total == 1
        assert page.data[0].id == payroll.id

        await api.update_payroll_status(payroll.id, PayrollStatus.paid)


async def test_my_payslips(app, db, admin_user, employee_user, test_employee):
    await db.commit()

    async with await _client_for(db, app, admin_user) as admin_api:
        payroll = await admin_api.generate_payroll(test_employee.id, 3, 2024)
        await admin_api.update_payroll_status(payroll.id, "processed")
        await admin_api.update_payroll_status(payroll.id, "paid")

    async with await _client_for(db, app, employee_user) as api:
        payslips = await api.get_my_payslips()

    assert [p.id for p in payslips] == [payroll.id]
    assert payslips[0].paid_at is not None


async def test_unknown_employee_raises_not_found(app, db, hr_user):
    async with await _client_for(db, app, hr_user) as api:
        with pytest.raises(NotFoundException):
            await api.generate_payroll(uuid.uuid4(), 1, 2024)


# ═════════════════════════════════════════════════════════════════════
# Transport and error mapping
# ═════════════════════════════════════════════════════════════════════


async def test_network_failure_raises_transport_error():
    def _refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with HrisApiClient(
        "token", base_url=API_BASE, transport=httpx.MockTransport(_refuse),
    ) as api:
        with pytest.raises(TransportError) as exc_info:
            await api.get_my_menu_keys()
    assert exc_info.value.status_code == 502


async def test_non_json_body_raises_transport_error():
    def _html(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>maintenance</html>")

    async with HrisApiClient(
        "token", base_url=API_BASE, transport=httpx.MockTransport(_html),
    ) as api:
        with pytest.raises(TransportError):
            await api.get_my_menu_keys()


async def test_requests_carry_bearer_token_and_base_url():
    seen: list[httpx.Request] = []

    def _record(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"menu_keys": ["dashboard"]})

    async with HrisApiClient(
        "abc123", base_url=API_BASE, transport=httpx.MockTransport(_record),
    ) as api:
        assert await api.get_my_menu_keys() == [MenuKey.dashboard]

    assert seen[0].headers["Authorization"] == "Bearer abc123"
    assert str(seen[0].url) == "http://test/api/v1/menu-access/me"


class TestProblemMapping:
    def _response(self, status, body=None, **kwargs):
        request = httpx.Request("GET", "http://test/api/v1/x")
        if body is None:
            return httpx.Response(status, request=request, **kwargs)
        return httpx.Response(status, json=body, request=request)

    def test_known_type_maps_to_class(self):
        exc = problem_to_exception(self._response(409, {
            "type": "https://hris.local/errors/invalid-transition",
            "title": "Invalid Status Transition",
            "detail": "Payroll cannot move from 'draft' to 'paid'.",
        }))
        assert isinstance(exc, InvalidTransitionError)
        assert exc.status_code == 409
        assert exc.detail == "Payroll cannot move from 'draft' to 'paid'."

    def test_unauthenticated_maps_to_forbidden(self):
        exc = problem_to_exception(self._response(401, {"detail": "Token has expired."}))
        assert isinstance(exc, ForbiddenException)
        assert exc.status_code == 401

    def test_unknown_server_error_is_transport_error(self):
        exc = problem_to_exception(self._response(503, text="Service Unavailable"))
        assert isinstance(exc, TransportError)

    def test_unknown_client_error_is_generic(self):
        exc = problem_to_exception(self._response(429, {"error": "Rate limit exceeded"}))
        assert type(exc) is AppException
        assert exc.status_code == 429
