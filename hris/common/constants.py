"""Enums and constants for the HRIS core — matching PostgreSQL column values."""

from __future__ import annotations

import enum


# ── Auth / Roles ────────────────────────────────────────────────────

class UserRole(str, enum.Enum):
    admin = "admin"
    hr = "hr"
    employee = "employee"


# ── Menu access ─────────────────────────────────────────────────────

class MenuKey(str, enum.Enum):
    dashboard = "dashboard"
    companies = "companies"
    departments = "departments"
    positions = "positions"
    shifts = "shifts"
    organization_structure = "organization_structure"
    users = "users"
    employees = "employees"
    attendance = "attendance"
    leaves = "leaves"
    payroll = "payroll"
    payslips = "payslips"
    menu_access_policy = "menu_access_policy"


# Closed universe, in declaration order.
ALL_MENU_KEYS: tuple[MenuKey, ...] = tuple(MenuKey)


# ── Employee ────────────────────────────────────────────────────────

class MaritalStatus(str, enum.Enum):
    lajang = "lajang"
    kawin = "kawin"


# ── Attendance ──────────────────────────────────────────────────────

class AttendanceStatus(str, enum.Enum):
    hadir = "hadir"
    terlambat = "terlambat"
    alpha = "alpha"
    izin = "izin"
    sakit = "sakit"
    cuti = "cuti"


# Statuses that count as a present day for payroll.
PRESENT_STATUSES: frozenset[AttendanceStatus] = frozenset(
    {AttendanceStatus.hadir, AttendanceStatus.terlambat}
)


# ── Payroll ─────────────────────────────────────────────────────────

class PayrollStatus(str, enum.Enum):
    draft = "draft"
    processed = "processed"
    paid = "paid"


# Only forward moves are legal: draft → processed → paid.
PAYROLL_TRANSITIONS: dict[PayrollStatus, PayrollStatus] = {
    PayrollStatus.draft: PayrollStatus.processed,
    PayrollStatus.processed: PayrollStatus.paid,
}


# ── Role-based default menus ────────────────────────────────────────

ROLE_DEFAULTS: dict[UserRole, tuple[MenuKey, ...]] = {
    UserRole.admin: (
        MenuKey.dashboard,
        MenuKey.companies,
        MenuKey.departments,
        MenuKey.positions,
        MenuKey.shifts,
        MenuKey.organization_structure,
        MenuKey.users,
        MenuKey.employees,
        MenuKey.attendance,
        MenuKey.leaves,
        MenuKey.payroll,
        MenuKey.menu_access_policy,
    ),
    UserRole.hr: (
        MenuKey.dashboard,
        MenuKey.companies,
        MenuKey.departments,
        MenuKey.positions,
        MenuKey.shifts,
        MenuKey.organization_structure,
        MenuKey.users,
        MenuKey.employees,
        MenuKey.attendance,
        MenuKey.leaves,
        MenuKey.payroll,
    ),
    UserRole.employee: (
        MenuKey.dashboard,
        MenuKey.attendance,
        MenuKey.leaves,
    ),
}

# ── Misc constants ──────────────────────────────────────────────────

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 50
