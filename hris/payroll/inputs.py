"""Payroll input gathering — salary, attendance and tax data for a period.

Reads the employee's current compensation package and the month's
attendance, then prices overtime, BPJS and PPh 21 with the statutory rules.
"""

from __future__ import annotations

import calendar
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hris.attendance.models import AttendanceRecord
from hris.common.constants import PRESENT_STATUSES
from hris.common.exceptions import ValidationException
from hris.core_hr.models import Employee
from hris.payroll.calculator import PayrollAmounts, compute_amounts
from hris.payroll.rules import (
    calculate_overtime,
    calculate_pph21_monthly,
    count_working_days,
    get_ptkp,
)
from hris.salary.models import EmployeeSalary


@dataclass(frozen=True)
class PayrollInputs:
    """Everything needed to create one payroll record."""

    employee_id: uuid.UUID
    period_month: int
    period_year: int
    working_days: int
    present_days: int
    overtime_hours: Decimal
    amounts: PayrollAmounts


def _period_bounds(month: int, year: int) -> tuple[date, date]:
    _, last = calendar.monthrange(year, month)
    return date(year, month, 1), date(year, month, last)


async def get_current_salary(
    db: AsyncSession,
    employee_id: uuid.UUID,
    as_of: Optional[date] = None,
) -> Optional[EmployeeSalary]:
    """Latest compensation package effective on or before *as_of*."""
    query = select(EmployeeSalary).where(EmployeeSalary.employee_id == employee_id)
    if as_of is not None:
        query = query.where(EmployeeSalary.effective_date <= as_of)
    result = await db.execute(
        query.order_by(
            EmployeeSalary.effective_date.desc(),
            EmployeeSalary.created_at.desc(),
        ).limit(1)
    )
    return result.scalars().first()


async def gather_inputs(
    db: AsyncSession,
    employee: Employee,
    month: int,
    year: int,
) -> PayrollInputs:
    """Collect and price the pay inputs of *employee* for one period.

    Raises ``ValidationException`` when no salary is effective by the end
    of the period.
    """
    first_day, last_day = _period_bounds(month, year)

    salary = await get_current_salary(db, employee.id, as_of=last_day)
    if salary is None:
        raise ValidationException(
            {"salary": ["Employee salary not found; set a salary first."]}
        )

    result = await db.execute(
        select(AttendanceRecord).where(
            AttendanceRecord.employee_id == employee.id,
            AttendanceRecord.attendance_date >= first_day,
            AttendanceRecord.attendance_date <= last_day,
        )
    )
    records = result.scalars().all()

    working_days = count_working_days(month, year)
    present_days = sum(1 for r in records if r.status in PRESENT_STATUSES)
    overtime_hours = sum(
        (Decimal(r.overtime_hours or 0) for r in records), Decimal("0"),
    )

    basic = Decimal(salary.basic_salary)
    allowances = Decimal(salary.total_allowances)
    overtime_pay = calculate_overtime(basic, overtime_hours)

    # PPh 21 is assessed on the annualised gross before THR and adjustments.
    monthly_gross = basic + allowances + overtime_pay
    ptkp = get_ptkp(employee.marital_status, employee.dependents or 0)
    pph21 = calculate_pph21_monthly(monthly_gross * 12, ptkp)

    amounts = compute_amounts(
        basic_salary=basic,
        total_allowances=allowances,
        overtime_pay=overtime_pay,
        bpjs_kes_deduction=Decimal(salary.bpjs_kes_employee or 0),
        bpjs_tk_deduction=Decimal(salary.bpjs_tk_employee),
        pph21=pph21,
    )

    return PayrollInputs(
        employee_id=employee.id,
        period_month=month,
        period_year=year,
        working_days=working_days,
        present_days=min(present_days, working_days),
        overtime_hours=overtime_hours,
        amounts=amounts,
    )
