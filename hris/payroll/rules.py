"""Indonesian statutory payroll rules — BPJS, PPh 21, PTKP, THR, overtime.

Pure functions over ``Decimal``. Every amount returned is rounded to a
whole rupiah, half away from zero.

References:
  - BPJS Kesehatan: employee 1%, company 4%, basis capped at 12,000,000
  - BPJS Ketenagakerjaan: JHT 2% / 3.7%, JKK 0.24%, JKM 0.3%,
    JP 1% / 2% with basis capped at 10,042,300
  - PPh 21 brackets per UU HPP 2022
  - Overtime per Kepmenakertrans No. 102/MEN/VI/2004, hourly rate = salary / 173
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from hris.common.constants import MaritalStatus

Number = Union[Decimal, int, str]

_ZERO = Decimal("0")
_RUPIAH = Decimal("1")

BPJS_KES_CAP = Decimal("12000000")
BPJS_JP_CAP = Decimal("10042300")

PTKP_SINGLE = Decimal("54000000")
PTKP_MARRIED = Decimal("58500000")
PTKP_PER_DEPENDENT = Decimal("4500000")
PTKP_MAX_DEPENDENTS = 3

# (upper limit of cumulative taxable income, rate); None means unbounded.
PPH21_BRACKETS: tuple[tuple[Optional[Decimal], Decimal], ...] = (
    (Decimal("60000000"), Decimal("0.05")),
    (Decimal("250000000"), Decimal("0.15")),
    (Decimal("500000000"), Decimal("0.25")),
    (Decimal("5000000000"), Decimal("0.30")),
    (None, Decimal("0.35")),
)

OVERTIME_HOURLY_DIVISOR = Decimal("173")


def round_rupiah(amount: Number) -> Decimal:
    return Decimal(amount).quantize(_RUPIAH, rounding=ROUND_HALF_UP)


# ── BPJS ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class BPJSContributions:
    kes_employee: Decimal
    kes_company: Decimal
    jht_employee: Decimal
    jht_company: Decimal
    jkk: Decimal
    jkm: Decimal
    jp_employee: Decimal
    jp_company: Decimal

    @property
    def tk_employee(self) -> Decimal:
        """Employee share of BPJS Ketenagakerjaan (JHT + JP)."""
        return self.jht_employee + self.jp_employee


def calculate_bpjs(basic_salary: Number) -> BPJSContributions:
    """All BPJS contributions for a monthly basic salary."""
    basic = Decimal(basic_salary)
    kes_basis = min(basic, BPJS_KES_CAP)
    jp_basis = min(basic, BPJS_JP_CAP)
    return BPJSContributions(
        kes_employee=round_rupiah(kes_basis * Decimal("0.01")),
        kes_company=round_rupiah(kes_basis * Decimal("0.04")),
        jht_employee=round_rupiah(basic * Decimal("0.02")),
        jht_company=round_rupiah(basic * Decimal("0.037")),
        jkk=round_rupiah(basic * Decimal("0.0024")),
        jkm=round_rupiah(basic * Decimal("0.003")),
        jp_employee=round_rupiah(jp_basis * Decimal("0.01")),
        jp_company=round_rupiah(jp_basis * Decimal("0.02")),
    )


# ── PPh 21 ──────────────────────────────────────────────────────────

def get_ptkp(marital_status: Union[MaritalStatus, str], dependents: int = 0) -> Decimal:
    """Annual non-taxable income (TK/0 = 54M, K/0 = 58.5M, +4.5M per dependent, max 3)."""
    base = PTKP_MARRIED if MaritalStatus(marital_status) == MaritalStatus.kawin else PTKP_SINGLE
    deps = max(0, min(dependents, PTKP_MAX_DEPENDENTS))
    return base + PTKP_PER_DEPENDENT * deps


def calculate_pph21_monthly(
    annual_gross_income: Number,
    ptkp: Optional[Number] = None,
) -> Decimal:
    """Monthly PPh 21 for an annualised gross income.

    A missing or zero *ptkp* falls back to the single, no-dependent value.
    """
    ptkp_value = Decimal(ptkp) if ptkp else PTKP_SINGLE
    remaining = Decimal(annual_gross_income) - ptkp_value
    if remaining <= 0:
        return _ZERO

    annual_tax = _ZERO
    prev_limit = _ZERO
    for limit, rate in PPH21_BRACKETS:
        if remaining <= 0:
            break
        taxable = remaining if limit is None else min(remaining, limit - prev_limit)
        annual_tax += taxable * rate
        remaining -= taxable
        if limit is not None:
            prev_limit = limit

    return round_rupiah(annual_tax / 12)


# ── THR ─────────────────────────────────────────────────────────────

def months_worked(join_date: date, as_of: date) -> int:
    """Whole calendar months between *join_date* and *as_of*; never negative."""
    months = (as_of.year - join_date.year) * 12 + as_of.month - join_date.month
    return max(months, 0)


def calculate_thr(monthly_salary: Number, months: int) -> Decimal:
    """Religious holiday allowance: one month's pay after a year, prorated before."""
    salary = Decimal(monthly_salary)
    if months >= 12:
        return salary
    if months <= 0:
        return _ZERO
    return round_rupiah(Decimal(months) / 12 * salary)


# ── Overtime ────────────────────────────────────────────────────────

def calculate_overtime(
    monthly_salary: Number,
    overtime_hours: Number,
    is_holiday: bool = False,
) -> Decimal:
    """Overtime pay for a number of hours.

    Weekday: hour 1 at 1.5x, later hours at 2x.
    Holiday: hours 1-7 at 2x, hour 8 at 3x, later hours at 4x.
    """
    hourly = Decimal(monthly_salary) / OVERTIME_HOURLY_DIVISOR
    remaining = Decimal(overtime_hours)
    if remaining <= 0:
        return _ZERO

    if is_holiday:
        tiers = ((Decimal("7"), Decimal("2")), (Decimal("1"), Decimal("3")), (None, Decimal("4")))
    else:
        tiers = ((Decimal("1"), Decimal("1.5")), (None, Decimal("2")))

    pay = _ZERO
    for size, multiplier in tiers:
        if remaining <= 0:
            break
        hours = remaining if size is None else min(remaining, size)
        pay += hours * multiplier * hourly
        remaining -= hours

    return round_rupiah(pay)


# ── Calendar ────────────────────────────────────────────────────────

def count_working_days(month: int, year: int) -> int:
    """Weekdays (Mon-Fri) in the given month; public holidays are not excluded."""
    _, days_in_month = calendar.monthrange(year, month)
    return sum(
        1 for day in range(1, days_in_month + 1)
        if date(year, month, day).weekday() < 5
    )
