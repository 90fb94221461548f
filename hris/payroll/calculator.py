"""Payroll aggregation — gross, total deductions and net from pay inputs.

Pure and deterministic: the same inputs always yield the same totals, and
feeding a result back in changes nothing. Net salary may be negative when
deductions exceed gross; it is never clamped.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

_CENT = Decimal("0.01")


def _money(value: Any) -> Decimal:
    if value is None:
        return Decimal("0.00")
    return Decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PayrollAmounts:
    """Monetary components of one payroll record.

    The three derived fields are populated by ``compute_amounts`` /
    ``recompute``; values passed in for them are ignored.
    """

    basic_salary: Decimal
    total_allowances: Decimal = Decimal("0")
    overtime_pay: Decimal = Decimal("0")
    thr: Decimal = Decimal("0")
    bpjs_kes_deduction: Decimal = Decimal("0")
    bpjs_tk_deduction: Decimal = Decimal("0")
    pph21: Decimal = Decimal("0")
    other_deductions: Decimal = Decimal("0")
    gross_salary: Decimal = Decimal("0")
    total_deductions: Decimal = Decimal("0")
    net_salary: Decimal = Decimal("0")


INPUT_FIELDS = (
    "basic_salary",
    "total_allowances",
    "overtime_pay",
    "thr",
    "bpjs_kes_deduction",
    "bpjs_tk_deduction",
    "pph21",
    "other_deductions",
)


def recompute(amounts: PayrollAmounts) -> PayrollAmounts:
    """Return *amounts* with gross, total deductions and net recomputed."""
    inputs = {name: _money(getattr(amounts, name)) for name in INPUT_FIELDS}
    gross = (
        inputs["basic_salary"]
        + inputs["total_allowances"]
        + inputs["overtime_pay"]
        + inputs["thr"]
    )
    deductions = (
        inputs["bpjs_kes_deduction"]
        + inputs["bpjs_tk_deduction"]
        + inputs["pph21"]
        + inputs["other_deductions"]
    )
    return replace(
        amounts,
        **inputs,
        gross_salary=_money(gross),
        total_deductions=_money(deductions),
        net_salary=_money(gross - deductions),
    )


def compute_amounts(**inputs: Any) -> PayrollAmounts:
    """Build and total a ``PayrollAmounts`` from keyword inputs."""
    return recompute(PayrollAmounts(**inputs))


def amounts_of(record: Any) -> PayrollAmounts:
    """Read the input fields off any object carrying them (e.g. an ORM row)."""
    return PayrollAmounts(**{name: getattr(record, name) for name in INPUT_FIELDS})


def apply_amounts(record: Any, amounts: PayrollAmounts) -> None:
    """Write every monetary field of *amounts* onto *record*."""
    for name in INPUT_FIELDS + ("gross_salary", "total_deductions", "net_salary"):
        setattr(record, name, getattr(amounts, name))
