"""Payroll calculator tests — gross/deduction/net aggregation."""

from __future__ import annotations

from decimal import Decimal
from types import SimpleNamespace

from hris.payroll.calculator import (
    INPUT_FIELDS,
    PayrollAmounts,
    amounts_of,
    apply_amounts,
    compute_amounts,
    recompute,
)

D = Decimal


def _reference_amounts() -> PayrollAmounts:
    return compute_amounts(
        basic_salary=D("5000000"),
        total_allowances=D("500000"),
        overtime_pay=D("200000"),
        thr=D("0"),
        bpjs_kes_deduction=D("50000"),
        bpjs_tk_deduction=D("150000"),
        pph21=D("112500"),
        other_deductions=D("0"),
    )


def test_reference_payroll_totals():
    """5,000,000 basic + 500,000 allowances + 200,000 overtime → 5,387,500 net."""
    amounts = _reference_amounts()
    assert amounts.gross_salary == D("5700000")
    assert amounts.total_deductions == D("312500")
    assert amounts.net_salary == D("5387500")


def test_thr_and_other_deductions_included():
    amounts = compute_amounts(
        basic_salary=D("4000000"),
        thr=D("4000000"),
        other_deductions=D("250000"),
    )
    assert amounts.gross_salary == D("8000000")
    assert amounts.total_deductions == D("250000")
    assert amounts.net_salary == D("7750000")


def test_recompute_is_idempotent():
    once = _reference_amounts()
    twice = recompute(once)
    assert twice == once
    assert recompute(twice) == once


def test_stale_derived_values_are_overwritten():
    stale = PayrollAmounts(
        basic_salary=D("1000000"),
        gross_salary=D("999"),
        total_deductions=D("999"),
        net_salary=D("999"),
    )
    fixed = recompute(stale)
    assert fixed.gross_salary == D("1000000")
    assert fixed.total_deductions == D("0")
    assert fixed.net_salary == D("1000000")


def test_negative_net_is_preserved():
    amounts = compute_amounts(
        basic_salary=D("1000000"),
        other_deductions=D("1500000"),
    )
    assert amounts.net_salary == D("-500000")


def test_amounts_are_rounded_to_cents():
    amounts = compute_amounts(
        basic_salary=D("1000000.005"),
        total_allowances=D("0.004"),
    )
    assert amounts.basic_salary == D("1000000.01")
    assert amounts.total_allowances == D("0.00")
    assert amounts.gross_salary == D("1000000.01")


def test_none_inputs_count_as_zero():
    amounts = compute_amounts(basic_salary=D("100"), thr=None, pph21=None)
    assert amounts.gross_salary == D("100")
    assert amounts.total_deductions == D("0")


def test_read_and_write_record_fields():
    record = SimpleNamespace(**{name: D("0") for name in INPUT_FIELDS})
    record.basic_salary = D("3000000")
    record.pph21 = D("10000")

    apply_amounts(record, recompute(amounts_of(record)))

    assert record.gross_salary == D("3000000")
    assert record.total_deductions == D("10000")
    assert record.net_salary == D("2990000")
