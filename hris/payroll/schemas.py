"""Payroll Pydantic v2 schemas — request/response validation."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from hris.common.constants import PayrollStatus
from hris.common.pagination import PaginationMeta


# ═════════════════════════════════════════════════════════════════════
# Employee Brief (embedded)
# ═════════════════════════════════════════════════════════════════════


class EmployeeBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_number: str
    display_name: Optional[str] = None


# ═════════════════════════════════════════════════════════════════════
# Requests
# ═════════════════════════════════════════════════════════════════════


class PayrollGenerate(BaseModel):
    """Month range is checked by the service so it reports as a field error."""

    employee_id: uuid.UUID
    month: int
    year: int = Field(..., ge=1900, le=9999)


class PayrollUpdate(BaseModel):
    """Manual adjustments; ``price_thr`` fills ``thr`` from the statutory rule."""

    overtime_pay: Optional[Decimal] = Field(None, ge=0)
    thr: Optional[Decimal] = Field(None, ge=0)
    price_thr: bool = False
    other_deductions: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = None


class PayrollStatusUpdate(BaseModel):
    status: PayrollStatus


# ═════════════════════════════════════════════════════════════════════
# Responses
# ═════════════════════════════════════════════════════════════════════


class PayrollOut(BaseModel):
    """Full payroll representation."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    employee_id: uuid.UUID
    employee: Optional[EmployeeBrief] = None
    period_month: int
    period_year: int
    working_days: int = 0
    present_days: int = 0
    basic_salary: Decimal = Decimal("0")
    total_allowances: Decimal = Decimal("0")
    overtime_pay: Decimal = Decimal("0")
    thr: Decimal = Decimal("0")
    gross_salary: Decimal = Decimal("0")
    bpjs_kes_deduction: Decimal = Decimal("0")
    bpjs_tk_deduction: Decimal = Decimal("0")
    pph21: Decimal = Decimal("0")
    other_deductions: Decimal = Decimal("0")
    total_deductions: Decimal = Decimal("0")
    net_salary: Decimal = Decimal("0")
    status: PayrollStatus = PayrollStatus.draft
    paid_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PayrollListResponse(BaseModel):
    data: List[PayrollOut]
    meta: PaginationMeta


class PayslipListResponse(BaseModel):
    data: List[PayrollOut]
    total: int
