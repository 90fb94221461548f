"""Payroll router — generation, adjustments, lifecycle, payslips.

Listing and generation are open to HR; adjustments, status changes and
deletion are admin only. Payslips are self-service.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from hris.auth.dependencies import get_current_user, require_role
from hris.common.constants import PayrollStatus, UserRole
from hris.common.pagination import PaginationParams
from hris.common.rate_limit import limiter
from hris.core_hr.models import User
from hris.database import get_db
from hris.payroll.schemas import (
    PayrollGenerate,
    PayrollListResponse,
    PayrollOut,
    PayrollStatusUpdate,
    PayrollUpdate,
    PayslipListResponse,
)
from hris.payroll.service import PayrollService

router = APIRouter(prefix="", tags=["payroll"])

_hr_dep = require_role(UserRole.hr)
_admin_dep = require_role(UserRole.admin)


# ── GET / ────────────────────────────────────────────────────────────

@router.get("/", response_model=PayrollListResponse)
async def list_payrolls(
    employee_id: Optional[uuid.UUID] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None),
    status: Optional[PayrollStatus] = Query(None),
    params: PaginationParams = Depends(),
    _user: User = Depends(_hr_dep),
    db: AsyncSession = Depends(get_db),
):
    """List payrolls, newest period first (HR/Admin only)."""
    rows, meta = await PayrollService.list_payrolls(
        db, params, employee_id=employee_id, month=month, year=year, status=status,
    )
    return PayrollListResponse(
        data=[PayrollOut.model_validate(r) for r in rows],
        meta=meta,
    )


# ── GET /my-payslips ─────────────────────────────────────────────────

@router.get("/my-payslips", response_model=PayslipListResponse)
async def my_payslips(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Paid payrolls of the authenticated user's employee record."""
    rows = await PayrollService.list_payslips(db, user.id)
    return PayslipListResponse(
        data=[PayrollOut.model_validate(r) for r in rows],
        total=len(rows),
    )


# ── GET /{payroll_id} ────────────────────────────────────────────────

@router.get("/{payroll_id}", response_model=PayrollOut)
async def get_payroll(
    payroll_id: uuid.UUID,
    _user: User = Depends(_hr_dep),
    db: AsyncSession = Depends(get_db),
):
    record = await PayrollService.get(db, payroll_id)
    return PayrollOut.model_validate(record)


# ── POST /generate ───────────────────────────────────────────────────

@router.post("/generate", response_model=PayrollOut, status_code=201)
@limiter.limit("30/minute")
async def generate_payroll(
    request: Request,
    body: PayrollGenerate,
    user: User = Depends(_hr_dep),
    db: AsyncSession = Depends(get_db),
):
    """Generate a draft payroll for one employee and period (HR/Admin only)."""
    record = await PayrollService.generate(
        db, body.employee_id, body.month, body.year, actor_id=user.id,
    )
    return PayrollOut.model_validate(record)


# ── PUT /{payroll_id} ────────────────────────────────────────────────

@router.put("/{payroll_id}", response_model=PayrollOut)
async def update_payroll(
    payroll_id: uuid.UUID,
    body: PayrollUpdate,
    user: User = Depends(_admin_dep),
    db: AsyncSession = Depends(get_db),
):
    """Adjust overtime, THR (explicit or statutory), other deductions or notes (Admin only)."""
    record = await PayrollService.update(db, payroll_id, body, actor_id=user.id)
    return PayrollOut.model_validate(record)


# ── PUT /{payroll_id}/status ─────────────────────────────────────────

@router.put("/{payroll_id}/status", response_model=PayrollOut)
async def update_payroll_status(
    payroll_id: uuid.UUID,
    body: PayrollStatusUpdate,
    user: User = Depends(_admin_dep),
    db: AsyncSession = Depends(get_db),
):
    """Advance the payroll lifecycle one step (Admin only)."""
    record = await PayrollService.update_status(
        db, payroll_id, body.status, actor_id=user.id,
    )
    return PayrollOut.model_validate(record)


# ── DELETE /{payroll_id} ─────────────────────────────────────────────

@router.delete("/{payroll_id}", status_code=204)
async def delete_payroll(
    payroll_id: uuid.UUID,
    user: User = Depends(_admin_dep),
    db: AsyncSession = Depends(get_db),
):
    """Delete a draft payroll (Admin only)."""
    await PayrollService.delete(db, payroll_id, actor_id=user.id)
