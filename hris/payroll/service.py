"""Payroll service layer — generation, adjustment, lifecycle, payslips.

Business logic:
  - One record per employee per (month, year); duplicates are conflicts
  - Generation prices inputs from salary and attendance, stored as draft
  - Adjustments (overtime, THR, other deductions) re-total the record
  - Lifecycle moves forward only: draft → processed → paid
  - Only drafts may be deleted; paid records are immutable
"""

from __future__ import annotations

import calendar
import logging
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hris.common.audit import create_audit_entry
from hris.common.constants import PAYROLL_TRANSITIONS, PayrollStatus
from hris.common.exceptions import (
    ConflictError,
    InvalidTransitionError,
    NotFoundException,
    ValidationException,
)
from hris.common.filters import apply_filters
from hris.common.pagination import PaginationMeta, PaginationParams, paginate
from hris.core_hr.models import Employee
from hris.payroll.calculator import amounts_of, apply_amounts, recompute
from hris.payroll.inputs import gather_inputs
from hris.payroll.models import Payroll
from hris.payroll.rules import calculate_thr, months_worked
from hris.payroll.schemas import PayrollUpdate

logger = logging.getLogger(__name__)


def _period_key(employee_id: uuid.UUID, month: int, year: int) -> str:
    return f"{employee_id}/{year}-{month:02d}"


async def _statutory_thr(db: AsyncSession, record: Payroll) -> Decimal:
    """THR on the record's fixed monthly pay, prorated by service to period end."""
    employee = await db.get(Employee, record.employee_id)
    if employee is None:
        raise NotFoundException("Employee", record.employee_id)
    _, last = calendar.monthrange(record.period_year, record.period_month)
    months = months_worked(
        employee.join_date, date(record.period_year, record.period_month, last),
    )
    return calculate_thr(record.basic_salary + record.total_allowances, months)


def _snapshot(record: Payroll) -> dict[str, Any]:
    """JSON-safe view of the mutable fields, for the audit trail."""
    return {
        "status": record.status.value,
        "overtime_pay": str(record.overtime_pay),
        "thr": str(record.thr),
        "other_deductions": str(record.other_deductions),
        "gross_salary": str(record.gross_salary),
        "total_deductions": str(record.total_deductions),
        "net_salary": str(record.net_salary),
        "notes": record.notes,
    }


def recompute_record(record: Payroll) -> Payroll:
    """Re-derive gross, total deductions and net on *record* in place."""
    apply_amounts(record, recompute(amounts_of(record)))
    return record


def transition_status(
    record: Payroll,
    target: PayrollStatus,
    *,
    now: Optional[datetime] = None,
) -> Payroll:
    """Move *record* one step forward; ``paid_at`` is stamped on payment only."""
    target = PayrollStatus(target)
    current = PayrollStatus(record.status) if record.status is not None else None
    if current is None or PAYROLL_TRANSITIONS.get(current) != target:
        raise InvalidTransitionError(
            "Payroll", current.value if current else None, target.value,
        )
    record.status = target
    if target == PayrollStatus.paid:
        record.paid_at = now or datetime.now(timezone.utc)
    return record


# ═════════════════════════════════════════════════════════════════════
# PayrollService
# ═════════════════════════════════════════════════════════════════════


class PayrollService:
    """Async payroll operations against the database."""

    # ─────────────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def get(db: AsyncSession, payroll_id: uuid.UUID) -> Payroll:
        record = await db.get(Payroll, payroll_id)
        if record is None:
            raise NotFoundException("Payroll", payroll_id)
        return record

    @staticmethod
    async def find_for_period(
        db: AsyncSession, employee_id: uuid.UUID, month: int, year: int,
    ) -> Optional[Payroll]:
        result = await db.execute(
            select(Payroll).where(
                Payroll.employee_id == employee_id,
                Payroll.period_month == month,
                Payroll.period_year == year,
            )
        )
        return result.scalars().first()

    @staticmethod
    async def list_payrolls(
        db: AsyncSession,
        params: PaginationParams,
        *,
        employee_id: Optional[uuid.UUID] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        status: Optional[PayrollStatus] = None,
    ) -> tuple[list[Payroll], PaginationMeta]:
        """Filtered page of payrolls, newest period first."""
        query = select(Payroll).order_by(
            Payroll.period_year.desc(),
            Payroll.period_month.desc(),
            Payroll.created_at.desc(),
        )
        query = apply_filters(
            query,
            Payroll,
            {
                "employee_id": employee_id,
                "period_month": month,
                "period_year": year,
                "status": status,
            },
        )
        return await paginate(db, query, params, model=Payroll)

    @staticmethod
    async def list_payslips(db: AsyncSession, user_id: uuid.UUID) -> list[Payroll]:
        """Paid records of the employee linked to *user_id*, newest first."""
        result = await db.execute(
            select(Employee.id).where(Employee.user_id == user_id)
        )
        employee_id = result.scalar()
        if employee_id is None:
            raise NotFoundException("Employee", user_id)

        result = await db.execute(
            select(Payroll)
            .where(
                Payroll.employee_id == employee_id,
                Payroll.status == PayrollStatus.paid,
            )
            .order_by(Payroll.period_year.desc(), Payroll.period_month.desc())
        )
        return list(result.scalars().unique().all())

    # ─────────────────────────────────────────────────────────────────
    # Writes
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def generate(
        db: AsyncSession,
        employee_id: uuid.UUID,
        month: int,
        year: int,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> Payroll:
        """Create the draft payroll of *employee_id* for (*month*, *year*)."""
        if not 1 <= month <= 12:
            raise ValidationException({"month": ["Month must be between 1 and 12."]})

        employee = await db.get(Employee, employee_id)
        if employee is None:
            raise NotFoundException("Employee", employee_id)

        if await PayrollService.find_for_period(db, employee_id, month, year):
            raise ConflictError("period", _period_key(employee_id, month, year))

        inputs = await gather_inputs(db, employee, month, year)

        record = Payroll(
            employee_id=employee_id,
            period_month=month,
            period_year=year,
            working_days=inputs.working_days,
            present_days=inputs.present_days,
            status=PayrollStatus.draft,
        )
        record.employee = employee
        apply_amounts(record, inputs.amounts)
        db.add(record)
        try:
            await db.flush()
        except IntegrityError:
            raise ConflictError("period", _period_key(employee_id, month, year))

        await create_audit_entry(
            db,
            action="generate",
            entity_type="payroll",
            entity_id=record.id,
            actor_id=actor_id,
            new_values=_snapshot(record),
        )
        logger.info(
            "payroll generated for %s: gross=%s net=%s",
            _period_key(employee_id, month, year),
            record.gross_salary, record.net_salary,
        )
        return record

    @staticmethod
    async def update(
        db: AsyncSession,
        payroll_id: uuid.UUID,
        data: PayrollUpdate,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> Payroll:
        """Apply manual adjustments to an unpaid record and re-total it."""
        record = await PayrollService.get(db, payroll_id)
        if record.status == PayrollStatus.paid:
            raise InvalidTransitionError("Payroll", record.status.value, "updated")

        old_values = _snapshot(record)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if changes.pop("price_thr", False):
            if "thr" in changes:
                raise ValidationException(
                    {"thr": ["Give either thr or price_thr, not both."]}
                )
            changes["thr"] = await _statutory_thr(db, record)
        for field, value in changes.items():
            setattr(record, field, value)
        recompute_record(record)
        await db.flush()

        await create_audit_entry(
            db,
            action="update",
            entity_type="payroll",
            entity_id=record.id,
            actor_id=actor_id,
            old_values=old_values,
            new_values=_snapshot(record),
        )
        logger.info("payroll %s updated: %s", record.id, sorted(changes))
        return record

    @staticmethod
    async def update_status(
        db: AsyncSession,
        payroll_id: uuid.UUID,
        target: PayrollStatus,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> Payroll:
        record = await PayrollService.get(db, payroll_id)
        previous = record.status
        transition_status(record, target)
        await db.flush()

        await create_audit_entry(
            db,
            action="transition",
            entity_type="payroll",
            entity_id=record.id,
            actor_id=actor_id,
            old_values={"status": previous.value},
            new_values={"status": record.status.value},
        )
        logger.info(
            "payroll %s moved %s -> %s", record.id, previous.value, record.status.value,
        )
        return record

    @staticmethod
    async def delete(
        db: AsyncSession,
        payroll_id: uuid.UUID,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> None:
        record = await PayrollService.get(db, payroll_id)
        if record.status != PayrollStatus.draft:
            raise InvalidTransitionError("Payroll", record.status.value, "deleted")

        old_values = _snapshot(record)
        await db.delete(record)
        await db.flush()

        await create_audit_entry(
            db,
            action="delete",
            entity_type="payroll",
            entity_id=payroll_id,
            actor_id=actor_id,
            old_values=old_values,
        )
        logger.info("payroll %s deleted", payroll_id)
