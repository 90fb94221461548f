"""Payroll ORM models: Payroll.

One row per employee per (month, year) period. The three derived money
columns (gross, total deductions, net) are always written together by
the calculator, never edited on their own.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hris.common.constants import PayrollStatus
from hris.database import Base

if TYPE_CHECKING:
    from hris.core_hr.models import Employee

_MONEY = sa.Numeric(15, 2)


class Payroll(Base):
    """Monthly payroll record for one employee."""

    __tablename__ = "payrolls"
    __table_args__ = (
        sa.UniqueConstraint(
            "employee_id", "period_month", "period_year",
            name="uq_payroll_employee_period",
        ),
        sa.CheckConstraint("period_month BETWEEN 1 AND 12", name="ck_payroll_period_month"),
        sa.Index("ix_payrolls_period", "period_year", "period_month"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    period_month: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    period_year: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    working_days: Mapped[int] = mapped_column(sa.Integer, default=0)
    present_days: Mapped[int] = mapped_column(sa.Integer, default=0)

    # Earnings
    basic_salary: Mapped[Decimal] = mapped_column(_MONEY, default=Decimal("0"))
    total_allowances: Mapped[Decimal] = mapped_column(_MONEY, default=Decimal("0"))
    overtime_pay: Mapped[Decimal] = mapped_column(_MONEY, default=Decimal("0"))
    thr: Mapped[Decimal] = mapped_column(_MONEY, default=Decimal("0"))
    gross_salary: Mapped[Decimal] = mapped_column(_MONEY, default=Decimal("0"))

    # Deductions
    bpjs_kes_deduction: Mapped[Decimal] = mapped_column(_MONEY, default=Decimal("0"))
    bpjs_tk_deduction: Mapped[Decimal] = mapped_column(_MONEY, default=Decimal("0"))
    pph21: Mapped[Decimal] = mapped_column(_MONEY, default=Decimal("0"))
    other_deductions: Mapped[Decimal] = mapped_column(_MONEY, default=Decimal("0"))
    total_deductions: Mapped[Decimal] = mapped_column(_MONEY, default=Decimal("0"))

    net_salary: Mapped[Decimal] = mapped_column(_MONEY, default=Decimal("0"))

    status: Mapped[PayrollStatus] = mapped_column(
        sa.Enum(PayrollStatus, name="payroll_status", native_enum=False, length=20),
        nullable=False,
        default=PayrollStatus.draft,
    )
    paid_at: Mapped[Optional[datetime]] = mapped_column(sa.DateTime(timezone=True))
    notes: Mapped[Optional[str]] = mapped_column(sa.Text)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    employee: Mapped["Employee"] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return (
            f"<Payroll {self.employee_id} {self.period_year}-{self.period_month:02d} "
            f"{self.status.value}>"
        )
