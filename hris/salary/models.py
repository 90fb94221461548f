"""Salary ORM models: EmployeeSalary.

SQLAlchemy 2.0 async-compatible models. A row is one compensation
package effective from ``effective_date``; the latest row on or before a
pay period is the one payroll uses.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hris.database import Base

_MONEY = sa.Numeric(15, 2)


class EmployeeSalary(Base):
    """Employee compensation package: base pay, allowances, BPJS shares."""

    __tablename__ = "employee_salaries"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    employee_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("employees.id", ondelete="CASCADE"),
        nullable=False,
    )
    basic_salary: Mapped[Decimal] = mapped_column(_MONEY, nullable=False)

    # Allowances
    transport_allowance: Mapped[Decimal] = mapped_column(_MONEY, default=Decimal("0"))
    meal_allowance: Mapped[Decimal] = mapped_column(_MONEY, default=Decimal("0"))
    housing_allowance: Mapped[Decimal] = mapped_column(_MONEY, default=Decimal("0"))
    position_allowance: Mapped[Decimal] = mapped_column(_MONEY, default=Decimal("0"))

    # BPJS Kesehatan
    bpjs_kes_employee: Mapped[Decimal] = mapped_column(_MONEY, default=Decimal("0"))
    bpjs_kes_company: Mapped[Decimal] = mapped_column(_MONEY, default=Decimal("0"))

    # BPJS Ketenagakerjaan
    bpjs_tk_jht_employee: Mapped[Decimal] = mapped_column(_MONEY, default=Decimal("0"))
    bpjs_tk_jht_company: Mapped[Decimal] = mapped_column(_MONEY, default=Decimal("0"))
    bpjs_tk_jkk: Mapped[Decimal] = mapped_column(_MONEY, default=Decimal("0"))
    bpjs_tk_jkm: Mapped[Decimal] = mapped_column(_MONEY, default=Decimal("0"))
    bpjs_tk_jp_employee: Mapped[Decimal] = mapped_column(_MONEY, default=Decimal("0"))
    bpjs_tk_jp_company: Mapped[Decimal] = mapped_column(_MONEY, default=Decimal("0"))

    effective_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    employee = relationship("Employee", foreign_keys=[employee_id])

    @property
    def total_allowances(self) -> Decimal:
        return (
            (self.transport_allowance or Decimal("0"))
            + (self.meal_allowance or Decimal("0"))
            + (self.housing_allowance or Decimal("0"))
            + (self.position_allowance or Decimal("0"))
        )

    @property
    def bpjs_tk_employee(self) -> Decimal:
        """Employee-side BPJS Ketenagakerjaan: JHT + JP."""
        return (self.bpjs_tk_jht_employee or Decimal("0")) + (
            self.bpjs_tk_jp_employee or Decimal("0")
        )

    def __repr__(self) -> str:
        return f"<EmployeeSalary employee_id={self.employee_id} basic={self.basic_salary}>"
