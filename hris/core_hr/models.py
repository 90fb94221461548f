"""Core HR ORM models: User, Employee.

SQLAlchemy 2.0 async-compatible models with Mapped[] annotations.
A User is a login identity carrying a role; an Employee is the payroll
subject linked one-to-one to a User.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hris.common.constants import MaritalStatus, UserRole
from hris.database import Base

if TYPE_CHECKING:
    from hris.auth.models import UserSession
    from hris.menu_access.models import MenuAccessOverride


# ═════════════════════════════════════════════════════════════════════
# User
# ═════════════════════════════════════════════════════════════════════


class User(Base):
    """Login identity; ``role`` drives default menu access and API gating."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(sa.String(255), nullable=False)
    email: Mapped[str] = mapped_column(sa.String(255), unique=True, nullable=False)
    role: Mapped[UserRole] = mapped_column(
        sa.Enum(UserRole, name="user_role", native_enum=False, length=20),
        nullable=False,
        default=UserRole.employee,
    )
    is_active: Mapped[bool] = mapped_column(
        sa.Boolean, default=True, server_default=sa.text("TRUE"),
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )

    # ── Relationships ───────────────────────────────────────────────
    employee: Mapped[Optional[Employee]] = relationship(
        back_populates="user", uselist=False,
    )
    sessions: Mapped[list["UserSession"]] = relationship(
        back_populates="user", cascade="all, delete-orphan",
    )
    menu_access: Mapped[Optional["MenuAccessOverride"]] = relationship(
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        foreign_keys="MenuAccessOverride.user_id",
    )

    def __repr__(self) -> str:
        return f"<User {self.email!r} ({self.role.value})>"


# ═════════════════════════════════════════════════════════════════════
# Employee
# ═════════════════════════════════════════════════════════════════════


class Employee(Base):
    """Employee master record — the subject of payroll."""

    __tablename__ = "employees"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    employee_number: Mapped[str] = mapped_column(
        sa.String(50), unique=True, nullable=False,
    )
    marital_status: Mapped[MaritalStatus] = mapped_column(
        sa.Enum(MaritalStatus, name="marital_status", native_enum=False, length=20),
        default=MaritalStatus.lajang,
    )
    dependents: Mapped[int] = mapped_column(sa.Integer, default=0)
    join_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(
        sa.Boolean, default=True, server_default=sa.text("TRUE"),
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )

    # ── Relationships ───────────────────────────────────────────────
    user: Mapped[User] = relationship(back_populates="employee", lazy="joined")

    @property
    def display_name(self) -> str:
        return self.user.name if self.user is not None else self.employee_number

    def __repr__(self) -> str:
        return f"<Employee {self.employee_number}>"
