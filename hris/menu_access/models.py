"""Menu access ORM models: MenuAccessOverride."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hris.database import Base

if TYPE_CHECKING:
    from hris.core_hr.models import User


class MenuAccessOverride(Base):
    """Administrator-configured menu keys for one user.

    One row per user. ``menu_keys`` may be an empty list, which is a real
    configuration (the user sees only the dashboard), distinct from having
    no row at all (the user falls back to role defaults).
    """

    __tablename__ = "menu_access_overrides"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    menu_keys: Mapped[list] = mapped_column(
        sa.JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        default=list,
    )
    updated_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="SET NULL"),
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    user: Mapped["User"] = relationship(
        back_populates="menu_access", foreign_keys=[user_id], lazy="joined",
    )

    def __repr__(self) -> str:
        return f"<MenuAccessOverride user_id={self.user_id} keys={self.menu_keys}>"
