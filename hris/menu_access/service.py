"""Menu access service layer — override storage and effective access.

Business logic:
  - One override row per user; writing replaces the whole key set
  - An empty key set is stored as-is and hides everything but the dashboard
  - Reset deletes the row, returning the user to role defaults
  - Effective access resolution for session loads
  - Navigation chrome for the caller, filtered by effective access
"""

from __future__ import annotations

import logging
import uuid
from typing import Iterable, Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hris.common.audit import create_audit_entry
from hris.common.constants import ALL_MENU_KEYS, MenuKey
from hris.common.exceptions import ConflictError, NotFoundException
from hris.core_hr.models import User
from hris.menu_access.models import MenuAccessOverride
from hris.menu_access.navigation import (
    NAV_TABS,
    filter_visible_sub_items,
    filter_visible_tabs,
    get_active_tab,
    is_route_allowed,
    is_sub_item_active,
)
from hris.menu_access.resolver import (
    EffectiveAccess,
    coerce_menu_keys,
    effective_access_for,
)
from hris.menu_access.schemas import (
    MenuAccessOverrideOut,
    NavigationOut,
    NavTabOut,
    SubMenuItemOut,
)

logger = logging.getLogger(__name__)


def _canonical(keys: Iterable[MenuKey]) -> list[str]:
    """Serialise a key set in universe order for storage."""
    chosen = set(keys)
    return [k.value for k in ALL_MENU_KEYS if k in chosen]


def _override_out(
    row: MenuAccessOverride, user: Optional[User] = None,
) -> MenuAccessOverrideOut:
    user = user or row.user
    return MenuAccessOverrideOut(
        user_id=row.user_id,
        user_name=user.name if user else None,
        user_email=user.email if user else None,
        user_role=user.role if user else None,
        menu_keys=[MenuKey(k) for k in row.menu_keys],
        updated_by=row.updated_by,
        updated_at=row.updated_at,
    )


# ═════════════════════════════════════════════════════════════════════
# MenuAccessService
# ═════════════════════════════════════════════════════════════════════


class MenuAccessService:
    """Async menu access operations: overrides, resolution, navigation."""

    # ─────────────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def _get_row(
        db: AsyncSession, user_id: uuid.UUID,
    ) -> Optional[MenuAccessOverride]:
        result = await db.execute(
            select(MenuAccessOverride).where(MenuAccessOverride.user_id == user_id)
        )
        return result.scalars().first()

    @staticmethod
    async def get_override(
        db: AsyncSession, user_id: uuid.UUID,
    ) -> Optional[frozenset[MenuKey]]:
        """The user's override key set, or ``None`` when none is configured."""
        row = await MenuAccessService._get_row(db, user_id)
        if row is None:
            return None
        return frozenset(MenuKey(k) for k in row.menu_keys)

    @staticmethod
    async def get_effective_access(db: AsyncSession, user: User) -> EffectiveAccess:
        override = await MenuAccessService.get_override(db, user.id)
        return effective_access_for(user.role, override)

    @staticmethod
    async def list_overrides(db: AsyncSession) -> list[MenuAccessOverrideOut]:
        """Every configured override, most recently changed first."""
        result = await db.execute(
            select(MenuAccessOverride).order_by(MenuAccessOverride.updated_at.desc())
        )
        return [_override_out(row) for row in result.scalars().unique().all()]

    @staticmethod
    async def get_override_detail(
        db: AsyncSession, user_id: uuid.UUID,
    ) -> MenuAccessOverrideOut:
        row = await MenuAccessService._get_row(db, user_id)
        if row is None:
            raise NotFoundException("MenuAccessOverride", user_id)
        return _override_out(row)

    # ─────────────────────────────────────────────────────────────────
    # Writes
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def set_user_access(
        db: AsyncSession,
        user_id: uuid.UUID,
        menu_keys: Iterable[Union[MenuKey, str]],
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> MenuAccessOverrideOut:
        """Create or replace the override for *user_id* with exactly *menu_keys*."""
        keys = coerce_menu_keys(menu_keys)

        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundException("User", user_id)

        stored = _canonical(keys)
        row = await MenuAccessService._get_row(db, user_id)
        old_values = None
        if row is None:
            row = MenuAccessOverride(user_id=user_id, menu_keys=stored, updated_by=actor_id)
            db.add(row)
            action = "set"
        else:
            old_values = {"menu_keys": list(row.menu_keys)}
            row.menu_keys = stored
            row.updated_by = actor_id
            action = "replace"

        try:
            await db.flush()
        except IntegrityError:
            raise ConflictError("user_id", user_id)

        await create_audit_entry(
            db,
            action=action,
            entity_type="menu_access",
            entity_id=user_id,
            actor_id=actor_id,
            old_values=old_values,
            new_values={"menu_keys": stored},
        )
        logger.info(
            "menu access %s for user %s: %d keys (actor %s)",
            action, user_id, len(stored), actor_id,
        )
        return _override_out(row, user)

    @staticmethod
    async def reset_user_access(
        db: AsyncSession,
        user_id: uuid.UUID,
        *,
        actor_id: Optional[uuid.UUID] = None,
    ) -> bool:
        """Delete the override for *user_id*. Returns whether one existed."""
        row = await MenuAccessService._get_row(db, user_id)
        if row is None:
            return False

        old_values = {"menu_keys": list(row.menu_keys)}
        await db.delete(row)
        await db.flush()

        await create_audit_entry(
            db,
            action="reset",
            entity_type="menu_access",
            entity_id=user_id,
            actor_id=actor_id,
            old_values=old_values,
        )
        logger.info("menu access reset for user %s (actor %s)", user_id, actor_id)
        return True

    # ─────────────────────────────────────────────────────────────────
    # Navigation
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def build_navigation(
        access: EffectiveAccess, path: Optional[str] = None,
    ) -> NavigationOut:
        """Visible tabs and sub items for *access*, marked against *path*."""
        allowed = access.navigation_keys
        active = get_active_tab(path) if path else None

        tabs = []
        for tab in filter_visible_tabs(NAV_TABS, allowed):
            subs = [
                SubMenuItemOut(
                    name=sub.name,
                    key=sub.key,
                    href=sub.href,
                    is_active=bool(path) and is_sub_item_active(path, sub),
                )
                for sub in filter_visible_sub_items(tab.sub_items, allowed)
            ]
            tabs.append(
                NavTabOut(
                    name=tab.name,
                    href=tab.href,
                    menu_keys=list(tab.menu_keys),
                    sub_items=subs,
                    is_active=active is not None and active.name == tab.name,
                )
            )

        return NavigationOut(
            source=access.source,
            tabs=tabs,
            active_tab=active.name if active else None,
            route_allowed=is_route_allowed(path, allowed) if path else True,
        )
