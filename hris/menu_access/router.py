"""Menu access router — effective access, navigation, admin overrides.

Self-service endpoints require any authenticated user; override
management is admin only.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hris.auth.dependencies import get_current_user, require_role
from hris.common.constants import ROLE_DEFAULTS, UserRole
from hris.core_hr.models import User
from hris.database import get_db
from hris.menu_access.schemas import (
    EffectiveAccessOut,
    MenuAccessOverrideListResponse,
    MenuAccessOverrideOut,
    MenuAccessUpdate,
    NavigationOut,
    RoleDefaultsOut,
)
from hris.menu_access.service import MenuAccessService

router = APIRouter(prefix="", tags=["menu-access"])

_admin_dep = require_role(UserRole.admin)


# ── GET /me ──────────────────────────────────────────────────────────

@router.get("/me", response_model=EffectiveAccessOut)
async def my_menu_access(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Resolved menu keys for the authenticated user."""
    access = await MenuAccessService.get_effective_access(db, user)
    return EffectiveAccessOut(
        user_id=user.id,
        role=user.role,
        source=access.source,
        menu_keys=list(access.keys),
    )


# ── GET /me/navigation ───────────────────────────────────────────────

@router.get("/me/navigation", response_model=NavigationOut)
async def my_navigation(
    path: Optional[str] = Query(None, description="Current route, e.g. /dashboard/payroll"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Visible tabs and sub items for the authenticated user."""
    access = await MenuAccessService.get_effective_access(db, user)
    return MenuAccessService.build_navigation(access, path)


# ── GET /role-defaults/{role} ────────────────────────────────────────

@router.get("/role-defaults/{role}", response_model=RoleDefaultsOut)
async def role_defaults(
    role: UserRole,
    _user: User = Depends(get_current_user),
):
    """Default menu keys for a role."""
    return RoleDefaultsOut(role=role, menu_keys=list(ROLE_DEFAULTS[role]))


# ── GET / ────────────────────────────────────────────────────────────

@router.get("/", response_model=MenuAccessOverrideListResponse)
async def list_overrides(
    _user: User = Depends(_admin_dep),
    db: AsyncSession = Depends(get_db),
):
    """All configured overrides (admin only)."""
    overrides = await MenuAccessService.list_overrides(db)
    return MenuAccessOverrideListResponse(data=overrides, total=len(overrides))


# ── GET /{user_id} ───────────────────────────────────────────────────

@router.get("/{user_id}", response_model=MenuAccessOverrideOut)
async def get_override(
    user_id: uuid.UUID,
    _user: User = Depends(_admin_dep),
    db: AsyncSession = Depends(get_db),
):
    """One user's override; 404 when the user is on role defaults."""
    return await MenuAccessService.get_override_detail(db, user_id)


# ── PUT / ────────────────────────────────────────────────────────────

@router.put("/", response_model=MenuAccessOverrideOut)
async def set_user_access(
    body: MenuAccessUpdate,
    admin: User = Depends(_admin_dep),
    db: AsyncSession = Depends(get_db),
):
    """Create or replace a user's override (admin only)."""
    return await MenuAccessService.set_user_access(
        db, body.user_id, body.menu_keys, actor_id=admin.id,
    )


# ── DELETE /{user_id} ────────────────────────────────────────────────

@router.delete("/{user_id}", status_code=204)
async def reset_user_access(
    user_id: uuid.UUID,
    admin: User = Depends(_admin_dep),
    db: AsyncSession = Depends(get_db),
):
    """Drop a user's override so role defaults apply again (admin only)."""
    await MenuAccessService.reset_user_access(db, user_id, actor_id=admin.id)
