"""Menu access Pydantic v2 schemas — request/response validation."""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from hris.common.constants import MenuKey, UserRole


# ═════════════════════════════════════════════════════════════════════
# Effective access
# ═════════════════════════════════════════════════════════════════════


class EffectiveAccessOut(BaseModel):
    """Resolved keys for one user and where they came from."""

    user_id: uuid.UUID
    role: UserRole
    source: str  # role_default | override
    menu_keys: List[MenuKey]


class RoleDefaultsOut(BaseModel):
    role: UserRole
    menu_keys: List[MenuKey]


# ═════════════════════════════════════════════════════════════════════
# Overrides
# ═════════════════════════════════════════════════════════════════════


class MenuAccessUpdate(BaseModel):
    """Replace a user's override with exactly ``menu_keys``.

    Keys arrive as plain strings so unknown values are reported by the
    service as a field error rather than a request-shape error.
    """

    user_id: uuid.UUID
    menu_keys: List[str]


class MenuAccessOverrideOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: uuid.UUID
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    user_role: Optional[UserRole] = None
    menu_keys: List[MenuKey] = []
    updated_by: Optional[uuid.UUID] = None
    updated_at: Optional[datetime] = None


class MenuAccessOverrideListResponse(BaseModel):
    data: List[MenuAccessOverrideOut]
    total: int


# ═════════════════════════════════════════════════════════════════════
# Navigation
# ═════════════════════════════════════════════════════════════════════


class SubMenuItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    key: MenuKey
    href: str
    is_active: bool = False


class NavTabOut(BaseModel):
    name: str
    href: str
    menu_keys: List[MenuKey]
    sub_items: List[SubMenuItemOut] = []
    is_active: bool = False


class NavigationOut(BaseModel):
    """Visible chrome for the caller, optionally marked for a current path."""

    source: str
    tabs: List[NavTabOut]
    active_tab: Optional[str] = None
    route_allowed: bool = True
