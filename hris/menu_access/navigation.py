"""Static navigation taxonomy and access-based filtering.

Each ``NavTab`` groups one or more menu keys; each key maps to exactly one
``SubMenuItem`` (display name + route). The Dashboard tab is always shown,
whatever the configured keys.

Every filter takes ``allowed`` as either a key set or ``None``. ``None``
means "user is on role defaults" and disables filtering entirely.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from hris.common.constants import MenuKey

DASHBOARD_PATH = "/dashboard"


@dataclass(frozen=True)
class SubMenuItem:
    name: str
    key: MenuKey
    href: str


@dataclass(frozen=True)
class NavTab:
    name: str
    href: str
    menu_keys: tuple[MenuKey, ...]
    sub_items: tuple[SubMenuItem, ...] = ()

    @property
    def is_dashboard(self) -> bool:
        return self.name == DASHBOARD_TAB.name


DASHBOARD_TAB = NavTab(
    name="Dashboard",
    href=DASHBOARD_PATH,
    menu_keys=(MenuKey.dashboard,),
)

NAV_TABS: tuple[NavTab, ...] = (
    DASHBOARD_TAB,
    NavTab(
        name="Organization",
        href="/dashboard/companies",
        menu_keys=(
            MenuKey.companies,
            MenuKey.departments,
            MenuKey.positions,
            MenuKey.shifts,
            MenuKey.organization_structure,
        ),
        sub_items=(
            SubMenuItem("Companies", MenuKey.companies, "/dashboard/companies"),
            SubMenuItem("Departments", MenuKey.departments, "/dashboard/departments"),
            SubMenuItem("Positions", MenuKey.positions, "/dashboard/positions"),
            SubMenuItem("Shifts", MenuKey.shifts, "/dashboard/shifts"),
            SubMenuItem(
                "Organization Structure",
                MenuKey.organization_structure,
                "/dashboard/organization-structure",
            ),
        ),
    ),
    NavTab(
        name="People",
        href="/dashboard/users",
        menu_keys=(MenuKey.users, MenuKey.employees),
        sub_items=(
            SubMenuItem("Users", MenuKey.users, "/dashboard/users"),
            SubMenuItem("Employees", MenuKey.employees, "/dashboard/employees"),
        ),
    ),
    NavTab(
        name="Attendance",
        href="/dashboard/attendance",
        menu_keys=(MenuKey.attendance, MenuKey.leaves),
        sub_items=(
            SubMenuItem("Attendance", MenuKey.attendance, "/dashboard/attendance"),
            SubMenuItem("Leaves", MenuKey.leaves, "/dashboard/leaves"),
        ),
    ),
    NavTab(
        name="Payroll",
        href="/dashboard/payroll",
        menu_keys=(MenuKey.payroll, MenuKey.payslips),
        sub_items=(
            SubMenuItem("Payroll", MenuKey.payroll, "/dashboard/payroll"),
            SubMenuItem("Payslips", MenuKey.payslips, "/dashboard/payslips"),
        ),
    ),
    NavTab(
        name="Administration",
        href="/dashboard/menu-access",
        menu_keys=(MenuKey.menu_access_policy,),
        sub_items=(
            SubMenuItem("Menu Access", MenuKey.menu_access_policy, "/dashboard/menu-access"),
        ),
    ),
)


# ── Filtering ───────────────────────────────────────────────────────

def filter_visible_tabs(
    tabs: Sequence[NavTab],
    allowed: Optional[Iterable[MenuKey]],
) -> list[NavTab]:
    """Tabs the user may see; Dashboard is always kept."""
    if allowed is None:
        return list(tabs)
    allowed_set = frozenset(allowed)
    return [
        tab for tab in tabs
        if tab.is_dashboard or any(key in allowed_set for key in tab.menu_keys)
    ]


def filter_visible_sub_items(
    sub_items: Sequence[SubMenuItem],
    allowed: Optional[Iterable[MenuKey]],
) -> list[SubMenuItem]:
    if allowed is None:
        return list(sub_items)
    allowed_set = frozenset(allowed)
    return [item for item in sub_items if item.key in allowed_set]


# ── Path matching ───────────────────────────────────────────────────

def is_sub_item_active(pathname: str, sub_item: SubMenuItem) -> bool:
    return pathname.startswith(sub_item.href)


def is_tab_active(pathname: str, tab: NavTab) -> bool:
    if tab.is_dashboard:
        return pathname == DASHBOARD_PATH
    if tab.sub_items:
        return any(is_sub_item_active(pathname, sub) for sub in tab.sub_items)
    return pathname.startswith(tab.href)


def get_active_tab(
    pathname: str,
    tabs: Sequence[NavTab] = NAV_TABS,
) -> Optional[NavTab]:
    """The tab owning *pathname*, or ``None`` for routes outside the taxonomy."""
    for tab in tabs:
        if is_tab_active(pathname, tab):
            return tab
    return None


def is_route_allowed(
    pathname: str,
    allowed: Optional[Iterable[MenuKey]],
    tabs: Sequence[NavTab] = NAV_TABS,
) -> bool:
    """Route gating derived from the taxonomy.

    The dashboard and any route no sub-item claims are always reachable.
    """
    if allowed is None or pathname == DASHBOARD_PATH:
        return True
    allowed_set = frozenset(allowed)
    for tab in tabs:
        for sub in tab.sub_items:
            if is_sub_item_active(pathname, sub):
                return sub.key in allowed_set
    return True


def tab_for_key(key: MenuKey, tabs: Sequence[NavTab] = NAV_TABS) -> NavTab:
    """Return the single tab whose key set contains *key*."""
    for tab in tabs:
        if key in tab.menu_keys:
            return tab
    raise KeyError(key)
