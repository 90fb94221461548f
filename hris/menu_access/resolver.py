"""Effective menu access resolution.

A user's access is either the default key list of their role or an
administrator's override, never a mix of the two. The variant is kept
explicit so the navigation layer can tell "role defaults" (show every
tab) apart from "override" (filter tabs by key).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Union

from hris.common.constants import ALL_MENU_KEYS, ROLE_DEFAULTS, MenuKey, UserRole
from hris.common.exceptions import ValidationException


@dataclass(frozen=True)
class RoleDefaultAccess:
    """No override configured; the role's defaults apply."""

    role: UserRole

    source = "role_default"

    @property
    def keys(self) -> tuple[MenuKey, ...]:
        return ROLE_DEFAULTS[self.role]

    @property
    def navigation_keys(self) -> Optional[frozenset[MenuKey]]:
        # Navigation is not filtered while a user is on role defaults.
        return None


@dataclass(frozen=True)
class OverrideAccess:
    """An administrator override; may be empty."""

    menu_keys: frozenset[MenuKey]

    source = "override"

    @property
    def keys(self) -> tuple[MenuKey, ...]:
        return tuple(k for k in ALL_MENU_KEYS if k in self.menu_keys)

    @property
    def navigation_keys(self) -> Optional[frozenset[MenuKey]]:
        return self.menu_keys


EffectiveAccess = Union[RoleDefaultAccess, OverrideAccess]


def coerce_menu_keys(keys: Iterable[Union[MenuKey, str]]) -> frozenset[MenuKey]:
    """Validate raw keys against the closed universe.

    Raises ``ValidationException`` naming every unknown key.
    """
    valid: set[MenuKey] = set()
    invalid: list[str] = []
    for key in keys:
        try:
            valid.add(MenuKey(key))
        except ValueError:
            invalid.append(str(key))
    if invalid:
        raise ValidationException(
            {"menu_keys": [f"Invalid menu key: '{k}'." for k in invalid]}
        )
    return frozenset(valid)


def effective_access_for(
    role: UserRole,
    override: Optional[Iterable[Union[MenuKey, str]]] = None,
) -> EffectiveAccess:
    """Build the tagged access variant for a role and optional override."""
    if override is None:
        return RoleDefaultAccess(role=UserRole(role))
    return OverrideAccess(menu_keys=coerce_menu_keys(override))


def resolve_effective_access(
    role: UserRole,
    override: Optional[Iterable[Union[MenuKey, str]]] = None,
) -> frozenset[MenuKey]:
    """Return the set of menu keys *role* may use, honouring *override* verbatim."""
    return frozenset(effective_access_for(role, override).keys)
