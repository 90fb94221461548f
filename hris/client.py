"""Async HTTP client for the HRIS core API.

Each client instance carries its own base URL and bearer token; nothing is
read from or written to process-wide state. Problem-detail responses are
raised as the matching ``hris.common.exceptions`` class, and network
failures as ``TransportError``.

Usage::

    async with HrisApiClient(token) as api:
        access = await api.load_session_access()
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Iterable, Optional, Union

import httpx

from hris.common.constants import MenuKey, PayrollStatus, UserRole
from hris.common.exceptions import (
    AppException,
    ConflictError,
    ForbiddenException,
    InvalidTransitionError,
    NotFoundException,
    TransportError,
    ValidationException,
)
from hris.config import settings
from hris.menu_access.resolver import EffectiveAccess, effective_access_for
from hris.menu_access.schemas import MenuAccessOverrideOut
from hris.payroll.schemas import PayrollListResponse, PayrollOut

logger = logging.getLogger(__name__)

_PROBLEM_TYPES: dict[str, type[AppException]] = {
    "validation-error": ValidationException,
    "conflict": ConflictError,
    "invalid-transition": InvalidTransitionError,
    "not-found": NotFoundException,
    "forbidden": ForbiddenException,
}


def problem_to_exception(response: httpx.Response) -> AppException:
    """Rebuild the server-side exception from an error response."""
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    error_type = str(body.get("type", "")).rsplit("/", 1)[-1]
    detail = body.get("detail") or response.reason_phrase or "Request failed."
    if not isinstance(detail, str):
        detail = str(detail)

    if response.status_code == 401:
        error_type = "forbidden"

    cls = _PROBLEM_TYPES.get(error_type)
    if cls is None:
        if response.status_code >= 500:
            return TransportError(f"Server error {response.status_code}: {detail}")
        return AppException(
            status_code=response.status_code,
            error_type=error_type or "error",
            title=body.get("title", "Error"),
            detail=detail,
            errors=body.get("errors"),
        )

    # Subclass constructors format their own messages; keep the server's.
    exc = cls.__new__(cls)
    AppException.__init__(
        exc,
        status_code=response.status_code,
        error_type=error_type,
        title=body.get("title", cls.__name__),
        detail=detail,
        errors=body.get("errors"),
    )
    if isinstance(exc, InvalidTransitionError):
        exc.current = None
        exc.target = None
    return exc


class HrisApiClient:
    """Explicit-context client for menu access and payroll endpoints."""

    def __init__(
        self,
        token: str,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout if timeout is not None else settings.API_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def __aenter__(self) -> "HrisApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ── transport ───────────────────────────────────────────────────

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise TransportError(f"{method} {path} failed: {exc}") from exc

        if response.is_success:
            if response.status_code == 204 or not response.content:
                return None
            try:
                return response.json()
            except ValueError as exc:
                logger.warning("%s %s returned a non-JSON body", method, path)
                raise TransportError(f"{method} {path} returned a non-JSON body.") from exc

        raise problem_to_exception(response)

    # ── menu access ─────────────────────────────────────────────────

    async def get_my_menu_keys(self) -> list[MenuKey]:
        data = await self._request("GET", "menu-access/me")
        return [MenuKey(k) for k in data["menu_keys"]]

    async def load_session_access(self) -> EffectiveAccess:
        """Resolve the caller's access once per session load."""
        data = await self._request("GET", "menu-access/me")
        override = None if data["source"] == "role_default" else data["menu_keys"]
        return effective_access_for(UserRole(data["role"]), override)

    async def get_role_defaults(self, role: Union[UserRole, str]) -> list[MenuKey]:
        data = await self._request("GET", f"menu-access/role-defaults/{UserRole(role).value}")
        return [MenuKey(k) for k in data["menu_keys"]]

    async def get_override(self, user_id: uuid.UUID) -> Optional[frozenset[MenuKey]]:
        """The user's override keys, or ``None`` when role defaults apply."""
        try:
            data = await self._request("GET", f"menu-access/{user_id}")
        except NotFoundException:
            return None
        return frozenset(MenuKey(k) for k in data["menu_keys"])

    async def list_overrides(self) -> list[MenuAccessOverrideOut]:
        data = await self._request("GET", "menu-access/")
        return [MenuAccessOverrideOut.model_validate(o) for o in data["data"]]

    async def set_user_access(
        self,
        user_id: uuid.UUID,
        menu_keys: Iterable[Union[MenuKey, str]],
    ) -> MenuAccessOverrideOut:
        payload = {
            "user_id": str(user_id),
            "menu_keys": [k.value if isinstance(k, MenuKey) else str(k) for k in menu_keys],
        }
        data = await self._request("PUT", "menu-access/", json=payload)
        return MenuAccessOverrideOut.model_validate(data)

    async def reset_user_access(self, user_id: uuid.UUID) -> None:
        await self._request("DELETE", f"menu-access/{user_id}")

    # ── payroll ─────────────────────────────────────────────────────

    async def generate_payroll(
        self, employee_id: uuid.UUID, month: int, year: int,
    ) -> PayrollOut:
        data = await self._request(
            "POST",
            "payroll/generate",
            json={"employee_id": str(employee_id), "month": month, "year": year},
        )
        return PayrollOut.model_validate(data)

    async def update_payroll_status(
        self, payroll_id: uuid.UUID, status: Union[PayrollStatus, str],
    ) -> PayrollOut:
        data = await self._request(
            "PUT",
            f"payroll/{payroll_id}/status",
            json={"status": PayrollStatus(status).value},
        )
        return PayrollOut.model_validate(data)

    async def list_payroll(
        self,
        *,
        employee_id: Optional[uuid.UUID] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        status: Optional[Union[PayrollStatus, str]] = None,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> PayrollListResponse:
        params: dict[str, Any] = {"page": page}
        if employee_id is not None:
            params["employee_id"] = str(employee_id)
        if month is not None:
            params["month"] = month
        if year is not None:
            params["year"] = year
        if status is not None:
            params["status"] = PayrollStatus(status).value
        if page_size is not None:
            params["page_size"] = page_size
        data = await self._request("GET", "payroll/", params=params)
        return PayrollListResponse.model_validate(data)

    async def get_my_payslips(self) -> list[PayrollOut]:
        data = await self._request("GET", "payroll/my-payslips")
        return [PayrollOut.model_validate(p) for p in data["data"]]
