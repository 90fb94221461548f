"""Common module — shared utilities for the HRIS core."""

from hris.common.audit import AuditTrail, create_audit_entry
from hris.common.constants import (
    ALL_MENU_KEYS,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    PAYROLL_TRANSITIONS,
    PRESENT_STATUSES,
    ROLE_DEFAULTS,
    AttendanceStatus,
    MaritalStatus,
    MenuKey,
    PayrollStatus,
    UserRole,
)
from hris.common.exceptions import (
    AppException,
    ConflictError,
    ForbiddenException,
    InvalidTransitionError,
    NotFoundException,
    TransportError,
    ValidationException,
    register_exception_handlers,
)
from hris.common.filters import apply_filters, apply_sorting
from hris.common.pagination import (
    PaginationMeta,
    PaginationParams,
    paginate,
)

__all__ = [
    # Audit
    "AuditTrail",
    "create_audit_entry",
    # Constants / Enums
    "AttendanceStatus",
    "MaritalStatus",
    "MenuKey",
    "PayrollStatus",
    "UserRole",
    "ALL_MENU_KEYS",
    "PAYROLL_TRANSITIONS",
    "PRESENT_STATUSES",
    "ROLE_DEFAULTS",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    # Exceptions
    "AppException",
    "ConflictError",
    "ForbiddenException",
    "InvalidTransitionError",
    "NotFoundException",
    "TransportError",
    "ValidationException",
    "register_exception_handlers",
    # Filters
    "apply_filters",
    "apply_sorting",
    # Pagination
    "PaginationMeta",
    "PaginationParams",
    "paginate",
]
