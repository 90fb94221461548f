"""Core HR module — User and Employee models."""

from hris.core_hr.models import Employee, User

__all__ = ["User", "Employee"]
