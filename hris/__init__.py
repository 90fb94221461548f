"""HRIS core service: menu access resolution and payroll aggregation."""
