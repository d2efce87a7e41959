"""NexHR package.

Organized by feature modules (attendance, employees, payroll, analytics, leave)
with a thin Flask controller layer over service/repository layers. Every data
call is scoped to a tenant through an explicit ``TenantContext``.
"""
