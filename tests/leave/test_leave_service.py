from __future__ import annotations

from datetime import date, datetime

import pytest

from src.nexhr.nexhr.core.context import TenantContext
from src.nexhr.nexhr.core.enums import RequestStatus
from src.nexhr.nexhr.core.exceptions import NotFoundError, ValidationError
from tests.fakes import in_memory_container, make_employee

EMPLOYEE = TenantContext(customer_id=1, employee_id=2)
ADMIN = TenantContext(customer_id=1, employee_id=1)
NOW = datetime(2026, 2, 1, 10, 0)


@pytest.fixture
def service():
    return in_memory_container(employees=[make_employee(1), make_employee(2)]).leave_service


def _apply(service, **overrides):
    kwargs = dict(leave_type="Sick", start_date=date(2026, 2, 3), end_date=date(2026, 2, 4), reason="Flu", now=NOW)
    kwargs.update(overrides)
    return service.apply_leave(EMPLOYEE, **kwargs)


def test_apply_leave_validates_dates_and_reason(service):
    with pytest.raises(ValidationError):
        _apply(service, end_date=date(2026, 2, 2))
    with pytest.raises(ValidationError):
        _apply(service, reason="   ")


def test_apply_and_list_my_leaves(service):
    request_id = _apply(service)

    mine = service.list_my_leaves(EMPLOYEE)
    assert [r.request_id for r in mine] == [request_id]
    assert mine[0].status == RequestStatus.PENDING
    assert mine[0].days == 2


def test_approve_only_pending(service):
    request_id = _apply(service)

    service.approve_leave(ADMIN, request_id=request_id, admin_note=" ok ", now=NOW)

    decided = service.list_leaves(ADMIN, status=RequestStatus.APPROVED)
    assert decided[0].decided_by == 1
    assert decided[0].admin_note == "ok"
    with pytest.raises(ValidationError):
        service.reject_leave(ADMIN, request_id=request_id, now=NOW)


def test_reject_unknown_request(service):
    with pytest.raises(NotFoundError):
        service.reject_leave(ADMIN, request_id=99, now=NOW)


def test_leaves_are_tenant_scoped(service):
    _apply(service)

    assert service.list_leaves(TenantContext(customer_id=2)) == []
