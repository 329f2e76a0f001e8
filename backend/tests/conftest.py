"""
conftest.py: shared fixtures for the report engine tests.

Strategy:
- No live upstream: FakeDataSource serves in-memory records and can be told
  to fail a whole source or single per-employee lookups.
- Record factories build upstream models with sensible defaults, so each
  test only spells out the fields it asserts on.
- The HTTP client runs the FastAPI app in-process (ASGITransport) with the
  data source and narrative dependencies overridden.
"""

from __future__ import annotations

from datetime import date

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from hr_reporting.api.deps import get_data_source, get_narrative_generator
from hr_reporting.core.errors import UpstreamError
from hr_reporting.main import app
from hr_reporting.schemas.records import (
    Allowance,
    AttendanceMonthlySummary,
    AttendanceRecord,
    Employee,
    LeaveBalance,
    LeaveRequest,
    PayrollLine,
    PayrollPreview,
    PayrollSummary,
    WorkSchedule,
)
from hr_reporting.schemas.report import ReportContext

# ---------------------------------------------------------------------------
# Record factories
# ---------------------------------------------------------------------------


def attendance(
    employee_id: int,
    status: str = "PRESENT",
    day: date = date(2026, 1, 5),
    **extra,
) -> AttendanceRecord:
    return AttendanceRecord(
        employee_id=employee_id,
        employee_name=extra.pop("employee_name", f"Employee {employee_id}"),
        attendance_date=day,
        status=status,
        work_hours=extra.pop("work_hours", "PT8H"),
        **extra,
    )


def leave(
    employee_id: int,
    status: str = "APPROVED",
    total_days: float = 1,
    start: date = date(2026, 1, 6),
    end: date | None = None,
    **extra,
) -> LeaveRequest:
    return LeaveRequest(
        employee_id=employee_id,
        employee_name=extra.pop("employee_name", f"Employee {employee_id}"),
        leave_type_id=extra.pop("leave_type_id", 1),
        status=status,
        start_date=start,
        end_date=end or start,
        total_days=total_days,
        **extra,
    )


def schedule(
    employee_id: int,
    status: str = "COMPLETED",
    day: date = date(2026, 1, 5),
    **extra,
) -> WorkSchedule:
    return WorkSchedule(
        employee_id=employee_id,
        employee_name=extra.pop("employee_name", f"Employee {employee_id}"),
        schedule_date=day,
        status=status,
        **extra,
    )


def payroll_line(employee_id: int, net_pay: float, **extra) -> PayrollLine:
    return PayrollLine(
        employee_id=employee_id,
        employee_name=extra.pop("employee_name", f"Employee {employee_id}"),
        net_pay=net_pay,
        **extra,
    )


def payroll_summary(lines: list[PayrollLine], month: int = 1, year: int = 2026) -> PayrollSummary:
    return PayrollSummary(
        pay_period_month=month,
        pay_period_year=year,
        total_employees=len(lines),
        total_base_salary=sum(line.base_salary for line in lines),
        total_allowances=sum(line.total_allowances for line in lines),
        total_deductions=sum(line.total_deductions for line in lines),
        total_overtime_pay=sum(line.overtime_pay for line in lines),
        total_gross_pay=sum(line.gross_pay for line in lines),
        total_net_pay=sum(line.net_pay for line in lines),
        payrolls=lines,
    )


# ---------------------------------------------------------------------------
# Fake upstream
# ---------------------------------------------------------------------------


class FakeDataSource:
    """In-memory ReportDataSource that records every call it receives."""

    def __init__(
        self,
        attendance: list[AttendanceRecord] | None = None,
        leave_requests: list[LeaveRequest] | None = None,
        payroll: PayrollSummary | None = None,
        schedules: list[WorkSchedule] | None = None,
        allowances: list[Allowance] | None = None,
        previews: list[PayrollPreview] | None = None,
        employees: list[Employee] | None = None,
        failing_sources: set[str] | None = None,
        failing_employees: set[int] | None = None,
    ) -> None:
        self.attendance = attendance or []
        self.leave_requests = leave_requests or []
        self.payroll = payroll
        self.schedules = schedules or []
        self.allowances = allowances or []
        self.previews = previews or []
        self.employees = employees or []
        self.failing_sources = failing_sources or set()
        self.failing_employees = failing_employees or set()
        self.calls: list[tuple] = []

    def _check(self, source: str, employee_id: int | None = None) -> None:
        if source in self.failing_sources:
            raise UpstreamError(f"{source} is down")
        if employee_id is not None and employee_id in self.failing_employees:
            raise UpstreamError(f"{source} failed for employee {employee_id}")

    async def get_attendance_report(self, start_date, end_date, department_id=None):
        self.calls.append(("attendance", start_date, end_date, department_id))
        self._check("attendance")
        return self.attendance

    async def get_attendance_summary(self, employee_id, month, year):
        self.calls.append(("attendance_summary", employee_id, month, year))
        self._check("attendance_summary", employee_id)
        return AttendanceMonthlySummary(
            employee_id=employee_id, year=year, month=month, total_days=20, present_days=20
        )

    async def get_leave_requests(self):
        self.calls.append(("leave_requests",))
        self._check("leave_requests")
        return self.leave_requests

    async def get_leave_balances(self, employee_id, year):
        self.calls.append(("leave_balances", employee_id, year))
        self._check("leave_balances", employee_id)
        return [
            LeaveBalance(
                employee_id=employee_id,
                leave_type_id=1,
                total_entitlement=20,
                used_days=5,
                remaining_days=15,
                year=year,
            )
        ]

    async def get_payroll_summary(self, month, year, department_id=None):
        self.calls.append(("payroll", month, year, department_id))
        self._check("payroll")
        return self.payroll or payroll_summary([], month, year)

    async def get_payroll_previews(self, month, year, department_id=None):
        self.calls.append(("payroll_previews", month, year, department_id))
        self._check("payroll_previews")
        return self.previews

    async def get_allowances(self):
        self.calls.append(("allowances",))
        self._check("allowances")
        return self.allowances

    async def get_work_schedules(self, start_date, end_date, department_id=None, employee_id=None):
        self.calls.append(("schedules", start_date, end_date, department_id))
        self._check("schedules")
        return self.schedules

    async def get_employees(self):
        self.calls.append(("employees",))
        self._check("employees")
        return self.employees

    def called(self, source: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == source]


class FakeNarrativeGenerator:
    def __init__(self, text: str = "Everything is on track.", fail: bool = False) -> None:
        self.text = text
        self.fail = fail
        self.contexts: list[ReportContext] = []

    async def generate(self, context: ReportContext) -> str:
        self.contexts.append(context)
        if self.fail:
            raise UpstreamError("The report writer is unavailable")
        return self.text


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_source() -> FakeDataSource:
    """
    Small mixed dataset for a week in January 2026 (Mon 05 – Sun 11).
    Employees 1 and 2 have attendance, leave, schedules and payroll.
    """
    return FakeDataSource(
        attendance=[
            attendance(1, "PRESENT", date(2026, 1, 5)),
            attendance(1, "LATE", date(2026, 1, 6)),
            attendance(2, "PRESENT", date(2026, 1, 5)),
        ],
        leave_requests=[
            leave(1, "APPROVED", 3, date(2026, 1, 6), date(2026, 1, 8)),
            leave(2, "PENDING", 1, date(2026, 1, 9)),
            leave(3, "APPROVED", 2, date(2025, 12, 1), date(2025, 12, 2)),
        ],
        payroll=payroll_summary(
            [
                payroll_line(1, 1500.0, base_salary=1400.0, total_allowances=100.0),
                payroll_line(2, 2500.0, base_salary=2400.0, total_allowances=100.0),
            ]
        ),
        schedules=[
            schedule(1, "COMPLETED", work_shift_id=1, work_shift_name="Morning"),
            schedule(2, "ABSENT", work_shift_id=1, work_shift_name="Morning"),
        ],
        allowances=[Allowance(id=1, name="Transport", amount=100.0)],
        employees=[
            Employee(id=1, full_name="Employee 1", department_id=10, department_name="Sales"),
            Employee(id=2, full_name="Employee 2", department_id=20, department_name="Ops"),
        ],
    )


@pytest.fixture
def fake_narrative() -> FakeNarrativeGenerator:
    return FakeNarrativeGenerator()


@pytest_asyncio.fixture
async def client(fake_source: FakeDataSource, fake_narrative: FakeNarrativeGenerator) -> AsyncClient:
    """In-process HTTPX client with upstream dependencies replaced by fakes."""
    app.dependency_overrides[get_data_source] = lambda: fake_source
    app.dependency_overrides[get_narrative_generator] = lambda: fake_narrative
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
