from datetime import date
from typing import Protocol

from hr_reporting.schemas.records import (
    Allowance,
    AttendanceMonthlySummary,
    AttendanceRecord,
    Employee,
    LeaveBalance,
    LeaveRequest,
    PayrollPreview,
    PayrollSummary,
    WorkSchedule,
)
from hr_reporting.schemas.report import ReportContext


class ReportDataSource(Protocol):
    """Upstream HR services as seen by the report engine."""

    async def get_attendance_report(
        self, start_date: date, end_date: date, department_id: int | None = None
    ) -> list[AttendanceRecord]: ...

    async def get_attendance_summary(
        self, employee_id: int, month: int, year: int
    ) -> AttendanceMonthlySummary: ...

    async def get_leave_requests(self) -> list[LeaveRequest]: ...

    async def get_leave_balances(self, employee_id: int, year: int) -> list[LeaveBalance]: ...

    async def get_payroll_summary(
        self, month: int, year: int, department_id: int | None = None
    ) -> PayrollSummary: ...

    async def get_payroll_previews(
        self, month: int, year: int, department_id: int | None = None
    ) -> list[PayrollPreview]: ...

    async def get_allowances(self) -> list[Allowance]: ...

    async def get_work_schedules(
        self,
        start_date: date,
        end_date: date,
        department_id: int | None = None,
        employee_id: int | None = None,
    ) -> list[WorkSchedule]: ...

    async def get_employees(self) -> list[Employee]: ...


class NarrativeGenerator(Protocol):
    """Text-generation collaborator that turns a context into a written report."""

    async def generate(self, context: ReportContext) -> str: ...
