from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from hr_reporting.schemas.records import AttendanceMonthlySummary, LeaveBalance


class ReportType(str, Enum):
    OVERVIEW = "overview"
    ATTENDANCE = "attendance"
    PAYROLL = "payroll"
    LEAVE = "leave"
    SCHEDULE = "schedule"


class RangeMode(str, Enum):
    WEEK = "week"
    MONTH = "month"
    CUSTOM = "custom"


class ReportModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TimeWindow(ReportModel):
    """Inclusive calendar window [start_date, end_date]."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    start_date: date
    end_date: date

    def contains(self, d: date) -> bool:
        return self.start_date <= d <= self.end_date


class ReportFilters(ReportModel):
    start_date: date
    end_date: date
    department_id: int | None = None


class RangeResponse(ReportModel):
    start_date: date
    end_date: date
    label: str
    week_number: int | None = None


# ---------------------------------------------------------------------------
# Distributions and leaderboards
# ---------------------------------------------------------------------------


class StatusCount(ReportModel):
    status: str
    count: int


class StatusDays(ReportModel):
    status: str
    count: int
    total_days: float


class DimensionCount(ReportModel):
    key: str
    count: int


class RankedEntry(ReportModel):
    key: int | str
    value: float
    display_name: str = ""


# ---------------------------------------------------------------------------
# Attendance
# ---------------------------------------------------------------------------


class EmployeeAttendanceAggregate(ReportModel):
    employee_id: int
    employee_name: str
    employee_code: str | None = None
    present_days: int = 0
    late_days: int = 0
    absent_days: int = 0
    total_records: int = 0


class DailyAttendancePoint(ReportModel):
    date: date
    work_hours: float
    late_rate: float


class AttendanceMetrics(ReportModel):
    by_status: list[StatusCount]
    by_shift: list[DimensionCount]
    by_schedule_status: list[StatusCount]
    late_rate: float
    total_work_hours: float
    total_overtime_hours: float
    daily: list[DailyAttendancePoint]
    top_late_employees: list[RankedEntry]
    perfect_attendance_count: int
    monthly_summaries: list[AttendanceMonthlySummary]


class AttendanceSummary(ReportModel):
    total_records: int
    total_employees: int
    aggregates: list[EmployeeAttendanceAggregate]
    detailed_metrics: AttendanceMetrics | None = None


# ---------------------------------------------------------------------------
# Leave
# ---------------------------------------------------------------------------


class LeaveTypeBreakdown(ReportModel):
    leave_type_id: int | None
    name: str
    count: int
    total_days: float


class BalanceUsage(ReportModel):
    employee_id: int
    leave_type_id: int
    leave_type_name: str | None = None
    used_days: float
    total_entitlement: float
    usage_percent: int


class LeaveMetrics(ReportModel):
    by_status: list[StatusDays]
    by_leave_type: list[LeaveTypeBreakdown]
    approval_rate: float
    utilization_rate: int
    top_requesters: list[RankedEntry]
    balances: list[LeaveBalance]
    balance_usage: list[BalanceUsage]


class LeaveSummary(ReportModel):
    total_requests: int
    by_status: list[StatusDays]
    detailed_metrics: LeaveMetrics | None = None


# ---------------------------------------------------------------------------
# Work schedules
# ---------------------------------------------------------------------------


class ShiftBreakdown(ReportModel):
    work_shift_id: int | None
    name: str
    total: int
    completed: int
    absent: int


class ScheduleMetrics(ReportModel):
    by_status: list[StatusCount]
    by_shift: list[ShiftBreakdown]
    by_department: list[DimensionCount]
    compliance_rate: float
    chronic_absence: list[RankedEntry]


class WorkScheduleSummary(ReportModel):
    total_schedules: int
    total_employees: int
    by_status: list[StatusCount]
    detailed_metrics: ScheduleMetrics | None = None


# ---------------------------------------------------------------------------
# Payroll
# ---------------------------------------------------------------------------


class DepartmentCost(ReportModel):
    department: str
    base_salary: int
    allowances: int
    overtime: int
    deductions: int


class AllowanceUsage(ReportModel):
    allowance_id: int
    name: str
    usage_count: int


class PayrollMetrics(ReportModel):
    average_net_pay: float
    by_status: list[StatusCount]
    top_earners: list[RankedEntry]
    by_department: list[DepartmentCost]
    allowance_usage: list[AllowanceUsage]


class PayrollReportSummary(ReportModel):
    pay_period_month: int
    pay_period_year: int
    total_employees: int
    total_base_salary: float
    total_overtime_pay: float
    total_allowances: float
    total_deductions: float
    total_gross_pay: float
    total_net_pay: float
    detailed_metrics: PayrollMetrics | None = None


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------


class ReportContext(ReportModel):
    report_type: ReportType
    filters: ReportFilters
    generated_at: datetime
    attendance: AttendanceSummary | None = None
    payroll_summary: PayrollReportSummary | None = None
    leave_summary: LeaveSummary | None = None
    work_schedule_summary: WorkScheduleSummary | None = None


class NarrativeResponse(ReportModel):
    report_text: str
    context: ReportContext

