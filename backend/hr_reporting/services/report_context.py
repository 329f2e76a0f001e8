"""
Report context builders, one per report type.

Each builder is a pure function of the resolved window, the echoed filters
and the already-fetched datasets. Aggregate maps are created fresh on every
call; the input records are never modified.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone

from hr_reporting.core.config import settings
from hr_reporting.schemas.records import (
    Allowance,
    AttendanceMonthlySummary,
    AttendanceRecord,
    AttendanceStatus,
    Employee,
    LeaveBalance,
    LeaveRequest,
    LeaveStatus,
    PayrollLine,
    PayrollPreview,
    PayrollStatus,
    PayrollSummary,
    WorkSchedule,
    WorkScheduleStatus,
)
from hr_reporting.schemas.report import (
    AllowanceUsage,
    AttendanceMetrics,
    AttendanceSummary,
    BalanceUsage,
    DepartmentCost,
    LeaveMetrics,
    LeaveTypeBreakdown,
    PayrollMetrics,
    PayrollReportSummary,
    ReportContext,
    ReportFilters,
    ReportType,
    ScheduleMetrics,
    ShiftBreakdown,
    StatusDays,
    TimeWindow,
)
from hr_reporting.services.aggregation import (
    aggregate_attendance,
    by_dimension,
    by_employee,
    by_status,
    daily_attendance,
    dimension_counts,
    filter_leave_in_window,
    full_distribution,
    perfect_attendance_count,
    sum_by,
    summarize_leave,
    summarize_schedules,
)
from hr_reporting.services.rates import PROGRESS_PRECISION, average_per_entity, percentage
from hr_reporting.services.ranking import at_least, name_resolver_from, top_n


@dataclass
class PrimaryData:
    attendance: list[AttendanceRecord] = field(default_factory=list)
    leave_requests: list[LeaveRequest] = field(default_factory=list)
    payroll: PayrollSummary | None = None
    schedules: list[WorkSchedule] = field(default_factory=list)


@dataclass
class SecondaryData:
    attendance_summaries: list[AttendanceMonthlySummary] = field(default_factory=list)
    leave_balances: list[LeaveBalance] = field(default_factory=list)
    allowances: list[Allowance] = field(default_factory=list)
    payroll_previews: list[PayrollPreview] = field(default_factory=list)
    employees: list[Employee] = field(default_factory=list)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _shift_label(work_shift_id: int | None, work_shift_name: str | None) -> str | None:
    if work_shift_name:
        return work_shift_name
    if work_shift_id is not None:
        return f"Shift #{work_shift_id}"
    return None


def _department_label(department_id: int | None, department_name: str | None) -> str | None:
    if department_name:
        return department_name
    if department_id is not None:
        return f"Department #{department_id}"
    return None


# ---------------------------------------------------------------------------
# Attendance
# ---------------------------------------------------------------------------


def attendance_summary(records: list[AttendanceRecord]) -> AttendanceSummary:
    aggregates = aggregate_attendance(records)
    return AttendanceSummary(
        total_records=len(records),
        total_employees=len(aggregates),
        aggregates=aggregates,
    )


def attendance_metrics(
    records: list[AttendanceRecord],
    schedules: list[WorkSchedule],
    monthly_summaries: list[AttendanceMonthlySummary],
) -> AttendanceMetrics:
    buckets = by_employee(records, lambda r: r.employee_id, lambda r: r.status)
    status_counts = by_status(records, lambda r: r.status)
    late_counts = {
        emp_id: bucket.count(AttendanceStatus.LATE.value)
        for emp_id, bucket in buckets.items()
        if bucket.count(AttendanceStatus.LATE.value) > 0
    }
    resolve_name = name_resolver_from(records, lambda r: r.employee_id, lambda r: r.employee_name)

    return AttendanceMetrics(
        by_status=full_distribution(status_counts, AttendanceStatus),
        by_shift=dimension_counts(
            by_dimension(records, lambda r: _shift_label(r.work_shift_id, r.work_shift_name))
        ),
        by_schedule_status=full_distribution(
            by_status(schedules, lambda ws: ws.status), WorkScheduleStatus
        ),
        late_rate=percentage(status_counts.get(AttendanceStatus.LATE.value, 0), len(records)),
        total_work_hours=round(sum(r.work_hours for r in records), 2),
        total_overtime_hours=round(sum(r.overtime_hours for r in records), 2),
        daily=daily_attendance(records),
        top_late_employees=top_n(late_counts, settings.TOP_N_LIMIT, resolve_name),
        perfect_attendance_count=perfect_attendance_count(buckets),
        monthly_summaries=monthly_summaries,
    )


# ---------------------------------------------------------------------------
# Leave
# ---------------------------------------------------------------------------


def leave_metrics(requests: list[LeaveRequest], balances: list[LeaveBalance]) -> LeaveMetrics:
    status_buckets = by_employee(
        requests, lambda lr: lr.status.value, lambda lr: lr.status, lambda lr: lr.total_days
    )
    by_status_days = []
    for status in LeaveStatus:
        bucket = status_buckets.get(status.value)
        by_status_days.append(
            StatusDays(
                status=status.value,
                count=bucket.total if bucket else 0,
                total_days=bucket.total_amount if bucket else 0.0,
            )
        )

    by_type = []
    for type_id, items in by_dimension(requests, lambda lr: lr.leave_type_id).items():
        name = next((lr.leave_type_name for lr in items if lr.leave_type_name), None)
        is_known = isinstance(type_id, int)
        by_type.append(
            LeaveTypeBreakdown(
                leave_type_id=type_id if is_known else None,
                name=name or (f"Type #{type_id}" if is_known else str(type_id)),
                count=len(items),
                total_days=sum(lr.total_days for lr in items),
            )
        )

    approved = sum(1 for lr in requests if lr.status is LeaveStatus.APPROVED)
    days_per_employee = sum_by(requests, lambda lr: lr.employee_id, lambda lr: lr.total_days)
    resolve_name = name_resolver_from(requests, lambda lr: lr.employee_id, lambda lr: lr.employee_name)

    return LeaveMetrics(
        by_status=by_status_days,
        by_leave_type=by_type,
        approval_rate=percentage(approved, len(requests)),
        utilization_rate=percentage(
            sum(b.used_days for b in balances),
            sum(b.total_entitlement for b in balances),
            PROGRESS_PRECISION,
        ),
        top_requesters=top_n(days_per_employee, settings.TOP_N_LIMIT, resolve_name),
        balances=balances,
        balance_usage=[
            BalanceUsage(
                employee_id=b.employee_id,
                leave_type_id=b.leave_type_id,
                leave_type_name=b.leave_type_name,
                used_days=b.used_days,
                total_entitlement=b.total_entitlement,
                usage_percent=percentage(b.used_days, b.total_entitlement, PROGRESS_PRECISION),
            )
            for b in balances
        ],
    )


# ---------------------------------------------------------------------------
# Work schedules
# ---------------------------------------------------------------------------


def schedule_metrics(schedules: list[WorkSchedule]) -> ScheduleMetrics:
    status_counts = by_status(schedules, lambda ws: ws.status)

    by_shift = []
    for shift_id, items in by_dimension(schedules, lambda ws: ws.work_shift_id).items():
        is_known = isinstance(shift_id, int)
        name = next((ws.work_shift_name for ws in items if ws.work_shift_name), None)
        by_shift.append(
            ShiftBreakdown(
                work_shift_id=shift_id if is_known else None,
                name=name or (f"Shift #{shift_id}" if is_known else str(shift_id)),
                total=len(items),
                completed=sum(1 for ws in items if ws.status is WorkScheduleStatus.COMPLETED),
                absent=sum(1 for ws in items if ws.status is WorkScheduleStatus.ABSENT),
            )
        )

    absences = sum_by(
        (ws for ws in schedules if ws.status is WorkScheduleStatus.ABSENT),
        lambda ws: ws.employee_id,
        lambda ws: 1,
    )
    resolve_name = name_resolver_from(schedules, lambda ws: ws.employee_id, lambda ws: ws.employee_name)

    return ScheduleMetrics(
        by_status=full_distribution(status_counts, WorkScheduleStatus),
        by_shift=by_shift,
        by_department=dimension_counts(
            by_dimension(schedules, lambda ws: _department_label(ws.department_id, ws.department_name))
        ),
        compliance_rate=percentage(
            status_counts.get(WorkScheduleStatus.COMPLETED.value, 0), len(schedules)
        ),
        chronic_absence=top_n(
            at_least(absences, settings.CHRONIC_ABSENCE_THRESHOLD), None, resolve_name
        ),
    )


# ---------------------------------------------------------------------------
# Payroll
# ---------------------------------------------------------------------------


def payroll_totals(payroll: PayrollSummary | None, window: TimeWindow) -> PayrollReportSummary:
    if payroll is None:
        return PayrollReportSummary(
            pay_period_month=window.start_date.month,
            pay_period_year=window.start_date.year,
            total_employees=0,
            total_base_salary=0.0,
            total_overtime_pay=0.0,
            total_allowances=0.0,
            total_deductions=0.0,
            total_gross_pay=0.0,
            total_net_pay=0.0,
        )
    return PayrollReportSummary(
        pay_period_month=payroll.pay_period_month,
        pay_period_year=payroll.pay_period_year,
        total_employees=payroll.total_employees or len(payroll.payrolls),
        total_base_salary=payroll.total_base_salary,
        total_overtime_pay=payroll.total_overtime_pay,
        total_allowances=payroll.total_allowances,
        total_deductions=payroll.total_deductions,
        total_gross_pay=payroll.total_gross_pay,
        total_net_pay=payroll.total_net_pay,
    )


def _department_costs(lines: list[PayrollLine], employees: list[Employee]) -> list[DepartmentCost]:
    departments = {
        emp.id: _department_label(emp.department_id, emp.department_name) for emp in employees
    }
    groups = by_dimension(lines, lambda line: departments.get(line.employee_id))
    return [
        DepartmentCost(
            department=str(department),
            base_salary=round(sum(line.base_salary for line in items)),
            allowances=round(sum(line.total_allowances for line in items)),
            overtime=round(sum(line.overtime_pay for line in items)),
            deductions=round(sum(line.total_deductions for line in items)),
        )
        for department, items in groups.items()
    ]


def _allowance_usage(
    allowances: list[Allowance], previews: list[PayrollPreview]
) -> list[AllowanceUsage]:
    """How many payroll previews mention each allowance in their breakdown."""
    referenced = [
        {
            item.name.strip().casefold()
            for item in (*preview.allowance_details, *preview.deduction_details)
        }
        for preview in previews
    ]
    return [
        AllowanceUsage(
            allowance_id=allowance.id,
            name=allowance.name,
            usage_count=sum(1 for names in referenced if allowance.name.strip().casefold() in names),
        )
        for allowance in allowances
    ]


def payroll_metrics(
    totals: PayrollReportSummary,
    lines: list[PayrollLine],
    secondary: SecondaryData,
) -> PayrollMetrics:
    net_by_employee = sum_by(lines, lambda line: line.employee_id, lambda line: line.net_pay)
    resolve_name = name_resolver_from(lines, lambda line: line.employee_id, lambda line: line.employee_name)
    return PayrollMetrics(
        average_net_pay=average_per_entity(totals.total_net_pay, totals.total_employees),
        by_status=full_distribution(by_status(lines, lambda line: line.status), PayrollStatus),
        top_earners=top_n(net_by_employee, settings.TOP_N_LIMIT, resolve_name),
        by_department=_department_costs(lines, secondary.employees),
        allowance_usage=_allowance_usage(secondary.allowances, secondary.payroll_previews),
    )


# ---------------------------------------------------------------------------
# Report variants
# ---------------------------------------------------------------------------


def build_overview_context(
    window: TimeWindow,
    filters: ReportFilters,
    primary: PrimaryData,
    secondary: SecondaryData,
    generated_at: datetime | None = None,
) -> ReportContext:
    return ReportContext(
        report_type=ReportType.OVERVIEW,
        filters=filters,
        generated_at=generated_at or _now(),
        attendance=attendance_summary(primary.attendance),
        payroll_summary=payroll_totals(primary.payroll, window),
        leave_summary=summarize_leave(filter_leave_in_window(primary.leave_requests, window)),
        work_schedule_summary=summarize_schedules(primary.schedules),
    )


def build_attendance_context(
    window: TimeWindow,
    filters: ReportFilters,
    primary: PrimaryData,
    secondary: SecondaryData,
    generated_at: datetime | None = None,
) -> ReportContext:
    summary = attendance_summary(primary.attendance)
    summary.detailed_metrics = attendance_metrics(
        primary.attendance, primary.schedules, secondary.attendance_summaries
    )
    return ReportContext(
        report_type=ReportType.ATTENDANCE,
        filters=filters,
        generated_at=generated_at or _now(),
        attendance=summary,
    )


def build_payroll_context(
    window: TimeWindow,
    filters: ReportFilters,
    primary: PrimaryData,
    secondary: SecondaryData,
    generated_at: datetime | None = None,
) -> ReportContext:
    totals = payroll_totals(primary.payroll, window)
    lines = primary.payroll.payrolls if primary.payroll else []
    totals.detailed_metrics = payroll_metrics(totals, lines, secondary)
    return ReportContext(
        report_type=ReportType.PAYROLL,
        filters=filters,
        generated_at=generated_at or _now(),
        payroll_summary=totals,
    )


def build_leave_context(
    window: TimeWindow,
    filters: ReportFilters,
    primary: PrimaryData,
    secondary: SecondaryData,
    generated_at: datetime | None = None,
) -> ReportContext:
    requests = filter_leave_in_window(primary.leave_requests, window)
    summary = summarize_leave(requests)
    summary.detailed_metrics = leave_metrics(requests, secondary.leave_balances)
    return ReportContext(
        report_type=ReportType.LEAVE,
        filters=filters,
        generated_at=generated_at or _now(),
        leave_summary=summary,
    )


def build_schedule_context(
    window: TimeWindow,
    filters: ReportFilters,
    primary: PrimaryData,
    secondary: SecondaryData,
    generated_at: datetime | None = None,
) -> ReportContext:
    summary = summarize_schedules(primary.schedules)
    summary.detailed_metrics = schedule_metrics(primary.schedules)
    return ReportContext(
        report_type=ReportType.SCHEDULE,
        filters=filters,
        generated_at=generated_at or _now(),
        work_schedule_summary=summary,
    )


ContextBuilder = Callable[
    [TimeWindow, ReportFilters, PrimaryData, SecondaryData, datetime | None], ReportContext
]

CONTEXT_BUILDERS: dict[ReportType, ContextBuilder] = {
    ReportType.OVERVIEW: build_overview_context,
    ReportType.ATTENDANCE: build_attendance_context,
    ReportType.PAYROLL: build_payroll_context,
    ReportType.LEAVE: build_leave_context,
    ReportType.SCHEDULE: build_schedule_context,
}
