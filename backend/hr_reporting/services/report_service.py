"""
Report build entry point.

Sequence for every report type: resolve the window, fetch the primary
datasets concurrently, run the bounded secondary lookups, then hand all of
it to the pure context builder. The only suspension points are the
upstream calls; aggregation runs synchronously afterwards.
"""

import itertools
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime

from hr_reporting.clients.base import ReportDataSource
from hr_reporting.core.config import settings
from hr_reporting.schemas.report import ReportContext, ReportFilters, ReportType, TimeWindow
from hr_reporting.services.aggregation import filter_leave_in_window
from hr_reporting.services.fetching import fetch_primary, settle, settle_bounded
from hr_reporting.services.report_context import CONTEXT_BUILDERS, PrimaryData, SecondaryData
from hr_reporting.services.time_range import resolve_custom

logger = logging.getLogger(__name__)

PRIMARY_SOURCES: dict[ReportType, tuple[str, ...]] = {
    ReportType.OVERVIEW: ("attendance", "leave_requests", "payroll", "schedules"),
    ReportType.ATTENDANCE: ("attendance", "schedules"),
    ReportType.PAYROLL: ("payroll",),
    ReportType.LEAVE: ("leave_requests",),
    ReportType.SCHEDULE: ("schedules",),
}


def payroll_period(window: TimeWindow) -> tuple[int, int]:
    """Payroll is monthly: the month of the window start is the one reported."""
    return window.start_date.month, window.start_date.year


def _distinct(ids) -> list:
    return list(dict.fromkeys(ids))


async def fetch_primary_data(
    report_type: ReportType,
    window: TimeWindow,
    filters: ReportFilters,
    source: ReportDataSource,
) -> PrimaryData:
    month, year = payroll_period(window)
    calls: dict[str, Callable[[], Awaitable]] = {
        "attendance": lambda: source.get_attendance_report(
            window.start_date, window.end_date, filters.department_id
        ),
        # The leave service has no department on its requests; the list is
        # narrowed to the window after fetching.
        "leave_requests": lambda: source.get_leave_requests(),
        "payroll": lambda: source.get_payroll_summary(month, year, filters.department_id),
        "schedules": lambda: source.get_work_schedules(
            window.start_date, window.end_date, filters.department_id
        ),
    }
    results = await fetch_primary({name: calls[name]() for name in PRIMARY_SOURCES[report_type]})
    return PrimaryData(**results)


async def fetch_secondary_data(
    report_type: ReportType,
    window: TimeWindow,
    filters: ReportFilters,
    primary: PrimaryData,
    source: ReportDataSource,
    max_fan_out: int | None = None,
) -> SecondaryData:
    month, year = payroll_period(window)
    secondary = SecondaryData()

    if report_type is ReportType.ATTENDANCE:
        secondary.attendance_summaries = await settle_bounded(
            _distinct(r.employee_id for r in primary.attendance),
            settings.ATTENDANCE_SUMMARY_FAN_OUT if max_fan_out is None else max_fan_out,
            lambda emp_id: source.get_attendance_summary(emp_id, month, year),
            label="attendance summary",
        )

    elif report_type is ReportType.LEAVE:
        requests = filter_leave_in_window(primary.leave_requests, window)
        balances = await settle_bounded(
            _distinct(lr.employee_id for lr in requests),
            settings.LEAVE_BALANCE_FAN_OUT if max_fan_out is None else max_fan_out,
            lambda emp_id: source.get_leave_balances(emp_id, year),
            label="leave balance",
        )
        secondary.leave_balances = list(itertools.chain.from_iterable(balances))

    elif report_type is ReportType.PAYROLL:
        optional = await settle(
            {
                "allowances": source.get_allowances(),
                "payroll_previews": source.get_payroll_previews(month, year, filters.department_id),
                "employees": source.get_employees(),
            }
        )
        secondary.allowances = optional["allowances"] or []
        secondary.payroll_previews = optional["payroll_previews"] or []
        secondary.employees = optional["employees"] or []

    return secondary


async def build_report(
    report_type: ReportType | str,
    filters: ReportFilters,
    source: ReportDataSource,
    max_fan_out: int | None = None,
    generated_at: datetime | None = None,
) -> ReportContext:
    """
    Build one report context.

    Raises:
        InvalidRangeError: start date after end date; nothing is fetched.
        PrimaryFetchError: a primary dataset failed; no partial report.
    """
    report_type = ReportType(report_type)
    window = resolve_custom(filters.start_date, filters.end_date)
    logger.info(
        "Building %s report: %s..%s department=%s",
        report_type.value, window.start_date, window.end_date, filters.department_id,
    )

    primary = await fetch_primary_data(report_type, window, filters, source)
    secondary = await fetch_secondary_data(
        report_type, window, filters, primary, source, max_fan_out
    )

    context = CONTEXT_BUILDERS[report_type](window, filters, primary, secondary, generated_at)
    logger.info(
        "Built %s report: attendance=%d leave=%d schedules=%d payroll_lines=%d",
        report_type.value,
        len(primary.attendance),
        len(primary.leave_requests),
        len(primary.schedules),
        len(primary.payroll.payrolls) if primary.payroll else 0,
    )
    return context
