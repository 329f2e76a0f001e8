"""
Generic reducers over flat record lists, plus the per-dataset summaries
built on top of them.

All maps preserve first-seen order of their keys, so downstream ranking
and chart series are deterministic for a given input order. Records with
no value for a grouping dimension are kept under the unassigned key.
"""

from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import TypeVar

from hr_reporting.core.config import settings
from hr_reporting.schemas.records import (
    AttendanceRecord,
    AttendanceStatus,
    LeaveRequest,
    WorkSchedule,
)
from hr_reporting.schemas.report import (
    DailyAttendancePoint,
    DimensionCount,
    EmployeeAttendanceAggregate,
    LeaveSummary,
    StatusCount,
    StatusDays,
    TimeWindow,
    WorkScheduleSummary,
)
from hr_reporting.services.rates import percentage

R = TypeVar("R")
K = TypeVar("K", bound=Hashable)


@dataclass
class AggregateBucket:
    """Per-key accumulator: record counts and summed amounts per status."""

    key: Hashable
    counts: dict[Hashable, int] = field(default_factory=dict)
    amounts: dict[Hashable, float] = field(default_factory=dict)
    total: int = 0
    total_amount: float = 0.0

    def add(self, status: Hashable, amount: float = 0.0) -> None:
        self.counts[status] = self.counts.get(status, 0) + 1
        self.amounts[status] = self.amounts.get(status, 0.0) + amount
        self.total += 1
        self.total_amount += amount

    def count(self, status: Hashable) -> int:
        return self.counts.get(status, 0)

    def amount(self, status: Hashable) -> float:
        return self.amounts.get(status, 0.0)


def _status_key(value: object) -> Hashable:
    return value.value if isinstance(value, Enum) else value


def by_employee(
    records: Iterable[R],
    key_fn: Callable[[R], K],
    status_fn: Callable[[R], Hashable],
    amount_fn: Callable[[R], float] | None = None,
) -> dict[K, AggregateBucket]:
    """Group records by ``key_fn`` and count them per status.

    With ``amount_fn`` the bucket also sums that amount per status, e.g.
    leave days next to the number of leave requests.
    """
    buckets: dict[K, AggregateBucket] = {}
    for rec in records:
        key = key_fn(rec)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = AggregateBucket(key=key)
        bucket.add(_status_key(status_fn(rec)), amount_fn(rec) if amount_fn else 0.0)
    return buckets


def by_status(records: Iterable[R], status_fn: Callable[[R], Hashable]) -> dict[Hashable, int]:
    """Global distribution: status -> number of records."""
    counts: dict[Hashable, int] = {}
    for rec in records:
        status = _status_key(status_fn(rec))
        counts[status] = counts.get(status, 0) + 1
    return counts


def by_dimension(
    records: Iterable[R],
    key_fn: Callable[[R], K | None],
    fallback: K | str | None = None,
) -> dict[K | str, list[R]]:
    """Group records by a dimension; missing values go under ``fallback``."""
    fallback = settings.UNASSIGNED_LABEL if fallback is None else fallback
    groups: dict[K | str, list[R]] = {}
    for rec in records:
        key = key_fn(rec)
        if key is None or key == "":
            key = fallback
        groups.setdefault(key, []).append(rec)
    return groups


def sum_by(
    records: Iterable[R],
    key_fn: Callable[[R], K],
    value_fn: Callable[[R], float],
) -> dict[K, float]:
    totals: dict[K, float] = {}
    for rec in records:
        key = key_fn(rec)
        totals[key] = totals.get(key, 0.0) + (value_fn(rec) or 0.0)
    return totals


def full_distribution(counts: dict[Hashable, int], statuses: type[Enum]) -> list[StatusCount]:
    """Every member of a status enum in declaration order, zeros included."""
    return [StatusCount(status=s.value, count=counts.get(s.value, 0)) for s in statuses]


def observed_distribution(counts: dict[Hashable, int]) -> list[StatusCount]:
    return [StatusCount(status=str(status), count=count) for status, count in counts.items()]


def dimension_counts(groups: dict[Hashable, list]) -> list[DimensionCount]:
    return [DimensionCount(key=str(key), count=len(items)) for key, items in groups.items()]


# ---------------------------------------------------------------------------
# Attendance
# ---------------------------------------------------------------------------


def aggregate_attendance(records: list[AttendanceRecord]) -> list[EmployeeAttendanceAggregate]:
    """Per-employee PRESENT / LATE / ABSENT counters."""
    buckets = by_employee(records, lambda r: r.employee_id, lambda r: r.status)
    first_seen: dict[int, AttendanceRecord] = {}
    for rec in records:
        first_seen.setdefault(rec.employee_id, rec)

    return [
        EmployeeAttendanceAggregate(
            employee_id=emp_id,
            employee_name=first_seen[emp_id].employee_name,
            employee_code=first_seen[emp_id].employee_code,
            present_days=bucket.count(AttendanceStatus.PRESENT.value),
            late_days=bucket.count(AttendanceStatus.LATE.value),
            absent_days=bucket.count(AttendanceStatus.ABSENT.value),
            total_records=bucket.total,
        )
        for emp_id, bucket in buckets.items()
    ]


def daily_attendance(records: list[AttendanceRecord]) -> list[DailyAttendancePoint]:
    """Work hours and late rate per calendar day, oldest first."""
    days = by_dimension(records, lambda r: r.attendance_date)
    points = []
    for day in sorted(d for d in days if isinstance(d, date)):
        day_records = days[day]
        late = sum(1 for r in day_records if r.status is AttendanceStatus.LATE)
        points.append(
            DailyAttendancePoint(
                date=day,
                work_hours=round(sum(r.work_hours for r in day_records), 2),
                late_rate=percentage(late, len(day_records)),
            )
        )
    return points


_IMPERFECT_STATUSES = frozenset(
    {
        AttendanceStatus.LATE.value,
        AttendanceStatus.ABSENT.value,
        AttendanceStatus.HALF_DAY.value,
        AttendanceStatus.EARLY_DEPARTURE.value,
    }
)


def perfect_attendance_count(buckets: dict[Hashable, AggregateBucket]) -> int:
    """Employees whose every record is PRESENT or OVERTIME."""
    return sum(
        1
        for bucket in buckets.values()
        if bucket.total > 0 and not any(bucket.count(s) for s in _IMPERFECT_STATUSES)
    )


# ---------------------------------------------------------------------------
# Leave
# ---------------------------------------------------------------------------


def leave_overlaps(request: LeaveRequest, window: TimeWindow) -> bool:
    """True when the leave touches the window at all.

    Three cases: it starts inside, it ends inside, or it spans the whole
    window. The third one is what keeps multi-week leave that crosses both
    window boundaries in the report.
    """
    starts_inside = window.contains(request.start_date)
    ends_inside = window.contains(request.end_date)
    spans_window = request.start_date < window.start_date and request.end_date > window.end_date
    return starts_inside or ends_inside or spans_window


def filter_leave_in_window(requests: list[LeaveRequest], window: TimeWindow) -> list[LeaveRequest]:
    return [lr for lr in requests if leave_overlaps(lr, window)]


def leave_status_days(requests: list[LeaveRequest]) -> list[StatusDays]:
    """Request count and summed days per status, in first-seen order.

    Uses the full ``total_days`` of each request, also for leave that only
    partly falls inside the report window.
    """
    buckets = by_employee(
        requests,
        lambda lr: _status_key(lr.status),
        lambda lr: lr.status,
        lambda lr: lr.total_days,
    )
    return [
        StatusDays(status=str(status), count=bucket.total, total_days=bucket.total_amount)
        for status, bucket in buckets.items()
    ]


def summarize_leave(requests: list[LeaveRequest]) -> LeaveSummary:
    return LeaveSummary(total_requests=len(requests), by_status=leave_status_days(requests))


# ---------------------------------------------------------------------------
# Work schedules
# ---------------------------------------------------------------------------


def summarize_schedules(schedules: list[WorkSchedule]) -> WorkScheduleSummary:
    return WorkScheduleSummary(
        total_schedules=len(schedules),
        total_employees=len({ws.employee_id for ws in schedules}),
        by_status=observed_distribution(by_status(schedules, lambda ws: ws.status)),
    )
