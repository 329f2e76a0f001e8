"""
Record aggregation: generic reducers and per-dataset summaries.
"""

from __future__ import annotations

from datetime import date

from hr_reporting.core.config import settings
from hr_reporting.schemas.records import AttendanceStatus
from hr_reporting.schemas.report import TimeWindow
from hr_reporting.services.aggregation import (
    aggregate_attendance,
    by_dimension,
    by_employee,
    by_status,
    daily_attendance,
    filter_leave_in_window,
    full_distribution,
    leave_overlaps,
    perfect_attendance_count,
    sum_by,
    summarize_leave,
    summarize_schedules,
)
from tests.conftest import attendance, leave, schedule

WEEK = TimeWindow(start_date=date(2026, 1, 5), end_date=date(2026, 1, 11))


class TestByEmployee:
    def test_counts_per_status(self) -> None:
        """Two records for emp1 (PRESENT, LATE) and one for emp2 (PRESENT)."""
        records = [attendance(1, "PRESENT"), attendance(1, "LATE"), attendance(2, "PRESENT")]
        buckets = by_employee(records, lambda r: r.employee_id, lambda r: r.status)

        assert list(buckets) == [1, 2]
        assert buckets[1].counts == {"PRESENT": 1, "LATE": 1}
        assert buckets[1].total == 2
        assert buckets[2].counts == {"PRESENT": 1}
        assert buckets[2].total == 1

    def test_totals_match_input(self) -> None:
        records = [attendance(i % 4, "LATE" if i % 3 else "ABSENT") for i in range(17)]
        buckets = by_employee(records, lambda r: r.employee_id, lambda r: r.status)
        assert sum(b.total for b in buckets.values()) == len(records)

    def test_amounts_summed_per_status(self) -> None:
        requests = [leave(1, "APPROVED", 3), leave(1, "APPROVED", 2), leave(1, "PENDING", 1)]
        buckets = by_employee(
            requests, lambda lr: lr.employee_id, lambda lr: lr.status, lambda lr: lr.total_days
        )
        assert buckets[1].amount("APPROVED") == 5
        assert buckets[1].total_amount == 6
        assert buckets[1].count("REJECTED") == 0

    def test_empty_input(self) -> None:
        assert by_employee([], lambda r: r, lambda r: r) == {}


class TestDistributions:
    def test_by_status_uses_enum_values(self) -> None:
        counts = by_status([attendance(1, "LATE"), attendance(2, "LATE")], lambda r: r.status)
        assert counts == {"LATE": 2}

    def test_full_distribution_includes_zeros(self) -> None:
        dist = full_distribution({"LATE": 2}, AttendanceStatus)
        assert [d.status for d in dist] == [s.value for s in AttendanceStatus]
        assert {d.status: d.count for d in dist}["PRESENT"] == 0
        assert sum(d.count for d in dist) == 2

    def test_missing_dimension_goes_to_unassigned(self) -> None:
        records = [
            attendance(1, work_shift_name="Morning"),
            attendance(2),
            attendance(3, work_shift_name=""),
        ]
        groups = by_dimension(records, lambda r: r.work_shift_name)
        assert set(groups) == {"Morning", settings.UNASSIGNED_LABEL}
        assert len(groups[settings.UNASSIGNED_LABEL]) == 2

    def test_sum_by(self) -> None:
        requests = [leave(1, total_days=3), leave(2, total_days=1), leave(1, total_days=2)]
        assert sum_by(requests, lambda lr: lr.employee_id, lambda lr: lr.total_days) == {1: 5, 2: 1}


class TestAttendance:
    def test_aggregate_attendance(self) -> None:
        records = [attendance(1, "PRESENT"), attendance(1, "LATE"), attendance(2, "ABSENT")]
        aggregates = {a.employee_id: a for a in aggregate_attendance(records)}
        assert aggregates[1].present_days == 1
        assert aggregates[1].late_days == 1
        assert aggregates[1].total_records == 2
        assert aggregates[2].absent_days == 1
        assert aggregates[1].employee_name == "Employee 1"

    def test_daily_attendance_sorted_with_late_rate(self) -> None:
        records = [
            attendance(1, "LATE", date(2026, 1, 6)),
            attendance(1, "PRESENT", date(2026, 1, 5)),
            attendance(2, "PRESENT", date(2026, 1, 6)),
        ]
        daily = daily_attendance(records)
        assert [p.date for p in daily] == [date(2026, 1, 5), date(2026, 1, 6)]
        assert daily[0].late_rate == 0.0
        assert daily[1].late_rate == 50.0
        assert daily[1].work_hours == 16.0

    def test_perfect_attendance(self) -> None:
        records = [
            attendance(1, "PRESENT"),
            attendance(1, "OVERTIME"),
            attendance(2, "PRESENT"),
            attendance(2, "HALF_DAY"),
        ]
        buckets = by_employee(records, lambda r: r.employee_id, lambda r: r.status)
        assert perfect_attendance_count(buckets) == 1


class TestLeaveOverlap:
    def test_starts_inside(self) -> None:
        assert leave_overlaps(leave(1, start=date(2026, 1, 10), end=date(2026, 1, 20)), WEEK)

    def test_ends_inside(self) -> None:
        assert leave_overlaps(leave(1, start=date(2025, 12, 30), end=date(2026, 1, 5)), WEEK)

    def test_starts_on_last_day(self) -> None:
        assert leave_overlaps(leave(1, start=date(2026, 1, 11), end=date(2026, 1, 15)), WEEK)

    def test_spans_whole_window(self) -> None:
        """Leave 2026-01-01..2026-01-31 against week 05..11 is included."""
        assert leave_overlaps(leave(1, start=date(2026, 1, 1), end=date(2026, 1, 31)), WEEK)

    def test_outside(self) -> None:
        assert not leave_overlaps(leave(1, start=date(2026, 1, 12), end=date(2026, 1, 14)), WEEK)
        assert not leave_overlaps(leave(1, start=date(2026, 1, 1), end=date(2026, 1, 4)), WEEK)

    def test_filter_keeps_order(self) -> None:
        requests = [
            leave(1, start=date(2026, 1, 9)),
            leave(2, start=date(2026, 2, 9)),
            leave(3, start=date(2026, 1, 5)),
        ]
        assert [lr.employee_id for lr in filter_leave_in_window(requests, WEEK)] == [1, 3]


class TestSummaries:
    def test_leave_summary(self) -> None:
        """APPROVED 3 + 2 days and PENDING 1 day, in first-seen order."""
        summary = summarize_leave(
            [leave(1, "APPROVED", 3), leave(1, "APPROVED", 2), leave(2, "PENDING", 1)]
        )
        assert summary.total_requests == 3
        assert [(s.status, s.count, s.total_days) for s in summary.by_status] == [
            ("APPROVED", 2, 5),
            ("PENDING", 1, 1),
        ]

    def test_spanning_leave_counts_full_days(self) -> None:
        requests = filter_leave_in_window(
            [leave(1, "APPROVED", 23, date(2026, 1, 1), date(2026, 1, 31))], WEEK
        )
        assert summarize_leave(requests).by_status[0].total_days == 23

    def test_schedule_summary(self) -> None:
        summary = summarize_schedules(
            [schedule(1, "COMPLETED"), schedule(1, "ABSENT"), schedule(2, "COMPLETED")]
        )
        assert summary.total_schedules == 3
        assert summary.total_employees == 2
        assert {s.status: s.count for s in summary.by_status} == {"COMPLETED": 2, "ABSENT": 1}

    def test_empty_summaries(self) -> None:
        assert summarize_leave([]).total_requests == 0
        assert summarize_schedules([]).by_status == []
