"""
Excel export of a report context: one sheet per table the context carries.
"""

from __future__ import annotations

import io
import logging

import pandas as pd

from hr_reporting.schemas.report import ReportContext, ReportModel

logger = logging.getLogger(__name__)


def _frame(rows: list[ReportModel]) -> pd.DataFrame:
    return pd.DataFrame([row.model_dump(mode="json", by_alias=True) for row in rows])


def context_sheets(context: ReportContext) -> dict[str, pd.DataFrame]:
    """Tables of a context keyed by sheet name, in display order."""
    overview = {
        "reportType": context.report_type.value,
        "startDate": context.filters.start_date.isoformat(),
        "endDate": context.filters.end_date.isoformat(),
        "departmentId": context.filters.department_id,
        "generatedAt": context.generated_at.isoformat(),
    }
    sheets: dict[str, pd.DataFrame] = {}

    if context.attendance is not None:
        att = context.attendance
        overview.update(totalRecords=att.total_records, totalEmployees=att.total_employees)
        sheets["Attendance"] = _frame(att.aggregates)
        if att.detailed_metrics is not None:
            m = att.detailed_metrics
            overview.update(
                lateRate=m.late_rate,
                totalWorkHours=m.total_work_hours,
                perfectAttendance=m.perfect_attendance_count,
            )
            sheets["Attendance by status"] = _frame(m.by_status)
            sheets["Attendance by shift"] = _frame(m.by_shift)
            sheets["Daily trend"] = _frame(m.daily)
            sheets["Top late"] = _frame(m.top_late_employees)
            sheets["Monthly summaries"] = _frame(m.monthly_summaries)

    if context.leave_summary is not None:
        leave = context.leave_summary
        overview["totalLeaveRequests"] = leave.total_requests
        sheets["Leave by status"] = _frame(leave.by_status)
        if leave.detailed_metrics is not None:
            m = leave.detailed_metrics
            overview.update(leaveApprovalRate=m.approval_rate, leaveUtilizationRate=m.utilization_rate)
            sheets["Leave by type"] = _frame(m.by_leave_type)
            sheets["Top requesters"] = _frame(m.top_requesters)
            sheets["Leave balances"] = _frame(m.balances)
            sheets["Leave balance usage"] = _frame(m.balance_usage)

    if context.work_schedule_summary is not None:
        ws = context.work_schedule_summary
        overview["totalSchedules"] = ws.total_schedules
        sheets["Schedules by status"] = _frame(ws.by_status)
        if ws.detailed_metrics is not None:
            m = ws.detailed_metrics
            overview["complianceRate"] = m.compliance_rate
            sheets["Schedules by shift"] = _frame(m.by_shift)
            sheets["Schedules by department"] = _frame(m.by_department)
            sheets["Chronic absence"] = _frame(m.chronic_absence)

    if context.payroll_summary is not None:
        pay = context.payroll_summary
        overview.update(totalNetPay=pay.total_net_pay, payrollEmployees=pay.total_employees)
        if pay.detailed_metrics is not None:
            m = pay.detailed_metrics
            overview["averageNetPay"] = m.average_net_pay
            sheets["Payroll by status"] = _frame(m.by_status)
            sheets["Top earners"] = _frame(m.top_earners)
            sheets["Payroll by department"] = _frame(m.by_department)
            sheets["Allowance usage"] = _frame(m.allowance_usage)

    summary = pd.DataFrame({"metric": list(overview), "value": list(overview.values())})
    return {"Summary": summary, **sheets}


def export_context_xlsx(context: ReportContext) -> bytes:
    buf = io.BytesIO()
    sheets = context_sheets(context)
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        for name, frame in sheets.items():
            # Excel caps sheet names at 31 characters
            frame.to_excel(writer, sheet_name=name[:31], index=False)
    logger.info(
        "Exported %s report: %d sheets", context.report_type.value, len(sheets)
    )
    return buf.getvalue()
