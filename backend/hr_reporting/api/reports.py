"""
Report API routes.

Each report type is built on demand from the upstream HR services; nothing
is stored. The range endpoint backs the dashboard's week/month picker.
"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from hr_reporting.api.deps import get_data_source, get_narrative_generator
from hr_reporting.clients.base import NarrativeGenerator, ReportDataSource
from hr_reporting.core.errors import InvalidRangeError, PrimaryFetchError, UpstreamError
from hr_reporting.schemas.report import (
    NarrativeResponse,
    RangeMode,
    RangeResponse,
    ReportContext,
    ReportFilters,
    ReportType,
)
from hr_reporting.services.export import export_context_xlsx
from hr_reporting.services.report_service import build_report
from hr_reporting.services.time_range import (
    format_range_label,
    format_week_label,
    resolve_range,
    shift_month,
    shift_week,
    today_window,
    week_number,
)

router = APIRouter()

_XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


async def _build_or_raise(
    report_type: ReportType, filters: ReportFilters, source: ReportDataSource
) -> ReportContext:
    try:
        return await build_report(report_type, filters, source)
    except InvalidRangeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except PrimaryFetchError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


@router.get(
    "/range",
    response_model=RangeResponse,
    summary="Resolve a week / month / custom range for the range picker",
)
async def get_range(
    mode: RangeMode = Query(default=RangeMode.WEEK),
    reference: date | None = Query(default=None, description="ISO date YYYY-MM-DD, defaults to today"),
    offset: int = Query(default=0, ge=-520, le=520, description="Weeks or months to move"),
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
) -> RangeResponse:
    try:
        if mode is RangeMode.CUSTOM:
            window = resolve_range(mode, start=start_date, end=end_date)
        elif reference is None:
            window = today_window(mode)
        else:
            window = resolve_range(mode, reference)
    except InvalidRangeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    if mode is RangeMode.WEEK:
        window = shift_week(window, offset)
        return RangeResponse(
            start_date=window.start_date,
            end_date=window.end_date,
            label=format_week_label(window),
            week_number=week_number(window.start_date),
        )

    if mode is RangeMode.MONTH:
        window = shift_month(window, offset)

    return RangeResponse(
        start_date=window.start_date,
        end_date=window.end_date,
        label=format_range_label(window),
    )


@router.post(
    "/{report_type}",
    response_model=ReportContext,
    response_model_exclude_none=True,
    summary="Build a report context",
)
async def create_report(
    report_type: ReportType,
    filters: ReportFilters,
    source: ReportDataSource = Depends(get_data_source),
) -> ReportContext:
    return await _build_or_raise(report_type, filters, source)


@router.post(
    "/{report_type}/narrative",
    response_model=NarrativeResponse,
    response_model_exclude_none=True,
    summary="Build a report context and have the AI report service write it up",
)
async def create_narrative(
    report_type: ReportType,
    filters: ReportFilters,
    source: ReportDataSource = Depends(get_data_source),
    generator: NarrativeGenerator = Depends(get_narrative_generator),
) -> NarrativeResponse:
    context = await _build_or_raise(report_type, filters, source)
    try:
        text = await generator.generate(context)
    except UpstreamError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    return NarrativeResponse(report_text=text, context=context)


@router.get(
    "/{report_type}/export",
    summary="Download a report context as an Excel workbook",
    response_class=Response,
)
async def export_report(
    report_type: ReportType,
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    department_id: int | None = Query(default=None, alias="departmentId"),
    source: ReportDataSource = Depends(get_data_source),
) -> Response:
    filters = ReportFilters(
        start_date=start_date, end_date=end_date, department_id=department_id
    )
    context = await _build_or_raise(report_type, filters, source)
    content = export_context_xlsx(context)
    filename = f"{report_type.value}-report-{start_date.isoformat()}-{end_date.isoformat()}.xlsx"
    return Response(
        content=content,
        media_type=_XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
