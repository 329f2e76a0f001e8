"""
HTTP implementation of ReportDataSource over the HR back-office REST API.

Responses may be wrapped in a ``{"data": ...}`` envelope; list endpoints
return Spring-style pages (``content``, ``totalPages``). Both are unwrapped
here and payloads are validated into the record models, so the report
engine only ever sees typed records.
"""

import logging
from datetime import date
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from hr_reporting.core.config import settings
from hr_reporting.core.errors import UpstreamError
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

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def build_client() -> httpx.AsyncClient:
    headers = {"Accept": "application/json"}
    if settings.UPSTREAM_API_TOKEN:
        headers["Authorization"] = f"Bearer {settings.UPSTREAM_API_TOKEN}"
    return httpx.AsyncClient(
        base_url=settings.UPSTREAM_BASE_URL,
        timeout=settings.UPSTREAM_TIMEOUT_SEC,
        follow_redirects=True,
        headers=headers,
    )


def extract_data(payload: Any) -> Any:
    """Unwrap ``{"data": ...}`` when the service uses the envelope."""
    if isinstance(payload, dict) and "data" in payload:
        return payload["data"]
    return payload


def _clean_params(params: dict[str, Any] | None) -> dict[str, Any]:
    return {k: v for k, v in (params or {}).items() if v is not None}


class HttpReportDataSource:
    def __init__(
        self,
        client: httpx.AsyncClient,
        page_size: int | None = None,
        max_pages: int | None = None,
    ) -> None:
        self._client = client
        self._page_size = page_size or settings.UPSTREAM_PAGE_SIZE
        self._max_pages = max_pages or settings.UPSTREAM_MAX_PAGES

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        try:
            resp = await self._client.get(path, params=_clean_params(params))
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as exc:
            raise UpstreamError(
                f"GET {path} returned {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(f"GET {path} failed: {exc.__class__.__name__}") from exc
        except ValueError as exc:
            raise UpstreamError(f"GET {path} returned invalid JSON") from exc
        return extract_data(payload)

    @staticmethod
    def _validate(path: str, model: type[M] | Any, data: Any) -> Any:
        try:
            return TypeAdapter(model).validate_python(data)
        except ValidationError as exc:
            raise UpstreamError(
                f"GET {path} returned unexpected data ({exc.error_count()} errors)"
            ) from exc

    async def _get_pages(
        self,
        path: str,
        model: type[M],
        params: dict[str, Any] | None = None,
        items_key: str = "content",
    ) -> list[M]:
        items: list[Any] = []
        page = 0
        while True:
            payload = await self._get(path, {**(params or {}), "page": page, "size": self._page_size})
            if isinstance(payload, list):
                items.extend(payload)
                break
            if not isinstance(payload, dict):
                raise UpstreamError(f"GET {path} returned an unexpected page shape")

            chunk = payload.get(items_key) or payload.get("content") or []
            items.extend(chunk)
            total_pages = int(payload.get("totalPages") or 1)
            page += 1
            if not chunk or page >= total_pages:
                break
            if page >= self._max_pages:
                logger.warning(
                    "GET %s: stopped after %d pages of %d", path, page, total_pages
                )
                break

        logger.debug("GET %s: %d records", path, len(items))
        return self._validate(path, list[model], items)

    # ------------------------------------------------------------------
    # Attendance
    # ------------------------------------------------------------------

    async def get_attendance_report(
        self, start_date: date, end_date: date, department_id: int | None = None
    ) -> list[AttendanceRecord]:
        return await self._get_pages(
            "/api/attendance/report",
            AttendanceRecord,
            {
                "startDate": start_date.isoformat(),
                "endDate": end_date.isoformat(),
                "departmentId": department_id,
            },
        )

    async def get_attendance_summary(
        self, employee_id: int, month: int, year: int
    ) -> AttendanceMonthlySummary:
        path = f"/api/attendance/employee/{employee_id}/summary"
        data = await self._get(path, {"month": month, "year": year})
        return self._validate(path, AttendanceMonthlySummary, data)

    async def get_work_schedules(
        self,
        start_date: date,
        end_date: date,
        department_id: int | None = None,
        employee_id: int | None = None,
    ) -> list[WorkSchedule]:
        return await self._get_pages(
            "/api/work-schedules",
            WorkSchedule,
            {
                "startDate": start_date.isoformat(),
                "endDate": end_date.isoformat(),
                "departmentId": department_id,
                "employeeId": employee_id,
            },
        )

    # ------------------------------------------------------------------
    # Leave
    # ------------------------------------------------------------------

    async def get_leave_requests(self) -> list[LeaveRequest]:
        return await self._get_pages("/api/leave-requests", LeaveRequest)

    async def get_leave_balances(self, employee_id: int, year: int) -> list[LeaveBalance]:
        path = f"/api/leave-requests/employee/{employee_id}/balance"
        data = await self._get(path, {"year": year})
        return self._validate(path, list[LeaveBalance], data or [])

    # ------------------------------------------------------------------
    # Payroll
    # ------------------------------------------------------------------

    async def get_payroll_summary(
        self, month: int, year: int, department_id: int | None = None
    ) -> PayrollSummary:
        path = "/api/payrolls/summary"
        data = await self._get(
            path, {"month": month, "year": year, "departmentId": department_id}
        )
        return self._validate(path, PayrollSummary, data)

    async def get_payroll_previews(
        self, month: int, year: int, department_id: int | None = None
    ) -> list[PayrollPreview]:
        path = "/api/payrolls/preview"
        data = await self._get(
            path, {"month": month, "year": year, "departmentId": department_id}
        )
        return self._validate(path, list[PayrollPreview], data or [])

    async def get_allowances(self) -> list[Allowance]:
        path = "/api/allowances"
        data = await self._get(path)
        return self._validate(path, list[Allowance], data or [])

    # ------------------------------------------------------------------
    # Directory
    # ------------------------------------------------------------------

    async def get_employees(self) -> list[Employee]:
        return await self._get_pages("/api/employees", Employee, items_key="employees")
