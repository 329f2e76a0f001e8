"""
Records returned by the upstream HR services.

All models are immutable and accept the camelCase JSON the services emit.
Duration fields are converted to float hours on the way in.
"""

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from hr_reporting.durations import parse_duration_hours


class AttendanceStatus(str, Enum):
    PRESENT = "PRESENT"
    LATE = "LATE"
    ABSENT = "ABSENT"
    HALF_DAY = "HALF_DAY"
    EARLY_DEPARTURE = "EARLY_DEPARTURE"
    OVERTIME = "OVERTIME"


class LeaveStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"
    WITHDRAWN = "WITHDRAWN"


class WorkScheduleStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    ABSENT = "ABSENT"
    CANCELLED = "CANCELLED"


class PayrollStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    PROCESSED = "PROCESSED"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


class UpstreamModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class AttendanceRecord(UpstreamModel):
    employee_id: int
    employee_name: str = ""
    employee_code: str | None = None
    attendance_date: date
    status: AttendanceStatus
    work_hours: float = 0.0
    overtime_hours: float = 0.0
    work_shift_id: int | None = None
    work_shift_name: str | None = None
    department_name: str | None = None

    @field_validator("work_hours", "overtime_hours", mode="before")
    @classmethod
    def duration_to_hours(cls, v: object) -> float:
        return parse_duration_hours(v)

    @field_validator("employee_name", mode="before")
    @classmethod
    def none_to_empty(cls, v: str | None) -> str:
        return v or ""


class AttendanceMonthlySummary(UpstreamModel):
    employee_id: int
    employee_name: str | None = None
    employee_code: str | None = None
    year: int
    month: int
    total_days: int = 0
    present_days: int = 0
    late_days: int = 0
    absent_days: int = 0
    half_days: int = 0
    total_work_hours: float = 0.0
    total_overtime_hours: float = 0.0

    @field_validator("total_work_hours", "total_overtime_hours", mode="before")
    @classmethod
    def duration_to_hours(cls, v: object) -> float:
        return parse_duration_hours(v)


class LeaveRequest(UpstreamModel):
    id: int | None = None
    employee_id: int
    employee_name: str | None = None
    employee_code: str | None = None
    leave_type_id: int
    leave_type_name: str | None = None
    status: LeaveStatus
    start_date: date
    end_date: date
    total_days: float = 0.0

    @field_validator("total_days", mode="before")
    @classmethod
    def none_to_zero(cls, v: float | None) -> float:
        return 0.0 if v is None else v

    @model_validator(mode="after")
    def check_dates(self) -> "LeaveRequest":
        if self.start_date > self.end_date:
            raise ValueError("startDate must not be after endDate")
        return self


class LeaveBalance(UpstreamModel):
    employee_id: int
    employee_name: str | None = None
    leave_type_id: int
    leave_type_name: str | None = None
    total_entitlement: float = 0.0
    used_days: float = 0.0
    remaining_days: float = 0.0
    carry_forward_days: float = 0.0
    year: int


class WorkSchedule(UpstreamModel):
    id: int | None = None
    employee_id: int
    employee_name: str | None = None
    department_id: int | None = None
    department_name: str | None = None
    work_shift_id: int | None = None
    work_shift_name: str | None = None
    schedule_date: date
    status: WorkScheduleStatus


class BreakdownItem(UpstreamModel):
    name: str
    amount: float = 0.0
    type: str | None = None
    mandatory: bool = False


class PayrollLine(UpstreamModel):
    employee_id: int
    employee_name: str | None = None
    employee_code: str | None = None
    base_salary: float = 0.0
    total_allowances: float = 0.0
    overtime_pay: float = 0.0
    total_deductions: float = 0.0
    gross_pay: float = 0.0
    net_pay: float = 0.0
    status: PayrollStatus = PayrollStatus.DRAFT


class PayrollSummary(UpstreamModel):
    pay_period_month: int
    pay_period_year: int
    total_employees: int = 0
    total_base_salary: float = 0.0
    total_overtime_pay: float = 0.0
    total_allowances: float = 0.0
    total_deductions: float = 0.0
    total_gross_pay: float = 0.0
    total_net_pay: float = 0.0
    payrolls: list[PayrollLine] = Field(default_factory=list)

    @field_validator("payrolls", mode="before")
    @classmethod
    def none_to_list(cls, v: list | None) -> list:
        return v or []


class PayrollPreview(UpstreamModel):
    employee_id: int
    employee_name: str | None = None
    net_pay: float = 0.0
    total_allowances: float = 0.0
    total_deductions: float = 0.0
    status: str | None = None
    allowance_details: list[BreakdownItem] = Field(default_factory=list)
    deduction_details: list[BreakdownItem] = Field(default_factory=list)

    @field_validator("allowance_details", "deduction_details", mode="before")
    @classmethod
    def none_to_list(cls, v: list | None) -> list:
        return v or []


class Allowance(UpstreamModel):
    id: int
    name: str
    type: str | None = None
    amount: float = 0.0
    active: bool = True


class Employee(UpstreamModel):
    id: int
    full_name: str | None = None
    employee_code: str | None = None
    department_id: int | None = None
    department_name: str | None = None

