# salon/validation.py

import re
from decimal import Decimal
from typing import List

from pydantic import BaseModel, Field, HttpUrl, TypeAdapter, ValidationError
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError

from salon.core import MAX_DURATION_MINUTES
from salon.schemas import AppointmentCreate, ServiceIn, StaffIn, StaffRole, WorkingHours

PHONE_PATTERN = re.compile(r"^\(\d{3}\) \d{3}-\d{4}$")
HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

_url_adapter = TypeAdapter(HttpUrl)


class FieldViolation(BaseModel):
    field: str
    message: str


class ValidationResult(BaseModel):
    violations: List[FieldViolation] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.violations

    def add(self, field: str, message: str):
        self.violations.append(FieldViolation(field=field, message=message))


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_service(service: ServiceIn) -> ValidationResult:
    result = ValidationResult()

    if _blank(service.name):
        result.add("name", "Service name is required")
    if _blank(service.description):
        result.add("description", "Description is required")

    if service.duration is None:
        result.add("duration", "Duration is required")
    elif service.duration <= 0:
        result.add("duration", "Duration must be positive")
    elif service.duration > MAX_DURATION_MINUTES:
        result.add("duration", f"Duration can be at most {MAX_DURATION_MINUTES} minutes")

    if service.price is None:
        result.add("price", "Price is required")
    elif service.price <= 0:
        result.add("price", "Price must be positive")
    elif Decimal(service.price).normalize().as_tuple().exponent < -2:
        result.add("price", "Price can have max 2 decimal places")

    if _blank(service.category):
        result.add("category", "Category is required")

    return result


def validate_schedule(schedule: List[WorkingHours], field: str = "schedule") -> ValidationResult:
    result = ValidationResult()
    seen_days = set()

    for idx, entry in enumerate(schedule):
        prefix = f"{field}[{idx}]"

        if entry.day_of_week is None:
            result.add(f"{prefix}.day_of_week", "Day of week is required")
        elif not (0 <= entry.day_of_week <= 6):
            result.add(f"{prefix}.day_of_week", "Day of week must be between 0 (Sunday) and 6 (Saturday)")
        elif entry.day_of_week in seen_days:
            result.add(f"{prefix}.day_of_week", "Only one working window per day is allowed")
        else:
            seen_days.add(entry.day_of_week)

        times_ok = True
        for name in ("start_time", "end_time"):
            value = getattr(entry, name)
            if _blank(value):
                result.add(f"{prefix}.{name}", f"{name} is required")
                times_ok = False
            elif not HHMM_PATTERN.match(value):
                result.add(f"{prefix}.{name}", f"{name} must be in HH:mm format")
                times_ok = False

        # zero-padded HH:mm compares correctly as text
        if times_ok and entry.start_time >= entry.end_time:
            result.add(f"{prefix}.end_time", "End time must be after start time")

    return result


def validate_staff(staff: StaffIn) -> ValidationResult:
    result = ValidationResult()

    if _blank(staff.name):
        result.add("name", "Name is required")

    if _blank(staff.email):
        result.add("email", "Email is required")
    else:
        try:
            validate_email(staff.email)
        except PydanticCustomError:
            result.add("email", "Invalid email")

    if _blank(staff.phone):
        result.add("phone", "Phone number is required")
    elif not PHONE_PATTERN.match(staff.phone):
        result.add("phone", "Phone number must be in format (XXX) XXX-XXXX")

    roles = [r.value for r in StaffRole]
    if _blank(staff.role):
        result.add("role", "Role is required")
    elif staff.role not in roles:
        result.add("role", f"Role must be one of: {', '.join(roles)}")

    if len(staff.service_ids) < 1:
        result.add("service_ids", "At least one service must be selected")

    result.violations.extend(validate_schedule(staff.schedule).violations)

    if not _blank(staff.image_url):
        try:
            _url_adapter.validate_python(staff.image_url)
        except ValidationError:
            result.add("image_url", "Must be a valid URL")

    return result


def validate_appointment(appt: AppointmentCreate) -> ValidationResult:
    result = ValidationResult()

    if _blank(appt.client_name):
        result.add("client_name", "Client name is required")
    if appt.service_id is None:
        result.add("service_id", "Service is required")
    if appt.staff_id is None:
        result.add("staff_id", "Staff member is required")
    if appt.start_time is None:
        result.add("start_time", "Date and time are required")

    return result
