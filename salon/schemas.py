# salon/schemas.py

from pydantic import BaseModel, Field, field_validator
from enum import Enum
from datetime import datetime, date
from decimal import Decimal
from typing import List, Optional


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserRole(str, Enum):
    admin = "admin"
    staff = "staff"


class UserPublic(BaseModel):
    id: int
    email: str
    role: UserRole
    staff_id: Optional[int] = None


class UserCreate(BaseModel):
    email: str
    password: str = Field(min_length=8, max_length=72)
    role: UserRole
    staff_id: Optional[int] = None


class StaffRole(str, Enum):
    barber = "barber"
    stylist = "stylist"
    colorist = "colorist"
    assistant = "assistant"


class AppointmentStatus(str, Enum):
    scheduled = "scheduled"
    confirmed = "confirmed"
    in_progress = "in-progress"
    completed = "completed"
    cancelled = "cancelled"


# Form inputs. Required fields default to empty so that missing values are
# reported by salon.validation as field violations instead of parse errors.

class ServiceIn(BaseModel):
    name: str = ""
    description: str = ""
    duration: Optional[int] = None  # minutes
    price: Optional[Decimal] = None
    category: str = ""
    active: bool = True


class ServicePublic(BaseModel):
    id: int
    name: str
    description: str
    duration: int
    price: Decimal
    category: str
    active: bool


class ServiceStats(BaseModel):
    total_services: int
    active_services: int
    average_price: Optional[Decimal] = None
    most_popular_category: Optional[str] = None


class WorkingHours(BaseModel):
    day_of_week: Optional[int] = None  # 0 = Sunday, 6 = Saturday
    start_time: str = ""  # HH:mm
    end_time: str = ""    # HH:mm


class StaffIn(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    role: str = ""
    service_ids: List[int] = Field(default_factory=list)
    schedule: List[WorkingHours] = Field(default_factory=list)
    active: bool = True
    image_url: Optional[str] = None


class StaffPublic(BaseModel):
    id: int
    name: str
    email: str
    phone: str
    role: StaffRole
    service_ids: List[int]
    schedule: List[WorkingHours]
    active: bool
    image_url: Optional[str] = None


def _wall_clock(value: Optional[datetime]) -> Optional[datetime]:
    # appointments are kept in local wall-clock time; any offset is dropped
    if value is not None and value.tzinfo is not None:
        return value.replace(tzinfo=None)
    return value


class AppointmentCreate(BaseModel):
    client_name: str = ""
    service_id: Optional[int] = None
    staff_id: Optional[int] = None
    start_time: Optional[datetime] = None
    notes: Optional[str] = None

    @field_validator("start_time")
    @classmethod
    def strip_offset(cls, value):
        return _wall_clock(value)


class AppointmentPublic(BaseModel):
    id: int
    client_name: str
    service_id: int
    staff_id: int
    start_time: datetime
    end_time: datetime
    duration: int
    status: AppointmentStatus
    notes: Optional[str] = None


class StatusUpdate(BaseModel):
    status: AppointmentStatus


class TimeOption(BaseModel):
    start_time: datetime
    end_time: datetime
    available: bool
    reason: Optional[str] = None


class AvailabilityResponse(BaseModel):
    staff_id: int
    service_id: int
    date: date
    min_time: Optional[datetime] = None
    max_time: Optional[datetime] = None
    options: List[TimeOption]
