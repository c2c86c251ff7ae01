# salon/models.py

from typing import Optional, List
from datetime import datetime, timedelta
from decimal import Decimal

from sqlalchemy.types import JSON, DateTime
from sqlmodel import SQLModel, Field, Column


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    password_hash: str
    role: str  # admin or staff
    # staff accounts act for one staff member
    staff_id: Optional[int] = Field(default=None, foreign_key="staffmember.id")


class Service(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    description: str
    duration: int  # minutes
    price: Decimal = Field(max_digits=10, decimal_places=2)
    category: str = Field(index=True)
    active: bool = True


class StaffMember(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str = Field(index=True)
    phone: str
    role: str  # barber, stylist, colorist or assistant
    service_ids: List[int] = Field(default_factory=list, sa_column=Column(JSON))
    # [{"day_of_week": 0..6, "start_time": "HH:mm", "end_time": "HH:mm"}], Sunday first
    schedule: List[dict] = Field(default_factory=list, sa_column=Column(JSON))
    active: bool = True
    image_url: Optional[str] = None


class Appointment(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    client_name: str
    service_id: int = Field(foreign_key="service.id", index=True)
    staff_id: int = Field(foreign_key="staffmember.id", index=True)
    # local wall-clock, stored without an offset
    start_time: datetime = Field(sa_column=Column(DateTime(timezone=False), index=True, nullable=False))
    duration: int  # minutes, copied from the service when booked
    status: str = "scheduled"
    notes: Optional[str] = None

    @property
    def end_time(self) -> datetime:
        return self.start_time + timedelta(minutes=self.duration)
