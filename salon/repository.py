# salon/repository.py

from datetime import date, datetime, timedelta
from typing import List, Optional

from fastapi import Depends
from sqlmodel import Session, select

from salon.core import MAX_DURATION_MINUTES, Interval
from salon.db import get_session
from salon.models import Appointment, Service, StaffMember, User


class _Repository:
    model = None

    def __init__(self, session: Session):
        self.session = session

    def get(self, record_id: int):
        return self.session.get(self.model, record_id)

    def list(self):
        return self.session.exec(select(self.model).order_by(self.model.id)).all()

    def add(self, record):
        self.session.add(record)
        self.session.commit()
        self.session.refresh(record)  # fills record.id
        return record

    def update(self, record, values: dict):
        for key, value in values.items():
            setattr(record, key, value)
        return self.add(record)


class _CatalogRepository(_Repository):
    def delete(self, record):
        self.session.delete(record)
        self.session.commit()


class ServiceRepository(_CatalogRepository):
    model = Service

    def in_use(self, service_id: int) -> bool:
        stmt = select(Appointment.id).where(Appointment.service_id == service_id)
        return self.session.exec(stmt).first() is not None


class StaffRepository(_CatalogRepository):
    model = StaffMember

    def in_use(self, staff_id: int) -> bool:
        stmt = select(Appointment.id).where(Appointment.staff_id == staff_id)
        return self.session.exec(stmt).first() is not None

    def account_for(self, staff_id: int) -> Optional[User]:
        return self.session.exec(select(User).where(User.staff_id == staff_id)).first()


class AppointmentRepository(_Repository):
    model = Appointment

    def list(
        self,
        on_date: Optional[date] = None,
        staff_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> List[Appointment]:
        stmt = select(Appointment)

        if on_date is not None:
            day_start_dt = datetime.combine(on_date, datetime.min.time())
            day_end_dt = day_start_dt + timedelta(days=1)
            stmt = stmt.where(Appointment.start_time >= day_start_dt).where(Appointment.start_time < day_end_dt)
        if staff_id is not None:
            stmt = stmt.where(Appointment.staff_id == staff_id)
        if status is not None:
            stmt = stmt.where(Appointment.status == status)

        stmt = stmt.order_by(Appointment.start_time)
        return self.session.exec(stmt).all()

    def set_status(self, record: Appointment, status: str) -> Appointment:
        record.status = status
        return self.add(record)

    def intervals_for(self, staff_id: int, window_start: datetime, window_end: datetime) -> List[Interval]:
        """
        Occupied ``(start, end)`` pairs for one staff member that may touch
        ``[window_start, window_end)``. Bookings never run longer than
        ``MAX_DURATION_MINUTES``, so nothing starting earlier than that can
        reach the window.
        """
        earliest = window_start - timedelta(minutes=MAX_DURATION_MINUTES)
        stmt = (
            select(Appointment)
            .where(Appointment.staff_id == staff_id)
            .where(Appointment.start_time >= earliest)
            .where(Appointment.start_time < window_end)
            .where(Appointment.status != "cancelled")
        )
        return [(a.start_time, a.end_time) for a in self.session.exec(stmt).all()]


def get_service_repo(session: Session = Depends(get_session)) -> ServiceRepository:
    return ServiceRepository(session)


def get_staff_repo(session: Session = Depends(get_session)) -> StaffRepository:
    return StaffRepository(session)


def get_appointment_repo(session: Session = Depends(get_session)) -> AppointmentRepository:
    return AppointmentRepository(session)
