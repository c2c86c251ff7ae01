# salon/routers/appointments_routes.py

import logging
from datetime import date, timedelta
from typing import Optional, List

from fastapi import APIRouter, Depends, HTTPException

from salon.auth import get_current_user
from salon.core import SlotRejection, check_slot, fits_working_hours
from salon.data import business_hours, shop_settings
from salon.deps import raise_for_violations
from salon.lifecycle import InvalidStatusTransition, is_terminal, transition_status
from salon.models import Appointment
from salon.repository import (
    AppointmentRepository,
    ServiceRepository,
    StaffRepository,
    get_appointment_repo,
    get_service_repo,
    get_staff_repo,
)
from salon.schemas import (
    AppointmentCreate,
    AppointmentPublic,
    AppointmentStatus,
    StatusUpdate,
)
from salon.validation import validate_appointment

logger = logging.getLogger("salon.appointments")

router = APIRouter(
    prefix="/appointments",
    tags=["appointments"],
)


def to_public(appt: Appointment) -> dict:
    return {
        "id": appt.id,
        "client_name": appt.client_name,
        "service_id": appt.service_id,
        "staff_id": appt.staff_id,
        "start_time": appt.start_time,
        "end_time": appt.end_time,
        "duration": appt.duration,
        "status": appt.status,
        "notes": appt.notes,
    }


def _get_or_404(repo: AppointmentRepository, appt_id: int) -> Appointment:
    appt = repo.get(appt_id)
    if appt is None:
        raise HTTPException(status_code=404, detail="Appointment not found")
    return appt


@router.post("", response_model=AppointmentPublic, status_code=201)
def create_appointment(
    payload: AppointmentCreate,
    repo: AppointmentRepository = Depends(get_appointment_repo),
    services: ServiceRepository = Depends(get_service_repo),
    staff: StaffRepository = Depends(get_staff_repo),
    current_user: dict = Depends(get_current_user),
):
    # 1) Required fields
    raise_for_violations(validate_appointment(payload))

    # 2) Validate service and staff member
    service = services.get(payload.service_id)
    if service is None or not service.active:
        raise HTTPException(status_code=422, detail="Service not available")

    member = staff.get(payload.staff_id)
    if member is None or not member.active:
        raise HTTPException(status_code=422, detail="Staff member not available")
    if service.id not in member.service_ids:
        raise HTTPException(status_code=422, detail="Staff member does not perform this service")

    # 3) Business hours and overlap with the staff member's bookings
    appt_start = payload.start_time
    appt_end = appt_start + timedelta(minutes=service.duration)
    existing = repo.intervals_for(member.id, appt_start, appt_end)
    slot = check_slot(
        appt_start,
        service.duration,
        business_hours(),
        existing,
        strict_closing=shop_settings["strict_closing"],
    )

    if slot.rejection is not None:
        logger.info(
            "rejected %s for staff %s at %s: %s",
            service.name, member.id, appt_start.isoformat(), slot.rejection.value,
        )
    if slot.rejection == SlotRejection.outside_business_hours:
        raise HTTPException(status_code=422, detail="Appointment must start within business hours")
    if slot.rejection == SlotRejection.past_closing:
        raise HTTPException(status_code=422, detail="Appointment must end by closing time")
    if slot.rejection == SlotRejection.overlap:
        conflict_start, conflict_end = slot.conflict
        raise HTTPException(
            status_code=409,
            detail={
                "message": "Appointment overlaps an existing appointment",
                "conflict_start": conflict_start.isoformat(),
                "conflict_end": conflict_end.isoformat(),
            },
        )

    # 4) Staff member's own working hours, when enforced
    if shop_settings["enforce_staff_schedule"] and not fits_working_hours(appt_start, service.duration, member.schedule):
        raise HTTPException(status_code=422, detail="Appointment must be within the staff member's working hours")

    # 5) Create and save appointment
    appt = repo.add(
        Appointment(
            client_name=payload.client_name.strip(),
            service_id=service.id,
            staff_id=member.id,
            start_time=appt_start,
            duration=service.duration,
            status=AppointmentStatus.scheduled.value,
            notes=payload.notes,
        )
    )
    logger.info("booked appointment %s for staff %s at %s", appt.id, member.id, appt_start.isoformat())
    return to_public(appt)


@router.get("", response_model=List[AppointmentPublic])
def list_appointments(
    on_date: Optional[date] = None,
    staff_id: Optional[int] = None,
    status: Optional[AppointmentStatus] = None,
    repo: AppointmentRepository = Depends(get_appointment_repo),
    current_user: dict = Depends(get_current_user),
):
    appts = repo.list(
        on_date=on_date,
        staff_id=staff_id,
        status=status.value if status is not None else None,
    )
    return [to_public(a) for a in appts]


@router.get("/{appt_id}", response_model=AppointmentPublic)
def get_appointment(
    appt_id: int,
    repo: AppointmentRepository = Depends(get_appointment_repo),
    current_user: dict = Depends(get_current_user),
):
    return to_public(_get_or_404(repo, appt_id))


@router.patch("/{appt_id}/status", response_model=AppointmentPublic)
def update_status(
    appt_id: int,
    payload: StatusUpdate,
    repo: AppointmentRepository = Depends(get_appointment_repo),
    current_user: dict = Depends(get_current_user),
):
    appt = _get_or_404(repo, appt_id)

    # 1) Staff accounts act for their own staff member only
    if current_user["role"] == "staff" and current_user["staff_id"] != appt.staff_id:
        raise HTTPException(status_code=403, detail="Staff can only update their own appointments")

    # 2) Finished appointments are closed
    if is_terminal(appt.status):
        raise HTTPException(status_code=409, detail=f"Appointment is already {appt.status}")

    try:
        new_status = transition_status(appt.status, payload.status)
    except InvalidStatusTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc))

    previous = appt.status
    appt = repo.set_status(appt, new_status.value)
    logger.info("appointment %s: %s -> %s", appt.id, previous, appt.status)
    return to_public(appt)
