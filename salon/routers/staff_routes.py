# salon/routers/staff_routes.py

import logging
from datetime import date, timedelta
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from salon.auth import get_current_user
from salon.core import candidate_options, compute_selectable_time_range, fits_working_hours
from salon.data import business_hours, shop_settings
from salon.deps import require_admin, raise_for_violations
from salon.models import StaffMember
from salon.repository import (
    AppointmentRepository,
    ServiceRepository,
    StaffRepository,
    get_appointment_repo,
    get_service_repo,
    get_staff_repo,
)
from salon.schemas import AvailabilityResponse, StaffIn, StaffPublic, WorkingHours
from salon.validation import ValidationResult, validate_schedule, validate_staff

logger = logging.getLogger("salon.staff")

router = APIRouter(
    prefix="/staff",
    tags=["staff"],
)


def _get_or_404(repo: StaffRepository, staff_id: int) -> StaffMember:
    member = repo.get(staff_id)
    if member is None:
        raise HTTPException(status_code=404, detail="Staff member not found")
    return member


def _check_services_exist(result: ValidationResult, service_ids: List[int], services: ServiceRepository):
    for service_id in service_ids:
        if services.get(service_id) is None:
            result.add("service_ids", f"Unknown service {service_id}")


def _sorted_schedule(schedule: List[WorkingHours]) -> List[dict]:
    return [entry.model_dump() for entry in sorted(schedule, key=lambda e: e.day_of_week)]


def _values(payload: StaffIn) -> dict:
    values = payload.model_dump()
    values["schedule"] = _sorted_schedule(payload.schedule)
    values["service_ids"] = list(dict.fromkeys(payload.service_ids))
    return values


@router.get("", response_model=List[StaffPublic])
def list_staff(
    repo: StaffRepository = Depends(get_staff_repo),
    current_user: dict = Depends(get_current_user),
):
    return repo.list()


@router.get("/{staff_id}", response_model=StaffPublic)
def get_staff(
    staff_id: int,
    repo: StaffRepository = Depends(get_staff_repo),
    current_user: dict = Depends(get_current_user),
):
    return _get_or_404(repo, staff_id)


@router.post("", response_model=StaffPublic, status_code=201)
def create_staff(
    payload: StaffIn,
    repo: StaffRepository = Depends(get_staff_repo),
    services: ServiceRepository = Depends(get_service_repo),
    current_user: dict = Depends(require_admin),
):
    result = validate_staff(payload)
    _check_services_exist(result, payload.service_ids, services)
    raise_for_violations(result)

    member = repo.add(StaffMember(**_values(payload)))
    logger.info("created staff member %s (%s)", member.id, member.name)
    return member


@router.put("/{staff_id}", response_model=StaffPublic)
def update_staff(
    staff_id: int,
    payload: StaffIn,
    repo: StaffRepository = Depends(get_staff_repo),
    services: ServiceRepository = Depends(get_service_repo),
    current_user: dict = Depends(require_admin),
):
    member = _get_or_404(repo, staff_id)
    result = validate_staff(payload)
    _check_services_exist(result, payload.service_ids, services)
    raise_for_violations(result)

    member = repo.update(member, _values(payload))
    logger.info("updated staff member %s", member.id)
    return member


@router.put("/{staff_id}/schedule", response_model=StaffPublic)
def update_schedule(
    staff_id: int,
    schedule: List[WorkingHours],
    repo: StaffRepository = Depends(get_staff_repo),
    current_user: dict = Depends(require_admin),
):
    member = _get_or_404(repo, staff_id)
    raise_for_violations(validate_schedule(schedule))

    member = repo.update(member, {"schedule": _sorted_schedule(schedule)})
    logger.info("updated schedule for staff member %s (%d days)", member.id, len(schedule))
    return member


@router.patch("/{staff_id}/toggle-active", response_model=StaffPublic)
def toggle_staff_active(
    staff_id: int,
    repo: StaffRepository = Depends(get_staff_repo),
    current_user: dict = Depends(require_admin),
):
    member = _get_or_404(repo, staff_id)
    member = repo.update(member, {"active": not member.active})
    logger.info("staff member %s active=%s", member.id, member.active)
    return member


@router.delete("/{staff_id}", status_code=204)
def delete_staff(
    staff_id: int,
    repo: StaffRepository = Depends(get_staff_repo),
    current_user: dict = Depends(require_admin),
):
    member = _get_or_404(repo, staff_id)
    if repo.in_use(staff_id):
        raise HTTPException(status_code=409, detail="Staff member has appointments; deactivate them instead")
    if repo.account_for(staff_id) is not None:
        raise HTTPException(status_code=409, detail="Staff member has a login account; deactivate them instead")

    repo.delete(member)
    logger.info("deleted staff member %s", staff_id)


@router.get("/{staff_id}/availability", response_model=AvailabilityResponse)
def staff_availability(
    staff_id: int,
    on_date: date,
    service_id: int,
    repo: StaffRepository = Depends(get_staff_repo),
    services: ServiceRepository = Depends(get_service_repo),
    appointments: AppointmentRepository = Depends(get_appointment_repo),
    current_user: dict = Depends(get_current_user),
):
    # 1) Lookup staff member and service
    member = _get_or_404(repo, staff_id)
    service = services.get(service_id)
    if service is None:
        raise HTTPException(status_code=404, detail="Service not found")

    # 2) Selectable range for the service duration
    hours = business_hours()
    time_range = compute_selectable_time_range(on_date, service.duration, hours)
    response = {
        "staff_id": member.id,
        "service_id": service.id,
        "date": on_date,
        "min_time": time_range.min_time,
        "max_time": time_range.max_time,
        "options": [],
    }

    if not member.active or not service.active or service_id not in member.service_ids:
        return response
    if not time_range.has_slots:
        return response

    # 3) Candidate starts checked against bookings that reach the range
    last_end = time_range.max_time + timedelta(minutes=service.duration)
    options = candidate_options(
        on_date,
        service.duration,
        hours,
        appointments.intervals_for(member.id, time_range.min_time, last_end),
        step_minutes=shop_settings["slot_minutes"],
        strict_closing=shop_settings["strict_closing"],
    )
    enforce_schedule = shop_settings["enforce_staff_schedule"]
    for option in options:
        available = option.available
        reason = option.rejection.value if option.rejection else None
        if available and enforce_schedule and not fits_working_hours(option.start, service.duration, member.schedule):
            available, reason = False, "outside_working_hours"
        response["options"].append({
            "start_time": option.start,
            "end_time": option.end,
            "available": available,
            "reason": reason,
        })
    return response
