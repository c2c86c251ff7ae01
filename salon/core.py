# salon/core.py
"""
Appointment availability engine.

Pure functions over appointment data. Nothing here touches the database or
keeps state between calls: callers pass the day's occupied intervals in as
``(start, end)`` pairs, already filtered to the relevant staff member.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple, Union

Interval = Tuple[datetime, datetime]

# longest service a booking may run; bounds how far back a conflict can start
MAX_DURATION_MINUTES = 24 * 60


@dataclass(frozen=True)
class BusinessHours:
    start_hour: int
    end_hour: int


class SlotRejection(str, Enum):
    outside_business_hours = "outside_business_hours"
    past_closing = "past_closing"
    overlap = "overlap"


@dataclass(frozen=True)
class SlotCheck:
    start: datetime
    end: datetime
    rejection: Optional[SlotRejection] = None
    conflict: Optional[Interval] = None

    @property
    def available(self) -> bool:
        return self.rejection is None


@dataclass(frozen=True)
class TimeRange:
    min_time: Optional[datetime] = None
    max_time: Optional[datetime] = None

    @property
    def has_slots(self) -> bool:
        # unselected date or a service longer than the whole business day
        if self.min_time is None or self.max_time is None:
            return False
        return self.max_time >= self.min_time


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """Half-open intersection test: ``[start_a, end_a)`` vs ``[start_b, end_b)``."""
    return start_a < end_b and end_a > start_b


def _day_at_hour(day: date, hour: int) -> datetime:
    # timedelta keeps end_hour=24 valid
    return datetime.combine(day, time.min) + timedelta(hours=hour)


def closing_time(day: date, business_hours: BusinessHours) -> datetime:
    return _day_at_hour(day, business_hours.end_hour)


def check_slot(
    candidate_start: datetime,
    service_duration: int,
    business_hours: BusinessHours,
    existing_appointments: Iterable[Interval],
    *,
    strict_closing: bool = False,
) -> SlotCheck:
    """
    Decide whether ``candidate_start`` can be booked for ``service_duration``
    minutes.

    Only the hour of the start instant is compared with the business window,
    so a 16:45 start for a 90 minute service passes a 9-17 window unless
    ``strict_closing`` is set. Any existing interval that intersects
    ``[candidate_start, candidate_start + duration)`` rejects the slot and is
    reported as ``conflict``.
    """
    if service_duration <= 0:
        raise ValueError("service_duration must be positive")

    candidate_end = candidate_start + timedelta(minutes=service_duration)

    hour = candidate_start.hour
    if hour < business_hours.start_hour or hour >= business_hours.end_hour:
        return SlotCheck(candidate_start, candidate_end, SlotRejection.outside_business_hours)

    if strict_closing and candidate_end > closing_time(candidate_start.date(), business_hours):
        return SlotCheck(candidate_start, candidate_end, SlotRejection.past_closing)

    for existing_start, existing_end in existing_appointments:
        if overlaps(candidate_start, candidate_end, existing_start, existing_end):
            return SlotCheck(
                candidate_start,
                candidate_end,
                SlotRejection.overlap,
                conflict=(existing_start, existing_end),
            )

    return SlotCheck(candidate_start, candidate_end)


def is_slot_available(
    candidate_start: datetime,
    service_duration: int,
    business_hours: BusinessHours,
    existing_appointments: Iterable[Interval],
    *,
    strict_closing: bool = False,
) -> bool:
    return check_slot(
        candidate_start,
        service_duration,
        business_hours,
        existing_appointments,
        strict_closing=strict_closing,
    ).available


def compute_selectable_time_range(
    selected_date: Optional[Union[date, datetime]],
    service_duration: int,
    business_hours: BusinessHours,
) -> TimeRange:
    """
    Earliest and latest selectable start on ``selected_date``.

    The latest start is closing time minus the service duration. The range is
    not clamped: a service longer than the business day gives
    ``max_time < min_time``, which ``TimeRange.has_slots`` reports as empty.
    """
    if selected_date is None:
        return TimeRange()
    if isinstance(selected_date, datetime):
        selected_date = selected_date.date()

    min_time = _day_at_hour(selected_date, business_hours.start_hour)
    max_time = closing_time(selected_date, business_hours) - timedelta(minutes=service_duration)
    return TimeRange(min_time, max_time)


def candidate_options(
    selected_date: Optional[Union[date, datetime]],
    service_duration: int,
    business_hours: BusinessHours,
    existing_appointments: Sequence[Interval],
    *,
    step_minutes: int = 15,
    strict_closing: bool = False,
) -> List[SlotCheck]:
    """Every ``step_minutes`` start inside the selectable range, with its availability."""
    if step_minutes <= 0:
        raise ValueError("step_minutes must be positive")

    time_range = compute_selectable_time_range(selected_date, service_duration, business_hours)
    if not time_range.has_slots:
        return []

    options = []
    step = timedelta(minutes=step_minutes)
    current = time_range.min_time
    while current <= time_range.max_time:
        options.append(
            check_slot(
                current,
                service_duration,
                business_hours,
                existing_appointments,
                strict_closing=strict_closing,
            )
        )
        current += step
    return options


# Staff working hours. day_of_week is Sunday-first (0 = Sunday, 6 = Saturday).

def sunday_first_weekday(day: date) -> int:
    return (day.weekday() + 1) % 7


def parse_hhmm(value: str) -> time:
    return datetime.strptime(value, "%H:%M").time()


def _entry_value(entry, key: str):
    if isinstance(entry, dict):
        return entry.get(key)
    return getattr(entry, key)


def working_window(day: date, schedule: Iterable) -> Optional[Interval]:
    """The staff member's ``(start, end)`` window on ``day``, or None if off that day."""
    weekday = sunday_first_weekday(day)
    for entry in schedule:
        if _entry_value(entry, "day_of_week") != weekday:
            continue
        start = datetime.combine(day, parse_hhmm(_entry_value(entry, "start_time")))
        end = datetime.combine(day, parse_hhmm(_entry_value(entry, "end_time")))
        return start, end
    return None


def fits_working_hours(candidate_start: datetime, service_duration: int, schedule: Iterable) -> bool:
    window = working_window(candidate_start.date(), schedule)
    if window is None:
        return False
    candidate_end = candidate_start + timedelta(minutes=service_duration)
    return window[0] <= candidate_start and candidate_end <= window[1]
