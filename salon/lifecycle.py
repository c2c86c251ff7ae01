# salon/lifecycle.py

from typing import Dict, FrozenSet, Union

from salon.schemas import AppointmentStatus

S = AppointmentStatus

ALLOWED_TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    S.scheduled: frozenset({S.confirmed, S.cancelled}),
    S.confirmed: frozenset({S.in_progress, S.cancelled}),
    S.in_progress: frozenset({S.completed}),
    S.completed: frozenset(),
    S.cancelled: frozenset(),
}


class InvalidStatusTransition(Exception):
    def __init__(self, current: AppointmentStatus, target: AppointmentStatus):
        self.current = current
        self.target = target
        super().__init__(f"Cannot change status from '{current.value}' to '{target.value}'")


def transition_status(current: Union[str, AppointmentStatus], target: Union[str, AppointmentStatus]) -> AppointmentStatus:
    current = AppointmentStatus(current)
    target = AppointmentStatus(target)
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidStatusTransition(current, target)
    return target


def is_terminal(status: Union[str, AppointmentStatus]) -> bool:
    return not ALLOWED_TRANSITIONS[AppointmentStatus(status)]
