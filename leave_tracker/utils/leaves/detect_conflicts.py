"""Advisory detection of other employees already away on requested dates."""

from typing import Any, Dict, Iterable, List, Optional

from leave_tracker.constants.constants import BLOCKING_STATUSES, LeaveDuration
from leave_tracker.models.identifiers import same_id
from leave_tracker.schemas.leaveSchema import LeaveResponse

BLOCKING_VALUES = {s.value for s in BLOCKING_STATUSES}


def _value(enum_or_str):
    return enum_or_str.value if hasattr(enum_or_str, "value") else enum_or_str


def periods_overlap(
    requested_duration: Optional[str],
    requested_period: Optional[str],
    existing_duration: Optional[str],
    existing_period: Optional[str],
) -> bool:
    """Whether two leaves on the same date occupy the same part of the day.

    A full day overlaps everything; two half days overlap only when they are
    for the same period.
    """
    full_day = LeaveDuration.full_day.value
    if (requested_duration or full_day) == full_day or (existing_duration or full_day) == full_day:
        return True
    return requested_period == existing_period


def detect_conflicts(
    user_id: Any,
    dates: Iterable[str],
    leaves: Iterable[LeaveResponse],
    leave_duration: Optional[Any] = LeaveDuration.full_day,
    half_day_period: Optional[Any] = None,
) -> Dict[str, List[str]]:
    """Map each requested date to the names of other employees away that day.

    The requester's own leaves and rejected leaves are ignored. Names appear
    once per date, in the order first seen. Dates without conflicts are
    omitted.
    """
    leaves = list(leaves)
    requested_duration = _value(leave_duration)
    requested_period = _value(half_day_period)

    conflicts = {}
    for day in dict.fromkeys(dates):
        names = []
        for leave in leaves:
            if user_id is not None and same_id(leave.user_id, user_id):
                continue
            if _value(leave.status) not in BLOCKING_VALUES or day not in leave.dates:
                continue
            if not periods_overlap(
                requested_duration, requested_period,
                _value(leave.leave_duration), _value(leave.half_day_period),
            ):
                continue
            name = leave.employee_name or "Unknown"
            if name not in names:
                names.append(name)
        if names:
            conflicts[day] = names
    return conflicts
