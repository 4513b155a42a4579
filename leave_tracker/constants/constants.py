"""Constants for user roles, leave types, leave durations, half-day periods and request statuses."""

from enum import Enum


class UserRole(str, Enum):
    """Enumeration of user roles within the organization."""

    employee = "employee"
    admin = "admin"


class LeaveType(str, Enum):
    """Enumeration of leave types."""

    casual = "casual"
    medical = "medical"
    halfday = "halfday"
    short = "short"


class LeaveDuration(str, Enum):
    """Enumeration of leave durations."""

    full_day = "full_day"
    half_day = "half_day"


class HalfDayPeriod(str, Enum):
    """Enumeration of half-day periods."""

    morning = "morning"
    evening = "evening"


class RequestStatus(str, Enum):
    """Enumeration of request statuses."""

    pending = "pending"
    approved = "approved"
    rejected = "rejected"


# Statuses an administrator may set on a leave.
DECISION_STATUSES = (RequestStatus.approved, RequestStatus.rejected)

# Statuses that still occupy a date for conflict purposes.
BLOCKING_STATUSES = (RequestStatus.pending, RequestStatus.approved)

HALF_DAY_LABELS = {
    HalfDayPeriod.morning: "8am-12pm",
    HalfDayPeriod.evening: "12pm-4pm",
}

USERS_COLLECTION = "users"
LEAVES_COLLECTION = "leaves"

DEFAULT_EMPLOYEE_NAMES = ["Anudi", "Savindi", "Senaka", "Apsara"]

EPHEMERAL_NOTE = "In-memory data is ephemeral and will reset on restart"
