"""Leave document for the leave tracker."""

import json
import logging
from typing import Any, Dict, List, Optional

from leave_tracker.constants.constants import (
    HALF_DAY_LABELS,
    HalfDayPeriod,
    LeaveDuration,
    LeaveType,
    RequestStatus,
)
from leave_tracker.models.base import TimestampMixin, as_utc
from leave_tracker.models.identifiers import normalize_id

logger = logging.getLogger(__name__)


def decode_dates(raw: Any) -> List[str]:
    """Canonical ``dates`` value for anything found in storage.

    Older records stored the list as a JSON-encoded string; every read goes
    through here so the rest of the code only sees a list of date strings.
    """
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        return [str(d) for d in raw]
    if isinstance(raw, str):
        if not raw.strip():
            return []
        try:
            decoded = json.loads(raw)
        except ValueError:
            logger.warning("Unreadable dates value %r, treating as empty", raw)
            return []
        if isinstance(decoded, list):
            return [str(d) for d in decoded]
        if isinstance(decoded, str):
            return [decoded]
    return []


def _enum_value(value: Any, default: Optional[str] = None) -> Optional[str]:
    if value is None:
        return default
    return value.value if hasattr(value, "value") else str(value)


def coerce_enum(enum_cls, value: Any, default: Optional[str], field: str) -> Optional[str]:
    """Stored ``value`` if it belongs to ``enum_cls``, otherwise ``default``."""
    if value is None or value == "":
        return default
    try:
        return enum_cls(_enum_value(value)).value
    except ValueError:
        logger.warning("Unknown %s %r in stored leave, using %r", field, value, default)
        return default


def date_label(leave_duration: Optional[str], half_day_period: Optional[str]) -> str:
    """Human label of the part of the day a leave covers."""
    if leave_duration != LeaveDuration.half_day.value or not half_day_period:
        return ""
    try:
        return HALF_DAY_LABELS[HalfDayPeriod(half_day_period)]
    except ValueError:
        return ""


class LeaveDocument(TimestampMixin):
    """Converts ``leaves`` documents between storage and API shape."""

    @staticmethod
    def to_storage(data: Dict[str, Any], user_id: Any) -> Dict[str, Any]:
        leave_duration = _enum_value(data.get("leave_duration"), LeaveDuration.full_day.value)
        half_day_period = _enum_value(data.get("half_day_period"))
        if leave_duration == LeaveDuration.full_day.value:
            half_day_period = None
        dates = data.get("dates")
        document = {
            "user_id": user_id,
            "leave_type": _enum_value(data.get("leave_type"), LeaveType.casual.value),
            "leave_duration": leave_duration,
            "half_day_period": half_day_period,
            "dates": list(dates) if isinstance(dates, (list, tuple)) else decode_dates(dates),
            "reason": data.get("reason") or "",
            "covering_officer": data.get("covering_officer") or None,
            "status": RequestStatus.pending.value,
        }
        return LeaveDocument.stamp_new(document, created_field="applied_at")

    @staticmethod
    def to_api(raw: Dict[str, Any], employee_name: Optional[str] = None) -> Dict[str, Any]:
        leave_duration = coerce_enum(
            LeaveDuration, raw.get("leave_duration"), LeaveDuration.full_day.value, "leave_duration"
        )
        half_day_period = coerce_enum(HalfDayPeriod, raw.get("half_day_period"), None, "half_day_period")
        if leave_duration == LeaveDuration.full_day.value:
            half_day_period = None
        record = {
            "id": normalize_id(raw.get("_id")),
            "user_id": normalize_id(raw.get("user_id")),
            "leave_type": coerce_enum(LeaveType, raw.get("leave_type"), LeaveType.casual.value, "leave_type"),
            "leave_duration": leave_duration,
            "half_day_period": half_day_period,
            "dates": decode_dates(raw.get("dates")),
            "reason": raw.get("reason") or "",
            "covering_officer": raw.get("covering_officer"),
            "status": coerce_enum(RequestStatus, raw.get("status"), RequestStatus.pending.value, "status"),
            "applied_at": as_utc(raw.get("applied_at")),
            "updated_at": as_utc(raw.get("updated_at")),
        }
        if employee_name is not None:
            record["employee_name"] = employee_name
        return record
