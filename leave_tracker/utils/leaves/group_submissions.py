"""Coalesce leaves stored by one interactive submission into one unit.

The client stores one leave per duration bucket, so a single submission can
produce several records a few seconds apart. Records are grouped around a
seed: every unprocessed record of the same employee within the window of the
seed joins it. Membership is only tested against the seed, never between
members, so the result depends on input order. t=0, t=9, t=18 seeded at
t=0 gives {0, 9} and {18}.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence

from leave_tracker.constants.constants import DECISION_STATUSES, RequestStatus
from leave_tracker.core.exceptions import ValidationError
from leave_tracker.models.leave import date_label
from leave_tracker.schemas.leaveSchema import (
    GroupedDate,
    GroupedSubmission,
    LeaveResponse,
    StatusUpdateResult,
)

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SECONDS = 10


def _value(enum_or_str):
    return enum_or_str.value if hasattr(enum_or_str, "value") else enum_or_str


def _same_submitter(seed: LeaveResponse, other: LeaveResponse) -> bool:
    if seed.user_id and seed.user_id == other.user_id:
        return True
    return bool(seed.employee_name) and seed.employee_name == other.employee_name


def _within_window(seed: LeaveResponse, other: LeaveResponse, window_seconds: float) -> bool:
    if seed.applied_at is None or other.applied_at is None:
        return False
    return abs((other.applied_at - seed.applied_at).total_seconds()) < window_seconds


def _tagged_dates(leave: LeaveResponse) -> List[GroupedDate]:
    duration = _value(leave.leave_duration)
    period = _value(leave.half_day_period) if leave.half_day_period else None
    return [
        GroupedDate(
            date=d,
            leave_duration=duration,
            half_day_period=period,
            label=date_label(duration, period),
        )
        for d in leave.dates
    ]


def group_submissions(
    leaves: Sequence[LeaveResponse],
    window_seconds: float = DEFAULT_WINDOW_SECONDS,
) -> List[GroupedSubmission]:
    """Group ``leaves`` into submissions, preserving seed order."""
    processed = set()
    groups = []

    for seed in leaves:
        if seed.id in processed:
            continue

        members = [
            leave for leave in leaves
            if leave.id not in processed
            and (leave.id == seed.id or (
                _same_submitter(seed, leave) and _within_window(seed, leave, window_seconds)
            ))
        ]
        processed.update(leave.id for leave in members)

        dates = []
        for member in members:
            dates.extend(_tagged_dates(member))

        groups.append(GroupedSubmission(
            id=seed.id,
            ids=[member.id for member in members],
            user_id=seed.user_id,
            employee_name=seed.employee_name,
            leave_type=seed.leave_type,
            status=seed.status,
            reason=seed.reason,
            covering_officer=seed.covering_officer,
            applied_at=seed.applied_at,
            dates=dates,
        ))

    return groups


@dataclass
class FanOutResult:
    """Outcome of applying one decision to every leave of a submission."""

    status: RequestStatus
    results: List[StatusUpdateResult] = field(default_factory=list)

    @property
    def all_succeeded(self) -> bool:
        return all(r.ok for r in self.results)

    @property
    def failed_ids(self) -> List[str]:
        return [r.id for r in self.results if not r.ok]

    @property
    def refetch_required(self) -> bool:
        # Partial application leaves server state unknown to the caller.
        return not self.all_succeeded


def parse_decision(status) -> RequestStatus:
    try:
        decision = RequestStatus(_value(status))
    except ValueError:
        decision = None
    if decision not in DECISION_STATUSES:
        raise ValidationError('Invalid status. Must be "approved" or "rejected"')
    return decision


async def fan_out_status_update(repository, leave_ids: Iterable, status) -> FanOutResult:
    """Update every contributing leave individually; no rollback."""
    decision = parse_decision(status)
    ids = list(dict.fromkeys(str(i) for i in leave_ids if i is not None and str(i).strip()))
    if not ids:
        raise ValidationError("Leave ID is required")

    result = FanOutResult(status=decision)
    result.results = await repository.update_leave_statuses(ids, decision)
    if not result.all_succeeded:
        logger.warning(f"Partial status update to {decision.value}, failed ids: {result.failed_ids}")
    return result
