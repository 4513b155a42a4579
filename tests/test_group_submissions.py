from datetime import datetime, timedelta, timezone

import pytest

from leave_tracker.constants.constants import RequestStatus
from leave_tracker.core.exceptions import ValidationError
from leave_tracker.schemas.leaveSchema import LeaveResponse, StatusUpdateResult
from leave_tracker.utils.leaves.group_submissions import (
    fan_out_status_update,
    group_submissions,
    parse_decision,
)

T0 = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


def leave(id, seconds, user_id="1", employee_name="Anudi", dates=("2025-03-10",), **fields):
    return LeaveResponse(
        id=id,
        user_id=user_id,
        employee_name=employee_name,
        leave_type=fields.pop("leave_type", "casual"),
        status=fields.pop("status", "pending"),
        dates=list(dates),
        applied_at=T0 + timedelta(seconds=seconds),
        **fields,
    )


def test_leaves_within_window_form_one_submission():
    groups = group_submissions([leave("a", 0), leave("b", 5), leave("c", 20)])

    assert [g.ids for g in groups] == [["a", "b"], ["c"]]
    assert groups[0].id == "a"


def test_membership_is_tested_against_the_seed_only():
    groups = group_submissions([leave("a", 0), leave("b", 9), leave("c", 18)])

    assert [g.ids for g in groups] == [["a", "b"], ["c"]]


def test_window_boundary_is_exclusive():
    groups = group_submissions([leave("a", 0), leave("b", 10)])

    assert [g.ids for g in groups] == [["a"], ["b"]]


def test_different_employees_are_never_merged():
    groups = group_submissions([
        leave("a", 0, user_id="1", employee_name="Anudi"),
        leave("b", 1, user_id="2", employee_name="Savindi"),
    ])

    assert [g.ids for g in groups] == [["a"], ["b"]]


def test_same_employee_name_is_enough_to_merge():
    groups = group_submissions([
        leave("a", 0, user_id="1", employee_name="Anudi"),
        leave("b", 2, user_id="legacy-1", employee_name="Anudi"),
    ])

    assert [g.ids for g in groups] == [["a", "b"]]


def test_order_of_input_is_kept():
    groups = group_submissions([leave("c", 30), leave("a", 0), leave("b", 3)])

    assert [g.id for g in groups] == ["c", "a"]


def test_dates_are_tagged_with_duration_and_label():
    groups = group_submissions([
        leave("a", 0, dates=["2025-03-10", "2025-03-11"]),
        leave("b", 1, dates=["2025-03-12"], leave_duration="half_day", half_day_period="morning"),
        leave("c", 2, dates=["2025-03-13"], leave_duration="half_day", half_day_period="evening"),
    ])

    [group] = groups
    assert [(d.date, d.leave_duration.value, d.label) for d in group.dates] == [
        ("2025-03-10", "full_day", ""),
        ("2025-03-11", "full_day", ""),
        ("2025-03-12", "half_day", "8am-12pm"),
        ("2025-03-13", "half_day", "12pm-4pm"),
    ]


def test_window_is_configurable():
    groups = group_submissions([leave("a", 0), leave("b", 20)], window_seconds=30)

    assert [g.ids for g in groups] == [["a", "b"]]


def test_parse_decision_accepts_only_approve_or_reject():
    assert parse_decision("approved") is RequestStatus.approved
    assert parse_decision(RequestStatus.rejected) is RequestStatus.rejected
    for bad in ("pending", "maybe", None):
        with pytest.raises(ValidationError):
            parse_decision(bad)


class FakeRepository:

    def __init__(self, missing=()):
        self.missing = set(missing)
        self.calls = []

    async def update_leave_statuses(self, leave_ids, status):
        self.calls.append((list(leave_ids), status))
        return [
            StatusUpdateResult(id=i, ok=i not in self.missing, error="Leave not found" if i in self.missing else None)
            for i in leave_ids
        ]


@pytest.mark.asyncio
async def test_fan_out_updates_every_leave_once():
    repository = FakeRepository()

    result = await fan_out_status_update(repository, ["a", "b", "a", 3], "approved")

    assert repository.calls == [(["a", "b", "3"], RequestStatus.approved)]
    assert result.all_succeeded
    assert not result.refetch_required


@pytest.mark.asyncio
async def test_fan_out_reports_partial_failure():
    result = await fan_out_status_update(FakeRepository(missing={"b"}), ["a", "b"], "rejected")

    assert not result.all_succeeded
    assert result.failed_ids == ["b"]
    assert result.refetch_required


@pytest.mark.asyncio
async def test_fan_out_needs_ids():
    with pytest.raises(ValidationError):
        await fan_out_status_update(FakeRepository(), [], "approved")
