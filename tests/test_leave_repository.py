from datetime import datetime, timezone

import pytest

from leave_tracker.constants.constants import LEAVES_COLLECTION, RequestStatus
from leave_tracker.core.exceptions import InternalError
from conftest import insert_employee


async def _apply(repository, user_id="1", **fields):
    data = {"user_id": user_id, "dates": ["2025-01-10", "2025-01-12"], "covering_officer": "Savindi"}
    data.update(fields)
    return await repository.create_leave(data)


@pytest.mark.asyncio
async def test_get_employees_uses_narrow_projection(repository):
    employees = await repository.get_employees()

    assert [e.name for e in employees] == ["Anudi", "Savindi", "Senaka", "Apsara"]
    assert set(employees[0].model_dump()) == {"id", "name", "role", "created_at"}


@pytest.mark.asyncio
async def test_selection_list_exposes_paysheet_number(repository, store):
    await insert_employee(store, "Kasun", paysheet_number="43074", email="kasun@example.com")

    options = await repository.list_employees_for_selection()

    assert options[-1].name == "Kasun"
    assert options[-1].paysheet_number == "43074"


@pytest.mark.asyncio
async def test_get_user_by_id_returns_none_when_missing(repository):
    assert (await repository.get_user_by_id("1")).name == "Anudi"
    assert await repository.get_user_by_id("404") is None
    assert await repository.get_user_by_id(None) is None


@pytest.mark.asyncio
async def test_create_leave_stores_pending_leave_with_defaults(repository):
    leave = await _apply(repository, reason=None)

    assert leave.id
    assert leave.user_id == "1"
    assert leave.status == RequestStatus.pending
    assert leave.leave_type.value == "casual"
    assert leave.leave_duration.value == "full_day"
    assert leave.half_day_period is None
    assert leave.reason == ""
    assert leave.applied_at == leave.updated_at


@pytest.mark.asyncio
async def test_dates_round_trip_as_a_list(repository):
    created = await _apply(repository)

    fetched = await repository.get_leave_by_id(created.id)

    assert fetched.dates == ["2025-01-10", "2025-01-12"]


@pytest.mark.asyncio
async def test_legacy_string_dates_are_decoded_on_read(repository, store):
    leaves = await store.collection(LEAVES_COLLECTION)
    await leaves.insert_one({
        "user_id": "2",
        "leave_type": "medical",
        "dates": '["2025-01-10","2025-01-12"]',
        "status": "pending",
    })

    [leave] = await repository.get_all_leaves()

    assert leave.dates == ["2025-01-10", "2025-01-12"]
    assert leave.employee_name == "Savindi"


@pytest.mark.asyncio
async def test_get_all_leaves_is_newest_first_and_joins_names(repository, store):
    leaves = await store.collection(LEAVES_COLLECTION)
    await leaves.insert_one({"user_id": "1", "leave_type": "casual", "dates": ["2025-01-10"],
                             "status": "pending", "applied_at": datetime(2025, 1, 1, tzinfo=timezone.utc)})
    await leaves.insert_one({"user_id": "999", "leave_type": "casual", "dates": ["2025-01-11"],
                             "status": "pending", "applied_at": datetime(2025, 1, 2, tzinfo=timezone.utc)})

    found = await repository.get_all_leaves()

    assert [l.dates for l in found] == [["2025-01-11"], ["2025-01-10"]]
    assert found[0].employee_name == "Unknown"
    assert found[1].employee_name == "Anudi"


@pytest.mark.asyncio
async def test_get_leaves_for_user_filters_by_owner(repository):
    mine = await _apply(repository, user_id="1")
    await _apply(repository, user_id="2")

    assert [l.id for l in await repository.get_leaves_for_user(1)] == [mine.id]


@pytest.mark.asyncio
async def test_status_update_is_idempotent(repository):
    leave = await _apply(repository)

    first = await repository.update_leave_status(leave.id, RequestStatus.approved)
    second = await repository.update_leave_status(leave.id, RequestStatus.approved)

    assert first.status == RequestStatus.approved
    assert second.status == RequestStatus.approved
    assert second.updated_at >= first.updated_at >= leave.updated_at


@pytest.mark.asyncio
async def test_status_update_of_missing_leave_returns_none(repository):
    assert await repository.update_leave_status("12345", RequestStatus.approved) is None


@pytest.mark.asyncio
async def test_batch_update_reports_each_leave(repository):
    leave = await _apply(repository)

    results = await repository.update_leave_statuses([leave.id, "777"], RequestStatus.rejected)

    assert [(r.id, r.ok) for r in results] == [(leave.id, True), ("777", False)]
    assert results[1].error == "Leave not found"
    assert (await repository.get_leave_by_id(leave.id)).status == RequestStatus.rejected


@pytest.mark.asyncio
async def test_stats_count_by_status_and_type(repository):
    a = await _apply(repository, user_id="1", leave_type="medical")
    await _apply(repository, user_id="1", leave_type="short")
    b = await _apply(repository, user_id="2")
    await repository.update_leave_status(a.id, RequestStatus.approved)
    await repository.update_leave_status(b.id, RequestStatus.rejected)

    stats = await repository.get_stats()

    assert stats.totalEmployees == 4
    assert stats.totalLeaves == 3
    assert (stats.pendingLeaves, stats.approvedLeaves, stats.rejectedLeaves) == (1, 1, 1)
    assert stats.leaveTypeBreakdown.model_dump() == {"casual": 1, "medical": 1, "halfday": 0, "short": 1}


@pytest.mark.asyncio
async def test_employee_stats_compare_ids_as_strings(repository, store):
    leaves = await store.collection(LEAVES_COLLECTION)
    # Owner stored as an int, employee ids are strings.
    await leaves.insert_one({"user_id": 3, "leave_type": "halfday", "dates": ["2025-01-10"], "status": "approved"})
    await _apply(repository, user_id="3")

    stats = {s.name: s for s in await repository.get_employee_stats()}

    assert stats["Senaka"].total_leaves == 2
    assert stats["Senaka"].approved_leaves == 1
    assert stats["Senaka"].pending_leaves == 1
    assert stats["Senaka"].halfday_leaves == 1
    assert stats["Senaka"].casual_leaves == 1
    assert stats["Anudi"].total_leaves == 0


@pytest.mark.asyncio
async def test_stats_never_raise(repository, store, monkeypatch):
    async def broken_collection(name):
        raise InternalError("store unavailable")

    monkeypatch.setattr(store, "collection", broken_collection)

    stats = await repository.get_stats()

    assert stats.totalEmployees == 0
    assert stats.totalLeaves == 0
    assert stats.leaveTypeBreakdown.model_dump() == {"casual": 0, "medical": 0, "halfday": 0, "short": 0}
    assert await repository.get_employee_stats() == []


@pytest.mark.asyncio
async def test_single_entity_reads_propagate_backend_errors(repository, store, monkeypatch):
    async def broken_collection(name):
        raise InternalError("store unavailable")

    monkeypatch.setattr(store, "collection", broken_collection)

    with pytest.raises(InternalError):
        await repository.get_leave_by_id("1")


@pytest.mark.asyncio
async def test_delete_leave(repository):
    leave = await _apply(repository)

    deleted = await repository.delete_leave(leave.id)

    assert deleted.id == leave.id
    assert await repository.get_leave_by_id(leave.id) is None
    assert await repository.delete_leave(leave.id) is None


@pytest.mark.asyncio
async def test_clear_leaves_is_a_noop_in_memory(repository):
    await _apply(repository)

    result = await repository.clear_leaves()

    assert result == {"deleted_count": 0, "ephemeral": True}
    assert len(await repository.get_all_leaves()) == 1


@pytest.mark.asyncio
async def test_unknown_stored_values_are_read_with_defaults(repository, store):
    leaves = await store.collection(LEAVES_COLLECTION)
    await leaves.insert_one({
        "user_id": "1", "leave_type": "annual", "leave_duration": "half_day",
        "half_day_period": "night", "dates": ["2025-01-10"], "status": "cancelled",
    })
    await _apply(repository, user_id="2", leave_type="medical")

    found = {l.user_id: l for l in await repository.get_all_leaves()}

    assert len(found) == 2
    legacy = found["1"]
    assert legacy.leave_type.value == "casual"
    assert legacy.half_day_period is None
    assert legacy.status == RequestStatus.pending
    assert found["2"].leave_type.value == "medical"


@pytest.mark.asyncio
async def test_stats_count_leaves_the_way_they_are_listed(repository, store):
    leaves = await store.collection(LEAVES_COLLECTION)
    await leaves.insert_one({"user_id": "1", "dates": ["2025-01-10"]})
    await leaves.insert_one({"user_id": "1", "leave_type": "annual", "dates": ["2025-01-11"], "status": "approved"})

    stats = await repository.get_stats()
    anudi = next(s for s in await repository.get_employee_stats() if s.name == "Anudi")

    assert stats.leaveTypeBreakdown.casual == 2
    assert (stats.pendingLeaves, stats.approvedLeaves) == (1, 1)
    assert anudi.casual_leaves == 2
    assert anudi.pending_leaves == 1
