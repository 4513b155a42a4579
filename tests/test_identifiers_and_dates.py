from bson import ObjectId

from leave_tracker.models.identifiers import DocumentId, normalize_id, same_id
from leave_tracker.models.leave import LeaveDocument, date_label, decode_dates


def test_valid_hex_string_becomes_object_id_on_live_backend():
    raw = "65a1f0c2e4b0a1b2c3d4e5f6"
    value = DocumentId.from_external(raw).for_backend(native=True)
    assert isinstance(value, ObjectId)
    assert str(value) == raw


def test_invalid_string_is_used_verbatim_on_live_backend():
    assert DocumentId.from_external("not-an-object-id").for_backend(native=True) == "not-an-object-id"
    assert DocumentId.from_external(" 42 ").for_backend(native=True) == "42"


def test_memory_backend_always_uses_strings():
    oid = ObjectId()
    assert DocumentId.from_native(oid).for_backend(native=False) == str(oid)
    assert DocumentId.from_native(7).for_backend(native=False) == "7"


def test_ids_compare_by_string_form():
    oid = ObjectId()
    assert same_id(oid, str(oid))
    assert same_id(3, "3")
    assert not same_id(None, "3")
    assert DocumentId.from_native(3) == DocumentId.from_external("3")
    assert normalize_id(None) == ""


def test_decode_dates_accepts_lists_and_legacy_json_strings():
    assert decode_dates(["2025-01-10", "2025-01-12"]) == ["2025-01-10", "2025-01-12"]
    assert decode_dates('["2025-01-10","2025-01-12"]') == ["2025-01-10", "2025-01-12"]
    assert decode_dates(None) == []
    assert decode_dates("") == []
    assert decode_dates("{broken") == []
    assert decode_dates(12) == []


def test_full_day_leave_never_keeps_a_half_day_period():
    document = LeaveDocument.to_storage(
        {"dates": ["2025-01-10"], "leave_duration": "full_day", "half_day_period": "morning"},
        user_id="1",
    )
    assert document["half_day_period"] is None
    assert document["leave_type"] == "casual"
    assert document["status"] == "pending"
    assert document["reason"] == ""
    assert document["applied_at"] == document["updated_at"]


def test_date_labels():
    assert date_label("full_day", None) == ""
    assert date_label("half_day", "morning") == "8am-12pm"
    assert date_label("half_day", "evening") == "12pm-4pm"
