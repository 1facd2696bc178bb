"""
Tests for record normalization between storage and wire forms.
"""

import uuid
from datetime import date, datetime, timezone, timedelta

from src.models import Account, Case
from src.normalize import auth_user, to_storage_ref, to_storage_refs, to_wire, wire_name
from src.timestamps import to_iso, to_naive_utc


class TestToWire:
    def test_none(self):
        assert to_wire(None) is None

    def test_dict_id_renamed_and_values_converted(self):
        ref = uuid.uuid4()
        result = to_wire({"_id": ref, "when": datetime(2024, 1, 2, 3, 4, 5), "ids": [ref]})
        assert result == {"id": str(ref), "when": "2024-01-02T03:04:05.000Z", "ids": [str(ref)]}

    def test_account_excludes_password_hash(self):
        account = Account(
            id=uuid.uuid4(),
            email="a@b.c",
            password_hash="salt$hash",
            first_name="A",
            last_name="B",
            photo_url="https://example.com/a.png",
        )
        result = to_wire(account)
        assert "passwordHash" not in result
        assert "password_hash" not in result
        assert result["photoURL"] == "https://example.com/a.png"
        assert result["firstName"] == "A"
        assert result["id"] == str(account.id)

    def test_reference_columns_are_strings(self):
        client_id = uuid.uuid4()
        case = Case(id=uuid.uuid4(), title="T", client_id=client_id, user_id=uuid.uuid4())
        result = to_wire(case)
        assert result["clientId"] == str(client_id)
        assert "client" not in result

    def test_wire_name(self):
        assert wire_name(Account, "photo_url") == "photoURL"
        assert wire_name(Account, "bar_council_number") == "barCouncilNumber"


class TestStorageRefs:
    def test_valid_string(self):
        ref = uuid.uuid4()
        assert to_storage_ref(str(ref)) == ref
        assert to_storage_ref(f"  {ref}  ") == ref
        assert to_storage_ref(ref) == ref

    def test_empty_and_invalid(self):
        assert to_storage_ref("") is None
        assert to_storage_ref("   ") is None
        assert to_storage_ref(None) is None
        assert to_storage_ref("Unassigned") is None
        assert to_storage_ref(42) is None

    def test_to_storage_refs_reports_rejections(self):
        good = uuid.uuid4()
        payload = {"case_id": "Smith v Jones", "client_id": str(good), "title": "Keep me"}
        converted, rejected = to_storage_refs(payload, ("case_id", "client_id", "absent_id"))
        assert converted == {"case_id": None, "client_id": good, "title": "Keep me"}
        assert rejected == {"case_id": "Smith v Jones"}
        assert payload["client_id"] == str(good)

    def test_empty_reference_is_not_a_rejection(self):
        converted, rejected = to_storage_refs({"case_id": ""}, ("case_id",))
        assert converted == {"case_id": None}
        assert rejected == {}

    def test_storage_then_wire_returns_original_values(self):
        ref = uuid.uuid4()
        payload = {"case_id": str(ref), "due_date": datetime(2024, 5, 6, 7, 8, 9, 123000)}
        converted, _ = to_storage_refs(payload, ("case_id",))
        assert converted["case_id"] == ref
        assert to_wire(converted) == {"case_id": str(ref), "due_date": "2024-05-06T07:08:09.123Z"}


class TestAuthUser:
    def test_compact_shape(self):
        user = auth_user({
            "id": "1", "email": "a@b.c", "firstName": "A", "lastName": "B",
            "phone": "555", "userType": None,
        })
        assert user == {
            "id": "1",
            "email": "a@b.c",
            "firstName": "A",
            "lastName": "B",
            "displayName": None,
            "photoURL": None,
            "userType": "lawyer",
        }


class TestTimestamps:
    def test_to_iso_naive_is_utc(self):
        assert to_iso(datetime(2024, 5, 1, 12, 0)) == "2024-05-01T12:00:00.000Z"

    def test_to_iso_aware(self):
        aware = datetime(2024, 5, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
        assert to_iso(aware) == "2024-05-01T12:00:00.000Z"

    def test_to_iso_date(self):
        assert to_iso(date(2024, 5, 1)) == "2024-05-01"

    def test_to_naive_utc(self):
        aware = datetime(2024, 5, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
        assert to_naive_utc(aware) == datetime(2024, 5, 1, 12, 0)
        assert to_naive_utc(None) is None
