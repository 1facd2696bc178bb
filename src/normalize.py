"""
CaseDesk Legal - Record Normalization

Converts stored records into wire-safe dictionaries (camelCase keys, string
ids, ISO-8601 dates) and wire reference strings back into storage UUIDs.
"""

import uuid
from datetime import date, datetime
from typing import Any, Dict, Iterable, Optional, Tuple

from pydantic.alias_generators import to_camel
from sqlalchemy import inspect

from src.timestamps import to_iso


# Fields of the compact account shape returned by login, register and verify
AUTH_USER_FIELDS = ("id", "email", "firstName", "lastName", "displayName", "photoURL", "userType")


def wire_name(model: type, attr: str) -> str:
    """Public name of a model attribute."""
    aliases = getattr(model, "__wire_aliases__", {})
    return aliases.get(attr) or to_camel(attr)


def wire_value(value: Any) -> Any:
    """Convert a single stored value to its wire form."""
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return to_iso(value)
    if isinstance(value, list):
        return [wire_value(item) for item in value]
    return value


def to_wire(record: Any) -> Optional[Dict[str, Any]]:
    """
    Map a stored record to a plain, JSON-safe dictionary.

    ORM instances contribute their mapped columns, minus the model's
    __wire_exclude__ fields. Plain dictionaries are converted value by value,
    with a private "_id" key renamed to "id".

    Returns:
        The wire dictionary, or None for a missing record.
    """
    if record is None:
        return None

    if isinstance(record, dict):
        result = {}
        for key, value in record.items():
            result["id" if key == "_id" else key] = wire_value(value)
        return result

    model = type(record)
    exclude = set(getattr(model, "__wire_exclude__", ()))
    result = {}
    for attr in inspect(model).column_attrs:
        if attr.key in exclude:
            continue
        result[wire_name(model, attr.key)] = wire_value(getattr(record, attr.key))
    return result


def ref_summary(record: Any, *fields: str) -> Optional[Dict[str, Any]]:
    """The expanded form of a reference: its id plus a few display fields."""
    if record is None:
        return None
    summary = {"id": str(record.id)}
    for field in fields:
        summary[field] = getattr(record, field)
    return summary


def to_storage_ref(value: Any) -> Optional[uuid.UUID]:
    """Parse a wire reference; empty or malformed values yield None."""
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not value:
        return None
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


def to_storage_refs(
    payload: Dict[str, Any],
    fields: Iterable[str],
) -> Tuple[Dict[str, Any], Dict[str, str]]:
    """
    Convert the reference fields of a payload into storage UUIDs.

    Args:
        payload: Incoming values, keyed by storage attribute name.
        fields: The keys that hold references to other records.

    Returns:
        A converted copy of the payload, and a mapping of the fields whose
        non-empty values were not valid references to their original text.
        Invalid or empty references are set to None in the copy.
    """
    converted = dict(payload)
    rejected: Dict[str, str] = {}
    for field in fields:
        if field not in payload:
            continue
        original = payload[field]
        ref = to_storage_ref(original)
        if ref is None and isinstance(original, str) and original.strip():
            rejected[field] = original.strip()
        converted[field] = ref
    return converted, rejected


def auth_user(account: Dict[str, Any]) -> Dict[str, Any]:
    """The compact account shape sent alongside session tokens."""
    user = {field: account.get(field) for field in AUTH_USER_FIELDS}
    user["userType"] = user["userType"] or "lawyer"
    return user
