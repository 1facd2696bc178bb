"""
CaseDesk Legal - Case Store
"""

from typing import Any, Dict

from src.models.case import Case, CaseStatus
from src.models.client import Client
from src.normalize import ref_summary, to_wire
from src.stores.base import OwnedRecordStore


class CaseStore(OwnedRecordStore):
    """Cases, newest first, each expanded with its client's name and email."""

    model = Case
    label = "case"
    reference_fields = {"client_id": Client}
    required_fields = {
        "title": "Title is required",
        "client_id": "A valid client reference is required",
        "user_id": "Owner is required",
    }

    def prepare(self, values: Dict[str, Any], creating: bool) -> Dict[str, Any]:
        values = super().prepare(values, creating)
        status = values.get("status")
        if isinstance(status, str):
            values["status"] = status.strip().lower()
        else:
            values.pop("status", None)
        return values

    def validate_fields(self, values: Dict[str, Any]) -> Dict[str, str]:
        status = values.get("status")
        if status is not None and status not in CaseStatus.ALL:
            return {"status": f"'{status}' is not a valid case status"}
        return {}

    def ordering(self) -> tuple:
        return (Case.created_at.desc(),)

    def serialize(self, record: Case) -> Dict[str, Any]:
        wire = to_wire(record)
        wire["client"] = ref_summary(record.client, "name", "email")
        return wire
