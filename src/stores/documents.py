"""
CaseDesk Legal - Document Store
"""

from typing import Any, Dict

from src.models.case import Case
from src.models.client import Client
from src.models.document import Document
from src.normalize import ref_summary, to_wire
from src.stores.base import OwnedRecordStore

# Case value the dashboard sends for a document with no case
UNASSIGNED = "Unassigned"

DEFAULT_TITLE = "Untitled Document"
DEFAULT_FILE_URL = "placeholder-url"
DEFAULT_FILE_TYPE = "application/pdf"


class DocumentStore(OwnedRecordStore):
    """
    Documents, newest first.

    A case or client value that is not a valid id is kept as a
    "case:<value>" / "client:<value>" tag instead of failing the upload.
    """

    model = Document
    label = "document"
    reference_fields = {"case_id": Case, "client_id": Client}
    required_fields = {
        "title": "Title is required",
        "file_url": "File URL is required",
        "user_id": "Owner is required",
    }

    def prepare(self, values: Dict[str, Any], creating: bool) -> Dict[str, Any]:
        if isinstance(values.get("case_id"), str) and values["case_id"].strip() == UNASSIGNED:
            values["case_id"] = None

        if creating or values.get("tags") is not None:
            values["tags"] = [str(tag) for tag in (values.get("tags") or [])]
        else:
            values.pop("tags", None)

        values = super().prepare(values, creating)

        if creating:
            values["title"] = values.get("title") or DEFAULT_TITLE
            values["file_url"] = values.get("file_url") or DEFAULT_FILE_URL
            values["file_type"] = values.get("file_type") or DEFAULT_FILE_TYPE
            values["file_size"] = values.get("file_size") or 0
            values["description"] = values.get("description") or ""
        return values

    def on_invalid_reference(self, values: Dict[str, Any], field: str, original: str) -> None:
        prefix = "case" if field == "case_id" else "client"
        tag = f"{prefix}:{original}"
        if tag not in values["tags"]:
            values["tags"].append(tag)

    def validate_fields(self, values: Dict[str, Any]) -> Dict[str, str]:
        size = values.get("file_size")
        if size is not None and (not isinstance(size, int) or size < 0):
            return {"file_size": "File size must be a non-negative number of bytes"}
        return {}

    def ordering(self) -> tuple:
        return (Document.created_at.desc(),)

    def serialize(self, record: Document) -> Dict[str, Any]:
        wire = to_wire(record)
        wire["case"] = ref_summary(record.case, "title")
        wire["client"] = ref_summary(record.client, "name")
        return wire
