"""
CaseDesk Legal - Task Store
"""

from typing import Any, Dict

from sqlalchemy import case

from src.models.case import Case
from src.models.client import Client
from src.models.task import Task, TaskPriority, TaskStatus
from src.normalize import ref_summary, to_wire
from src.stores.base import OwnedRecordStore

# Accepted spellings of each status, after lower-casing
STATUS_ALIASES = {
    "pending": TaskStatus.PENDING,
    "in progress": TaskStatus.IN_PROGRESS,
    "in-progress": TaskStatus.IN_PROGRESS,
    "in_progress": TaskStatus.IN_PROGRESS,
    "completed": TaskStatus.COMPLETED,
    "cancelled": TaskStatus.CANCELLED,
    "canceled": TaskStatus.CANCELLED,
}


def normalize_status(value: Any) -> str:
    """Map free-form status text onto TaskStatus; unknown values become pending."""
    if not isinstance(value, str):
        return TaskStatus.PENDING
    return STATUS_ALIASES.get(" ".join(value.lower().split()), TaskStatus.PENDING)


def normalize_priority(value: Any) -> str:
    """Map free-form priority text onto TaskPriority; unknown values become medium."""
    if not isinstance(value, str):
        return TaskPriority.MEDIUM
    value = value.strip().lower()
    return value if value in TaskPriority.ALL else TaskPriority.MEDIUM


class TaskStore(OwnedRecordStore):
    """Tasks by due date (undated last), most pressing first within a date."""

    model = Task
    label = "task"
    reference_fields = {"case_id": Case, "client_id": Client}
    required_fields = {
        "title": "Title is required",
        "user_id": "Owner is required",
    }

    def prepare(self, values: Dict[str, Any], creating: bool) -> Dict[str, Any]:
        values = super().prepare(values, creating)

        if creating or "status" in values:
            values["status"] = normalize_status(values.get("status"))
        if creating or "priority" in values:
            values["priority"] = normalize_priority(values.get("priority"))

        if creating:
            values["description"] = values.get("description") or ""
            values["notes"] = values.get("notes") or values["description"]
        return values

    def ordering(self) -> tuple:
        priority_rank = case(TaskPriority.RANK, value=Task.priority, else_=-1)
        return (
            Task.due_date.is_(None),
            Task.due_date.asc(),
            priority_rank.desc(),
            Task.created_at.asc(),
        )

    def serialize(self, record: Task) -> Dict[str, Any]:
        wire = to_wire(record)
        wire["case"] = ref_summary(record.case, "title")
        wire["client"] = ref_summary(record.client, "name")
        return wire
