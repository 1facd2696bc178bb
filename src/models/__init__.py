# CaseDesk Legal - Models Package

from src.models.account import Account, UserType
from src.models.client import Client
from src.models.case import Case, CaseStatus
from src.models.document import Document
from src.models.task import Task, TaskStatus, TaskPriority

__all__ = [
    "Account",
    "UserType",
    "Client",
    "Case",
    "CaseStatus",
    "Document",
    "Task",
    "TaskStatus",
    "TaskPriority",
]
