# CaseDesk Legal - Stores Package

from src.stores.accounts import AccountStore
from src.stores.base import OwnedRecordStore
from src.stores.cases import CaseStore
from src.stores.clients import ClientStore
from src.stores.documents import DocumentStore
from src.stores.tasks import TaskStore

__all__ = [
    "AccountStore",
    "OwnedRecordStore",
    "CaseStore",
    "ClientStore",
    "DocumentStore",
    "TaskStore",
]
