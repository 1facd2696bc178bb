"""
CaseDesk Legal - Client Store
"""

from src.models.client import Client
from src.stores.base import OwnedRecordStore


class ClientStore(OwnedRecordStore):
    """Clients in alphabetical order."""

    model = Client
    label = "client"
    required_fields = {
        "name": "Name is required",
        "user_id": "Owner is required",
    }

    def ordering(self) -> tuple:
        return (Client.name.asc(),)
