"""
CaseDesk Legal - Client Routes
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth import TokenIdentity, require_identity
from src.database import get_db
from src.errors import unclassified
from src.schemas import ClientFields
from src.stores.clients import ClientStore


router = APIRouter(prefix="/api/clients", tags=["clients"])


@router.get("")
async def list_clients(
    identity: TokenIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    """The caller's clients, sorted by name."""
    with unclassified("Failed to fetch clients"):
        return await ClientStore(db).list_for_owner(identity.id)


@router.post("", status_code=201)
async def create_client(
    body: ClientFields,
    identity: TokenIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    payload = body.to_payload()
    payload["user_id"] = identity.id
    with unclassified("Failed to create client"):
        client_id = await ClientStore(db).add(payload)
    return {"id": client_id}


@router.put("/{client_id}")
async def update_client(
    client_id: str,
    body: ClientFields,
    identity: TokenIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    store = ClientStore(db)
    with unclassified("Failed to update client"):
        await store.get_owned(client_id, identity.id)
        await store.update(client_id, body.to_payload())
    return {"success": True}


@router.delete("/{client_id}")
async def delete_client(
    client_id: str,
    identity: TokenIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    """Delete a client. Cases, documents and tasks that reference it are kept."""
    store = ClientStore(db)
    with unclassified("Failed to delete client"):
        await store.get_owned(client_id, identity.id)
        await store.delete(client_id)
    return {"success": True}
