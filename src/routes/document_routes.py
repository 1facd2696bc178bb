"""
CaseDesk Legal - Document Routes

Documents are metadata records; the file itself lives wherever fileUrl
points.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth import TokenIdentity, require_identity
from src.database import get_db
from src.errors import unclassified
from src.schemas import DocumentFields
from src.stores.documents import DocumentStore


router = APIRouter(prefix="/api/documents", tags=["documents"])


@router.get("")
async def list_documents(
    identity: TokenIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    with unclassified("Failed to fetch documents"):
        return await DocumentStore(db).list_for_owner(identity.id)


@router.post("", status_code=201)
async def create_document(
    body: DocumentFields,
    identity: TokenIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    """Create a document record; missing metadata gets placeholder defaults."""
    payload = body.to_payload()
    payload["user_id"] = identity.id
    with unclassified("Failed to create document"):
        document_id = await DocumentStore(db).add(payload)
    return {"id": document_id}


@router.put("/{document_id}")
async def update_document(
    document_id: str,
    body: DocumentFields,
    identity: TokenIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    store = DocumentStore(db)
    with unclassified("Failed to update document"):
        await store.get_owned(document_id, identity.id)
        await store.update(document_id, body.to_payload())
    return {"success": True}


@router.delete("/{document_id}")
async def delete_document(
    document_id: str,
    identity: TokenIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    store = DocumentStore(db)
    with unclassified("Failed to delete document"):
        await store.get_owned(document_id, identity.id)
        await store.delete(document_id)
    return {"success": True}
