"""
CaseDesk Legal - Case Routes
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth import TokenIdentity, require_identity
from src.database import get_db
from src.errors import ValidationError, unclassified
from src.schemas import CaseFields
from src.stores.cases import CaseStore


router = APIRouter(prefix="/api/cases", tags=["cases"])


@router.get("")
async def list_cases(
    identity: TokenIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    """The caller's cases, newest first."""
    with unclassified("Failed to fetch cases"):
        return await CaseStore(db).list_for_owner(identity.id)


@router.post("", status_code=201)
async def create_case(
    body: CaseFields,
    identity: TokenIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    if not body.client_id:
        raise ValidationError("Client is required")

    payload = body.to_payload()
    payload["user_id"] = identity.id
    with unclassified("Failed to create case"):
        case_id = await CaseStore(db).add(payload)
    return {"id": case_id}


@router.put("/{case_id}")
async def update_case(
    case_id: str,
    body: CaseFields,
    identity: TokenIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    store = CaseStore(db)
    with unclassified("Failed to update case"):
        await store.get_owned(case_id, identity.id)
        await store.update(case_id, body.to_payload())
    return {"success": True}


@router.delete("/{case_id}")
async def delete_case(
    case_id: str,
    identity: TokenIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    store = CaseStore(db)
    with unclassified("Failed to delete case"):
        await store.get_owned(case_id, identity.id)
        await store.delete(case_id)
    return {"success": True}
