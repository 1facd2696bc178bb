"""
CaseDesk Legal - Account Self-Service Routes

Every route here acts on /api/users/{user_id} and only lets an account
act on itself.
"""

from fastapi import APIRouter, Depends

from src.auth import TokenIdentity, require_identity, require_self
from src.auth_backends import DirectAuthBackend
from src.errors import unclassified
from src.normalize import auth_user
from src.routes.auth_routes import direct_backend
from src.schemas import ChangeEmailRequest, ChangePasswordRequest, ProfileFields


router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("/{user_id}/change-password")
async def change_password(
    user_id: str,
    body: ChangePasswordRequest,
    identity: TokenIdentity = Depends(require_identity),
    backend: DirectAuthBackend = Depends(direct_backend),
):
    require_self(identity, user_id, "change your own password")

    with unclassified("Failed to change password"):
        await backend.update_password(user_id, body.current_password, body.new_password)
    return {"success": True, "message": "Password updated successfully"}


@router.post("/{user_id}/change-email")
async def change_email(
    user_id: str,
    body: ChangeEmailRequest,
    identity: TokenIdentity = Depends(require_identity),
    backend: DirectAuthBackend = Depends(direct_backend),
):
    require_self(identity, user_id, "change your own email")

    with unclassified("Failed to change email"):
        return await backend.update_email(user_id, body.email)


@router.put("/{user_id}/profile")
async def update_user_profile(
    user_id: str,
    body: ProfileFields,
    identity: TokenIdentity = Depends(require_identity),
    backend: DirectAuthBackend = Depends(direct_backend),
):
    require_self(identity, user_id, "update your own profile")

    with unclassified("Failed to update profile"):
        account = await backend.update_profile(user_id, body.to_payload())
    return auth_user(account)
