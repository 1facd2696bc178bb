"""
CaseDesk Legal - Authentication Routes
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth import TokenIdentity, require_identity
from src.auth_backends import DirectAuthBackend
from src.database import get_db
from src.errors import NotFoundError, ValidationError, unclassified
from src.schemas import (
    LoginRequest,
    ProfileFields,
    RegisterRequest,
    ResetPasswordConfirm,
    ResetPasswordRequest,
    VerifyRequest,
)
from src.stores.accounts import AccountStore


router = APIRouter(prefix="/api/auth", tags=["auth"])


def direct_backend(db: AsyncSession = Depends(get_db)) -> DirectAuthBackend:
    """The routes serve accounts from this database regardless of AUTH_BACKEND."""
    return DirectAuthBackend(db)


# =============================================================================
# REGISTER / LOGIN / VERIFY
# =============================================================================

@router.post("/register", status_code=201)
async def register(
    body: RegisterRequest,
    backend: DirectAuthBackend = Depends(direct_backend),
):
    """Create an account and log it in."""
    if not body.email or not body.password:
        raise ValidationError("Email and password are required")
    if not body.first_name or not body.last_name:
        raise ValidationError("First name and last name are required")

    with unclassified("Failed to register user"):
        return await backend.signup(body.to_payload())


@router.post("/login")
async def login(
    body: LoginRequest,
    backend: DirectAuthBackend = Depends(direct_backend),
):
    """Exchange email and password for a session token."""
    if not body.email or not body.password:
        raise ValidationError("Email and password are required")

    with unclassified("Failed to log in"):
        return await backend.login(body.email, body.password)


@router.post("/verify")
async def verify(
    body: VerifyRequest,
    backend: DirectAuthBackend = Depends(direct_backend),
):
    """Check a session token and return the account it belongs to."""
    if not body.token:
        raise ValidationError("Token is required")

    with unclassified("Failed to verify token"):
        return await backend.verify_token(body.token)


# =============================================================================
# PROFILE
# =============================================================================

@router.get("/profile")
async def get_profile(
    identity: TokenIdentity = Depends(require_identity),
    db: AsyncSession = Depends(get_db),
):
    with unclassified("Failed to load profile"):
        account = await AccountStore(db).find_by_id(identity.id)
    if account is None:
        raise NotFoundError("User not found")
    return account


@router.put("/profile")
async def update_profile(
    body: ProfileFields,
    identity: TokenIdentity = Depends(require_identity),
    backend: DirectAuthBackend = Depends(direct_backend),
):
    with unclassified("Failed to update profile"):
        return await backend.update_profile(identity.id, body.to_payload())


# =============================================================================
# PASSWORD RESET
# =============================================================================

@router.post("/reset-password")
async def reset_password(
    body: ResetPasswordRequest,
    backend: DirectAuthBackend = Depends(direct_backend),
):
    """
    Start a password reset.

    Always answers with success so the response does not reveal whether
    an account exists for the email.
    """
    with unclassified("Failed to send password reset email"):
        return await backend.send_password_reset(body.email)


@router.post("/reset-password/confirm")
async def confirm_reset_password(
    body: ResetPasswordConfirm,
    backend: DirectAuthBackend = Depends(direct_backend),
):
    """Set a new password using a reset token."""
    with unclassified("Failed to reset password"):
        return await backend.confirm_password_reset(body.token, body.new_password)
