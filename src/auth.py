"""
CaseDesk Legal - Authentication Logic

Password hashing, signed session tokens and the bearer-token dependency.
"""

from typing import Optional
import hashlib
import logging
import secrets
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel, ConfigDict, Field

from src.config import settings
from src.errors import AuthError, ForbiddenError

logger = logging.getLogger(__name__)

# Token serializers; distinct salts keep reset tokens from working as sessions
serializer = URLSafeTimedSerializer(settings.SECRET_KEY, salt="casedesk-session")
reset_serializer = URLSafeTimedSerializer(settings.SECRET_KEY, salt="casedesk-password-reset")

bearer_scheme = HTTPBearer(auto_error=False)


# =============================================================================
# PASSWORD UTILITIES
# =============================================================================

def hash_password(password: str) -> str:
    """Hash a password using PBKDF2-SHA256."""
    salt = secrets.token_hex(16)
    pwd_hash = hashlib.pbkdf2_hmac(
        'sha256',
        password.encode('utf-8'),
        salt.encode('utf-8'),
        100000  # iterations
    ).hex()
    return f"{salt}${pwd_hash}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    try:
        salt, stored_hash = hashed_password.split('$')
        pwd_hash = hashlib.pbkdf2_hmac(
            'sha256',
            plain_password.encode('utf-8'),
            salt.encode('utf-8'),
            100000
        ).hex()
        return secrets.compare_digest(pwd_hash, stored_hash)
    except (ValueError, AttributeError):
        return False


# =============================================================================
# SESSION TOKENS
# =============================================================================

class TokenIdentity(BaseModel):
    """The identity carried inside a session token."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    email: str
    user_type: str = Field("lawyer", alias="userType")


def create_access_token(account: dict) -> str:
    """Create a signed session token for a normalized account."""
    return serializer.dumps({
        "id": account["id"],
        "email": account["email"],
        "userType": account.get("userType") or "lawyer",
    })


def verify_access_token(token: str, max_age: int = None) -> Optional[dict]:
    """
    Verify and decode a session token.

    Args:
        token: The session token to verify
        max_age: Maximum age in seconds (defaults to ACCESS_TOKEN_EXPIRE_MINUTES)

    Returns:
        The decoded payload if valid, None if invalid/expired
    """
    if max_age is None:
        max_age = settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60

    try:
        data = serializer.loads(token, max_age=max_age)
    except (BadSignature, SignatureExpired):
        return None
    if not isinstance(data, dict) or not data.get("id"):
        return None
    return data


def password_fingerprint(password_hash: str) -> str:
    """Short digest of a stored password hash, embedded in reset tokens."""
    return hashlib.sha256(password_hash.encode()).hexdigest()[:16]


def create_password_reset_token(account: dict, fingerprint: str) -> str:
    """
    Create a short-lived token that authorizes one password reset.

    The token carries the fingerprint of the password hash it was issued
    against, so it stops working as soon as the password changes.
    """
    return reset_serializer.dumps({"id": account["id"], "email": account["email"], "pwd": fingerprint})


def verify_password_reset_token(token: str, max_age: int = None) -> Optional[dict]:
    """Decode a password reset token, or None if invalid/expired."""
    if max_age is None:
        max_age = settings.PASSWORD_RESET_EXPIRE_MINUTES * 60

    try:
        return reset_serializer.loads(token, max_age=max_age)
    except (BadSignature, SignatureExpired):
        return None


# =============================================================================
# REQUEST AUTHENTICATION
# =============================================================================

async def require_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> TokenIdentity:
    """
    Require a valid bearer token.

    Missing token -> 401, invalid or expired token -> 403.
    """
    if credentials is None or not credentials.credentials:
        raise AuthError("Authentication required")

    data = verify_access_token(credentials.credentials)
    if not data:
        logger.warning("Rejected invalid or expired bearer token")
        raise ForbiddenError("Invalid or expired token")

    return TokenIdentity(**data)


def require_self(identity: TokenIdentity, user_id: str, action: str) -> None:
    """Allow an account to act only on itself."""
    if identity.id != user_id:
        raise ForbiddenError(f"You can only {action}")
