"""
CaseDesk Legal - Account Backends

One interface for the account operations (login, signup, token checks,
profile/password/email changes and password reset), with two
implementations:

- DirectAuthBackend works against the database through AccountStore.
  The /api/auth and /api/users routes always use it, whatever
  AUTH_BACKEND says, since they are the API a remote backend would call.
- RemoteAuthBackend calls a running CaseDesk API over HTTP with httpx,
  for scripts and services that do not share the database.

get_auth_backend() applies AUTH_BACKEND for such out-of-process callers.
"""

import logging
import secrets
from typing import Any, Dict, Optional

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth import (
    create_access_token,
    create_password_reset_token,
    verify_access_token,
    verify_password_reset_token,
)
from src.config import settings
from src.errors import (
    AppError,
    AuthError,
    DatabaseConnectionError,
    DuplicateKeyError,
    ForbiddenError,
    NotFoundError,
    UnclassifiedError,
    ValidationError,
)
from src.normalize import auth_user
from src.stores.accounts import AccountStore

logger = logging.getLogger(__name__)


class AuthBackend:
    """Account operations shared by every backend."""

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """Returns {user, token}."""
        raise NotImplementedError

    async def signup(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Returns {user, token}."""
        raise NotImplementedError

    async def verify_token(self, token: str) -> Dict[str, Any]:
        """Returns {user}."""
        raise NotImplementedError

    async def update_profile(self, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    async def update_password(self, user_id: str, current_password: str, new_password: str) -> None:
        raise NotImplementedError

    async def update_email(self, user_id: str, email: str) -> Dict[str, Any]:
        raise NotImplementedError

    async def send_password_reset(self, email: str) -> Dict[str, Any]:
        raise NotImplementedError

    async def confirm_password_reset(self, token: str, new_password: str) -> Dict[str, Any]:
        raise NotImplementedError


# =============================================================================
# DIRECT (DATABASE) BACKEND
# =============================================================================

class DirectAuthBackend(AuthBackend):
    """Account operations on the local database."""

    def __init__(self, db: AsyncSession):
        self.accounts = AccountStore(db)

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        account = await self.accounts.find_by_email(email)
        if account is None or not await self.accounts.verify_password(account, password):
            logger.info("Failed login attempt")
            raise AuthError("Invalid email or password")

        await self.accounts.record_login(account["id"])
        return {"user": auth_user(account), "token": create_access_token(account)}

    async def signup(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        account = await self.accounts.create_account(fields)
        return {"user": auth_user(account), "token": create_access_token(account)}

    async def verify_token(self, token: str) -> Dict[str, Any]:
        data = verify_access_token(token)
        if not data:
            raise AuthError("Invalid or expired token")

        account = await self.accounts.find_by_id(data["id"])
        if account is None:
            raise NotFoundError("User not found")
        return {"user": auth_user(account)}

    async def update_profile(self, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        account = await self.accounts.update_account(user_id, fields)
        if account is None:
            raise NotFoundError("User not found")
        return account

    async def update_password(self, user_id: str, current_password: str, new_password: str) -> None:
        if not current_password or not new_password:
            raise ValidationError("Current password and new password are required")

        account = await self.accounts.find_by_id(user_id)
        if account is None:
            raise NotFoundError("User not found")
        if not await self.accounts.verify_password(account, current_password):
            raise AuthError("Current password is incorrect")

        await self.accounts.update_account(user_id, {"password": new_password})
        logger.info("Password changed for account %s", user_id)

    async def update_email(self, user_id: str, email: str) -> Dict[str, Any]:
        email = (email or "").strip().lower()
        if not email:
            raise ValidationError("Email is required")

        existing = await self.accounts.find_by_email(email)
        if existing is not None and existing["id"] != user_id:
            raise ValidationError("Email already in use")

        try:
            account = await self.accounts.update_account(user_id, {"email": email})
        except DuplicateKeyError as exc:
            # Lost a race with another account taking the same address
            raise ValidationError("Email already in use") from exc
        if account is None:
            raise NotFoundError("User not found")
        return auth_user(account)

    async def send_password_reset(self, email: str) -> Dict[str, Any]:
        account = await self.accounts.find_by_email(email) if email else None
        if account is not None:
            # TODO: deliver the token by email once a mail transport is configured
            await self.issue_password_reset_token(account)
            logger.info("Password reset requested for %s", account["id"])

        return {
            "success": True,
            "message": "If an account exists for this email, a reset link has been sent",
        }

    async def confirm_password_reset(self, token: str, new_password: str) -> Dict[str, Any]:
        if not token or not new_password:
            raise ValidationError("Token and new password are required")

        data = verify_password_reset_token(token)
        if not data:
            raise AuthError("Invalid or expired token")

        account = await self.accounts.find_by_id(data.get("id"))
        # A reset link stops working once the account's email or password changes
        if account is None or account["email"] != data.get("email"):
            raise AuthError("Invalid or expired token")
        fingerprint = await self.accounts.password_fingerprint(account["id"])
        if not fingerprint or not secrets.compare_digest(fingerprint, str(data.get("pwd") or "")):
            raise AuthError("Invalid or expired token")

        await self.accounts.update_account(account["id"], {"password": new_password})
        logger.info("Password reset completed for account %s", account["id"])
        return {"success": True}

    async def issue_password_reset_token(self, account: Dict[str, Any]) -> str:
        """Reset token bound to the account's current email and password."""
        fingerprint = await self.accounts.password_fingerprint(account["id"])
        return create_password_reset_token(account, fingerprint)


# =============================================================================
# REMOTE (HTTP) BACKEND
# =============================================================================

# HTTP status -> error raised for it
STATUS_ERRORS = {
    400: ValidationError,
    401: AuthError,
    403: ForbiddenError,
    404: NotFoundError,
    409: DuplicateKeyError,
    503: DatabaseConnectionError,
}

DEFAULT_TIMEOUT = httpx.Timeout(10.0)


class RemoteAuthBackend(AuthBackend):
    """
    Account operations against a CaseDesk API over HTTP.

    Args:
        api_url: Base URL of the API, with or without a trailing /api.
        token: Bearer token for the profile/password/email calls. login()
            and signup() store the token they receive.
        client: Optional preconfigured httpx.AsyncClient (e.g. one with an
            ASGI transport in tests).
    """

    def __init__(
        self,
        api_url: str,
        token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_url = api_url
        self.token = token
        self._client = client

    def _endpoint(self, path: str) -> str:
        base = self.api_url.rstrip("/")
        if base.endswith("/api"):
            base = base[: -len("/api")]
        return f"{base}/api/{path.lstrip('/')}"

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        url = self._endpoint(path)
        try:
            if self._client is not None:
                response = await self._client.request(method, url, json=payload, headers=self._headers())
            else:
                async with httpx.AsyncClient(timeout=DEFAULT_TIMEOUT) as client:
                    response = await client.request(method, url, json=payload, headers=self._headers())
        except httpx.HTTPError as exc:
            logger.error("Account service request %s %s failed: %s", method, url, exc)
            raise UnclassifiedError("Account service unavailable", details=str(exc)) from exc

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.status_code >= 400:
            raise self._error_for(response.status_code, data)
        return data

    @staticmethod
    def _error_for(status_code: int, data: Any) -> AppError:
        message = "Account service request failed"
        details = None
        if isinstance(data, dict):
            message = data.get("message") or message
            details = data.get("details")
        error_class = STATUS_ERRORS.get(status_code, UnclassifiedError)
        return error_class(message, details=details)

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        data = await self._request("POST", "/auth/login", {"email": email, "password": password})
        self.token = data.get("token")
        return data

    async def signup(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        data = await self._request("POST", "/auth/register", fields)
        self.token = data.get("token")
        return data

    async def verify_token(self, token: str) -> Dict[str, Any]:
        return await self._request("POST", "/auth/verify", {"token": token})

    async def update_profile(self, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("PUT", f"/users/{user_id}/profile", fields)

    async def update_password(self, user_id: str, current_password: str, new_password: str) -> None:
        await self._request(
            "POST",
            f"/users/{user_id}/change-password",
            {"currentPassword": current_password, "newPassword": new_password},
        )

    async def update_email(self, user_id: str, email: str) -> Dict[str, Any]:
        return await self._request("POST", f"/users/{user_id}/change-email", {"email": email})

    async def send_password_reset(self, email: str) -> Dict[str, Any]:
        return await self._request("POST", "/auth/reset-password", {"email": email})

    async def confirm_password_reset(self, token: str, new_password: str) -> Dict[str, Any]:
        return await self._request(
            "POST",
            "/auth/reset-password/confirm",
            {"token": token, "newPassword": new_password},
        )


def get_auth_backend(db: Optional[AsyncSession] = None, token: Optional[str] = None) -> AuthBackend:
    """Build the backend selected by AUTH_BACKEND."""
    if settings.AUTH_BACKEND == "remote":
        return RemoteAuthBackend(settings.API_URL, token=token)
    if db is None:
        raise ValueError("The direct account backend needs a database session")
    return DirectAuthBackend(db)
