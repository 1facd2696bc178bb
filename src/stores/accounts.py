"""
CaseDesk Legal - Account Store

Persistence for user accounts. Password hashes stay inside this module:
every account handed to callers is a normalized dict without them.
"""

import logging
from typing import Any, Dict, Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth import (
    hash_password,
    password_fingerprint as fingerprint_password_hash,
    verify_password as check_password_hash,
)
from src.errors import DuplicateKeyError, ValidationError
from src.models.account import Account, UserType
from src.normalize import to_storage_ref, to_wire
from src.timestamps import now_utc

logger = logging.getLogger(__name__)

# Attributes callers may set on create/update, besides email and password
PROFILE_FIELDS = (
    "first_name",
    "last_name",
    "display_name",
    "photo_url",
    "phone",
    "address",
    "website",
    "gender",
    "bar_council_number",
    "practice_type",
    "user_type",
)

# Profile fields that cannot be cleared
NON_NULL_FIELDS = ("first_name", "last_name", "user_type")


def derive_names(email: str, display_name: Optional[str]) -> tuple:
    """
    Split a display name into first/last names.

    Without a display name the first name is the email's local part and the
    last name is empty.
    """
    words = (display_name or "").split()
    if words:
        return words[0], " ".join(words[1:])
    return email.split("@")[0], ""


def coerce_user_type(value: Optional[str]) -> str:
    """Absent role -> lawyer; unknown role -> admin."""
    if not value:
        return UserType.LAWYER
    if value not in UserType.ALL:
        logger.info("Invalid user type %r, defaulting to %r", value, UserType.ADMIN)
        return UserType.ADMIN
    return value


class AccountStore:
    """Identity store: create, look up, update and check passwords."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_account(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create an account with a hashed password.

        Args:
            fields: email, password and optional PROFILE_FIELDS.

        Returns:
            The normalized account.

        Raises:
            ValidationError: email or password missing.
            DuplicateKeyError: the email is already registered.
        """
        email = (fields.get("email") or "").strip().lower()
        password = fields.get("password")
        if not email or not password:
            errors = {}
            if not email:
                errors["email"] = "Email is required"
            if not password:
                errors["password"] = "Password is required"
            raise ValidationError("Email and password are required", errors=errors)

        values = {key: fields[key] for key in PROFILE_FIELDS if fields.get(key) is not None}
        first_name, last_name = derive_names(email, values.get("display_name"))
        values.setdefault("first_name", first_name)
        values.setdefault("last_name", last_name)
        values["user_type"] = coerce_user_type(values.get("user_type"))

        if await self._get_by_email(email) is not None:
            raise DuplicateKeyError(
                "Email already in use",
                details="This email address is already registered",
            )

        now = now_utc()
        account = Account(
            email=email,
            password_hash=hash_password(password),
            created_at=now,
            updated_at=now,
            **values,
        )
        self.db.add(account)
        try:
            await self.db.commit()
        except IntegrityError as exc:
            # Lost the race between the existence check and the insert
            await self.db.rollback()
            raise DuplicateKeyError(
                "Email already in use",
                details="This email address is already registered",
            ) from exc

        logger.info("Created account %s", account.id)
        return to_wire(account)

    async def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return to_wire(await self._get_by_email(email))

    async def find_by_id(self, account_id: Any) -> Optional[Dict[str, Any]]:
        return to_wire(await self._get(account_id))

    async def update_account(self, account_id: Any, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Update profile fields, email or password.

        A new password is hashed before it is stored. Returns the normalized
        account, or None when it does not exist.
        """
        account = await self._get(account_id)
        if account is None:
            return None

        for key in PROFILE_FIELDS:
            if key not in fields:
                continue
            value = fields[key]
            if key in NON_NULL_FIELDS and value is None:
                continue
            if key == "user_type":
                value = coerce_user_type(value)
            setattr(account, key, value)
        if fields.get("email"):
            account.email = fields["email"].strip().lower()
        if fields.get("password"):
            account.password_hash = hash_password(fields["password"])
        account.updated_at = now_utc()

        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            raise DuplicateKeyError("Email already in use") from exc

        return to_wire(account)

    async def verify_password(self, account: Union[Dict[str, Any], str], candidate: str) -> bool:
        """Compare a candidate password with the stored hash. Never raises on mismatch."""
        account_id = account.get("id") if isinstance(account, dict) else account
        stored = await self._get(account_id)
        if stored is None or not candidate:
            return False
        return check_password_hash(candidate, stored.password_hash)

    async def password_fingerprint(self, account_id: Any) -> Optional[str]:
        """Fingerprint of the account's current password hash, or None if unknown."""
        stored = await self._get(account_id)
        if stored is None:
            return None
        return fingerprint_password_hash(stored.password_hash)

    async def record_login(self, account_id: Any) -> None:
        """Stamp the account's last login time."""
        account = await self._get(account_id)
        if account is None:
            return
        account.last_login_at = now_utc()
        await self.db.commit()

    async def _get(self, account_id: Any) -> Optional[Account]:
        ref = to_storage_ref(account_id)
        if ref is None:
            return None
        return await self.db.get(Account, ref)

    async def _get_by_email(self, email: Optional[str]) -> Optional[Account]:
        if not email:
            return None
        result = await self.db.execute(
            select(Account).where(Account.email == email.strip().lower())
        )
        return result.scalar_one_or_none()
