"""
CaseDesk Legal - Request Schemas

Typed request bodies for every endpoint. Wire names are camelCase; the
attribute names match the storage columns, so to_payload() hands stores
a sanitized dict of only the fields the caller actually sent.

Required fields are Optional here on purpose: handlers check them and
answer with the exact 400 message each endpoint documents.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.timestamps import to_naive_utc


class WireModel(BaseModel):
    """Base for request bodies: camelCase aliases, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_payload(self) -> Dict[str, Any]:
        """Fields the client sent, keyed by storage name, datetimes as naive UTC."""
        payload = self.model_dump(exclude_unset=True)
        for key, value in payload.items():
            if isinstance(value, datetime):
                payload[key] = to_naive_utc(value)
        return payload


# =============================================================================
# ACCOUNTS
# =============================================================================

class ProfileFields(WireModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    display_name: Optional[str] = None
    photo_url: Optional[str] = Field(None, alias="photoURL")
    phone: Optional[str] = None
    address: Optional[str] = None
    website: Optional[str] = None
    gender: Optional[str] = None
    bar_council_number: Optional[str] = None
    practice_type: Optional[str] = None


class RegisterRequest(ProfileFields):
    email: Optional[str] = None
    password: Optional[str] = None
    user_type: Optional[str] = None


class LoginRequest(WireModel):
    email: Optional[str] = None
    password: Optional[str] = None


class VerifyRequest(WireModel):
    token: Optional[str] = None


class ChangePasswordRequest(WireModel):
    current_password: Optional[str] = None
    new_password: Optional[str] = None


class ChangeEmailRequest(WireModel):
    email: Optional[str] = None


class ResetPasswordRequest(WireModel):
    email: Optional[str] = None


class ResetPasswordConfirm(WireModel):
    token: Optional[str] = None
    new_password: Optional[str] = None


# =============================================================================
# PRACTICE RECORDS
# =============================================================================

class CaseFields(WireModel):
    title: Optional[str] = None
    description: Optional[str] = None
    case_number: Optional[str] = None
    court: Optional[str] = None
    status: Optional[str] = None
    client_id: Optional[str] = Field(None, validation_alias=AliasChoices("client", "clientId", "client_id"))
    filing_date: Optional[datetime] = None
    hearing_date: Optional[datetime] = None
    notes: Optional[str] = None


class ClientFields(WireModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    company: Optional[str] = None
    notes: Optional[str] = None


class DocumentFields(WireModel):
    """Document body; the upload dialog's name/url/type/size spellings are accepted too."""

    title: Optional[str] = Field(None, validation_alias=AliasChoices("title", "name"))
    description: Optional[str] = None
    file_url: Optional[str] = Field(None, validation_alias=AliasChoices("fileUrl", "url", "file_url"))
    file_type: Optional[str] = Field(None, validation_alias=AliasChoices("fileType", "type", "file_type"))
    file_size: Optional[int] = Field(None, validation_alias=AliasChoices("fileSize", "size", "file_size"))
    case_id: Optional[str] = Field(None, validation_alias=AliasChoices("caseId", "case", "case_id"))
    client_id: Optional[str] = Field(None, validation_alias=AliasChoices("clientId", "client", "client_id"))
    tags: Optional[List[str]] = None


class TaskFields(WireModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[datetime] = None
    notes: Optional[str] = None
    case_id: Optional[str] = Field(None, validation_alias=AliasChoices("caseId", "case", "case_id"))
    client_id: Optional[str] = Field(None, validation_alias=AliasChoices("clientId", "client", "client_id"))
