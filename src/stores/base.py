"""
CaseDesk Legal - Owner-Scoped Record Store

Shared add/list/update/delete logic for cases, clients, documents and tasks.
Stores work on an injected AsyncSession and never check ownership on
update/delete; routes do that with the token identity first.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import inspect, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.errors import NotFoundError, ValidationError
from src.normalize import to_storage_ref, to_storage_refs, to_wire
from src.timestamps import now_utc

logger = logging.getLogger(__name__)

# Columns a caller may never set through update()
PROTECTED_FIELDS = ("id", "user_id", "created_at", "updated_at")


class OwnedRecordStore:
    """Base store for records owned by one account via user_id."""

    model: type = None
    label = "record"

    # Storage attribute -> model of the record it references
    reference_fields: Dict[str, type] = {}

    # Required attribute -> message used when it is missing
    required_fields: Dict[str, str] = {}

    def __init__(self, db: AsyncSession):
        self.db = db

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def add(self, payload: Dict[str, Any]) -> str:
        """
        Validate and insert a new record.

        Args:
            payload: Values keyed by storage attribute name, including user_id.

        Returns:
            The new record's id as a string.
        """
        values = self._columns_only(payload)
        values["user_id"] = to_storage_ref(values.get("user_id"))
        values = self.prepare(values, creating=True)
        await self.drop_foreign_references(values, values["user_id"], creating=True)

        now = now_utc()
        values["created_at"] = now
        values["updated_at"] = now

        self.validate(values)

        record = self.model(**values)
        self.db.add(record)
        await self.db.commit()

        logger.info("Created %s %s", self.label, record.id)
        return str(record.id)

    async def get(self, record_id: Any) -> Optional[Any]:
        """The stored record, or None when the id is unknown or malformed."""
        ref = to_storage_ref(record_id)
        if ref is None:
            return None
        result = await self.db.execute(
            select(self.model)
            .where(self.model.id == ref)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_owned(self, record_id: Any, owner_id: str) -> Any:
        """The record if it exists and belongs to owner_id, else NotFoundError."""
        record = await self.get(record_id)
        if record is None or str(record.user_id) != owner_id:
            raise NotFoundError(f"{self.label.capitalize()} not found")
        return record

    async def list_for_owner(self, owner_id: Any) -> List[Dict[str, Any]]:
        """All records of one owner, sorted by the store's ordering."""
        owner = to_storage_ref(owner_id)
        if owner is None:
            return []
        result = await self.db.execute(
            select(self.model)
            .where(self.model.user_id == owner)
            .order_by(*self.ordering())
            .execution_options(populate_existing=True)
        )
        return [self.serialize(record) for record in result.scalars().all()]

    async def update(self, record_id: Any, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Apply a partial update and refresh updated_at."""
        record = await self.get(record_id)
        if record is None:
            raise NotFoundError(f"{self.label.capitalize()} not found")

        values = self._columns_only(fields)
        for field in PROTECTED_FIELDS:
            values.pop(field, None)
        values = self.prepare(values, creating=False)
        await self.drop_foreign_references(values, record.user_id, creating=False)
        self.validate(values, partial=True)

        for key, value in values.items():
            setattr(record, key, value)
        record.updated_at = now_utc()
        await self.db.commit()

        record = await self.get(record.id)
        return self.serialize(record)

    async def delete(self, record_id: Any) -> None:
        """Hard delete. Records referencing this one are left untouched."""
        record = await self.get(record_id)
        if record is None:
            raise NotFoundError(f"{self.label.capitalize()} not found")

        await self.db.delete(record)
        await self.db.commit()
        logger.info("Deleted %s %s", self.label, record_id)

    # -------------------------------------------------------------------------
    # Hooks
    # -------------------------------------------------------------------------

    def prepare(self, values: Dict[str, Any], creating: bool) -> Dict[str, Any]:
        """Coerce incoming values into storage form."""
        converted, rejected = to_storage_refs(values, self.reference_fields)
        for field, original in rejected.items():
            logger.warning("Dropping invalid %s reference %r on %s", field, original, self.label)
            if creating:
                self.on_invalid_reference(converted, field, original)
            else:
                # Leave the stored reference alone rather than clearing it
                converted.pop(field, None)
        return converted

    async def drop_foreign_references(self, values: Dict[str, Any], owner: Any, creating: bool) -> None:
        """
        Drop references to records owned by another account.

        Unknown ids are kept as dangling references; only a record that
        exists under a different owner is refused. On create the reference
        becomes None, on update the stored one is left unchanged.
        """
        if owner is None:
            return
        for field, target in self.reference_fields.items():
            ref = values.get(field)
            if ref is None:
                continue
            target_owner = await self.db.scalar(select(target.user_id).where(target.id == ref))
            if target_owner is None or target_owner == owner:
                continue
            logger.warning("Dropping %s reference to another account's record on %s", field, self.label)
            if creating:
                values[field] = None
            else:
                values.pop(field)

    def on_invalid_reference(self, values: Dict[str, Any], field: str, original: str) -> None:
        """Called for each reference that was not a valid id during add()."""

    def validate(self, values: Dict[str, Any], partial: bool = False) -> None:
        """Raise ValidationError with field-level messages on violation."""
        errors: Dict[str, str] = {}
        for field, message in self.required_fields.items():
            if partial and field not in values:
                continue
            value = values.get(field)
            if value is None or (isinstance(value, str) and not value.strip()):
                errors[field] = message
        errors.update(self.validate_fields(values))

        if errors:
            raise ValidationError(f"{self.label.capitalize()} validation failed", errors=errors)

    def validate_fields(self, values: Dict[str, Any]) -> Dict[str, str]:
        """Store-specific checks beyond required fields."""
        return {}

    def ordering(self) -> tuple:
        return (self.model.created_at.desc(),)

    def serialize(self, record: Any) -> Dict[str, Any]:
        return to_wire(record)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _columns_only(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        columns = {attr.key for attr in inspect(self.model).column_attrs}
        return {key: value for key, value in payload.items() if key in columns and key != "id"}
