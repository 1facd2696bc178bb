"""
CaseDesk Legal - Document Model
"""

import uuid
from datetime import datetime
from typing import Optional, TYPE_CHECKING
from sqlalchemy import String, DateTime, ForeignKey, Integer, Text, Uuid, JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship
from src.database import Base
from src.timestamps import now_utc

if TYPE_CHECKING:
    from src.models.case import Case
    from src.models.client import Client


class Document(Base):
    """A file stored against a lawyer's practice, optionally tied to a case or client."""

    __tablename__ = "documents"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # File details
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    file_url: Mapped[str] = mapped_column(Text, nullable=False)
    file_type: Mapped[str] = mapped_column(String(100), default="application/pdf")
    file_size: Mapped[int] = mapped_column(Integer, default=0)  # bytes

    # Owner
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)

    # Optional weak references
    case_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True, index=True)
    client_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True, index=True)

    # Free-text labels, e.g. "case:Smith v Jones" when the case was not an id
    tags: Mapped[list] = mapped_column(JSON, default=list)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=now_utc, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=now_utc, onupdate=now_utc)

    case: Mapped[Optional["Case"]] = relationship(
        "Case",
        primaryjoin="foreign(Document.case_id) == Case.id",
        viewonly=True,
        lazy="selectin",
    )
    client: Mapped[Optional["Client"]] = relationship(
        "Client",
        primaryjoin="foreign(Document.client_id) == Client.id",
        viewonly=True,
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Document {self.id}: {self.title}>"
