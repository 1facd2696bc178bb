"""
CaseDesk Legal - Case Model
"""

import uuid
from datetime import datetime
from typing import Optional, TYPE_CHECKING
from sqlalchemy import String, DateTime, ForeignKey, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from src.database import Base
from src.timestamps import now_utc

if TYPE_CHECKING:
    from src.models.client import Client


class CaseStatus:
    """Lifecycle states of a case."""

    ACTIVE = "active"
    PENDING = "pending"
    CLOSED = "closed"
    WON = "won"
    LOST = "lost"

    ALL = (ACTIVE, PENDING, CLOSED, WON, LOST)


class Case(Base):
    """A legal matter handled for one client."""

    __tablename__ = "cases"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    case_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    court: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default=CaseStatus.ACTIVE)  # active, pending, closed, won, lost
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Weak reference: deleting the client leaves this id dangling
    client_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    # Owner
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)

    # Court dates
    filing_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    hearing_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=now_utc, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=now_utc, onupdate=now_utc)

    client: Mapped[Optional["Client"]] = relationship(
        "Client",
        primaryjoin="foreign(Case.client_id) == Client.id",
        viewonly=True,
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Case {self.title}>"
