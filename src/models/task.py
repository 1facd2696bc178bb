"""
CaseDesk Legal - Task Model
"""

import uuid
from datetime import datetime
from typing import Optional, TYPE_CHECKING
from sqlalchemy import String, DateTime, ForeignKey, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from src.database import Base
from src.timestamps import now_utc

if TYPE_CHECKING:
    from src.models.case import Case
    from src.models.client import Client


class TaskStatus:
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    ALL = (PENDING, IN_PROGRESS, COMPLETED, CANCELLED)


class TaskPriority:
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    ALL = (LOW, MEDIUM, HIGH, URGENT)

    # Sort rank, higher is more pressing
    RANK = {LOW: 0, MEDIUM: 1, HIGH: 2, URGENT: 3}


class Task(Base):
    """A to-do item for the owning lawyer, optionally tied to a case or client."""

    __tablename__ = "tasks"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    status: Mapped[str] = mapped_column(String(20), default=TaskStatus.PENDING)  # pending, in-progress, completed, cancelled
    priority: Mapped[str] = mapped_column(String(20), default=TaskPriority.MEDIUM)  # low, medium, high, urgent
    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True, index=True)
    notes: Mapped[str] = mapped_column(Text, default="")

    # Optional weak references
    case_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True, index=True)
    client_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True, index=True)

    # Owner
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=now_utc)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=now_utc, onupdate=now_utc)

    case: Mapped[Optional["Case"]] = relationship(
        "Case",
        primaryjoin="foreign(Task.case_id) == Case.id",
        viewonly=True,
        lazy="selectin",
    )
    client: Mapped[Optional["Client"]] = relationship(
        "Client",
        primaryjoin="foreign(Task.client_id) == Client.id",
        viewonly=True,
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Task {self.title} ({self.status})>"
