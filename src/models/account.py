"""
CaseDesk Legal - Account Model
"""

import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy import String, DateTime, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from src.database import Base
from src.timestamps import now_utc


class UserType:
    """Account roles."""

    LAWYER = "lawyer"
    CLIENT = "client"
    ADMIN = "admin"

    ALL = (LAWYER, CLIENT, ADMIN)


class Account(Base):
    """A lawyer, client or admin using CaseDesk Legal."""

    __tablename__ = "users"

    # Wire names that differ from the plain camelCase of the attribute
    __wire_aliases__ = {"photo_url": "photoURL"}
    __wire_exclude__ = ("password_hash",)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Authentication
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Profile
    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    display_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    photo_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    gender: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Practice details
    bar_council_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    practice_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    user_type: Mapped[str] = mapped_column(String(20), default=UserType.LAWYER)  # lawyer, client, admin

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=now_utc)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=now_utc, onupdate=now_utc)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<Account {self.email}>"
