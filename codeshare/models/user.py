"""
User model — the authentication identity and profile.

Each User has two identifiers:
  - id: integer surrogate key, used internally (resources reference it)
  - uuid: opaque, globally unique identity string issued at registration.
    This is what the JWT "sub" claim carries and what the wallet account
    is keyed by.

Roles:
  - CANDIDATE: default for self-service signup
  - HR: recruiter accounts
  - ADMIN: operators

The password is stored as an Argon2id hash, never in plaintext.
"""

import enum
from uuid import uuid4
from datetime import date, datetime, timezone

from sqlalchemy import String, Date, DateTime, Enum, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from codeshare.database import Base


class UserRole(str, enum.Enum):
    """
    Role a user holds on the platform.

    Inherits from str so the value serializes naturally to JSON.
    """
    CANDIDATE = "candidate"
    HR = "hr"
    ADMIN = "admin"


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    # Opaque identity carried in authenticated requests
    uuid: Mapped[str] = mapped_column(
        String(36),
        unique=True,
        nullable=False,
        index=True,
        default=lambda: str(uuid4()),
    )

    username: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
        index=True,
    )

    email: Mapped[str | None] = mapped_column(
        String(100),
        unique=True,
        nullable=True,
    )

    phone: Mapped[str | None] = mapped_column(
        String(20),
        unique=True,
        nullable=True,
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole),
        default=UserRole.CANDIDATE,
        nullable=False,
    )

    # --- Optional profile fields ---
    real_name: Mapped[str | None] = mapped_column(String(50), nullable=True)
    gender: Mapped[str | None] = mapped_column(String(10), nullable=True)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Audit timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # --- Relationships ---
    # One-to-one with Account (uselist=False means single object, not list)
    account: Mapped["Account"] = relationship(
        back_populates="user",
        uselist=False,
    )
