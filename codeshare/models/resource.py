"""
Resource model — a published text/code snippet.

Each resource has:
  - a required title and optional text and code bodies
  - author_name: the owner's username copied at creation time. It is a
    snapshot, not a live reference; renaming the user leaves existing
    resources untouched and list queries never need a join.
  - three interaction counters (likes, views, comments)

Counters:
  The counters start at zero and are only ever changed by a single
  "SET x = x + 1" statement, so concurrent increments never lose updates.
  They are anonymous tallies: nothing ties a like or view to a user.
"""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from codeshare.database import Base


class Resource(Base):
    __tablename__ = "resources"

    __table_args__ = (
        CheckConstraint("like_count >= 0", name="ck_resources_like_count"),
        CheckConstraint("view_count >= 0", name="ck_resources_view_count"),
        CheckConstraint("comment_count >= 0", name="ck_resources_comment_count"),
    )

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    text_content: Mapped[str | None] = mapped_column(Text, nullable=True)
    code_content: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Snapshot of users.username at publish time (see module docstring)
    author_name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )

    # Indexed: list queries order by it
    published_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )

    # No Python-side defaults: the service supplies explicit zeros
    like_count: Mapped[int] = mapped_column(Integer, nullable=False)
    view_count: Mapped[int] = mapped_column(Integer, nullable=False)
    comment_count: Mapped[int] = mapped_column(Integer, nullable=False)
