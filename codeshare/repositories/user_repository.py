"""
User repository — identity lookups, user creation, and profile updates.

This is the identity-lookup collaborator used by the ledger and resource
services: resolving an opaque identity (uuid) or an internal id to a user.
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.exceptions import DuplicateUserError
from codeshare.models.user import User
from codeshare.repositories import storage_errors


async def get_by_uuid(db: AsyncSession, user_uuid: str) -> User | None:
    with storage_errors("get_user_by_uuid", user_uuid):
        result = await db.execute(select(User).where(User.uuid == user_uuid))
        return result.scalar_one_or_none()


async def get_by_id(db: AsyncSession, user_id: int) -> User | None:
    with storage_errors("get_user_by_id", user_id):
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()


async def get_by_field(db: AsyncSession, field: str, value: str) -> User | None:
    """Look a user up by one of the unique login fields: username, email or phone."""
    column = {
        "username": User.username,
        "email": User.email,
        "phone": User.phone,
    }[field]
    with storage_errors(f"get_user_by_{field}", value):
        result = await db.execute(select(User).where(column == value))
        return result.scalar_one_or_none()


async def create_user(db: AsyncSession, user: User) -> User:
    """
    Insert a user and flush so id/uuid are assigned.

    Raises:
        DuplicateUserError: If username, email or phone collides.
    """
    with storage_errors("create_user", user.username):
        db.add(user)
        try:
            await db.flush()
        except IntegrityError as exc:
            field = _duplicate_field(exc)
            value = getattr(user, field, None) or user.username
            raise DuplicateUserError(field, value) from exc
    return user


async def apply_changes(db: AsyncSession, user: User, changes: dict) -> User:
    """
    Apply an already-validated sparse change-set to a user and flush.

    Raises:
        DuplicateUserError: If a changed unique field collides.
    """
    with storage_errors("update_user", user.uuid):
        for field, value in changes.items():
            setattr(user, field, value)
        try:
            await db.flush()
        except IntegrityError as exc:
            field = _duplicate_field(exc)
            raise DuplicateUserError(field, str(changes.get(field, ""))) from exc
    return user


def _duplicate_field(exc: IntegrityError) -> str:
    message = str(exc.orig).lower()
    for field in ("username", "email", "phone"):
        if field in message:
            return field
    return "user"
