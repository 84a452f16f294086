"""
User service — profile read and sparse profile update.

Profile updates are a change-set over a fixed whitelist of mutable fields.
A field is applied only when the client sent it AND it is non-blank; every
other column keeps its value. uuid, role, password and avatar are never
writable through this path.

Renaming a user does not touch resources they already published: those
keep the author_name copied at publish time.
"""

import re
from dataclasses import dataclass, fields
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.exceptions import (
    DuplicateUserError,
    InvalidIdentityError,
    InvalidProfileError,
    UserNotFoundError,
)
from codeshare.models.user import User
from codeshare.repositories import user_repository

# 11-digit mainland China mobile number
PHONE_PATTERN = re.compile(r"^1[3-9]\d{9}$")
GENDERS = ("0", "1", "2")


def normalize_email(email: str | None) -> str | None:
    email = (email or "").strip().lower()
    return email or None


def normalize_phone(phone: str | None) -> str | None:
    phone = (phone or "").strip()
    if not phone:
        return None
    if not PHONE_PATTERN.match(phone):
        raise InvalidProfileError("Phone must be an 11-digit mobile number")
    return phone


def mask_phone(phone: str | None) -> str | None:
    """13800138000 -> 138****8000. Other shapes are returned unchanged."""
    if phone and len(phone) == 11:
        return phone[:3] + "****" + phone[7:]
    return phone


@dataclass
class ProfileChanges:
    """Optional new values for the mutable profile fields."""
    username: str | None = None
    email: str | None = None
    phone: str | None = None
    real_name: str | None = None
    gender: str | None = None
    birth_date: str | None = None

    def to_update(self, today: date | None = None) -> dict:
        """
        Validate and return only the fields that should be written.

        Raises:
            InvalidProfileError: A present field is malformed.
        """
        changes = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None or not str(value).strip():
                continue
            changes[f.name] = str(value).strip()

        if "email" in changes:
            changes["email"] = normalize_email(changes["email"])
        if "phone" in changes:
            changes["phone"] = normalize_phone(changes["phone"])
        if "gender" in changes and changes["gender"] not in GENDERS:
            raise InvalidProfileError("Gender must be one of 0, 1, 2")
        if "birth_date" in changes:
            changes["birth_date"] = _parse_birth_date(changes["birth_date"], today or date.today())
        return changes


def _parse_birth_date(value: str, today: date) -> date:
    try:
        parsed = date.fromisoformat(value)
    except ValueError:
        raise InvalidProfileError("Birth date must be a valid YYYY-MM-DD date")
    if parsed > today:
        raise InvalidProfileError("Birth date cannot be in the future")
    return parsed


async def _require_user(db: AsyncSession, user_uuid: str) -> User:
    if not (user_uuid or "").strip():
        raise InvalidIdentityError()
    user = await user_repository.get_by_uuid(db, user_uuid)
    if user is None:
        raise UserNotFoundError(user_uuid)
    return user


async def get_profile(db: AsyncSession, user_uuid: str) -> dict:
    """Profile for display, with the phone number masked."""
    user = await _require_user(db, user_uuid)
    return {
        "id": user.id,
        "uuid": user.uuid,
        "username": user.username,
        "email": user.email,
        "phone": mask_phone(user.phone),
        "role": user.role.value,
        "real_name": user.real_name,
        "gender": user.gender,
        "birth_date": user.birth_date,
        "avatar_url": user.avatar_url,
        "created_at": user.created_at,
    }


async def update_profile(db: AsyncSession, user_uuid: str, changes: ProfileChanges) -> dict:
    """
    Apply a sparse profile update and return the refreshed profile.

    Raises:
        InvalidProfileError: A present field is malformed.
        DuplicateUserError: New username/email/phone already taken.
        UserNotFoundError: Unknown identity.
    """
    user = await _require_user(db, user_uuid)
    update = changes.to_update()

    for field in ("username", "email", "phone"):
        value = update.get(field)
        if value is None or value == getattr(user, field):
            continue
        other = await user_repository.get_by_field(db, field, value)
        if other is not None and other.id != user.id:
            raise DuplicateUserError(field, value)

    if update:
        await user_repository.apply_changes(db, user, update)
    return await get_profile(db, user_uuid)
