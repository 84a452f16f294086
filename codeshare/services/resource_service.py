"""
Resource service — publishing, listing, and interaction counters.

This module handles:
  - Resource creation: validates the title, copies the owner's current
    username into author_name, and inserts with all counters at zero
  - Paginated keyword search and "my resources"
  - Resource detail
  - View/like/comment counters

Open actions:
  Views, likes and comments are deliberately anonymous. There is no
  ownership or authentication check and no one-like-per-user rule; the
  counters are plain tallies.

Comments:
  create_comment validates the body and bumps comment_count. The body itself
  is not stored.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.exceptions import (
    InvalidPageError,
    InvalidResourceError,
    ResourceNotFoundError,
    UserNotFoundError,
)
from codeshare.models.resource import Resource
from codeshare.repositories import resource_repository, user_repository

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 100
PAGE_SIZE_MAX = 50
# Largest value an INTEGER primary key can hold
MAX_RESOURCE_ID = 2**63 - 1


def _require_resource_id(resource_id: int) -> None:
    if resource_id is None or resource_id < 1:
        raise InvalidResourceError(f"Resource id must be a positive integer, got {resource_id}")
    if resource_id > MAX_RESOURCE_ID:
        raise ResourceNotFoundError(resource_id)


async def create_resource(
    db: AsyncSession,
    owner_id: int,
    title: str,
    text: str | None = None,
    code: str | None = None,
) -> Resource:
    """
    Publish a new resource.

    The title is trimmed and must be 1-100 characters. Text is trimmed;
    code is kept verbatim (indentation matters). Empty bodies are stored as
    NULL.

    Raises:
        InvalidResourceError: Bad title or owner id.
        UserNotFoundError: owner_id does not reference a user.
    """
    if owner_id is None or owner_id < 1:
        raise InvalidResourceError(f"Owner id must be a positive integer, got {owner_id}")

    title = (title or "").strip()
    if not title:
        raise InvalidResourceError("Resource title must not be empty")
    if len(title) > TITLE_MAX_LENGTH:
        raise InvalidResourceError(
            f"Resource title must be at most {TITLE_MAX_LENGTH} characters "
            f"(got {len(title)})"
        )

    owner = await user_repository.get_by_id(db, owner_id)
    if owner is None:
        raise UserNotFoundError(owner_id)

    text = (text or "").strip() or None
    code = code if code and code.strip() else None

    resource = Resource(
        owner_id=owner_id,
        title=title,
        text_content=text,
        code_content=code,
        author_name=owner.username,
        published_at=datetime.now(timezone.utc),
        like_count=0,
        view_count=0,
        comment_count=0,
    )
    await resource_repository.create_resource(db, resource)
    logger.info("Resource %s published by user %s", resource.id, owner_id)
    return resource


async def list_resources(
    db: AsyncSession,
    page: int,
    size: int,
    keyword: str | None = None,
) -> tuple[list[Resource], int]:
    """
    One page of resources, newest first, optionally filtered by keyword.

    Returns:
        (items, total) where total counts every match, not just this page.

    Raises:
        InvalidPageError: page < 1 or size outside 1..50.
    """
    if page is None or page < 1:
        raise InvalidPageError(f"Page must be >= 1, got {page}")
    if size is None or size < 1 or size > PAGE_SIZE_MAX:
        raise InvalidPageError(f"Size must be between 1 and {PAGE_SIZE_MAX}, got {size}")

    keyword = (keyword or "").strip()
    offset = (page - 1) * size

    total = await resource_repository.count(db, keyword)
    if total == 0:
        return [], 0

    items = await resource_repository.list_paged(db, offset, size, keyword)
    return items, total


async def list_my_resources(db: AsyncSession, owner_id: int) -> list[Resource]:
    """Every resource the user has published, newest first."""
    return await resource_repository.list_by_owner(db, owner_id)


async def get_resource(db: AsyncSession, resource_id: int) -> Resource:
    """
    Resource detail.

    Raises:
        InvalidResourceError: resource_id < 1.
        ResourceNotFoundError: No such resource.
    """
    _require_resource_id(resource_id)
    resource = await resource_repository.get_by_id(db, resource_id)
    if resource is None:
        raise ResourceNotFoundError(resource_id)
    return resource


async def increment_view(db: AsyncSession, resource_id: int) -> None:
    _require_resource_id(resource_id)
    await resource_repository.increment_view(db, resource_id)


async def increment_like(db: AsyncSession, resource_id: int) -> None:
    _require_resource_id(resource_id)
    await resource_repository.increment_like(db, resource_id)


async def create_comment(db: AsyncSession, resource_id: int, content: str) -> None:
    """
    Record a comment on a resource.

    Raises:
        InvalidResourceError: Bad id or blank content.
        ResourceNotFoundError: No such resource.
    """
    _require_resource_id(resource_id)
    if not (content or "").strip():
        raise InvalidResourceError("Comment content must not be empty")
    await resource_repository.increment_comment(db, resource_id)
