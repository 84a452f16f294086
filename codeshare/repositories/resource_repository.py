"""
Resource repository — resources, their counters, and keyword search.

Counter increments are single "SET x = x + 1" statements scoped by id.
There is never a read of the current value first, so N concurrent
increments always add exactly N.

Keyword search:
  A non-empty keyword matches as a substring (LIKE '%kw%') against the
  title, the text body, or the code body. LIKE wildcards typed by the user
  are escaped so "100%" searches for the literal text. The count query uses
  the same filter as the page query.
"""

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.exceptions import (
    ConflictError,
    InvalidResourceError,
    ResourceNotFoundError,
    UserNotFoundError,
)
from codeshare.models.resource import Resource
from codeshare.repositories import storage_errors

_LIKE_ESCAPE = "\\"


def _keyword_filter(keyword: str):
    escaped = (
        keyword.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )
    pattern = f"%{escaped}%"
    return or_(
        Resource.title.like(pattern, escape=_LIKE_ESCAPE),
        func.coalesce(Resource.text_content, "").like(pattern, escape=_LIKE_ESCAPE),
        func.coalesce(Resource.code_content, "").like(pattern, escape=_LIKE_ESCAPE),
    )


async def create_resource(db: AsyncSession, resource: Resource) -> Resource:
    """
    Insert a resource, counters included.

    The counters must be set by the caller; the store does not default
    them.

    Raises:
        InvalidResourceError: If the title or any counter is missing.
        UserNotFoundError: If owner_id does not reference a user.
        ConflictError: On any other constraint violation.
    """
    if not resource.title:
        raise InvalidResourceError("Resource title is required")
    if None in (resource.like_count, resource.view_count, resource.comment_count):
        raise InvalidResourceError("Resource counters must be set explicitly")

    with storage_errors("create_resource", resource.owner_id):
        db.add(resource)
        try:
            await db.flush()
        except IntegrityError as exc:
            if "foreign key" in str(exc.orig).lower():
                raise UserNotFoundError(resource.owner_id) from exc
            raise ConflictError("Resource conflicts with an existing record") from exc
    return resource


async def get_by_id(db: AsyncSession, resource_id: int) -> Resource | None:
    """Return a resource by id, or None."""
    with storage_errors("get_resource", resource_id):
        result = await db.execute(
            select(Resource)
            .where(Resource.id == resource_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()


async def list_by_owner(db: AsyncSession, owner_id: int) -> list[Resource]:
    """All resources published by one user, newest first."""
    with storage_errors("list_resources_by_owner", owner_id):
        result = await db.execute(
            select(Resource)
            .where(Resource.owner_id == owner_id)
            .order_by(Resource.published_at.desc(), Resource.id.desc())
        )
        return list(result.scalars().all())


async def count(db: AsyncSession, keyword: str = "") -> int:
    """Number of resources matching keyword (all resources if empty)."""
    stmt = select(func.count()).select_from(Resource)
    if keyword:
        stmt = stmt.where(_keyword_filter(keyword))

    with storage_errors("count_resources", keyword):
        result = await db.execute(stmt)
        return result.scalar_one()


async def list_paged(
    db: AsyncSession,
    offset: int,
    limit: int,
    keyword: str = "",
) -> list[Resource]:
    """One page of resources matching keyword, newest first."""
    stmt = select(Resource)
    if keyword:
        stmt = stmt.where(_keyword_filter(keyword))
    stmt = (
        stmt.order_by(Resource.published_at.desc(), Resource.id.desc())
        .offset(offset)
        .limit(limit)
    )

    with storage_errors("list_resources", keyword):
        result = await db.execute(stmt)
        return list(result.scalars().all())


async def _increment(db: AsyncSession, column, resource_id: int, operation: str) -> None:
    with storage_errors(operation, resource_id):
        result = await db.execute(
            update(Resource)
            .where(Resource.id == resource_id)
            .values({column: column + 1})
            .execution_options(synchronize_session=False)
        )
    if result.rowcount == 0:
        raise ResourceNotFoundError(resource_id)


async def increment_like(db: AsyncSession, resource_id: int) -> None:
    await _increment(db, Resource.like_count, resource_id, "increment_like")


async def increment_view(db: AsyncSession, resource_id: int) -> None:
    await _increment(db, Resource.view_count, resource_id, "increment_view")


async def increment_comment(db: AsyncSession, resource_id: int) -> None:
    await _increment(db, Resource.comment_count, resource_id, "increment_comment")
