"""
Resources router — publishing, browsing and interaction counters.

Endpoints:
  POST /resources                  — Publish (JWT)
  GET  /resources?page&size&keyword — Paginated search (JWT)
  GET  /resources/mine             — Own resources (JWT)
  GET  /resources/{id}             — Detail (public)
  POST /resources/{id}/views       — +1 view (public)
  POST /resources/{id}/likes       — +1 like (public)
  POST /resources/{id}/comments    — +1 comment (public)

The interaction endpoints are anonymous tallies: no login, no per-user
dedup. Each returns the counters as they stand after the increment.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.database import get_db
from codeshare.dependencies import get_current_user
from codeshare.models.user import User
from codeshare.schemas.resource import (
    CommentRequest,
    CounterResponse,
    ResourceCreateRequest,
    ResourceListResponse,
    ResourceResponse,
)
from codeshare.services import resource_service

router = APIRouter()


@router.post(
    "",
    response_model=ResourceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Publish a resource",
)
async def create_resource(
    request: ResourceCreateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await resource_service.create_resource(
        db, owner_id=user.id, title=request.title, text=request.text, code=request.code
    )


@router.get("", response_model=ResourceListResponse, summary="Search resources")
async def list_resources(
    page: int = 1,
    size: int = 10,
    keyword: str | None = None,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Newest first. **keyword** matches title, text or code as a substring.

    **total** counts every match, not just this page.
    """
    items, total = await resource_service.list_resources(db, page, size, keyword)
    return ResourceListResponse(
        items=[ResourceResponse.model_validate(item) for item in items],
        total=total,
        page=page,
        size=size,
    )


@router.get("/mine", response_model=list[ResourceResponse], summary="List own resources")
async def list_my_resources(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await resource_service.list_my_resources(db, user.id)


@router.get("/{resource_id}", response_model=ResourceResponse, summary="Resource detail")
async def get_resource(resource_id: int, db: AsyncSession = Depends(get_db)):
    return await resource_service.get_resource(db, resource_id)


@router.post("/{resource_id}/views", response_model=CounterResponse, summary="Record a view")
async def record_view(resource_id: int, db: AsyncSession = Depends(get_db)):
    await resource_service.increment_view(db, resource_id)
    return await resource_service.get_resource(db, resource_id)


@router.post("/{resource_id}/likes", response_model=CounterResponse, summary="Like a resource")
async def like_resource(resource_id: int, db: AsyncSession = Depends(get_db)):
    await resource_service.increment_like(db, resource_id)
    return await resource_service.get_resource(db, resource_id)


@router.post(
    "/{resource_id}/comments",
    response_model=CounterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a resource",
)
async def comment_on_resource(
    resource_id: int,
    request: CommentRequest,
    db: AsyncSession = Depends(get_db),
):
    await resource_service.create_comment(db, resource_id, request.content)
    return await resource_service.get_resource(db, resource_id)
