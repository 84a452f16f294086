"""
Pydantic schemas for resource endpoints.

The title limit here is looser than the service rule (100 characters after
trimming), so over-long titles reach the service and get its 400.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class ResourceCreateRequest(BaseModel):
    """Request body for POST /resources."""
    title: str = Field(max_length=255)
    text: str | None = None
    code: str | None = None


class ResourceResponse(BaseModel):
    id: int
    owner_id: int
    title: str
    text_content: str | None = None
    code_content: str | None = None
    author_name: str
    published_at: datetime
    like_count: int
    view_count: int
    comment_count: int

    model_config = {"from_attributes": True}


class ResourceListResponse(BaseModel):
    """One page of resources. total counts every match."""
    items: list[ResourceResponse]
    total: int
    page: int
    size: int


class CommentRequest(BaseModel):
    """Request body for POST /resources/{id}/comments."""
    content: str = Field(max_length=2000)


class CounterResponse(BaseModel):
    """Counters after an interaction."""
    id: int
    like_count: int
    view_count: int
    comment_count: int

    model_config = {"from_attributes": True}
