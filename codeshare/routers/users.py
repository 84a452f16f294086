"""
Users router — the authenticated user's own profile.

Endpoints:
  GET   /users/me — Profile (phone masked)
  PATCH /users/me — Sparse update; omitted or blank fields are untouched
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.database import get_db
from codeshare.dependencies import get_current_identity
from codeshare.schemas.user import UserProfileResponse, UserProfileUpdate
from codeshare.services import user_service
from codeshare.services.user_service import ProfileChanges

router = APIRouter()


@router.get("/me", response_model=UserProfileResponse, summary="Get own profile")
async def get_me(
    identity: str = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.get_profile(db, identity)


@router.patch("/me", response_model=UserProfileResponse, summary="Update own profile")
async def update_me(
    request: UserProfileUpdate,
    identity: str = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """
    Only the fields you send (and that are non-blank) change. Renaming
    does not rewrite the author name on resources you already published.
    """
    changes = ProfileChanges(**request.model_dump(exclude_unset=True))
    return await user_service.update_profile(db, identity, changes)
