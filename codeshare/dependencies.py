"""
FastAPI dependencies for authentication and shared app state.

  get_current_user (JWT -> User)
      └── get_current_identity (User -> uuid string)

Every authenticated endpoint declares one of these. If the token is
missing, expired, tampered with, or names a user that no longer exists,
the request is rejected with 401 before any service code runs.

The verification-code store and mailer live on app.state (created in the
lifespan hook) and are handed to routes through get_verification_store and
get_mailer, so tests can swap them without touching module globals.
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.database import get_db
from codeshare.models.user import User
from codeshare.repositories import user_repository
from codeshare.security import decode_access_token
from codeshare.verification import Mailer, VerificationCodeStore


# Reads "Authorization: Bearer <token>". tokenUrl feeds Swagger's Authorize button.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Validate the JWT and return the User named by its sub claim.

    Raises:
        HTTPException 401: Invalid token or unknown user.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_access_token(token)
    except JWTError:
        raise credentials_exception

    user_uuid = payload.get("sub")
    if not isinstance(user_uuid, str) or not user_uuid.strip():
        raise credentials_exception

    user = await user_repository.get_by_uuid(db, user_uuid)
    if user is None:
        raise credentials_exception
    return user


async def get_current_identity(user: User = Depends(get_current_user)) -> str:
    """The authenticated user's opaque identity (their uuid)."""
    return user.uuid


def get_verification_store(request: Request) -> VerificationCodeStore:
    return request.app.state.verification_store


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer
