"""
Authentication router — signup, password login and email-code login.

These are public endpoints; everything under /account, /users and the
write side of /resources requires the JWT they hand out.

Endpoints:
  POST /auth/signup      — Register (user + wallet) and get a token
  POST /auth/login       — Username/phone/email + password -> token
  POST /auth/email-code  — Send a one-time login code
  POST /auth/email-login — Exchange the code for a token

Passwords and codes are never logged by these routes; the request-log
middleware records method, path, status and latency only.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.database import get_db
from codeshare.dependencies import get_mailer, get_verification_store
from codeshare.models.user import UserRole
from codeshare.schemas.auth import (
    EmailCodeRequest,
    EmailLoginRequest,
    SignupResponse,
    TokenResponse,
    UserLoginRequest,
    UserSignupRequest,
)
from codeshare.services import auth_service
from codeshare.verification import Mailer, VerificationCodeStore

router = APIRouter()


@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def signup(
    request: UserSignupRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Register a user and open their wallet in one transaction.

    - **username**: 3-50 characters, unique
    - **password**: 6-64 characters
    - **email** / **phone**: optional, unique when given
    """
    user, token = await auth_service.signup(
        db=db,
        username=request.username,
        password=request.password,
        email=request.email,
        phone=request.phone,
        role=UserRole(request.role),
        real_name=request.real_name,
        gender=request.gender,
    )

    return SignupResponse(
        user_uuid=user.uuid,
        username=user.username,
        role=user.role.value,
        token=token,
    )


@router.post("/login", response_model=TokenResponse, summary="Authenticate and get a token")
async def login(
    request: UserLoginRequest,
    db: AsyncSession = Depends(get_db),
):
    _, token = await auth_service.login(
        db=db,
        password=request.password,
        username=request.username,
        email=request.email,
        phone=request.phone,
    )
    return TokenResponse(token=token)


@router.post(
    "/email-code",
    status_code=status.HTTP_202_ACCEPTED,
    summary="Send a one-time login code by email",
)
async def request_email_code(
    request: EmailCodeRequest,
    db: AsyncSession = Depends(get_db),
    store: VerificationCodeStore = Depends(get_verification_store),
    mailer: Mailer = Depends(get_mailer),
):
    """Always 202 for a well-formed email, whether or not it is registered."""
    await auth_service.request_email_code(db, request.email, store, mailer)
    return {"detail": "If the address is registered, a code has been sent"}


@router.post("/email-login", response_model=TokenResponse, summary="Log in with an email code")
async def email_login(
    request: EmailLoginRequest,
    db: AsyncSession = Depends(get_db),
    store: VerificationCodeStore = Depends(get_verification_store),
):
    _, token = await auth_service.verify_email_code(db, request.email, request.code, store)
    return TokenResponse(token=token)
