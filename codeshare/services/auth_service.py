"""
Authentication service — signup, password login, and email-code login.

Signup flow:
  1. Normalize and validate username/email/phone
  2. Reject any already-taken unique field (409)
  3. Hash the password with Argon2id
  4. Create the User AND its Account in the same session. Nothing is
     committed here: get_db() commits both rows together when the request
     succeeds and rolls both back if anything fails, so a user never exists
     without exactly one account.
  5. Return a JWT so the user is immediately logged in

Login flow:
  Look the user up by username, phone or email (first one given wins),
  verify the password, return a JWT. Unknown user and wrong password raise
  the same error so valid usernames cannot be enumerated.

Email-code login:
  request_email_code() stores a 6-digit code with a TTL and hands it to the
  mailer; verify_email_code() consumes it and returns a JWT. Requesting a
  code for an unknown email looks exactly like success to the caller.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.exceptions import (
    DuplicateUserError,
    InvalidCredentialsError,
    InvalidProfileError,
    InvalidVerificationCodeError,
)
from codeshare.models.user import User, UserRole
from codeshare.repositories import user_repository
from codeshare.security import create_user_token, hash_password, verify_password
from codeshare.services import account_service
from codeshare.services.user_service import normalize_email, normalize_phone
from codeshare.verification import Mailer, VerificationCodeStore, generate_code

logger = logging.getLogger(__name__)


async def signup(
    db: AsyncSession,
    username: str,
    password: str,
    email: str | None = None,
    phone: str | None = None,
    role: UserRole = UserRole.CANDIDATE,
    real_name: str | None = None,
    gender: str | None = None,
) -> tuple[User, str]:
    """
    Register a new user together with their wallet account.

    Returns:
        Tuple of (User instance, JWT token string).

    Raises:
        InvalidProfileError: Blank username/password or malformed phone.
        DuplicateUserError: Username, email or phone already registered.
    """
    username = (username or "").strip()
    if not username:
        raise InvalidProfileError("Username must not be empty")
    if not (password or "").strip():
        raise InvalidProfileError("Password must not be empty")
    email = normalize_email(email)
    phone = normalize_phone(phone)

    for field, value in (("username", username), ("email", email), ("phone", phone)):
        if value and await user_repository.get_by_field(db, field, value) is not None:
            raise DuplicateUserError(field, value)

    user = User(
        username=username,
        email=email,
        phone=phone,
        hashed_password=hash_password(password),
        role=role,
        real_name=(real_name or "").strip() or None,
        gender=gender or None,
    )
    await user_repository.create_user(db, user)
    await account_service.create_account(db, user.uuid)

    logger.info("User %s registered (uuid=%s)", user.username, user.uuid)
    return user, create_user_token(user)


async def login(
    db: AsyncSession,
    password: str,
    username: str | None = None,
    email: str | None = None,
    phone: str | None = None,
) -> tuple[User, str]:
    """
    Authenticate with a password and one of username/phone/email.

    Raises:
        InvalidCredentialsError: No identifier given, unknown user, or wrong password.
    """
    user = None
    for field, value in (("username", username), ("phone", phone), ("email", email)):
        value = (value or "").strip()
        if value:
            user = await user_repository.get_by_field(db, field, value)
            break

    # Same error for every failure mode (anti-enumeration)
    if user is None or not verify_password(password, user.hashed_password):
        raise InvalidCredentialsError()

    return user, create_user_token(user)


async def request_email_code(
    db: AsyncSession,
    email: str,
    store: VerificationCodeStore,
    mailer: Mailer,
) -> None:
    """Generate, store and send a login code if the email belongs to a user."""
    email = normalize_email(email)
    if email is None:
        raise InvalidProfileError("Email must not be empty")

    user = await user_repository.get_by_field(db, "email", email)
    if user is None:
        logger.info("Email code requested for unknown address %s", email)
        return

    code = generate_code()
    store.save(email, code)
    await mailer.send_verification_code(email, code, store.ttl_seconds)


async def verify_email_code(
    db: AsyncSession,
    email: str,
    code: str,
    store: VerificationCodeStore,
) -> tuple[User, str]:
    """
    Exchange a valid email code for a token.

    Raises:
        InvalidVerificationCodeError: Missing, wrong or expired code.
    """
    email = normalize_email(email)
    if email is None:
        raise InvalidVerificationCodeError()

    store.verify(email, (code or "").strip())

    user = await user_repository.get_by_field(db, "email", email)
    if user is None:
        raise InvalidVerificationCodeError()
    return user, create_user_token(user)
