"""
Account ledger service — business logic for the per-user wallet.

This module handles:
  - Account creation (called from signup, inside the signup transaction)
  - Recharge: add money
  - Deduct: spend money, never below zero
  - Account snapshot retrieval

Every public operation validates its input BEFORE touching storage:
  - an empty identity raises InvalidIdentityError
  - a non-positive, unparsable or over-precise amount raises InvalidAmountError

Recharge and deduct then confirm the identity resolves to a real user, so a
stale token produces UserNotFoundError instead of a bare "no rows updated".
After the mutation the account is re-read and returned, so callers always
see the post-operation balance and totals.

No retries:
  Recharge and deduct are not idempotent. Retrying a recharge that timed
  out could apply it twice, so this layer never retries; a caller that wants
  retries must bring its own idempotency key.
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.exceptions import (
    AccountNotFoundError,
    InsufficientFundsError,
    InvalidIdentityError,
    UserNotFoundError,
)
from codeshare.models.account import Account
from codeshare.money import to_cents
from codeshare.repositories import account_repository, user_repository

logger = logging.getLogger(__name__)


def _require_identity(user_uuid: str | None) -> str:
    if user_uuid is None or not user_uuid.strip():
        raise InvalidIdentityError()
    return user_uuid.strip()


async def _require_user(db: AsyncSession, user_uuid: str) -> None:
    if await user_repository.get_by_uuid(db, user_uuid) is None:
        raise UserNotFoundError(user_uuid)


async def _snapshot(db: AsyncSession, user_uuid: str) -> Account:
    account = await account_repository.get_account(db, user_uuid)
    if account is None:
        raise AccountNotFoundError(user_uuid)
    return account


async def create_account(db: AsyncSession, user_uuid: str) -> Account:
    """
    Create the wallet for a newly registered user.

    Runs in the caller's session, so it commits or rolls back together with
    the user row.

    Raises:
        InvalidIdentityError: If user_uuid is empty.
        DuplicateAccountError: If the user already has an account.
    """
    user_uuid = _require_identity(user_uuid)
    account = await account_repository.create_account(db, user_uuid)
    logger.info("Account created for user %s", user_uuid)
    return account


async def recharge(db: AsyncSession, user_uuid: str, amount: Decimal) -> Account:
    """
    Add amount to the balance and to total_recharge.

    Args:
        db: Database session.
        user_uuid: Authenticated user's identity.
        amount: Positive amount with at most two decimal places.

    Returns:
        The account after the recharge.

    Raises:
        InvalidIdentityError, InvalidAmountError, UserNotFoundError,
        AccountNotFoundError, StorageError
    """
    user_uuid = _require_identity(user_uuid)
    amount_cents = to_cents(amount)

    await _require_user(db, user_uuid)
    await account_repository.recharge(db, user_uuid, amount_cents)

    account = await _snapshot(db, user_uuid)
    logger.info(
        "Recharge applied: user=%s amount=%s balance=%s",
        user_uuid,
        amount,
        account.balance,
    )
    return account


async def deduct(db: AsyncSession, user_uuid: str, amount: Decimal) -> Account:
    """
    Subtract amount from the balance and add it to total_consume.

    The deduction is a single conditional update, so the balance can never
    go below zero even under concurrent requests.

    Returns:
        The account after the deduction.

    Raises:
        InvalidIdentityError, InvalidAmountError, UserNotFoundError,
        AccountNotFoundError, InsufficientFundsError, StorageError
    """
    user_uuid = _require_identity(user_uuid)
    amount_cents = to_cents(amount)

    await _require_user(db, user_uuid)
    try:
        await account_repository.deduct(db, user_uuid, amount_cents)
    except InsufficientFundsError as exc:
        logger.warning(
            "Deduct rejected: user=%s requested=%s available=%s",
            user_uuid,
            exc.requested,
            exc.available,
        )
        raise

    account = await _snapshot(db, user_uuid)
    logger.info(
        "Deduct applied: user=%s amount=%s balance=%s",
        user_uuid,
        amount,
        account.balance,
    )
    return account


async def get_account(db: AsyncSession, user_uuid: str) -> Account:
    """
    Return the wallet for a user.

    Raises:
        InvalidIdentityError: If user_uuid is empty.
        AccountNotFoundError: If the user has no account.
    """
    user_uuid = _require_identity(user_uuid)
    return await _snapshot(db, user_uuid)
