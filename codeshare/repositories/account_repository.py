"""
Account repository — race-safe persistence of one wallet row per user.

Every balance mutation is ONE UPDATE statement:

  Recharge:
      UPDATE accounts
      SET balance_cents = balance_cents + :amount,
          total_recharge_cents = total_recharge_cents + :amount
      WHERE user_uuid = :user_uuid

  Deduct:
      UPDATE accounts
      SET balance_cents = balance_cents - :amount,
          total_consume_cents = total_consume_cents + :amount
      WHERE user_uuid = :user_uuid AND balance_cents >= :amount

The sufficiency check lives in the WHERE clause, so two concurrent
deductions can never both pass against a stale balance. Zero affected rows
means "no account" or "not enough money"; a follow-up read tells the two
apart for the error message but never authorizes a write.

Transaction ownership: the caller's session owns the transaction. These
functions only flush; get_db() (or the caller) commits.
"""

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.exceptions import (
    AccountNotFoundError,
    DuplicateAccountError,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidIdentityError,
)
from codeshare.models.account import Account
from codeshare.money import from_cents
from codeshare.repositories import storage_errors


def _require_identity(user_uuid: str | None) -> None:
    if user_uuid is None or not user_uuid.strip():
        raise InvalidIdentityError()


def _require_positive(amount_cents: int) -> None:
    if amount_cents <= 0:
        raise InvalidAmountError(from_cents(amount_cents))


async def get_account(db: AsyncSession, user_uuid: str) -> Account | None:
    """Return the account for a user, or None if there is none."""
    with storage_errors("get_account", user_uuid):
        result = await db.execute(
            select(Account)
            .where(Account.user_uuid == user_uuid)
            # Always reload column values: a concurrent transaction may have
            # moved the balance since this session last saw the row.
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()


async def create_account(db: AsyncSession, user_uuid: str) -> Account:
    """
    Insert a zero-balance account for a user inside the caller's transaction.

    Raises:
        InvalidIdentityError: If user_uuid is empty.
        DuplicateAccountError: If the user already has an account.
    """
    _require_identity(user_uuid)

    if await get_account(db, user_uuid) is not None:
        raise DuplicateAccountError(user_uuid)

    account = Account(
        user_uuid=user_uuid,
        balance_cents=0,
        total_recharge_cents=0,
        total_consume_cents=0,
    )
    with storage_errors("create_account", user_uuid):
        db.add(account)
        try:
            await db.flush()
        except IntegrityError as exc:
            # Lost a race with a concurrent insert for the same user
            raise DuplicateAccountError(user_uuid) from exc
    return account


async def recharge(db: AsyncSession, user_uuid: str, amount_cents: int) -> None:
    """
    Atomically add amount_cents to the balance and the recharge total.

    Raises:
        InvalidAmountError: If amount_cents <= 0.
        AccountNotFoundError: If no row was updated.
    """
    _require_positive(amount_cents)

    with storage_errors("recharge", user_uuid):
        result = await db.execute(
            update(Account)
            .where(Account.user_uuid == user_uuid)
            .values(
                balance_cents=Account.balance_cents + amount_cents,
                total_recharge_cents=Account.total_recharge_cents + amount_cents,
            )
            .execution_options(synchronize_session=False)
        )

    if result.rowcount == 0:
        raise AccountNotFoundError(user_uuid)


async def deduct(db: AsyncSession, user_uuid: str, amount_cents: int) -> None:
    """
    Atomically subtract amount_cents if, and only if, the balance covers it.

    Raises:
        InvalidAmountError: If amount_cents <= 0.
        AccountNotFoundError: If the user has no account.
        InsufficientFundsError: If the balance is lower than amount_cents.
    """
    _require_positive(amount_cents)

    with storage_errors("deduct", user_uuid):
        result = await db.execute(
            update(Account)
            .where(Account.user_uuid == user_uuid)
            .where(Account.balance_cents >= amount_cents)
            .values(
                balance_cents=Account.balance_cents - amount_cents,
                total_consume_cents=Account.total_consume_cents + amount_cents,
            )
            .execution_options(synchronize_session=False)
        )

    if result.rowcount == 1:
        return

    account = await get_account(db, user_uuid)
    if account is None:
        raise AccountNotFoundError(user_uuid)
    raise InsufficientFundsError(
        user_uuid=user_uuid,
        requested=from_cents(amount_cents),
        available=account.balance,
    )
