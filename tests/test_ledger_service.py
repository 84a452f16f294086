"""
Tests for the account ledger service, called directly.

These tests verify the ledger rules independently of HTTP:
  - balance == total_recharge - total_consume after every operation
  - Totals never decrease
  - Deduct never drives the balance below zero
  - Invalid amounts and identities are rejected before any write
  - Unknown users and users without a wallet are reported as not found
  - Decimal amounts are exact to the cent, no float drift
"""

from decimal import Decimal

import pytest

from codeshare.exceptions import (
    AccountNotFoundError,
    DuplicateAccountError,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidIdentityError,
    UserNotFoundError,
)
from codeshare.models.user import User
from codeshare.repositories import user_repository
from codeshare.security import hash_password
from codeshare.services import account_service


def assert_invariant(account):
    assert account.balance == account.total_recharge - account.total_consume
    assert account.balance >= 0


# ---------------------------------------------------------------------------
# Ledger invariant
# ---------------------------------------------------------------------------

class TestLedgerInvariant:

    async def test_sequence_keeps_invariant(self, db_session, user):
        """balance == total_recharge - total_consume after every operation."""
        previous_recharge = Decimal("0")
        previous_consume = Decimal("0")
        operations = [
            ("recharge", "100.00"),
            ("deduct", "30.00"),
            ("recharge", "0.50"),
            ("deduct", "70.50"),
            ("recharge", "5"),
        ]
        for op, amount in operations:
            fn = getattr(account_service, op)
            account = await fn(db_session, user.uuid, Decimal(amount))
            assert_invariant(account)
            assert account.total_recharge >= previous_recharge
            assert account.total_consume >= previous_consume
            previous_recharge = account.total_recharge
            previous_consume = account.total_consume

        assert account.balance == Decimal("5.00")
        assert account.total_recharge == Decimal("105.50")
        assert account.total_consume == Decimal("100.50")

    async def test_recharge_deduct_scenario(self, db_session, user):
        """Recharge 100, deduct 30, then deduct 100 fails and leaves 70."""
        account = await account_service.get_account(db_session, user.uuid)
        assert account.balance == Decimal("0.00")

        account = await account_service.recharge(db_session, user.uuid, Decimal("100.00"))
        assert account.balance == Decimal("100.00")
        assert account.total_recharge == Decimal("100.00")

        account = await account_service.deduct(db_session, user.uuid, Decimal("30.00"))
        assert account.balance == Decimal("70.00")
        assert account.total_consume == Decimal("30.00")

        with pytest.raises(InsufficientFundsError):
            await account_service.deduct(db_session, user.uuid, Decimal("100.00"))
        account = await account_service.get_account(db_session, user.uuid)
        assert account.balance == Decimal("70.00")

    async def test_insufficient_funds_changes_nothing(self, db_session, user):
        """A refused deduct reports requested/available and writes nothing."""
        await account_service.recharge(db_session, user.uuid, Decimal("10.00"))

        with pytest.raises(InsufficientFundsError) as exc_info:
            await account_service.deduct(db_session, user.uuid, Decimal("10.01"))
        assert exc_info.value.requested == Decimal("10.01")
        assert exc_info.value.available == Decimal("10.00")

        account = await account_service.get_account(db_session, user.uuid)
        assert account.balance == Decimal("10.00")
        assert account.total_consume == Decimal("0.00")
        assert_invariant(account)


# ---------------------------------------------------------------------------
# Amount validation
# ---------------------------------------------------------------------------

class TestAmountValidation:

    @pytest.mark.parametrize(
        "amount",
        [Decimal("0"), Decimal("-1"), Decimal("0.001"), "abc", None, 0.1, True, Decimal("NaN")],
    )
    async def test_recharge_rejects(self, db_session, user, amount):
        """Invalid recharge amounts raise before any write."""
        with pytest.raises(InvalidAmountError):
            await account_service.recharge(db_session, user.uuid, amount)

        account = await account_service.get_account(db_session, user.uuid)
        assert account.balance == Decimal("0")
        assert account.total_recharge == Decimal("0")

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-0.01"), Decimal("2.555")])
    async def test_deduct_rejects(self, db_session, user, amount):
        """Invalid deduct amounts raise before any write."""
        await account_service.recharge(db_session, user.uuid, Decimal("10"))
        with pytest.raises(InvalidAmountError):
            await account_service.deduct(db_session, user.uuid, amount)

        account = await account_service.get_account(db_session, user.uuid)
        assert account.balance == Decimal("10.00")

    async def test_repeated_cents_are_exact(self, db_session, user):
        """Many small amounts add up exactly, with no float drift."""
        for _ in range(10):
            account = await account_service.recharge(db_session, user.uuid, Decimal("0.10"))
        assert account.balance == Decimal("1.00")

        for _ in range(3):
            account = await account_service.deduct(db_session, user.uuid, Decimal("0.10"))
        assert account.balance == Decimal("0.70")
        assert str(account.balance) == "0.70"


# ---------------------------------------------------------------------------
# Identity resolution
# ---------------------------------------------------------------------------

class TestIdentity:

    @pytest.mark.parametrize("identity", ["", "   ", None])
    async def test_blank_identity(self, db_session, identity):
        """Blank identities are rejected by every ledger operation."""
        with pytest.raises(InvalidIdentityError):
            await account_service.recharge(db_session, identity, Decimal("1"))
        with pytest.raises(InvalidIdentityError):
            await account_service.deduct(db_session, identity, Decimal("1"))
        with pytest.raises(InvalidIdentityError):
            await account_service.get_account(db_session, identity)

    async def test_unknown_user(self, db_session, user):
        """An identity with no user is reported as user-not-found."""
        with pytest.raises(UserNotFoundError):
            await account_service.recharge(db_session, "no-such-user", Decimal("1"))
        with pytest.raises(UserNotFoundError):
            await account_service.deduct(db_session, "no-such-user", Decimal("1"))

        account = await account_service.get_account(db_session, user.uuid)
        assert account.balance == Decimal("0")

    async def test_user_without_wallet(self, db_session):
        """A user with no account row is reported as account-not-found."""
        orphan = User(username="orphan", hashed_password=hash_password("SecurePass123"))
        await user_repository.create_user(db_session, orphan)

        with pytest.raises(AccountNotFoundError):
            await account_service.recharge(db_session, orphan.uuid, Decimal("1"))
        with pytest.raises(AccountNotFoundError):
            await account_service.deduct(db_session, orphan.uuid, Decimal("1"))
        with pytest.raises(AccountNotFoundError):
            await account_service.get_account(db_session, orphan.uuid)

    async def test_second_wallet_is_conflict(self, db_session, user):
        """A user can never get a second wallet."""
        with pytest.raises(DuplicateAccountError):
            await account_service.create_account(db_session, user.uuid)
