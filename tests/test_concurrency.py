"""
Concurrency tests against a file-backed SQLite database.

Each task gets its own session (and connection), like concurrent requests
do in production. In-memory SQLite is unsuitable here because every
session would share one connection.

These tests verify:
  - N concurrent likes add exactly N
  - Concurrent deducts never overdraw: exactly balance // amount succeed
  - Concurrent recharges are all applied
"""

import asyncio
from decimal import Decimal

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from codeshare.database import Base, enable_sqlite_foreign_keys
from codeshare.exceptions import InsufficientFundsError
from codeshare.services import account_service, auth_service, resource_service


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'concurrency.db'}",
        connect_args={"timeout": 30},
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def funded_user(session_factory):
    """A user whose wallet holds 100.00."""
    async with session_factory() as session:
        user, _ = await auth_service.signup(session, username="racer", password="SecurePass123")
        await account_service.recharge(session, user.uuid, Decimal("100.00"))
        await session.commit()
    return user


# ---------------------------------------------------------------------------
# Concurrent counters
# ---------------------------------------------------------------------------

class TestConcurrentCounters:

    async def test_concurrent_likes_add_exactly_n(self, session_factory, funded_user):
        """25 concurrent likes add exactly 25."""
        async with session_factory() as session:
            resource = await resource_service.create_resource(session, funded_user.id, "Hot take")
            await session.commit()

        async def like():
            async with session_factory() as session:
                await resource_service.increment_like(session, resource.id)
                await session.commit()

        await asyncio.gather(*(like() for _ in range(25)))

        async with session_factory() as session:
            fresh = await resource_service.get_resource(session, resource.id)
        assert fresh.like_count == 25
        assert fresh.view_count == 0


# ---------------------------------------------------------------------------
# Concurrent ledger
# ---------------------------------------------------------------------------

class TestConcurrentLedger:

    async def test_concurrent_deducts_never_overdraw(self, session_factory, funded_user):
        """Only as many deducts succeed as the balance covers."""
        async def spend() -> bool:
            async with session_factory() as session:
                try:
                    await account_service.deduct(session, funded_user.uuid, Decimal("10.00"))
                except InsufficientFundsError:
                    await session.rollback()
                    return False
                await session.commit()
                return True

        results = await asyncio.gather(*(spend() for _ in range(20)))

        assert results.count(True) == 10
        async with session_factory() as session:
            account = await account_service.get_account(session, funded_user.uuid)
        assert account.balance == Decimal("0.00")
        assert account.total_consume == Decimal("100.00")
        assert account.balance == account.total_recharge - account.total_consume

    async def test_concurrent_recharges_all_apply(self, session_factory, funded_user):
        """No concurrent recharge is lost."""
        async def top_up():
            async with session_factory() as session:
                await account_service.recharge(session, funded_user.uuid, Decimal("5.00"))
                await session.commit()

        await asyncio.gather(*(top_up() for _ in range(20)))

        async with session_factory() as session:
            account = await account_service.get_account(session, funded_user.uuid)
        assert account.balance == Decimal("200.00")
        assert account.total_recharge == Decimal("200.00")
