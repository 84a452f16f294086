"""
Account model — the per-user wallet.

Exactly one Account exists per User. It is created in the same database
transaction as the User at registration time and is never deleted.

Columns:
  - balance_cents: current balance
  - total_recharge_cents: lifetime sum of successful recharges
  - total_consume_cents: lifetime sum of successful deductions

Amounts are stored as integer cents and exposed as two-place Decimals
through the `balance`, `total_recharge` and `total_consume` properties,
which is what the API schemas read.

Invariant: balance == total_recharge - total_consume. Both totals only ever
increase. CHECK constraints reject a negative balance at the database level
even if a buggy caller bypasses the conditional update in the repository.
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from codeshare.database import Base
from codeshare.money import from_cents


class Account(Base):
    __tablename__ = "accounts"

    __table_args__ = (
        CheckConstraint("balance_cents >= 0", name="ck_accounts_non_negative_balance"),
        CheckConstraint("total_recharge_cents >= 0", name="ck_accounts_non_negative_recharge"),
        CheckConstraint("total_consume_cents >= 0", name="ck_accounts_non_negative_consume"),
    )

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    # UNIQUE enforces one account per user
    user_uuid: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.uuid"),
        unique=True,
        nullable=False,
        index=True,
    )

    balance_cents: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
    )

    total_recharge_cents: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
    )

    total_consume_cents: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # --- Relationships ---
    user: Mapped["User"] = relationship(
        back_populates="account",
    )

    @property
    def balance(self) -> Decimal:
        return from_cents(self.balance_cents)

    @property
    def total_recharge(self) -> Decimal:
        return from_cents(self.total_recharge_cents)

    @property
    def total_consume(self) -> Decimal:
        return from_cents(self.total_consume_cents)
