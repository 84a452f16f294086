"""
Pydantic schemas for the wallet endpoints.

Amounts travel as decimal strings ("100.00") in both directions, so no
float ever touches a balance. The request type is Decimal; validation of
sign and precision happens in codeshare.money so the HTTP path and direct
service callers share one rule.
"""

from decimal import Decimal

from pydantic import BaseModel, field_serializer


class AmountRequest(BaseModel):
    """Request body for POST /account/recharge and POST /account/deduct."""
    amount: Decimal


class AccountResponse(BaseModel):
    """Wallet snapshot. balance == total_recharge - total_consume."""
    user_uuid: str
    balance: Decimal
    total_recharge: Decimal
    total_consume: Decimal

    model_config = {"from_attributes": True}

    @field_serializer("balance", "total_recharge", "total_consume")
    def _as_string(self, value: Decimal) -> str:
        return f"{value:.2f}"
