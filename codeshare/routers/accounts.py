"""
Wallet router — the authenticated user's own account.

Endpoints (all require JWT, scoped to the caller's identity):
  GET  /account           — Balance and running totals
  POST /account/recharge  — Add money
  POST /account/deduct    — Spend money (422 on insufficient funds)

There is no path parameter: the account is always the one belonging to the
token's subject, so one user can never address another user's wallet.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from codeshare.database import get_db
from codeshare.dependencies import get_current_identity
from codeshare.schemas.account import AccountResponse, AmountRequest
from codeshare.services import account_service

router = APIRouter()


@router.get("", response_model=AccountResponse, summary="Get own wallet")
async def get_account(
    identity: str = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    return await account_service.get_account(db, identity)


@router.post("/recharge", response_model=AccountResponse, summary="Recharge own wallet")
async def recharge(
    request: AmountRequest,
    identity: str = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """
    Add **amount** (positive, at most two decimal places) to the balance.

    Returns the wallet after the recharge.
    """
    return await account_service.recharge(db, identity, request.amount)


@router.post("/deduct", response_model=AccountResponse, summary="Spend from own wallet")
async def deduct(
    request: AmountRequest,
    identity: str = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """
    Subtract **amount** from the balance.

    Fails with 422 and leaves the wallet untouched when the balance is
    lower than the amount.
    """
    return await account_service.deduct(db, identity, request.amount)
