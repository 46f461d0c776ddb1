"""Account Routes — balance, transactions and money transfers over the dispatch bus.

Invariants:
    - Routes build the bank endpoint URL from settings and make exactly one
      bus request; no bank API call happens in the route itself
    - Worker failures propagate as ContoError and are rendered by error_handlers
    - A transfer reply is always 200: its own status field says OK or ERROR

Design Decisions:
    - Bus read from app.state (created in the lifespan), settings via Depends:
      both replaceable in tests without patching modules
"""

import logging

from fastapi import APIRouter, Depends, Query, Request

from conto.config import Settings, get_settings
from conto.core.bank_endpoints import balance_url, money_transfer_url, transactions_url
from conto.infrastructure.dispatch_bus import DispatchBus
from conto.schemas.accounts import (
    ISO_DATE_PATTERN,
    BalanceResponse,
    MoneyTransferRequest,
    MoneyTransferResponse,
    TransactionListResponse,
)
from conto.services.topics import BALANCE_TOPIC, MONEY_TRANSFER_TOPIC, TRANSACTIONS_TOPIC

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/accounts", tags=["accounts"])


def get_bus(request: Request) -> DispatchBus:
    return request.app.state.bus


@router.get("/balance", response_model=BalanceResponse)
async def get_balance(
    bus: DispatchBus = Depends(get_bus),
    settings: Settings = Depends(get_settings),
):
    """Current and available balance of the configured account."""
    url = balance_url(settings.bank_api_base_url, settings.bank_account_id)
    return await bus.request(BALANCE_TOPIC, {"url": url})


@router.get("/transactions", response_model=TransactionListResponse)
async def list_transactions(
    from_accounting_date: str = Query(
        ..., alias="fromAccountingDate", pattern=ISO_DATE_PATTERN,
    ),
    to_accounting_date: str = Query(
        ..., alias="toAccountingDate", pattern=ISO_DATE_PATTERN,
    ),
    bus: DispatchBus = Depends(get_bus),
    settings: Settings = Depends(get_settings),
):
    """Booked transactions between two accounting dates (inclusive)."""
    url = transactions_url(
        settings.bank_api_base_url, settings.bank_account_id,
        from_accounting_date, to_accounting_date,
    )
    return await bus.request(TRANSACTIONS_TOPIC, {"url": url})


@router.post("/payments/money-transfers", response_model=MoneyTransferResponse)
async def create_money_transfer(
    body: MoneyTransferRequest,
    bus: DispatchBus = Depends(get_bus),
    settings: Settings = Depends(get_settings),
):
    """Submit a money transfer; the reply carries its terminal outcome."""
    url = money_transfer_url(settings.bank_api_base_url, settings.bank_account_id)
    return await bus.request(MONEY_TRANSFER_TOPIC, {"url": url, "request": body})
