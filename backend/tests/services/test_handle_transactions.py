"""Tests for the transactions worker — reply first, persistence after.

Invariants:
    - The reply lists exactly the fetched transactions
    - Fetched rows are stored once the fire-and-forget persistence has run
    - Nothing on the persistence side changes the reply
"""

import httpx
import pytest

from conto.core.bank_endpoints import transactions_url
from conto.core.errors import ProviderAPIError
from conto.infrastructure.dispatch_bus import DispatchBus
from conto.services.handle_transactions import TransactionsHandlers
from conto.services.topics import TRANSACTION_PERSISTENCE_TOPIC, TRANSACTIONS_TOPIC

from tests.fake_bank import (
    ACCOUNT_ID,
    BASE_URL,
    error_body,
    transaction,
    transactions_body,
)

URL = transactions_url(BASE_URL, ACCOUNT_ID, "2026-10-01", "2026-10-19")


async def test_reply_lists_fetched_transactions(wired_bus, fake_bank):
    fake_bank.on("GET", "/transactions", httpx.Response(200, json=transactions_body(
        transaction("T1", -100.5), transaction("T2", 250.0, description="Salary"),
    )))

    reply = await wired_bus.request(TRANSACTIONS_TOPIC, {"url": URL})

    assert [t["transactionId"] for t in reply["list"]] == ["T1", "T2"]
    first = reply["list"][0]
    assert first["amount"] == -100.5
    assert first["type"] == {"enumeration": "BBT", "value": "BONIFICO"}
    assert first["accountingDate"] == "2026-10-19"


async def test_fetched_transactions_are_persisted(
    wired_bus, fake_bank, stored_transactions,
):
    fake_bank.on("GET", "/transactions", httpx.Response(200, json=transactions_body(
        transaction("T1", -100.5), transaction("T2", 250.0),
    )))

    await wired_bus.request(TRANSACTIONS_TOPIC, {"url": URL})
    await wired_bus.drain()

    rows = await stored_transactions()
    assert [r.transaction_id for r in rows] == ["T1", "T2"]
    assert rows[0].type_value == "BONIFICO"


async def test_empty_list_replies_and_persists_nothing(
    wired_bus, fake_bank, stored_transactions,
):
    fake_bank.on("GET", "/transactions", httpx.Response(200, json=transactions_body()))

    reply = await wired_bus.request(TRANSACTIONS_TOPIC, {"url": URL})
    await wired_bus.drain()

    assert reply == {"list": []}
    assert await stored_transactions() == []


async def test_missing_payload_list_is_empty(wired_bus, fake_bank):
    fake_bank.on("GET", "/transactions", httpx.Response(200, json={"status": "OK"}))

    assert await wired_bus.request(TRANSACTIONS_TOPIC, {"url": URL}) == {"list": []}


async def test_provider_error_skips_persistence(
    wired_bus, fake_bank, stored_transactions,
):
    fake_bank.on(
        "GET", "/transactions",
        httpx.Response(400, json=error_body("REQ017", "Invalid date")),
    )

    with pytest.raises(ProviderAPIError):
        await wired_bus.request(TRANSACTIONS_TOPIC, {"url": URL})
    await wired_bus.drain()
    assert await stored_transactions() == []


async def test_persistence_failure_does_not_affect_reply(fake_bank, bank_client):
    bus = DispatchBus(default_timeout=5.0)
    handlers = TransactionsHandlers(bank_client, bus)
    persisted = []

    async def failing_store(message):
        persisted.append(message.payload)
        raise RuntimeError("store down")

    bus.subscribe(TRANSACTIONS_TOPIC, handlers.list_transactions)
    bus.subscribe(TRANSACTION_PERSISTENCE_TOPIC, failing_store)
    fake_bank.on("GET", "/transactions", httpx.Response(200, json=transactions_body(
        transaction("T1", -100.5),
    )))

    reply = await bus.request(TRANSACTIONS_TOPIC, {"url": URL})
    await bus.drain()

    assert len(reply["list"]) == 1
    assert len(persisted) == 1


async def test_persistence_request_carries_correlation_id(fake_bank, bank_client):
    bus = DispatchBus(default_timeout=5.0)
    handlers = TransactionsHandlers(bank_client, bus)
    seen = []

    async def spy(message):
        seen.append(message.correlation_id)

    bus.subscribe(TRANSACTIONS_TOPIC, handlers.list_transactions)
    bus.subscribe(TRANSACTION_PERSISTENCE_TOPIC, spy)
    fake_bank.on("GET", "/transactions", httpx.Response(200, json=transactions_body(
        transaction("T1", -100.5),
    )))

    await bus.request(TRANSACTIONS_TOPIC, {"url": URL}, correlation_id="req-42")
    await bus.drain()
    assert seen == ["req-42"]


async def test_reply_survives_missing_persistence_worker(fake_bank, bank_client):
    bus = DispatchBus(default_timeout=5.0)
    bus.subscribe(
        TRANSACTIONS_TOPIC, TransactionsHandlers(bank_client, bus).list_transactions,
    )
    fake_bank.on("GET", "/transactions", httpx.Response(200, json=transactions_body(
        transaction("T1", -100.5),
    )))

    reply = await bus.request(TRANSACTIONS_TOPIC, {"url": URL})
    assert len(reply["list"]) == 1
