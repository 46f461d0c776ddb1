"""Transactions Worker — lists account transactions and hands them to persistence.

Invariants:
    - Payload: {"url": <transactions endpoint>}; one GET per message, no retry
    - Reply: {"list": [transaction, ...]} with camelCase transaction fields
    - The persistence request is sent only after the reply has been delivered
    - Persistence is fire-and-forget: nothing that happens while triggering or
      running it can change the reply already sent
"""

import logging
from collections.abc import Sequence

from conto.core.call_outcome import Success, TransportFailure
from conto.core.errors import ProviderAPIError, ProviderConnectionError
from conto.infrastructure.bank_api_client import BankApiClient
from conto.infrastructure.dispatch_bus import DispatchBus, Message
from conto.schemas.accounts import TransactionListResponse
from conto.schemas.provider import TransactionListEnvelope, TransactionRecord
from conto.services.payloads import encode_reply, require_field
from conto.services.provider_replies import (
    describe_provider_error, parse_success_body,
)
from conto.services.topics import TRANSACTION_PERSISTENCE_TOPIC

logger = logging.getLogger(__name__)


class TransactionsHandlers:
    """Bus handler for transaction-list reads."""

    def __init__(self, client: BankApiClient, bus: DispatchBus):
        self._client = client
        self._bus = bus

    async def list_transactions(self, message: Message) -> None:
        url = require_field(message.payload, "url")
        logger.info("Transactions request for %s", url)

        outcome = await self._client.get(url)
        if isinstance(outcome, TransportFailure):
            raise ProviderConnectionError(outcome.reason)
        if not isinstance(outcome, Success):
            raise ProviderAPIError(
                describe_provider_error(outcome), outcome.status_code,
            )

        envelope = parse_success_body(outcome.body, TransactionListEnvelope)
        transactions = envelope.transactions
        message.reply(encode_reply(TransactionListResponse(items=transactions)))
        self._trigger_persistence(transactions, message.correlation_id)

    def _trigger_persistence(
        self, transactions: Sequence[TransactionRecord], correlation_id: str | None,
    ) -> None:
        try:
            if not transactions:
                logger.debug("No transactions to persist")
                return
            logger.info(
                "Triggering async persistence of %d transactions",
                len(transactions),
                extra={"transaction_count": len(transactions)},
            )
            self._bus.send(
                TRANSACTION_PERSISTENCE_TOPIC,
                {"transactions": list(transactions)},
                correlation_id=correlation_id,
            )
        except Exception as e:
            # reply already delivered
            logger.error(
                f"Error triggering async persistence: {e}", exc_info=True,
            )
