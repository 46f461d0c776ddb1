"""Balance Worker — reads the account balance from the bank API.

Invariants:
    - Payload: {"url": <balance endpoint>}; one GET per message, no retry
    - Reply: {"balance", "availableBalance", "currency"}
    - Any non-success status fails with ProviderAPIError (500/504 included:
      a read has no side effect to reconcile)
"""

import logging

from conto.core.call_outcome import Success, TransportFailure
from conto.core.errors import ProviderAPIError, ProviderConnectionError
from conto.infrastructure.bank_api_client import BankApiClient
from conto.infrastructure.dispatch_bus import Message
from conto.schemas.accounts import BalanceResponse
from conto.schemas.provider import BalanceEnvelope
from conto.services.payloads import encode_reply, require_field
from conto.services.provider_replies import (
    describe_provider_error, parse_success_body,
)

logger = logging.getLogger(__name__)


class BalanceHandlers:
    """Bus handler for balance reads."""

    def __init__(self, client: BankApiClient):
        self._client = client

    async def get_balance(self, message: Message) -> dict:
        url = require_field(message.payload, "url")
        logger.info("Balance request for %s", url)

        outcome = await self._client.get(url)
        if isinstance(outcome, TransportFailure):
            raise ProviderConnectionError(outcome.reason)
        if not isinstance(outcome, Success):
            raise ProviderAPIError(
                describe_provider_error(outcome), outcome.status_code,
            )

        envelope = parse_success_body(outcome.body, BalanceEnvelope)
        payload = envelope.payload
        return encode_reply(BalanceResponse(
            balance=payload.balance,
            available_balance=payload.available_balance,
            currency=payload.currency,
        ))
