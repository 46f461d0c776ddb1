"""Money Transfer Executor — submits a transfer and resolves its terminal outcome.

Invariants:
    - Payload: {"url": <money-transfer endpoint>, "request": <MoneyTransferRequest>}
    - The transfer POST is sent at most once per message; never retried
    - 2xx → PENDING, no reconciliation
    - 500 or 504 → exactly one reconciliation, which decides EXECUTED / FAILED / UNKNOWN
    - Other non-success statuses → FAILED with the provider's error message
    - Reconciliation always completes before the reply is produced

Design Decisions:
    - The request may arrive as a model, a dict or a JSON string; all three go
      through MoneyTransferRequest validation
    - A transport failure on the POST is raised (ProviderConnectionError), not
      reconciled: the request never reached the bank
"""

import logging
from collections.abc import Callable
from datetime import date
from typing import Any

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from conto.core.call_outcome import (
    AmbiguousFailure, CallOutcome, ProviderFailure, Success, TransportFailure,
)
from conto.core.errors import (
    InvalidRequestError, ProviderConnectionError, SerializationError,
)
from conto.core.transfer_mapping import to_provider_transfer
from conto.core.transfer_outcome import TransferResult, failed, pending
from conto.infrastructure.bank_api_client import BankApiClient
from conto.infrastructure.dispatch_bus import Message
from conto.schemas.accounts import MoneyTransferRequest
from conto.services.payloads import require_field
from conto.services.provider_replies import describe_provider_error
from conto.services.transfer_reconciliation import TransferReconciler

logger = logging.getLogger(__name__)


def parse_transfer_request(raw: Any) -> MoneyTransferRequest:
    """Validate a transfer request in any of its accepted shapes."""
    if isinstance(raw, MoneyTransferRequest):
        return raw
    try:
        if isinstance(raw, (str, bytes)):
            return MoneyTransferRequest.model_validate_json(raw)
        return MoneyTransferRequest.model_validate(raw)
    except ValidationError as e:
        logger.warning(f"Invalid money transfer request: {e.error_count()} errors")
        raise InvalidRequestError("Error parsing request JSON")


class MoneyTransferHandlers:
    """Bus handler for money transfers."""

    def __init__(
        self,
        client: BankApiClient,
        reconciler: TransferReconciler,
        today: Callable[[], date] = date.today,
    ):
        self._client = client
        self._reconciler = reconciler
        self._today = today

    async def execute_transfer(self, message: Message) -> dict:
        url = require_field(message.payload, "url")
        request = parse_transfer_request(message.payload.get("request"))

        wire = to_provider_transfer(request, self._today())
        try:
            body = wire.model_dump_json(by_alias=True)
        except PydanticSerializationError as e:
            raise SerializationError(f"Error serializing transfer body: {e}")

        logger.info(f"Submitting money transfer to {url}")
        outcome = await self._client.post_json(url, body)
        result = await self._resolve(outcome, request, url)
        logger.info(
            f"Money transfer outcome: {result.outcome.value}",
            extra={"status_code": getattr(outcome, "status_code", None)},
        )
        return result.to_reply()

    async def _resolve(
        self, outcome: CallOutcome, request: MoneyTransferRequest, url: str,
    ) -> TransferResult:
        if isinstance(outcome, Success):
            return pending()
        if isinstance(outcome, AmbiguousFailure):
            logger.warning(
                f"Received HTTP {outcome.status_code} - performing validation enquiry",
                extra={"status_code": outcome.status_code},
            )
            return await self._reconciler.reconcile(request, url)
        if isinstance(outcome, ProviderFailure):
            reason = describe_provider_error(outcome)
            logger.error(
                f"Bank API rejected transfer: {reason}",
                extra={"status_code": outcome.status_code},
            )
            return failed(reason)
        if isinstance(outcome, TransportFailure):
            raise ProviderConnectionError(outcome.reason)
        raise TypeError(f"Unexpected call outcome: {outcome!r}")
