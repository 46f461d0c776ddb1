"""Transfer Reconciliation — resolves an ambiguous transfer by querying booked transactions.

Invariants:
    - Account id and API base are both derived from the transfer URL
    - Exactly one transactions query per reconciliation, for today's
      accounting date only (from = to = today)
    - Never raises for provider trouble: every failure maps to UNKNOWN with a
      message naming the step that failed
    - No match in a successfully parsed list → FAILED

Design Decisions:
    - today is injectable so tests pin the query window
    - Transport failure and non-success status get distinct UNKNOWN messages:
      the caller can tell "provider unreachable" from "provider said no"
"""

import logging
from collections.abc import Callable
from datetime import date

from pydantic import ValidationError

from conto.core.bank_endpoints import base_url_of, extract_account_id, transactions_url
from conto.core.call_outcome import Success, TransportFailure
from conto.core.reconciliation import find_matching_transfer
from conto.core.transfer_outcome import (
    MSG_CANNOT_EXTRACT_ACCOUNT_ID,
    MSG_ENQUIRY_FAILED,
    MSG_ENQUIRY_PARSING_FAILED,
    MSG_ENQUIRY_UNAVAILABLE,
    MSG_NO_MATCHING_TRANSACTION,
    TransferResult,
    executed,
    failed,
    unknown,
)
from conto.infrastructure.bank_api_client import BankApiClient
from conto.schemas.accounts import MoneyTransferRequest
from conto.schemas.provider import TransactionListEnvelope

logger = logging.getLogger(__name__)


class TransferReconciler:
    """Looks for the outgoing transaction a transfer would have produced."""

    def __init__(
        self,
        client: BankApiClient,
        today: Callable[[], date] = date.today,
    ):
        self._client = client
        self._today = today

    async def reconcile(
        self, request: MoneyTransferRequest, transfer_url: str,
    ) -> TransferResult:
        account_id = extract_account_id(transfer_url)
        base_url = base_url_of(transfer_url)
        if account_id is None or base_url is None:
            logger.error(f"Cannot extract account id from {transfer_url}")
            return unknown(MSG_CANNOT_EXTRACT_ACCOUNT_ID)

        day = self._today().isoformat()
        query_url = transactions_url(base_url, account_id, day, day)
        logger.info(f"Validation enquiry: {query_url}")

        outcome = await self._client.get(query_url)
        if isinstance(outcome, TransportFailure):
            logger.error(f"Validation enquiry unavailable: {outcome.reason}")
            return unknown(MSG_ENQUIRY_UNAVAILABLE)
        if not isinstance(outcome, Success):
            logger.error(
                f"Validation enquiry failed with HTTP {outcome.status_code}",
                extra={"status_code": outcome.status_code},
            )
            return unknown(MSG_ENQUIRY_FAILED)

        try:
            envelope = TransactionListEnvelope.model_validate_json(outcome.body)
        except ValidationError as e:
            logger.error(f"Error parsing validation enquiry response: {e}")
            return unknown(MSG_ENQUIRY_PARSING_FAILED)

        transactions = envelope.transactions
        match = find_matching_transfer(
            transactions, request.amount, request.currency, request.description,
        )
        if match is None:
            logger.warning(
                "No matching transaction among %d listed", len(transactions),
                extra={"transaction_count": len(transactions)},
            )
            return failed(MSG_NO_MATCHING_TRANSACTION)

        logger.info(f"Found matching transaction {match.transaction_id}")
        return executed()
