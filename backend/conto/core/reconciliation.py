"""Reconciliation Matching — decides whether a listed transaction is the transfer we sent.

Invariants:
    - A candidate matches iff: amount < 0 (outgoing), | |amount| - |requested| | < 0.01,
      and currency equals the requested currency exactly (case-sensitive)
    - Description equality is computed for diagnostics only; it never decides a match
    - First match in provider order wins; None or empty list → no match
    - Pure: no IO, Decimal arithmetic only

Design Decisions:
    - Absolute-value comparison tolerates provider-side sign and rounding quirks
    - Strict "< 0.01": a difference of exactly one cent is a different transfer
"""

import logging
from collections.abc import Iterable
from decimal import Decimal

from conto.schemas.provider import TransactionRecord

logger = logging.getLogger(__name__)

AMOUNT_TOLERANCE = Decimal("0.01")


def is_matching_transfer(
    candidate: TransactionRecord, amount: Decimal, currency: str,
) -> bool:
    """Apply the match predicate to a single listed transaction."""
    if candidate.amount is None:
        return False
    is_outgoing = candidate.amount < 0
    difference = abs(abs(candidate.amount) - abs(amount))
    amount_matches = difference < AMOUNT_TOLERANCE
    currency_matches = candidate.currency == currency
    return is_outgoing and amount_matches and currency_matches


def find_matching_transfer(
    transactions: Iterable[TransactionRecord] | None,
    amount: Decimal,
    currency: str,
    description: str | None = None,
) -> TransactionRecord | None:
    """Return the first listed transaction matching the requested transfer."""
    if not transactions:
        return None
    logger.debug(
        "Searching for transfer: amount=%s, currency=%s, description=%s",
        amount, currency, description,
    )
    for candidate in transactions:
        matches = is_matching_transfer(candidate, amount, currency)
        description_matches = (
            description is not None and description == candidate.description
        )
        logger.debug(
            "Checking transaction %s -> amount=%s, currency=%s, "
            "description_matches=%s, matches=%s",
            candidate.transaction_id, candidate.amount, candidate.currency,
            description_matches, matches,
        )
        if matches:
            return candidate
    return None
