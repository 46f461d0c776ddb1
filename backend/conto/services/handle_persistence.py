"""Transaction Persistence Worker — stores fetched transactions exactly once per id.

Invariants:
    - Payload: {"transactions": [TransactionRecord | dict, ...]}
    - Records without a transaction_id are skipped, never stored
    - Within a batch the first occurrence of an id wins
    - One existence query for the whole batch; new rows go in one multi-row insert
    - Idempotent: persisting the same batch twice leaves one row per id
    - Failures are logged and swallowed: nobody waits on this topic
    - Only PostgreSQL and SQLite are supported: any other dialect is refused
      when the handler is built

Design Decisions:
    - Duplicate-safe insert (ON CONFLICT DO NOTHING on transaction_id) on
      PostgreSQL and SQLite: two overlapping batches racing past the existence
      query still leave one row per id
    - created_at written explicitly per row: multi-row inserts skip ORM defaults
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from conto.core.errors import DatabaseError
from conto.infrastructure.database import DatabaseSessionManager
from conto.infrastructure.dispatch_bus import Message
from conto.models.bank_transaction import BankTransaction
from conto.schemas.provider import TransactionRecord

logger = logging.getLogger(__name__)


def unique_by_id(records: Iterable[TransactionRecord]) -> list[TransactionRecord]:
    """Drop records with no id and later duplicates of an id already seen."""
    seen: set[str] = set()
    unique: list[TransactionRecord] = []
    for record in records:
        if not record.transaction_id:
            logger.warning("Skipping transaction without id")
            continue
        if record.transaction_id in seen:
            continue
        seen.add(record.transaction_id)
        unique.append(record)
    return unique


def _to_row(record: TransactionRecord, created_at: datetime) -> dict:
    return {
        "transaction_id": record.transaction_id,
        "operation_id": record.operation_id,
        "accounting_date": record.accounting_date,
        "value_date": record.value_date,
        "type_enumeration": record.type.enumeration if record.type else None,
        "type_value": record.type.value if record.type else None,
        "amount": record.amount,
        "currency": record.currency,
        "description": record.description,
        "created_at": created_at,
    }


_DUPLICATE_SAFE_INSERTS = {"postgresql": pg_insert, "sqlite": sqlite_insert}


class TransactionPersistenceHandlers:
    """Bus handler for fire-and-forget transaction persistence."""

    def __init__(self, db_manager: DatabaseSessionManager):
        dialect = db_manager.engine.dialect.name
        if dialect not in _DUPLICATE_SAFE_INSERTS:
            raise ValueError(
                f"Transaction persistence supports PostgreSQL and SQLite, not '{dialect}'"
            )
        self._db = db_manager
        self._insert = _DUPLICATE_SAFE_INSERTS[dialect]

    async def persist_transactions(self, message: Message) -> None:
        raw = (
            message.payload.get("transactions")
            if isinstance(message.payload, dict) else None
        )
        if not isinstance(raw, list):
            logger.warning("No transactions found in persistence request")
            return

        try:
            records = [
                r if isinstance(r, TransactionRecord)
                else TransactionRecord.model_validate(r)
                for r in raw
            ]
        except ValidationError as e:
            logger.error(f"Error parsing transactions for persistence: {e}")
            return

        try:
            await self.persist_batch(records)
        except DatabaseError as e:
            logger.error(f"Transaction persistence failed: {e.message}")

    async def persist_batch(self, records: Sequence[TransactionRecord]) -> int:
        """Store records whose id is not yet present. Returns rows inserted."""
        unique = unique_by_id(records)
        if not unique:
            logger.info("No transactions with an id to persist")
            return 0

        ids = [r.transaction_id for r in unique]
        async with self._db.session() as db:
            result = await db.execute(
                select(BankTransaction.transaction_id).where(
                    BankTransaction.transaction_id.in_(ids),
                )
            )
            existing = set(result.scalars().all())

            now = datetime.now(timezone.utc)
            rows = [
                _to_row(r, now) for r in unique
                if r.transaction_id not in existing
            ]
            if not rows:
                logger.info(
                    "All %d transactions already stored", len(unique),
                    extra={"transaction_count": len(unique)},
                )
                return 0

            stmt = self._insert(BankTransaction).values(rows).on_conflict_do_nothing(
                index_elements=["transaction_id"],
            )
            inserted = await db.execute(stmt)
            count = inserted.rowcount if inserted.rowcount >= 0 else len(rows)
            await db.commit()

        logger.info(
            "Persisted %d new transactions (%d already stored)",
            count, len(existing),
            extra={"transaction_count": count},
        )
        return count
