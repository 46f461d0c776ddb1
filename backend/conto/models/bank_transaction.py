"""BankTransaction ORM — transactions fetched from the bank, stored once per id.

Invariants:
    - transaction_id is the primary key: the store itself rejects a second row
      for the same id
    - Append-only: rows are never updated or deleted by the gateway

Design Decisions:
    - Dates kept as the provider's ISO strings: stored exactly as observed
    - Numeric(19, 4): keeps sub-cent provider amounts without float rounding
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Text, DateTime, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from conto.db.base import Base


class BankTransaction(Base):
    """One booked account transaction."""
    __tablename__ = "conto_transactions"

    transaction_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    operation_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    accounting_date: Mapped[str | None] = mapped_column(
        String(10), nullable=True, index=True,
    )
    value_date: Mapped[str | None] = mapped_column(String(10), nullable=True)
    type_enumeration: Mapped[str | None] = mapped_column(
        String(50), nullable=True,
    )
    type_value: Mapped[str | None] = mapped_column(String(100), nullable=True)
    amount: Mapped[Decimal | None] = mapped_column(
        Numeric(19, 4), nullable=True,
    )
    currency: Mapped[str | None] = mapped_column(String(3), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
