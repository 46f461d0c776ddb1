"""Initial schema — conto_transactions.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "conto_transactions",
        sa.Column("transaction_id", sa.String(64), primary_key=True),
        sa.Column("operation_id", sa.String(64), nullable=True),
        sa.Column("accounting_date", sa.String(10), nullable=True),
        sa.Column("value_date", sa.String(10), nullable=True),
        sa.Column("type_enumeration", sa.String(50), nullable=True),
        sa.Column("type_value", sa.String(100), nullable=True),
        sa.Column("amount", sa.Numeric(19, 4), nullable=True),
        sa.Column("currency", sa.String(3), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_conto_transactions_accounting_date",
        "conto_transactions", ["accounting_date"],
    )


def downgrade() -> None:
    op.drop_index("ix_conto_transactions_accounting_date", table_name="conto_transactions")
    op.drop_table("conto_transactions")
