"""ORM Models — SQLAlchemy declarative models for stored entities.

Invariants:
    - All models inherit from Base (db/base.py)

Design Decisions:
    - All models imported here so Base.metadata is complete for create_all and alembic
"""

from conto.models.bank_transaction import BankTransaction  # noqa: F401
