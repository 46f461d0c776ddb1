"""Dispatch bus topic names — one per worker."""

BALANCE_TOPIC = "balance"
TRANSACTIONS_TOPIC = "transactions"
MONEY_TRANSFER_TOPIC = "money_transfer"
TRANSACTION_PERSISTENCE_TOPIC = "transaction_persistence"
