"""Services Layer — bus workers for balance, transactions, transfers and persistence.

Invariants:
    - One handler class per worker, one topic per handler method
    - Topic → handler wiring is an explicit list in worker_registry (no auto-discovery)
"""
