"""Worker Registry — subscribes every worker to its bus topic.

Invariants:
    - One call per bus; each topic bound exactly once
    - The money transfer executor and its reconciler share one bank client
"""

from collections.abc import Callable
from datetime import date

from conto.infrastructure.bank_api_client import BankApiClient
from conto.infrastructure.database import DatabaseSessionManager
from conto.infrastructure.dispatch_bus import DispatchBus
from conto.services.handle_balance import BalanceHandlers
from conto.services.handle_money_transfer import MoneyTransferHandlers
from conto.services.handle_persistence import TransactionPersistenceHandlers
from conto.services.handle_transactions import TransactionsHandlers
from conto.services.topics import (
    BALANCE_TOPIC,
    MONEY_TRANSFER_TOPIC,
    TRANSACTION_PERSISTENCE_TOPIC,
    TRANSACTIONS_TOPIC,
)
from conto.services.transfer_reconciliation import TransferReconciler


def register_workers(
    bus: DispatchBus,
    bank_client: BankApiClient,
    db_manager: DatabaseSessionManager,
    today: Callable[[], date] = date.today,
) -> None:
    balance = BalanceHandlers(bank_client)
    transactions = TransactionsHandlers(bank_client, bus)
    transfers = MoneyTransferHandlers(
        bank_client, TransferReconciler(bank_client, today), today,
    )
    persistence = TransactionPersistenceHandlers(db_manager)

    bus.subscribe(BALANCE_TOPIC, balance.get_balance)
    bus.subscribe(TRANSACTIONS_TOPIC, transactions.list_transactions)
    bus.subscribe(MONEY_TRANSFER_TOPIC, transfers.execute_transfer)
    bus.subscribe(TRANSACTION_PERSISTENCE_TOPIC, persistence.persist_transactions)
