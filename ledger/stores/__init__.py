from ledger.config import settings
from ledger.stores.base import ClientStore, LedgerStore, TransactionStore
from ledger.stores.memory import MemoryStore
from ledger.stores.sql import SQLStore

__all__ = [
    "ClientStore",
    "TransactionStore",
    "LedgerStore",
    "MemoryStore",
    "SQLStore",
    "create_store",
]


def create_store(backend: str = None, database_url: str = None) -> LedgerStore:
    """
    Build the store backend selected in the settings (or by <backend>).

    :param backend: (str) optional; "sql" or "memory".
    :param database_url: (str) optional; database URL for the "sql" backend.
    :returns: (LedgerStore) the new store.
    """
    backend = (backend or settings.backend).lower()
    if backend == "memory":
        return MemoryStore()
    if backend == "sql":
        return SQLStore.from_url(database_url)
    raise ValueError(f"Unknown store backend: {backend!r}")
