from ...core.config import settings
from .ledger_base import LedgerStoreBase, SupplierInUseError
from .ledger_memory import InMemoryLedgerStore
from .ledger_sqlite import SQLiteLedgerStore


def create_ledger_store(backend: str | None = None, db_path: str | None = None) -> LedgerStoreBase:
    """Build the store selected by LEDGER_BACKEND ("sqlite" or "memory")."""
    backend = (backend or settings.ledger_backend).lower()
    if backend == "memory":
        return InMemoryLedgerStore()
    if backend == "sqlite":
        return SQLiteLedgerStore(db_path or settings.database_path)
    raise ValueError(f"Unknown ledger backend: {backend!r}")


# Global instance (swap via the get_ledger_store dependency in tests)
ledger_store = create_ledger_store()

__all__ = [
    "LedgerStoreBase",
    "SupplierInUseError",
    "InMemoryLedgerStore",
    "SQLiteLedgerStore",
    "create_ledger_store",
    "ledger_store",
]
