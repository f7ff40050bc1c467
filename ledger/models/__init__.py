from ledger.database import Base

from .alias import Alias
from .client import Client
from .transaction import Transaction

__all__ = ["Base", "Client", "Alias", "Transaction"]
