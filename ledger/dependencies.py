"""
filename: dependencies.py
author: Valentin Piombo
email: valenp97@gmail.com
description: Module for the FastAPI dependencies shared by the routers.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from ledger.stores import LedgerStore, create_store


@lru_cache
def get_store() -> LedgerStore:
    """Store backend selected in the settings, created on first use and then reused."""
    return create_store()


store_dependency = Annotated[LedgerStore, Depends(get_store)]
