"""
filename: smoke.py
author: Valentin Piombo
email: valenp97@gmail.com
description: Smoke test of a store backend: create a client, bill it, recompute its balance.
    Run with `python -m ledger.smoke`.
"""

import logging

from ledger.config import configure_logging
from ledger.entities import Client
from ledger.filters import ClientFilter
from ledger.stores import LedgerStore, create_store
from ledger.utils.tools import current_timestamp

logger = logging.getLogger(__name__)


def run_smoke_test(store: LedgerStore, name: str = "lul") -> Client:
    """
    Exercise the main path of a store and return the client as stored at the end, whose
    balance should be 400 - 1000 = -600.

    :param store: (LedgerStore) backend to exercise.
    :param name: (str) name of the client to create.
    :returns: (Client) the refreshed client.
    """
    added = store.add_client(name, "1")
    client = next(store.get_clients(ClientFilter().with_name(name).with_id(added.id)))
    logger.info("Created %r", client)
    store.add_transaction(client, 1000, 400, "pague weeee", current_timestamp())
    store.recompute_balance(client)
    client = next(store.get_clients(ClientFilter().with_id(client.id)))
    logger.info("After recompute: %r", client)
    return client


if __name__ == "__main__":
    configure_logging()
    run_smoke_test(create_store())
