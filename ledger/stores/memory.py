"""
filename: memory.py
author: Valentin Piombo
email: valenp97@gmail.com
description: Module for the in-memory store backend, useful for tests and for embedding the
    ledger without a database engine. Not safe for concurrent mutation; wrap the whole store
    in a lock if several threads share it.
"""

import logging
from collections import defaultdict
from itertools import count
from typing import Iterator

from ledger.entities import Alias, Client, Transaction, client_id_of
from ledger.exceptions import NotFound
from ledger.filters import ClientFilter, TransactionFilter
from ledger.stores.base import (
    LedgerStore,
    validate_anonymous_payment,
    validate_client_name,
    validate_transaction_fields,
)
from ledger.utils.tools import current_timestamp

logger = logging.getLogger(__name__)


class MemoryStore(LedgerStore):
    def __init__(self):
        self._clients: dict[int, Client] = {}
        self._aliases: dict[int, Alias] = {}
        self._transactions: dict[int, Transaction] = {}
        # One counter per collection, ids start at 1 and are never handed out twice
        self._client_ids = count(1)
        self._alias_ids = count(1)
        self._transaction_ids = count(1)

    @staticmethod
    def _replace(collection: dict, entry):
        """Swap the stored entry having the same id for <entry>."""
        del collection[entry.id]
        collection[entry.id] = entry
        return entry

    @staticmethod
    def _ordered(collection: dict) -> list:
        return sorted(collection.values())

    def _get_client(self, client: Client | int) -> Client:
        client_id = client_id_of(client)
        try:
            return self._clients[client_id]
        except KeyError:
            raise NotFound(f"Client {client_id} not found") from None

    def _get_transaction(self, id: int) -> Transaction:
        try:
            return self._transactions[id]
        except KeyError:
            raise NotFound(f"Transaction {id} not found") from None

    # Clients

    def add_client(self, name: str, detail: str | None = None) -> Client:
        validate_client_name(name)
        client = Client(id=next(self._client_ids), name=name, detail=detail, balance=0)
        self._clients[client.id] = client
        logger.debug("Added client %s", client.id)
        return client

    def update_client(self, client: Client) -> Client:
        validate_client_name(client.name)
        stored = self._get_client(client)
        updated = stored.model_copy(update={"name": client.name, "detail": client.detail})
        return self._replace(self._clients, updated)

    def remove_client(self, id: int) -> None:
        if self._clients.pop(id, None) is None:
            return
        # Cascade: drop the aliases, keep the transactions as anonymous
        for alias in [a for a in self._aliases.values() if a.client_id == id]:
            del self._aliases[alias.id]
        for transaction in [t for t in self._transactions.values() if t.client_id == id]:
            self._replace(self._transactions, transaction.model_copy(update={"client_id": None}))
        logger.debug("Removed client %s", id)

    def get_clients(self, filter: ClientFilter | None = None) -> Iterator[Client]:
        filter = filter or ClientFilter()
        aliases_by_client = defaultdict(list)
        # Aliases only matter to the alias field
        if filter.alias is not None:
            for alias in self._aliases.values():
                aliases_by_client[alias.client_id].append(alias)
        matches = [
            client
            for client in self._ordered(self._clients)
            if filter.matches(client, aliases_by_client.get(client.id, ()))
        ]
        return iter(matches)

    # Aliases

    def _aliases_of(self, client_id: int) -> list[Alias]:
        return [a for a in self._ordered(self._aliases) if a.client_id == client_id]

    def add_alias(self, client: Client | int, alias: str) -> Alias:
        stored = self._get_client(client)
        new_alias = Alias(id=next(self._alias_ids), alias=alias, client_id=stored.id)
        self._aliases[new_alias.id] = new_alias
        return new_alias

    def get_aliases(self, client: Client | int) -> Iterator[Alias]:
        return iter(self._aliases_of(client_id_of(client)))

    def remove_alias(self, alias_id: int) -> None:
        self._aliases.pop(alias_id, None)

    def update_alias(self, alias: Alias) -> Alias:
        if alias.id not in self._aliases:
            raise NotFound(f"Alias {alias.id} not found")
        # The owner of an alias never changes
        updated = self._aliases[alias.id].model_copy(update={"alias": alias.alias})
        return self._replace(self._aliases, updated)

    # Balance

    def recompute_balance(self, client: Client | int) -> Client:
        stored = self._get_client(client)
        balance = sum(
            t.payment - t.price for t in self._transactions.values() if t.client_id == stored.id
        )
        return self._replace(self._clients, stored.model_copy(update={"balance": balance}))

    def adjust_balance(self, client_id: int, delta: int) -> Client:
        stored = self._get_client(client_id)
        return self._replace(
            self._clients, stored.model_copy(update={"balance": stored.balance + delta})
        )

    # Transactions

    def add_transaction(
        self,
        client: Client | int | None,
        price: int,
        payment: int,
        detail: str | None = None,
        date: int | None = None,
    ) -> Transaction:
        validate_transaction_fields(price, payment, date)
        client_id = client_id_of(client)
        validate_anonymous_payment(client_id, price, payment)
        if client_id is not None:
            self._get_client(client_id)
        transaction = Transaction(
            id=next(self._transaction_ids),
            client_id=client_id,
            date=current_timestamp() if date is None else date,
            price=price,
            payment=payment,
            detail=detail,
        )
        self._transactions[transaction.id] = transaction
        logger.debug("Added transaction %s for client %s", transaction.id, client_id)
        return transaction

    def get_transactions(self, filter: TransactionFilter | None = None) -> Iterator[Transaction]:
        filter = filter or TransactionFilter()
        return iter([t for t in self._ordered(self._transactions) if filter.matches(t)])

    def update_transaction(self, transaction: Transaction) -> Transaction:
        validate_transaction_fields(date=transaction.date)
        stored = self._get_transaction(transaction.id)
        if not transaction.is_anonymous:
            self._get_client(transaction.client_id)
        elif not stored.is_anonymous:
            validate_anonymous_payment(None, stored.price, stored.payment)
        updated = stored.model_copy(
            update={
                "date": transaction.date,
                "client_id": transaction.client_id,
                "detail": transaction.detail,
            }
        )
        return self._replace(self._transactions, updated)

    def update_transaction_price(self, id: int, new_price: int) -> Transaction:
        validate_transaction_fields(price=new_price)
        stored = self._get_transaction(id)
        validate_anonymous_payment(stored.client_id, new_price, stored.payment)
        return self._replace(self._transactions, stored.model_copy(update={"price": new_price}))

    def update_transaction_balance(self, id: int, payment_delta: int) -> Transaction:
        validate_transaction_fields(payment=payment_delta)
        stored = self._get_transaction(id)
        payment = stored.payment + payment_delta
        validate_anonymous_payment(stored.client_id, stored.price, payment)
        return self._replace(self._transactions, stored.model_copy(update={"payment": payment}))

    def remove_transaction(self, id: int) -> None:
        self._transactions.pop(id, None)
