"""
filename: base.py
author: Valentin Piombo
email: valenp97@gmail.com
description: Module for the definitions of the storage contracts every backend implements.
"""

from abc import ABC, abstractmethod
from typing import Iterator

from ledger.entities import Alias, Client, Transaction
from ledger.exceptions import EmptyClientName, InvalidPaymentOnAnonClient, ValidationError
from ledger.filters import ClientFilter, TransactionFilter


def validate_client_name(name: str) -> str:
    """
    :raises EmptyClientName: if <name> is empty or blank.
    """
    if not name or not name.strip():
        raise EmptyClientName()
    return name


def validate_anonymous_payment(client_id: int | None, price: int, payment: int) -> None:
    """
    An anonymous transaction has nobody to collect from later, so it must be fully paid.

    :raises InvalidPaymentOnAnonClient: if <client_id> is None and <payment> differs from
        <price>.
    """
    if client_id is None and payment != price:
        raise InvalidPaymentOnAnonClient(
            f"Anonymous transaction must be fully paid: price {price}, payment {payment}"
        )


def _is_integer(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_transaction_fields(
    price: int | None = None, payment: int | None = None, date: int | None = None
) -> None:
    """
    Check the given transaction fields before anything is written. Fields left as None are
    not checked.

    :param price: (int) optional; amount billed.
    :param payment: (int) optional; amount paid, or the amount added to a payment.
    :param date: (int) optional; Unix timestamp in seconds.
    :raises ValidationError: if an amount or the date is not an integer, or the date is
        negative.
    """
    for field, value in (("price", price), ("payment", payment), ("date", date)):
        if value is not None and not _is_integer(value):
            raise ValidationError(f"Transaction {field} must be an integer, got {value!r}")
    if date is not None and date < 0:
        raise ValidationError(f"Transaction date must not be negative, got {date}")


class ClientStore(ABC):
    """
    Storage of clients and their aliases, plus the cached client balance.

    The balance is not kept in sync with the transactions automatically. After changing
    transactions the caller either runs <recompute_balance> (full scan) or applies the same
    change through <adjust_balance> (delta). Both give the same result for the same history.
    """

    @abstractmethod
    def add_client(self, name: str, detail: str | None = None) -> Client:
        """
        Create a client with a zero balance and no aliases.

        :raises EmptyClientName: if <name> is empty.
        """

    @abstractmethod
    def update_client(self, client: Client) -> Client:
        """
        Replace the name and detail of the stored client with the same id. The balance is left
        untouched.

        :raises NotFound: if no client has that id.
        """

    @abstractmethod
    def remove_client(self, id: int) -> None:
        """
        Delete a client along with its aliases. Its transactions are kept as anonymous ones.
        Removing an unknown id is a no-op.
        """

    @abstractmethod
    def get_clients(self, filter: ClientFilter | None = None) -> Iterator[Client]:
        """Iterate once over the clients matching <filter> (every client if omitted)."""

    @abstractmethod
    def add_alias(self, client: Client | int, alias: str) -> Alias:
        """
        :raises NotFound: if the client no longer exists.
        """

    @abstractmethod
    def get_aliases(self, client: Client | int) -> Iterator[Alias]:
        """Iterate once over the aliases owned by <client>."""

    @abstractmethod
    def remove_alias(self, alias_id: int) -> None:
        """Delete an alias. Removing an unknown id is a no-op."""

    @abstractmethod
    def update_alias(self, alias: Alias) -> Alias:
        """
        Rewrite the text of the stored alias with the same id.

        :raises NotFound: if no alias has that id.
        """

    @abstractmethod
    def recompute_balance(self, client: Client | int) -> Client:
        """
        Set the client balance to the sum of payments minus the sum of prices of its
        transactions and return the refreshed client.

        :raises NotFound: if the client does not exist.
        """

    @abstractmethod
    def adjust_balance(self, client_id: int, delta: int) -> Client:
        """
        Add <delta> to the stored balance without looking at the transactions. The caller is
        responsible for <delta> matching an actual transaction change.

        :raises NotFound: if the client does not exist.
        """


class TransactionStore(ABC):
    """
    Storage of transactions. None of these operations touch a client balance; see
    <ClientStore> for the balance operations.
    """

    @abstractmethod
    def add_transaction(
        self,
        client: Client | int | None,
        price: int,
        payment: int,
        detail: str | None = None,
        date: int | None = None,
    ) -> Transaction:
        """
        Record a transaction, anonymous when <client> is None. <date> defaults to now.

        :raises ValidationError: if an amount is not an integer or <date> is negative.
        :raises InvalidPaymentOnAnonClient: if anonymous and <payment> differs from <price>.
        :raises NotFound: if the client does not exist.
        """

    @abstractmethod
    def get_transactions(
        self, filter: TransactionFilter | None = None
    ) -> Iterator[Transaction]:
        """Iterate once over the transactions matching <filter> (all if omitted)."""

    @abstractmethod
    def update_transaction(self, transaction: Transaction) -> Transaction:
        """
        Rewrite date, client and detail of the stored transaction with the same id. Price and
        payment are changed through the targeted updates only.

        :raises NotFound: if the transaction or the new client does not exist.
        :raises InvalidPaymentOnAnonClient: if it detaches a transaction that is not fully
            paid from its client.
        """

    @abstractmethod
    def update_transaction_price(self, id: int, new_price: int) -> Transaction:
        """
        :raises NotFound: if the transaction does not exist.
        :raises InvalidPaymentOnAnonClient: if anonymous and the new price differs from the
            payment.
        """

    @abstractmethod
    def update_transaction_balance(self, id: int, payment_delta: int) -> Transaction:
        """
        Add <payment_delta> to the payment of a transaction.

        :raises NotFound: if the transaction does not exist.
        :raises InvalidPaymentOnAnonClient: if anonymous and the new payment differs from the
            price.
        """

    @abstractmethod
    def remove_transaction(self, id: int) -> None:
        """Delete a transaction. Removing an unknown id is a no-op."""


class LedgerStore(ClientStore, TransactionStore):
    """
    Both contracts on the same storage, plus wrappers pairing a transaction write with the
    matching balance delta. The relational backend overrides them to run each pair in one
    unit of work.
    """

    def record_transaction(
        self,
        client: Client | int | None,
        price: int,
        payment: int,
        detail: str | None = None,
        date: int | None = None,
    ) -> Transaction:
        """Add a transaction and move the client balance by <payment> - <price>."""
        transaction = self.add_transaction(client, price, payment, detail, date)
        if not transaction.is_anonymous:
            self.adjust_balance(transaction.client_id, payment - price)
        return transaction

    def record_payment(self, transaction_id: int, amount: int) -> Transaction:
        """Add <amount> to a transaction payment and to its client balance."""
        transaction = self.update_transaction_balance(transaction_id, amount)
        if not transaction.is_anonymous:
            self.adjust_balance(transaction.client_id, amount)
        return transaction
