"""
filename: filters.py
author: Valentin Piombo
email: valenp97@gmail.com
description: Module for the definitions of the query descriptors accepted by the read
    operations of every store.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict

from ledger.entities import Alias, Client, Transaction, client_id_of
from ledger.exceptions import InvalidQuery
from ledger.utils.tools import to_timestamp


def _checked_range(low: int, high: int, field: str) -> tuple[int, int]:
    if low > high:
        raise InvalidQuery(f"Invalid {field} range: {low} is greater than {high}")
    return low, high


class ClientFilter(BaseModel):
    """
    Optional-field predicate over clients. Unset fields match everything and set fields are
    combined with AND. Built with the <with_*> methods, each of which returns a new filter:

        ClientFilter().with_name("lul").with_id(3)
    """

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    id: int | None = None
    alias: str | None = None

    def with_name(self, name: str) -> "ClientFilter":
        return self.model_copy(update={"name": name})

    def with_id(self, id: int) -> "ClientFilter":
        return self.model_copy(update={"id": id})

    def with_alias(self, alias: str) -> "ClientFilter":
        """Match the clients owning an alias with exactly this text."""
        return self.model_copy(update={"alias": alias})

    def matches(self, client: Client, aliases: list[Alias] = ()) -> bool:
        """
        Evaluate the filter against a client.

        :param client: (Client) client to check.
        :param aliases: (list[Alias]) aliases owned by the client, only used by the alias field.
        :returns: (bool) whether every set field matches.
        """
        if self.name is not None and client.name != self.name:
            return False
        if self.id is not None and client.id != self.id:
            return False
        if self.alias is not None and not any(a.alias == self.alias for a in aliases):
            return False
        return True


class TransactionFilter(BaseModel):
    """
    Optional-field predicate over transactions. Ranges are inclusive on both ends. Unset
    fields match everything and set fields are combined with AND.
    """

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    client_id: int | None = None
    date_range: tuple[int, int] | None = None
    price_range: tuple[int, int] | None = None

    def with_id(self, id: int) -> "TransactionFilter":
        return self.model_copy(update={"id": id})

    def with_client(self, client: Client | int) -> "TransactionFilter":
        return self.model_copy(update={"client_id": client_id_of(client)})

    def with_date_range(
        self, start: int | date | datetime, end: int | date | datetime
    ) -> "TransactionFilter":
        """
        Restrict to transactions dated between <start> and <end>, both included. Accepts Unix
        seconds, dates or datetimes (naive values are read in the configured timezone).

        :raises InvalidQuery: if <start> is after <end>.
        """
        date_range = _checked_range(to_timestamp(start), to_timestamp(end), "date")
        return self.model_copy(update={"date_range": date_range})

    def with_price_range(self, low: int, high: int) -> "TransactionFilter":
        """
        :raises InvalidQuery: if <low> is greater than <high>.
        """
        return self.model_copy(update={"price_range": _checked_range(low, high, "price")})

    def matches(self, transaction: Transaction) -> bool:
        if self.id is not None and transaction.id != self.id:
            return False
        if self.client_id is not None and transaction.client_id != self.client_id:
            return False
        if self.date_range is not None:
            start, end = self.date_range
            if not start <= transaction.date <= end:
                return False
        if self.price_range is not None:
            low, high = self.price_range
            if not low <= transaction.price <= high:
                return False
        return True
