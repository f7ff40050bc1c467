"""
filename: sql.py
author: Valentin Piombo
email: valenp97@gmail.com
description: Module for the relational store backend, built on the SQLAlchemy models. Every
    public operation is one unit of work; engine errors come out as BackendError.
"""

import logging
from typing import Iterator

from pydantic import ValidationError as SchemaError
from sqlalchemy import delete, func, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from ledger import entities
from ledger.database import create_db_engine, init_db, make_session_factory, sql_session
from ledger.entities import client_id_of
from ledger.exceptions import BackendError, NotFound
from ledger.filters import ClientFilter, TransactionFilter
from ledger.models import Alias, Client, Transaction
from ledger.stores.base import (
    LedgerStore,
    validate_anonymous_payment,
    validate_client_name,
    validate_transaction_fields,
)
from ledger.utils.tools import current_timestamp, validate_entries_in_db

logger = logging.getLogger(__name__)


def _parse_rows(entity: type, rows: list) -> Iterator:
    """
    Turn fetched rows into entities, skipping (and logging) the ones that do not make a
    valid entity so that a single corrupt row does not hide the rest of the result.
    """
    for row in rows:
        try:
            yield entity.model_validate(dict(row))
        except SchemaError as e:
            logger.warning(
                "Skipping malformed %s row (id=%s): %s",
                entity.__name__,
                row.get("id"),
                e.errors()[0]["msg"],
            )


def _to_entity(entity: type, model):
    try:
        return entity.model_validate(model)
    except SchemaError as e:
        raise BackendError(f"Stored {entity.__name__} {model.id} is malformed: {e}") from e


def client_clauses(filter: ClientFilter) -> list:
    """Translate a client filter into where clauses; unset fields add none."""
    clauses = []
    if filter.name is not None:
        clauses.append(Client.name == filter.name)
    if filter.id is not None:
        clauses.append(Client.id == filter.id)
    if filter.alias is not None:
        clauses.append(
            Client.id.in_(select(Alias.client_id).where(Alias.alias == filter.alias))
        )
    return clauses


def transaction_clauses(filter: TransactionFilter) -> list:
    """Translate a transaction filter into where clauses; unset fields add none."""
    clauses = []
    if filter.id is not None:
        clauses.append(Transaction.id == filter.id)
    if filter.client_id is not None:
        clauses.append(Transaction.client_id == filter.client_id)
    if filter.date_range is not None:
        clauses.append(Transaction.date.between(*filter.date_range))
    if filter.price_range is not None:
        clauses.append(Transaction.price.between(*filter.price_range))
    return clauses


def fetch_client(db: Session, client_id: int) -> entities.Client:
    """Read a client straight from the table, bypassing the session identity map."""
    row = db.execute(select(Client.__table__).where(Client.id == client_id)).mappings().first()
    if row is None:
        raise NotFound(f"Client {client_id} not found")
    try:
        return entities.Client.model_validate(dict(row))
    except SchemaError as e:
        raise BackendError(f"Stored Client {client_id} is malformed: {e}") from e


def shift_balance(db: Session, client_id: int, delta: int) -> None:
    """
    Add <delta> to the stored balance of a client in a single statement.

    :param db: (Session) SQLAlchemy ORM session.
    :param client_id: (int) ID of the client entry.
    :param delta: (int) amount to move the balance by.
    :raises NotFound: if the client does not exist.
    """
    result = db.execute(
        update(Client)
        .where(Client.id == client_id)
        .values(balance=Client.balance + delta)
        .execution_options(synchronize_session=False)
    )
    if not result.rowcount:
        raise NotFound(f"Client {client_id} not found")


def insert_transaction(
    db: Session,
    client_id: int | None,
    price: int,
    payment: int,
    detail: str | None,
    date: int | None,
) -> Transaction:
    """
    Create a transaction entry once the anonymous payment rule and the client have been
    validated. The entry is flushed so that its id is available before the commit.
    """
    validate_transaction_fields(price, payment, date)
    validate_anonymous_payment(client_id, price, payment)
    if client_id is not None:
        validate_entries_in_db(
            db=db, entries=[{"model": Client, "id_value": client_id, "return_model": False}]
        )
    transaction_model = Transaction(
        client_id=client_id,
        date=current_timestamp() if date is None else date,
        price=price,
        payment=payment,
        detail=detail,
    )
    db.add(transaction_model)
    db.flush()
    return transaction_model


def add_to_payment(db: Session, id: int, payment_delta: int) -> Transaction:
    """Add <payment_delta> to the payment of a transaction entry."""
    validate_transaction_fields(payment=payment_delta)
    transaction_model = validate_entries_in_db(
        db=db, entries=[{"model": Transaction, "id_value": id, "return_model": True}]
    )["Transaction"]
    payment = transaction_model.payment + payment_delta
    validate_anonymous_payment(transaction_model.client_id, transaction_model.price, payment)
    transaction_model.payment = payment
    db.add(transaction_model)
    db.flush()
    return transaction_model


class SQLStore(LedgerStore):
    """
    Store backed by a relational database. The schema (see ledger.models) takes care of the
    client cascades: aliases are deleted with their client and transactions lose their
    client reference.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = make_session_factory(engine)

    @classmethod
    def from_url(cls, database_url: str = None, create_tables: bool = True) -> "SQLStore":
        """
        Build a store for a database URL (the configured one by default).

        :param database_url: (str) optional; SQLAlchemy database URL.
        :param create_tables: (bool) create the ledger tables if they are missing.
        """
        engine = create_db_engine(database_url)
        if create_tables:
            init_db(engine)
        return cls(engine)

    def _session(self):
        return sql_session(self._session_factory)

    # Clients

    def add_client(self, name: str, detail: str | None = None) -> entities.Client:
        validate_client_name(name)
        with self._session() as db:
            client_model = Client(name=name, detail=detail, balance=0)
            db.add(client_model)
            db.flush()
            client = _to_entity(entities.Client, client_model)
        logger.debug("Added client %s", client.id)
        return client

    def update_client(self, client: entities.Client) -> entities.Client:
        validate_client_name(client.name)
        with self._session() as db:
            client_model = validate_entries_in_db(
                db=db, entries=[{"model": Client, "id_value": client.id, "return_model": True}]
            )["Client"]
            client_model.name = client.name
            client_model.detail = client.detail
            db.add(client_model)
            db.flush()
            return _to_entity(entities.Client, client_model)

    def remove_client(self, id: int) -> None:
        with self._session() as db:
            removed = db.execute(delete(Client).where(Client.id == id)).rowcount
        if removed:
            logger.debug("Removed client %s", id)

    def get_clients(self, filter: ClientFilter | None = None) -> Iterator[entities.Client]:
        filter = filter or ClientFilter()
        with self._session() as db:
            rows = (
                db.execute(
                    select(Client.__table__).where(*client_clauses(filter)).order_by(Client.id)
                )
                .mappings()
                .all()
            )
        return _parse_rows(entities.Client, rows)

    # Aliases

    def add_alias(self, client: entities.Client | int, alias: str) -> entities.Alias:
        client_id = client_id_of(client)
        with self._session() as db:
            validate_entries_in_db(
                db=db, entries=[{"model": Client, "id_value": client_id, "return_model": False}]
            )
            alias_model = Alias(client_id=client_id, alias=alias)
            db.add(alias_model)
            db.flush()
            return _to_entity(entities.Alias, alias_model)

    def get_aliases(self, client: entities.Client | int) -> Iterator[entities.Alias]:
        with self._session() as db:
            rows = (
                db.execute(
                    select(Alias.__table__)
                    .where(Alias.client_id == client_id_of(client))
                    .order_by(Alias.id)
                )
                .mappings()
                .all()
            )
        return _parse_rows(entities.Alias, rows)

    def remove_alias(self, alias_id: int) -> None:
        with self._session() as db:
            db.execute(delete(Alias).where(Alias.id == alias_id))

    def update_alias(self, alias: entities.Alias) -> entities.Alias:
        with self._session() as db:
            alias_model = validate_entries_in_db(
                db=db, entries=[{"model": Alias, "id_value": alias.id, "return_model": True}]
            )["Alias"]
            alias_model.alias = alias.alias
            db.add(alias_model)
            db.flush()
            return _to_entity(entities.Alias, alias_model)

    # Balance

    def recompute_balance(self, client: entities.Client | int) -> entities.Client:
        client_id = client_id_of(client)
        paid = (
            select(func.coalesce(func.sum(Transaction.payment), 0))
            .where(Transaction.client_id == client_id)
            .scalar_subquery()
        )
        billed = (
            select(func.coalesce(func.sum(Transaction.price), 0))
            .where(Transaction.client_id == client_id)
            .scalar_subquery()
        )
        with self._session() as db:
            # Both sums are computed by the engine within the same statement
            result = db.execute(
                update(Client)
                .where(Client.id == client_id)
                .values(balance=paid - billed)
                .execution_options(synchronize_session=False)
            )
            if not result.rowcount:
                raise NotFound(f"Client {client_id} not found")
            return fetch_client(db, client_id)

    def adjust_balance(self, client_id: int, delta: int) -> entities.Client:
        with self._session() as db:
            shift_balance(db, client_id, delta)
            return fetch_client(db, client_id)

    # Transactions

    def add_transaction(
        self,
        client: entities.Client | int | None,
        price: int,
        payment: int,
        detail: str | None = None,
        date: int | None = None,
    ) -> entities.Transaction:
        with self._session() as db:
            transaction_model = insert_transaction(
                db, client_id_of(client), price, payment, detail, date
            )
            transaction = _to_entity(entities.Transaction, transaction_model)
        logger.debug("Added transaction %s for client %s", transaction.id, transaction.client_id)
        return transaction

    def get_transactions(
        self, filter: TransactionFilter | None = None
    ) -> Iterator[entities.Transaction]:
        filter = filter or TransactionFilter()
        with self._session() as db:
            rows = (
                db.execute(
                    select(Transaction.__table__)
                    .where(*transaction_clauses(filter))
                    .order_by(Transaction.id)
                )
                .mappings()
                .all()
            )
        return _parse_rows(entities.Transaction, rows)

    def update_transaction(self, transaction: entities.Transaction) -> entities.Transaction:
        validate_transaction_fields(date=transaction.date)
        with self._session() as db:
            validations = validate_entries_in_db(
                db=db,
                entries=[
                    {"model": Transaction, "id_value": transaction.id, "return_model": True},
                    (
                        {"model": Client, "id_value": transaction.client_id, "return_model": False}
                        if not transaction.is_anonymous
                        else None
                    ),
                ],
            )
            transaction_model = validations["Transaction"]
            # Detaching from the client is only allowed once nothing is owed
            if transaction.is_anonymous and transaction_model.client_id is not None:
                validate_anonymous_payment(
                    None, transaction_model.price, transaction_model.payment
                )
            transaction_model.date = transaction.date
            transaction_model.client_id = transaction.client_id
            transaction_model.detail = transaction.detail
            db.add(transaction_model)
            db.flush()
            return _to_entity(entities.Transaction, transaction_model)

    def update_transaction_price(self, id: int, new_price: int) -> entities.Transaction:
        validate_transaction_fields(price=new_price)
        with self._session() as db:
            transaction_model = validate_entries_in_db(
                db=db, entries=[{"model": Transaction, "id_value": id, "return_model": True}]
            )["Transaction"]
            validate_anonymous_payment(
                transaction_model.client_id, new_price, transaction_model.payment
            )
            transaction_model.price = new_price
            db.add(transaction_model)
            db.flush()
            return _to_entity(entities.Transaction, transaction_model)

    def update_transaction_balance(self, id: int, payment_delta: int) -> entities.Transaction:
        with self._session() as db:
            return _to_entity(entities.Transaction, add_to_payment(db, id, payment_delta))

    def remove_transaction(self, id: int) -> None:
        with self._session() as db:
            db.execute(delete(Transaction).where(Transaction.id == id))

    # Atomic wrappers

    def record_transaction(
        self,
        client: entities.Client | int | None,
        price: int,
        payment: int,
        detail: str | None = None,
        date: int | None = None,
    ) -> entities.Transaction:
        with self._session() as db:
            transaction_model = insert_transaction(
                db, client_id_of(client), price, payment, detail, date
            )
            if transaction_model.client_id is not None:
                shift_balance(db, transaction_model.client_id, payment - price)
            return _to_entity(entities.Transaction, transaction_model)

    def record_payment(self, transaction_id: int, amount: int) -> entities.Transaction:
        with self._session() as db:
            transaction_model = add_to_payment(db, transaction_id, amount)
            if transaction_model.client_id is not None:
                shift_balance(db, transaction_model.client_id, amount)
            return _to_entity(entities.Transaction, transaction_model)
