"""
filename: test_sql_store.py
author: Valentin Piombo
email: valenp97@gmail.com
description: Test module for the behaviour specific to the relational store backend.
"""

import logging

import pytest
from sqlalchemy import inspect, text

from ledger.exceptions import BackendError, NotFound
from ledger.filters import ClientFilter
from ledger.stores import SQLStore, create_store, sql


def test_tables_are_created(sql_store):
    tables = set(inspect(sql_store.engine).get_table_names())
    assert {"clients", "aliases", "transactions"} <= tables


def test_schema_cascades(sql_store):
    client = sql_store.add_client("larry")
    sql_store.add_alias(client, "lolo")
    transaction = sql_store.add_transaction(client, 100, 40)
    # Bypass the store, the schema alone has to keep things consistent
    with sql_store.engine.begin() as connection:
        connection.execute(text("DELETE FROM clients WHERE id = :id"), {"id": client.id})
    assert list(sql_store.get_aliases(client)) == []
    assert list(sql_store.get_transactions()) == [transaction]
    assert next(sql_store.get_transactions()).client_id is None


def test_stores_share_the_database(tmp_path):
    database_url = f"sqlite:///{tmp_path / 'shared.db'}"
    writer = SQLStore.from_url(database_url)
    client = writer.add_client("larry")
    reader = SQLStore.from_url(database_url, create_tables=False)
    assert list(reader.get_clients()) == [client]


def test_malformed_rows_are_skipped(sql_store, caplog):
    good = sql_store.add_client("good")
    with sql_store.engine.begin() as connection:
        connection.execute(
            text("INSERT INTO clients (name, balance) VALUES ('broken', 'not a number')")
        )
        connection.execute(text("INSERT INTO clients (name, balance) VALUES ('', 0)"))
    last = sql_store.add_client("last")
    with caplog.at_level(logging.WARNING, logger="ledger.stores.sql"):
        clients = list(sql_store.get_clients())
    assert clients == [good, last]
    assert caplog.text.count("Skipping malformed Client row") == 2


def test_malformed_transaction_rows_are_skipped(sql_store):
    client = sql_store.add_client("larry")
    kept = sql_store.add_transaction(client, 100, 0, date=10)
    with sql_store.engine.begin() as connection:
        connection.execute(
            text(
                "INSERT INTO transactions (client_id, date, price, payment) "
                "VALUES (:client_id, 'yesterday', 5, 0)"
            ),
            {"client_id": client.id},
        )
    assert list(sql_store.get_transactions()) == [kept]


def test_text_is_never_interpolated(sql_store):
    name = "Robert'); DROP TABLE clients;--"
    client = sql_store.add_client(name, "it's \"quoted\"")
    sql_store.add_alias(client, "o'hara")
    assert list(sql_store.get_clients(ClientFilter().with_name(name))) == [client]
    assert list(sql_store.get_clients(ClientFilter().with_alias("o'hara"))) == [client]
    assert next(sql_store.get_clients()).detail == "it's \"quoted\""


def test_engine_failures_are_backend_errors(sql_store):
    with sql_store.engine.begin() as connection:
        connection.execute(text("DROP TABLE aliases"))
    with pytest.raises(BackendError) as error:
        list(sql_store.get_aliases(1))
    assert error.value.__cause__ is not None


def test_failed_unit_of_work_is_rolled_back(sql_store, monkeypatch):
    client = sql_store.add_client("larry")
    transaction = sql_store.add_transaction(client, 100, 0)

    def failing_shift(db, client_id, delta):
        raise NotFound(f"Client {client_id} not found")

    monkeypatch.setattr(sql, "shift_balance", failing_shift)
    # The payment is flushed first, then the balance change aborts the whole operation
    with pytest.raises(NotFound):
        sql_store.record_payment(transaction.id, 100)
    with pytest.raises(NotFound):
        sql_store.record_transaction(client, 50, 0)
    assert list(sql_store.get_transactions()) == [transaction]
    assert next(sql_store.get_transactions()).payment == 0


def test_recompute_balance_is_computed_by_the_engine(sql_store):
    client = sql_store.add_client("larry")
    with sql_store.engine.begin() as connection:
        for price, payment in [(1000, 400), (20, 20), (5, 100)]:
            connection.execute(
                text(
                    "INSERT INTO transactions (client_id, date, price, payment) "
                    "VALUES (:client_id, 0, :price, :payment)"
                ),
                {"client_id": client.id, "price": price, "payment": payment},
            )
    assert sql_store.recompute_balance(client).balance == 520 - 1025


def test_create_store(tmp_path):
    store = create_store("sql", f"sqlite:///{tmp_path / 'created.db'}")
    assert isinstance(store, SQLStore)
    with pytest.raises(ValueError):
        create_store("postgres-but-misspelled")
