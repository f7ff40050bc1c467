"""
filename: conftest.py
author: Valentin Piombo
email: valenp97@gmail.com
description: Configuration of the PyTest suite.
"""

from random import randint

from fastapi.testclient import TestClient
from pytest import fixture

from ledger.dependencies import get_store
from ledger.main import app
from ledger.stores import MemoryStore, SQLStore

# 2023-11-14 22:13:20 UTC
BASE_DATE = 1_700_000_000


@fixture()
def sql_store(tmp_path):
    # A fresh database file per test
    store = SQLStore.from_url(f"sqlite:///{tmp_path / 'test.db'}")
    yield store
    store.engine.dispose()


@fixture()
def memory_store():
    return MemoryStore()


# Every test using this fixture runs once against each backend
@fixture(params=["sql", "memory"])
def store(request):
    return request.getfixturevalue(f"{request.param}_store")


# Override FastAPI's dependency to use the test store
@fixture()
def api_client(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@fixture()
def create_client(store):
    def _create_client(**kwargs):
        return store.add_client(
            kwargs.get("name", "test client"), kwargs.get("detail", "test detail")
        )

    return _create_client


@fixture()
def create_transaction(store, create_client):
    def _create_transaction(**kwargs):
        client = kwargs["client"] if "client" in kwargs else create_client()
        return store.add_transaction(
            client,
            kwargs.get("price", 100),
            kwargs.get("payment", 0),
            kwargs.get("detail", "test description"),
            kwargs.get("date", BASE_DATE),
        )

    return _create_transaction


@fixture(params=[1, 3, 10])
def create_multiple_transactions(request, create_client, create_transaction):
    client = create_client(name="test payer")
    transactions = []
    for i in range(request.param):
        transaction = create_transaction(
            client=client,
            price=randint(1, 500),
            payment=randint(0, 500),
            detail=f"test description {i}",
            date=BASE_DATE + i * 3600,
        )
        transactions.append(transaction)
    return client, transactions
