"""
filename: test_api.py
author: Valentin Piombo
email: valenp97@gmail.com
description: Test module for testing the client, alias and transaction routes.
"""

import pytest

from ledger.filters import ClientFilter
from ledger.tests.conftest import BASE_DATE


def test_create_client(api_client, store):
    result = api_client.post("/client/", json={"name": "larry", "detail": "lolasd"})
    assert result.status_code == 201
    assert result.json() == {"id": 1, "name": "larry", "detail": "lolasd", "balance": 0}
    assert [c.name for c in store.get_clients()] == ["larry"]


@pytest.mark.parametrize("name, status_code", [("", 422), ("   ", 400)])
def test_create_client_with_empty_name(api_client, store, name, status_code):
    result = api_client.post("/client/", json={"name": name})
    assert result.status_code == status_code
    assert list(store.get_clients()) == []


def test_fetch_all_clients(api_client, create_client):
    create_client(name="larry")
    create_client(name="lul")
    response = api_client.get("/client/all")
    assert response.status_code == 200
    assert [c["name"] for c in response.json()] == ["larry", "lul"]


def test_fetch_clients_with_filters(api_client, store, create_client):
    larry = create_client(name="larry")
    create_client(name="lul")
    store.add_alias(larry, "lolo")
    assert [c["id"] for c in api_client.get("/client/all?name=larry").json()] == [larry.id]
    assert [c["id"] for c in api_client.get("/client/all?alias=lolo").json()] == [larry.id]
    assert api_client.get("/client/all?alias=lolo&name=lul").json() == []


def test_fetch_client_by_id(api_client, create_client):
    client = create_client(name="larry")
    response = api_client.get(f"/client/{client.id}")
    assert response.status_code == 200
    assert response.json().get("name") == "larry"


def test_fetch_missing_client(api_client):
    response = api_client.get("/client/42")
    assert response.status_code == 404
    assert response.json() == {"detail": {"message": "Client 42 not found"}}


def test_update_client(api_client, store, create_client):
    client = create_client(name="larry")
    store.adjust_balance(client.id, -100)
    response = api_client.put(f"/client/{client.id}", json={"name": "astracalustro"})
    assert response.status_code == 200
    assert response.json().get("name") == "astracalustro"
    assert response.json().get("detail") is None
    assert response.json().get("balance") == -100


def test_update_missing_client(api_client):
    response = api_client.put("/client/42", json={"name": "nobody"})
    assert response.status_code == 404


def test_delete_client(api_client, store, create_client, create_transaction):
    client = create_client()
    transaction = create_transaction(client=client)
    response = api_client.delete(f"/client/{client.id}")
    assert response.status_code == 204
    assert list(store.get_clients()) == []
    assert next(store.get_transactions()).id == transaction.id
    # Deleting again is not an error
    assert api_client.delete(f"/client/{client.id}").status_code == 204


def test_recompute_and_adjust_balance(api_client, create_client, create_transaction):
    client = create_client()
    create_transaction(client=client, price=1000, payment=400)
    response = api_client.post(f"/client/{client.id}/balance/recompute")
    assert response.status_code == 200
    assert response.json().get("balance") == -600
    response = api_client.post(f"/client/{client.id}/balance/adjust", json={"delta": 600})
    assert response.status_code == 200
    assert response.json().get("balance") == 0


def test_balance_of_missing_client(api_client):
    assert api_client.post("/client/42/balance/recompute").status_code == 404
    assert api_client.post("/client/42/balance/adjust", json={"delta": 1}).status_code == 404


def test_alias_routes(api_client, store, create_client):
    client = create_client()
    response = api_client.post(f"/client/{client.id}/alias", json={"alias": "lolo"})
    assert response.status_code == 201
    alias_id = response.json().get("id")
    assert response.json() == {"id": alias_id, "alias": "lolo", "client_id": client.id}

    response = api_client.put(f"/client/{client.id}/alias/{alias_id}", json={"alias": "lala"})
    assert response.status_code == 200
    assert response.json().get("alias") == "lala"

    response = api_client.get(f"/client/{client.id}/alias")
    assert response.status_code == 200
    assert [a["alias"] for a in response.json()] == ["lala"]

    assert api_client.delete(f"/client/{client.id}/alias/{alias_id}").status_code == 204
    assert list(store.get_aliases(client)) == []


def test_alias_routes_check_the_owner(api_client, store, create_client):
    owner = create_client(name="owner")
    other = create_client(name="other")
    alias = store.add_alias(owner, "lolo")
    response = api_client.put(f"/client/{other.id}/alias/{alias.id}", json={"alias": "lala"})
    assert response.status_code == 404
    assert api_client.delete(f"/client/{other.id}/alias/{alias.id}").status_code == 204
    assert list(store.get_aliases(owner)) == [alias]


def test_alias_of_missing_client(api_client):
    assert api_client.get("/client/42/alias").status_code == 404
    assert api_client.post("/client/42/alias", json={"alias": "ghost"}).status_code == 404


def test_create_transaction(api_client, store, create_client):
    client = create_client()
    transaction_payload = {
        "client_id": client.id,
        "price": 1000,
        "payment": 400,
        "detail": "pague weeee",
        "date": BASE_DATE,
    }
    result = api_client.post("/transaction/", json=transaction_payload)
    assert result.status_code == 201
    assert result.json() == {"id": 1, **transaction_payload}
    assert len(list(store.get_transactions())) == 1
    # The balance is left to the caller
    assert next(store.get_clients(ClientFilter().with_id(client.id))).balance == 0


def test_create_anonymous_transaction(api_client):
    result = api_client.post("/transaction/", json={"price": 100, "payment": 100})
    assert result.status_code == 201
    assert result.json().get("client_id") is None


def test_create_anonymous_transaction_not_fully_paid(api_client, store):
    result = api_client.post("/transaction/", json={"price": 100, "payment": 40})
    assert result.status_code == 400
    assert "message" in result.json()["detail"]
    assert list(store.get_transactions()) == []


def test_create_transaction_for_missing_client(api_client):
    result = api_client.post("/transaction/", json={"client_id": 42, "price": 100})
    assert result.status_code == 404


def test_record_transaction(api_client, store, create_client):
    client = create_client()
    result = api_client.post(
        "/transaction/record", json={"client_id": client.id, "price": 1000, "payment": 400}
    )
    assert result.status_code == 201
    assert next(store.get_clients(ClientFilter().with_id(client.id))).balance == -600


def test_fetch_all_transactions(api_client, create_multiple_transactions):
    _, transactions = create_multiple_transactions
    response = api_client.get("/transaction/all")
    assert response.status_code == 200
    assert [t["id"] for t in response.json()] == [t.id for t in transactions]


def test_fetch_transactions_with_filters(api_client, create_client, create_transaction):
    larry = create_client(name="larry")
    lul = create_client(name="lul")
    cheap = create_transaction(client=larry, price=10, date=BASE_DATE)
    expensive = create_transaction(client=larry, price=900, date=BASE_DATE + 86400)
    other = create_transaction(client=lul, price=10, date=BASE_DATE)

    def ids(query):
        return [t["id"] for t in api_client.get(f"/transaction/all?{query}").json()]

    assert ids(f"client_id={larry.id}") == [cheap.id, expensive.id]
    assert ids(f"client_id={larry.id}&price_max=100") == [cheap.id]
    assert ids(f"client_id={larry.id}&price_min=100") == [expensive.id]
    assert ids(f"client_id={larry.id}&date_from={BASE_DATE + 1}") == [expensive.id]
    assert ids(f"date_to={BASE_DATE}&price_min=10&price_max=10") == [cheap.id, other.id]


@pytest.mark.parametrize(
    "params",
    [
        {"price_min": 10, "price_max": 1},
        {"date_from": BASE_DATE, "date_to": BASE_DATE - 1},
    ],
)
def test_fetch_transactions_with_inverted_range(api_client, params):
    response = api_client.get("/transaction/all", params=params)
    assert response.status_code == 400
    assert "range" in response.json()["detail"]["message"]


@pytest.mark.parametrize("price, payment", [(200, 0), (-10, 5), (20, 20)])
def test_fetch_transaction_by_id(api_client, create_transaction, price, payment):
    transaction = create_transaction(price=price, payment=payment)
    response = api_client.get(f"/transaction/{transaction.id}")
    assert response.status_code == 200
    assert response.json().get("price") == price
    assert response.json().get("payment") == payment


def test_fetch_missing_transaction(api_client):
    response = api_client.get("/transaction/42")
    assert response.status_code == 404
    assert response.json() == {"detail": {"message": "Transaction 42 not found"}}


def test_update_transaction(api_client, create_client, create_transaction):
    larry = create_client(name="larry")
    lul = create_client(name="lul")
    transaction = create_transaction(client=larry, price=100, payment=100)
    payload = {"client_id": lul.id, "date": BASE_DATE + 60, "detail": "moved"}
    response = api_client.put(f"/transaction/{transaction.id}", json=payload)
    assert response.status_code == 200
    assert response.json().get("client_id") == lul.id
    assert response.json().get("date") == BASE_DATE + 60
    # Detaching works once the transaction is fully paid
    payload["client_id"] = None
    response = api_client.put(f"/transaction/{transaction.id}", json=payload)
    assert response.status_code == 200
    assert response.json().get("client_id") is None


def test_update_price_and_payment(api_client, store, create_client, create_transaction):
    client = create_client()
    transaction = create_transaction(client=client, price=100, payment=0)
    response = api_client.patch(f"/transaction/{transaction.id}/price", json={"price": 300})
    assert response.status_code == 200
    assert response.json().get("price") == 300
    response = api_client.patch(f"/transaction/{transaction.id}/payment", json={"amount": 120})
    assert response.status_code == 200
    assert response.json().get("payment") == 120
    assert next(store.get_clients(ClientFilter().with_id(client.id))).balance == 0


def test_pay_transaction(api_client, store, create_client):
    client = create_client()
    transaction = store.record_transaction(client, 1000, 400)
    response = api_client.post(f"/transaction/{transaction.id}/pay", json={"amount": 600})
    assert response.status_code == 200
    assert response.json().get("payment") == 1000
    assert next(store.get_clients(ClientFilter().with_id(client.id))).balance == 0


def test_delete_transaction(api_client, store, create_transaction):
    transaction = create_transaction()
    assert api_client.delete(f"/transaction/{transaction.id}").status_code == 204
    assert api_client.delete(f"/transaction/{transaction.id}").status_code == 204
    assert list(store.get_transactions()) == []
