"""
filename: transaction.py
author: Valentin Piombo
email: valenp97@gmail.com
description: Module for the definitions of routes related to the Transaction model.
"""

from fastapi import APIRouter, Path
from pydantic import BaseModel, Field
from starlette import status

from ledger.dependencies import store_dependency
from ledger.entities import Transaction
from ledger.exceptions import NotFound
from ledger.filters import TransactionFilter
from ledger.stores import LedgerStore

router = APIRouter(prefix="/transaction", tags=["transaction"])

# Open ends of the optional range query parameters
MIN_VALUE = -(2**63)
MAX_VALUE = 2**63 - 1


class TransactionRequest(BaseModel):
    """
    Request model for data validation. A transaction without <client_id> is anonymous and has
    to be fully paid.
    """

    client_id: int | None = Field(default=None, gt=0)
    price: int
    payment: int = 0
    detail: str | None = Field(default=None, max_length=200)
    date: int | None = Field(default=None, ge=0, description="Unix timestamp in seconds")


class TransactionUpdateRequest(BaseModel):
    """Price and payment have their own endpoints, so they are not part of this model."""

    client_id: int | None = Field(default=None, gt=0)
    date: int = Field(ge=0)
    detail: str | None = Field(default=None, max_length=200)


class PriceRequest(BaseModel):
    price: int


class PaymentRequest(BaseModel):
    amount: int


def get_transaction_entry(store: LedgerStore, id: int) -> Transaction:
    """
    Auxiliary function to fetch a single transaction from the store.

    :param store: (LedgerStore) store backend.
    :param id: (int) ID of the transaction entry.
    :raises NotFound: if there is no transaction with that ID.
    """
    transaction = next(store.get_transactions(TransactionFilter().with_id(id)), None)
    if transaction is None:
        raise NotFound(f"Transaction {id} not found")
    return transaction


@router.get("/all", status_code=status.HTTP_200_OK, response_model=list[Transaction])
async def read_all_transactions(
    store: store_dependency,
    id: int = None,
    client_id: int = None,
    date_from: int = None,
    date_to: int = None,
    price_min: int = None,
    price_max: int = None,
):
    """
    Endpoint to fetch the transaction entries, optionally filtered. Ranges are inclusive and
    a missing end of a range leaves it open.

    :param store: (store_dependency) store backend.
    :param id: (int) optional; ID of the transaction.
    :param client_id: (int) optional; ID of the client the transactions belong to.
    :param date_from: (int) optional; earliest Unix timestamp.
    :param date_to: (int) optional; latest Unix timestamp.
    :param price_min: (int) optional; lowest price.
    :param price_max: (int) optional; highest price.
    """
    transaction_filter = TransactionFilter()
    if id is not None:
        transaction_filter = transaction_filter.with_id(id)
    if client_id is not None:
        transaction_filter = transaction_filter.with_client(client_id)
    if date_from is not None or date_to is not None:
        transaction_filter = transaction_filter.with_date_range(
            0 if date_from is None else date_from,
            MAX_VALUE if date_to is None else date_to,
        )
    if price_min is not None or price_max is not None:
        transaction_filter = transaction_filter.with_price_range(
            MIN_VALUE if price_min is None else price_min,
            MAX_VALUE if price_max is None else price_max,
        )
    return list(store.get_transactions(transaction_filter))


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=Transaction)
async def create_transaction(store: store_dependency, transaction_request: TransactionRequest):
    """
    Endpoint to create a new transaction entry. The client balance is not updated; use the
    client balance endpoints or "/transaction/record" for that.

    :param store: (store_dependency) store backend.
    :param transaction_request: (TransactionRequest) data to be used to build the entry.
    """
    return store.add_transaction(
        transaction_request.client_id,
        transaction_request.price,
        transaction_request.payment,
        transaction_request.detail,
        transaction_request.date,
    )


@router.post("/record", status_code=status.HTTP_201_CREATED, response_model=Transaction)
async def record_transaction(store: store_dependency, transaction_request: TransactionRequest):
    """
    Endpoint to create a new transaction entry and move the client balance by the payment
    minus the price in the same operation.

    :param store: (store_dependency) store backend.
    :param transaction_request: (TransactionRequest) data to be used to build the entry.
    """
    return store.record_transaction(
        transaction_request.client_id,
        transaction_request.price,
        transaction_request.payment,
        transaction_request.detail,
        transaction_request.date,
    )


@router.get("/{id}", status_code=status.HTTP_200_OK, response_model=Transaction)
async def get_transaction(store: store_dependency, id: int = Path(gt=0)):
    return get_transaction_entry(store, id)


@router.put("/{id}", status_code=status.HTTP_200_OK, response_model=Transaction)
async def update_transaction(
    store: store_dependency,
    transaction_request: TransactionUpdateRequest,
    id: int = Path(gt=0),
):
    """
    Endpoint to modify the client, date and detail of an existing transaction entry.

    :param store: (store_dependency) store backend.
    :param transaction_request: (TransactionUpdateRequest) new data of the entry.
    :param id: (int) ID of the transaction entry.
    """
    transaction = get_transaction_entry(store, id)
    return store.update_transaction(
        transaction.model_copy(update=transaction_request.model_dump())
    )


@router.patch("/{id}/price", status_code=status.HTTP_200_OK, response_model=Transaction)
async def update_transaction_price(
    store: store_dependency, price_request: PriceRequest, id: int = Path(gt=0)
):
    """
    Endpoint to change the price of a transaction. The client balance is not updated.

    :param store: (store_dependency) store backend.
    :param price_request: (PriceRequest) new price.
    :param id: (int) ID of the transaction entry.
    """
    return store.update_transaction_price(id, price_request.price)


@router.patch("/{id}/payment", status_code=status.HTTP_200_OK, response_model=Transaction)
async def update_transaction_payment(
    store: store_dependency, payment_request: PaymentRequest, id: int = Path(gt=0)
):
    """
    Endpoint to add an amount to the payment of a transaction. The client balance is not
    updated.

    :param store: (store_dependency) store backend.
    :param payment_request: (PaymentRequest) amount to add to the payment.
    :param id: (int) ID of the transaction entry.
    """
    return store.update_transaction_balance(id, payment_request.amount)


@router.post("/{id}/pay", status_code=status.HTTP_200_OK, response_model=Transaction)
async def pay_transaction(
    store: store_dependency, payment_request: PaymentRequest, id: int = Path(gt=0)
):
    """
    Endpoint to register a payment on a transaction and on its client balance at once.

    :param store: (store_dependency) store backend.
    :param payment_request: (PaymentRequest) amount paid.
    :param id: (int) ID of the transaction entry.
    """
    return store.record_payment(id, payment_request.amount)


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction(store: store_dependency, id: int = Path(gt=0)):
    """
    Endpoint to delete a transaction entry. The client balance is not updated.

    :param store: (store_dependency) store backend.
    :param id: (int) ID of the transaction entry.
    """
    store.remove_transaction(id)
