"""
filename: client.py
author: Valentin Piombo
email: valenp97@gmail.com
description: Module for the definitions of routes related to the Client and Alias models.
"""

from fastapi import APIRouter, Path
from pydantic import BaseModel, Field
from starlette import status

from ledger.dependencies import store_dependency
from ledger.entities import Alias, Client
from ledger.exceptions import NotFound
from ledger.filters import ClientFilter
from ledger.stores import LedgerStore

router = APIRouter(prefix="/client", tags=["client"])


class ClientRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    detail: str | None = Field(default=None, max_length=200)


class BalanceAdjustRequest(BaseModel):
    delta: int


class AliasRequest(BaseModel):
    alias: str = Field(min_length=1, max_length=100)


def get_client_entry(store: LedgerStore, id: int) -> Client:
    """
    Auxiliary function to fetch a single client from the store.

    :param store: (LedgerStore) store backend.
    :param id: (int) ID of the client entry.
    :raises NotFound: if there is no client with that ID.
    """
    client = next(store.get_clients(ClientFilter().with_id(id)), None)
    if client is None:
        raise NotFound(f"Client {id} not found")
    return client


def get_alias_entry(store: LedgerStore, client_id: int, alias_id: int) -> Alias:
    """Fetch one of the aliases of a client; 404 if the client does not own it."""
    alias = next((a for a in store.get_aliases(client_id) if a.id == alias_id), None)
    if alias is None:
        raise NotFound(f"Alias {alias_id} not found for client {client_id}")
    return alias


@router.get("/all", status_code=status.HTTP_200_OK, response_model=list[Client])
async def read_all_clients(
    store: store_dependency, name: str = None, id: int = None, alias: str = None
):
    """
    Endpoint to fetch the client entries, optionally filtered. Every given query parameter
    must match.

    :param store: (store_dependency) store backend.
    :param name: (str) optional; exact name of the client.
    :param id: (int) optional; ID of the client.
    :param alias: (str) optional; exact text of one of the client's aliases.
    """
    client_filter = ClientFilter()
    if name is not None:
        client_filter = client_filter.with_name(name)
    if id is not None:
        client_filter = client_filter.with_id(id)
    if alias is not None:
        client_filter = client_filter.with_alias(alias)
    return list(store.get_clients(client_filter))


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=Client)
async def create_client(store: store_dependency, client_request: ClientRequest):
    """
    Endpoint to create a new client entry with a zero balance.

    :param store: (store_dependency) store backend.
    :param client_request: (ClientRequest) data to be used to build the client entry.
    """
    return store.add_client(client_request.name, client_request.detail)


@router.get("/{id}", status_code=status.HTTP_200_OK, response_model=Client)
async def get_client(store: store_dependency, id: int = Path(gt=0)):
    return get_client_entry(store, id)


@router.put("/{id}", status_code=status.HTTP_200_OK, response_model=Client)
async def update_client(
    store: store_dependency, client_request: ClientRequest, id: int = Path(gt=0)
):
    """
    Endpoint to modify the name and detail of an existing client entry. The balance can only
    be changed through the balance endpoints.

    :param store: (store_dependency) store backend.
    :param client_request: (ClientRequest) data to be used to update the client entry.
    :param id: (int) ID of the client entry.
    """
    client = get_client_entry(store, id)
    return store.update_client(client.model_copy(update=client_request.model_dump()))


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(store: store_dependency, id: int = Path(gt=0)):
    """
    Endpoint to delete a client entry along with its aliases. Its transactions are kept
    without a client.

    :param store: (store_dependency) store backend.
    :param id: (int) ID of the client entry.
    """
    store.remove_client(id)


@router.post("/{id}/balance/recompute", status_code=status.HTTP_200_OK, response_model=Client)
async def recompute_client_balance(store: store_dependency, id: int = Path(gt=0)):
    """
    Endpoint to recompute the balance of a client from all of its transactions.

    :param store: (store_dependency) store backend.
    :param id: (int) ID of the client entry.
    """
    return store.recompute_balance(id)


@router.post("/{id}/balance/adjust", status_code=status.HTTP_200_OK, response_model=Client)
async def adjust_client_balance(
    store: store_dependency, adjust_request: BalanceAdjustRequest, id: int = Path(gt=0)
):
    """
    Endpoint to move the balance of a client by a given amount without looking at its
    transactions.

    :param store: (store_dependency) store backend.
    :param adjust_request: (BalanceAdjustRequest) amount to add to the balance.
    :param id: (int) ID of the client entry.
    """
    return store.adjust_balance(id, adjust_request.delta)


@router.get("/{id}/alias", status_code=status.HTTP_200_OK, response_model=list[Alias])
async def read_client_aliases(store: store_dependency, id: int = Path(gt=0)):
    return list(store.get_aliases(get_client_entry(store, id)))


@router.post("/{id}/alias", status_code=status.HTTP_201_CREATED, response_model=Alias)
async def create_client_alias(
    store: store_dependency, alias_request: AliasRequest, id: int = Path(gt=0)
):
    """
    Endpoint to give a client an alternate name.

    :param store: (store_dependency) store backend.
    :param alias_request: (AliasRequest) text of the alias.
    :param id: (int) ID of the client entry.
    """
    return store.add_alias(id, alias_request.alias)


@router.put("/{id}/alias/{alias_id}", status_code=status.HTTP_200_OK, response_model=Alias)
async def update_client_alias(
    store: store_dependency,
    alias_request: AliasRequest,
    id: int = Path(gt=0),
    alias_id: int = Path(gt=0),
):
    """
    Endpoint to rewrite the text of an alias. Aliases cannot be moved to another client.

    :param store: (store_dependency) store backend.
    :param alias_request: (AliasRequest) new text of the alias.
    :param id: (int) ID of the client owning the alias.
    :param alias_id: (int) ID of the alias entry.
    """
    alias = get_alias_entry(store, id, alias_id)
    return store.update_alias(alias.model_copy(update={"alias": alias_request.alias}))


@router.delete("/{id}/alias/{alias_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client_alias(
    store: store_dependency, id: int = Path(gt=0), alias_id: int = Path(gt=0)
):
    """
    Endpoint to delete an alias. Deleting an alias that is already gone is not an error.

    :param store: (store_dependency) store backend.
    :param id: (int) ID of the client owning the alias.
    :param alias_id: (int) ID of the alias entry.
    """
    if any(a.id == alias_id for a in store.get_aliases(id)):
        store.remove_alias(alias_id)
