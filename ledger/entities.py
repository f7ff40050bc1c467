"""
filename: entities.py
author: Valentin Piombo
email: valenp97@gmail.com
description: Module for the definitions of the records handed out by the stores.
"""

from functools import total_ordering

from pydantic import BaseModel, ConfigDict, Field


@total_ordering
class Entity(BaseModel):
    """
    Immutable record identified by its <id>. Two records with the same id are the same
    record regardless of the other fields, which is what deduplication and ordering use.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int = Field(gt=0)

    def __eq__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        return self.id == other.id

    def __lt__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        return self.id < other.id

    def __hash__(self):
        return hash((type(self).__name__, self.id))


class Client(Entity):
    name: str = Field(min_length=1)
    detail: str | None = None
    balance: int = 0


class Alias(Entity):
    alias: str
    client_id: int = Field(gt=0)


class Transaction(Entity):
    # None marks an anonymous (walk-in) transaction
    client_id: int | None = Field(default=None, gt=0)
    date: int = Field(ge=0, description="Unix timestamp in seconds")
    price: int
    payment: int = 0
    detail: str | None = None

    @property
    def is_anonymous(self) -> bool:
        return self.client_id is None


def client_id_of(client: Client | int | None) -> int | None:
    """Id of <client>, which may be given as a Client, a bare id or None (anonymous)."""
    if isinstance(client, Client):
        return client.id
    return client
