"""
filename: transaction.py
author: Valentin Piombo
email: valenp97@gmail.com
description: Module for the definition of the transaction model.
"""

from sqlalchemy import Column, ForeignKey, Integer, String

from ledger.database import Base


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = {"sqlite_autoincrement": True}
    id = Column(
        Integer,
        primary_key=True,
        index=True,
        autoincrement=True,
        doc="Unique identifier of the transaction entry",
    )
    client_id = Column(
        Integer,
        ForeignKey("clients.id", onupdate="CASCADE", ondelete="SET NULL"),
        nullable=True,
        index=True,
        doc=(
            "Foreign key link to the client the transaction is billed to; null for anonymous "
            "transactions and for those whose client was removed"
        ),
    )
    date = Column(Integer, nullable=False, doc="Unix timestamp (seconds) of the transaction")
    price = Column(Integer, nullable=False, doc="Amount billed")
    payment = Column(
        Integer, nullable=False, default=0, server_default="0", doc="Amount actually paid"
    )
    detail = Column(String, nullable=True, doc="(optional) Free text about the transaction")
