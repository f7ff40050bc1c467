"""
filename: client.py
author: Valentin Piombo
email: valenp97@gmail.com
description: Module for the definition of the client model.
"""

from sqlalchemy import Column, Integer, String

from ledger.database import Base


class Client(Base):
    __tablename__ = "clients"
    # AUTOINCREMENT keeps SQLite from handing out the id of a deleted client again
    __table_args__ = {"sqlite_autoincrement": True}
    id = Column(
        Integer,
        primary_key=True,
        index=True,
        autoincrement=True,
        doc="Unique identifier of the client entry",
    )
    name = Column(String, nullable=False, doc="Name of the client")
    balance = Column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
        doc="Payments minus prices of the client's transactions, as of the last balance update",
    )
    detail = Column(String, nullable=True, doc="(optional) Free text about the client")
