"""
filename: alias.py
author: Valentin Piombo
email: valenp97@gmail.com
description: Module for the definition of the alias model.
"""

from sqlalchemy import Column, ForeignKey, Integer, String

from ledger.database import Base


class Alias(Base):
    __tablename__ = "aliases"
    __table_args__ = {"sqlite_autoincrement": True}
    id = Column(
        Integer,
        primary_key=True,
        index=True,
        autoincrement=True,
        doc="Unique identifier of the alias entry",
    )
    client_id = Column(
        Integer,
        ForeignKey("clients.id", onupdate="CASCADE", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="Foreign key link to the client owning the alias; removed along with the client",
    )
    alias = Column(String, nullable=False, doc="Alternate name of the client")
