"""
filename: database.py
author: Valentin Piombo
email: valenp97@gmail.com
description: Module for everything database/engine/sessions related.
"""

import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from ledger.config import settings
from ledger.exceptions import BackendError, StoreError

logger = logging.getLogger(__name__)

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE/ON UPDATE clauses unless this is set per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(database_url: str = None, echo: bool = None) -> Engine:
    """
    Create an engine for the given URL (the configured one by default). SQLite engines get
    foreign key enforcement turned on so the client cascades of the schema apply.

    :param database_url: (str) optional; SQLAlchemy database URL.
    :param echo: (bool) optional; log every emitted SQL statement.
    :returns: (Engine) the new engine.
    """
    database_url = database_url or settings.database_url
    echo = settings.sql_echo if echo is None else echo
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(database_url, echo=echo, connect_args=connect_args)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def init_db(engine: Engine) -> None:
    """Create the clients, aliases and transactions tables if they do not exist yet."""
    # Register the models on the metadata
    from ledger import models  # noqa: F401

    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        logger.error("Could not create the ledger tables: %s", e)
        raise BackendError(f"Could not create the ledger tables: {e}") from e


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def sql_session(session_factory: sessionmaker):
    """
    Custom SQL session in a context manager that conviniently commits and closes. Any error
    rolls the whole unit of work back; store errors propagate untouched while engine errors
    are wrapped into a BackendError.
    """
    db_session = session_factory()
    try:
        yield db_session
        db_session.commit()
    except StoreError:
        db_session.rollback()
        raise
    except SQLAlchemyError as e:
        db_session.rollback()
        logger.error("Database operation failed: %s", e)
        raise BackendError(str(e)) from e
    finally:
        db_session.close()
