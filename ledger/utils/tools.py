"""
filename: tools.py
author: Valentin Piombo
email: valenp97@gmail.com
description: Module for the definitions of reusable utility functions.
"""

from datetime import date, datetime

from pytz import timezone
from sqlalchemy.orm import Session

from ledger.config import settings
from ledger.exceptions import NotFound


def validate_entries_in_db(db: Session, entries: list) -> dict:
    """
    Auxiliary function to validate the existence of data in the database. This is useful for
    validating the data before making operations. After successful validation, it can also
    return the data in the form of SQLAlchemy models.

    :param db: (Session) SQLAlchemy ORM session.
    :param entries: (List[Union[Entry, None]]) collection of data to check; optional flag
     <return_model> can be included if the entry data is requested to be returned.
    :return: (dict) A dictionary with model names as keys and corresponding result as values.
    :raises NotFound: if any of the requested entries does not exist.
    """
    results = {}
    for entry in entries:
        if entry is None:
            continue  # Skip processing if entry is None
        query = db.query(entry["model"]).filter(entry["model"].id == entry["id_value"])
        if entry.get("return_model"):
            model_result = query.first()
            if not model_result:
                raise NotFound(f"{entry['model'].__name__} {entry['id_value']} not found")
            results[entry["model"].__name__] = model_result
        else:
            count_result = query.count()
            if not count_result:
                raise NotFound(f"{entry['model'].__name__} {entry['id_value']} not found")
    return results


def now_factory() -> datetime:
    """
    Function that computes the current date and time accurate to the timezone set in the
    config.py

    :returns: (datetime) timezone aware current date and time
    """
    return datetime.now(timezone(settings.timezone)).replace(microsecond=0)


def to_timestamp(value: int | date | datetime) -> int:
    """
    Convert a point in time to Unix seconds. Integers are taken as Unix seconds already, naive
    datetimes and dates are interpreted in the timezone set in the config.py (a date maps to
    its midnight).

    :param value: (int | date | datetime) point in time to convert.
    :returns: (int) Unix timestamp in seconds.
    """
    if isinstance(value, bool):
        raise TypeError("Cannot convert a boolean to a timestamp")
    if isinstance(value, int):
        return value
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        value = timezone(settings.timezone).localize(value)
    return int(value.timestamp())


def current_timestamp() -> int:
    """Unix seconds for the current moment."""
    return int(now_factory().timestamp())
