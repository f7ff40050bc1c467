"""
filename: exceptions.py
author: Valentin Piombo
email: valenp97@gmail.com
description: Module for the definitions of the errors raised by every store backend.
"""

from starlette import status


class StoreError(Exception):
    """
    Root of the store errors. Every error carries a human readable <detail> and the HTTP
    <status_code> it maps to when it reaches the API layer.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Store operation failed"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(StoreError):
    """Caller supplied data violates an invariant. Raised before any write."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid data"


class EmptyClientName(ValidationError):
    default_detail = "Client name cannot be empty"


class InvalidPaymentOnAnonClient(ValidationError):
    default_detail = "Anonymous transactions must be fully paid (payment must equal price)"


class NotFound(StoreError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Entry not found"


class BackendError(StoreError):
    """The storage engine rejected or failed to run an operation. Never retried."""

    default_detail = "Storage backend failure"


class InvalidQuery(BackendError):
    """A query descriptor that cannot be run, such as a range whose ends are swapped."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Malformed query"
