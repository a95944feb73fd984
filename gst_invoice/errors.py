"""
Exceptions raised by the billing calculator and its helpers.

Every error is a ValueError: callers reject the request (4xx) rather than retry.
"""
from __future__ import annotations
from typing import Any, Optional


class BillingError(ValueError):
    pass


class InvalidLineItem(BillingError):
    """A line item failed validation before any totals were computed."""

    def __init__(
        self,
        message: str,
        *,
        index: Optional[int] = None,
        field: Optional[str] = None,
        value: Any = None,
    ):
        self.index = index
        self.field = field
        self.value = value
        if index is not None:
            message = f"item {index}: {message}"
        super().__init__(message)


class EmptyInvoice(BillingError):
    pass


class UnknownInvoiceType(BillingError):
    pass


class InvalidDocumentNumber(BillingError):
    pass


class InvalidPayment(BillingError):
    pass
