"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer (or any other front end) can catch them uniformly and
display the message as-is.  Messages are written for the operator: no
internal identifiers beyond the ones printed on receipts.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


NotFoundError = EntityNotFoundError


class SaleNotFoundError(EntityNotFoundError):

    def __init__(self, sale_id: int) -> None:
        super().__init__(f"Sale #{sale_id} not found")
        self.sale_id = sale_id


class InsufficientStockError(ValidationError):
    """Raised before any stock mutation when a variant cannot cover a request."""

    def __init__(self, variant_id: int, label: str, requested: int, available: int) -> None:
        super().__init__(
            f"Insufficient stock for {label} "
            f"(requested {requested}, {available} available)"
        )
        self.variant_id = variant_id
        self.requested = requested
        self.available = available


class EmptyCartError(ValidationError):

    def __init__(self, message: str = "Cart is empty") -> None:
        super().__init__(message)


class EmptyReturnError(ValidationError):

    def __init__(self, message: str = "Select at least one item to return") -> None:
        super().__init__(message)


class EmptyExchangeError(ValidationError):

    def __init__(self, message: str = "Select at least one replacement item") -> None:
        super().__init__(message)


class OverReturnError(ValidationError):

    def __init__(self, sale_item_id: int, requested: int, sold: int) -> None:
        if requested <= 0:
            message = f"Return quantity for sale item #{sale_item_id} must be positive"
        else:
            message = (
                f"Cannot return {requested} of sale item #{sale_item_id} "
                f"(only {sold} sold)"
            )
        super().__init__(message)
        self.sale_item_id = sale_item_id
        self.requested = requested
        self.sold = sold


class AlreadyReturnedError(ValidationError):

    def __init__(self, sale_id: int) -> None:
        super().__init__(f"Sale #{sale_id} already has a return")
        self.sale_id = sale_id


class TooManyCartsError(ValidationError):

    def __init__(self, maximum: int) -> None:
        super().__init__(f"Maximum {maximum} customers at a time")
        self.maximum = maximum


class LastCartError(ValidationError):

    def __init__(self) -> None:
        super().__init__("At least one cart must stay open")


class PersistenceError(DomainException):
    """Wraps any storage-boundary failure (I/O, serialization)."""


class StockConflictError(PersistenceError):
    """Stored stock changed between the check and the write."""


class ConfigurationError(DomainException):
    """A setting could not be parsed."""
