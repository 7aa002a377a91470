from __future__ import annotations


class LedgerError(Exception):
    """Base class for every failure raised by the ledger core.

    All ledger errors are raised before any state is written, so catching one
    never leaves a partially-applied operation behind.
    """


class InvalidInputError(LedgerError, ValueError):
    """Blank required text, null identity, or an empty ingredient list."""


class UnknownOrUnavailableIngredientError(LedgerError, LookupError):
    def __init__(self, ingredient_id: int) -> None:
        super().__init__(f"Invalid or unavailable ingredient: {ingredient_id}")
        self.ingredient_id = ingredient_id


class NotFoundError(LedgerError, LookupError):
    """Entity ID outside the allocated range, or an unregistered user."""


class NotAuthorizedSupplierError(LedgerError, PermissionError):
    """Caller is not an eligible supplier with an outstanding vote."""

    def __init__(self, product_id: int, caller: str, message: str | None = None) -> None:
        super().__init__(message or f"Not authorized supplier {caller!r} for product {product_id}")
        self.product_id = product_id
        self.caller = caller


class ProductFinalizedError(NotAuthorizedSupplierError):
    """An eligible supplier tried to vote on a product that already reached a terminal status."""

    def __init__(self, product_id: int, caller: str, status: str) -> None:
        super().__init__(
            product_id,
            caller,
            f"Product {product_id} is already {status}; vote from {caller!r} refused",
        )
        self.status = status


class NotYetApprovedError(LedgerError):
    def __init__(self, product_id: int, status: str) -> None:
        super().__init__(f"Product {product_id} is not approved (status: {status})")
        self.product_id = product_id
        self.status = status


class AccessDeniedError(LedgerError, PermissionError):
    """The user registry refused the caller's request."""


class AlreadyRegisteredError(LedgerError, ValueError):
    pass
