"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.

Every exception carries a machine-readable ``code`` and a ``retryable``
flag.  Only ``TransientStoreError`` is retryable: nothing partial was ever
committed, so the caller may safely run the whole operation again.
After a ``CommitOutcomeUnknownError`` the caller must check what was
stored instead of repeating the operation.
"""


class DomainException(Exception):
    """Base class for all domain errors."""

    code: str = "DOMAIN_ERROR"
    retryable: bool = False


class ValidationError(DomainException):
    """A business rule or invariant was violated (invalid input)."""

    code = "INVALID_INPUT"


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""

    code = "NOT_FOUND"


class ProductInactiveError(DomainException):
    """A deactivated product was requested in a new sale."""

    code = "PRODUCT_INACTIVE"

    def __init__(self, product_id: str, product_name: str) -> None:
        self.product_id = product_id
        self.product_name = product_name
        super().__init__(f"Product is not active: {product_name}")


class InsufficientStockError(DomainException):
    """Not enough stock to satisfy a line item."""

    code = "INSUFFICIENT_STOCK"

    def __init__(self, product_id: str, product_name: str, requested: int, available: int) -> None:
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for {product_name} "
            f"(need {requested}, have {available} available)"
        )


class ConflictError(DomainException):
    """The operation conflicts with the current state of an entity."""

    code = "CONFLICT"


class InvalidStatusTransitionError(ConflictError):
    """A sale status change is not allowed by the lifecycle rules."""

    code = "INVALID_STATUS_TRANSITION"

    def __init__(self, from_status: str, to_status: str) -> None:
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Cannot change sale status from '{from_status}' to '{to_status}'"
        )


class TransientStoreError(DomainException):
    """The store timed out or hit contention; the scope was rolled back."""

    code = "TRANSIENT_STORE_FAILURE"
    retryable = True


class InconsistentStateError(DomainException):
    """Stored data is inconsistent and needs operator intervention."""

    code = "INCONSISTENT_STATE"


class CommitOutcomeUnknownError(DomainException):
    """The connection dropped while committing; the write may or may not have landed.

    Not retryable: running the operation again could apply it twice.
    """

    code = "COMMIT_OUTCOME_UNKNOWN"
