"""
Typed Exception Hierarchy for the Stock Kernel.

===============================================================================
WHEN TO RAISE
===============================================================================

Business outcomes are NOT exceptions here. An over-allocating edit, a
negative cost, or a purchase that fails the save checks is an expected
event in an interactive editing session; engines return those as typed
failures (see ``stock_kernel.domain.failures``) inside result objects.

Exceptions are reserved for:
  - Programmer errors (malformed input shape, unknown measurement type,
    a record id that does not belong to the session, calling a session
    operation in the wrong state).
  - Collaborator failures (a repository cannot find the item or purchase
    it was asked for).

Every exception carries a ``code`` class attribute (machine-readable) and
keeps its context as attributes, so it can be logged and serialized without
parsing the message.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    StockKernelError (base)
    |
    +-- MeasurementError
    |   +-- UnknownMeasurementTypeError
    |   +-- InvalidUnitError
    |
    +-- BreakdownError
    |   +-- SessionStateError
    |   +-- RecordNotFoundError
    |   +-- SourceItemRequiredError
    |
    +-- PurchaseError
    |   +-- LineNotFoundError
    |
    +-- RepositoryError
        +-- ItemNotFoundError
        +-- PurchaseNotFoundError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Measurement     | UNKNOWN_MEASUREMENT_TYPE    | Tracking type string not recognised
                | INVALID_UNIT                | Unit symbol not allowed for the type
----------------|-----------------------------|-----------------------------------------
Breakdown       | SESSION_STATE               | Operation not allowed in current state
                | RECORD_NOT_FOUND            | Record id not part of the session
                | SOURCE_ITEM_REQUIRED        | Session used before a source was opened
----------------|-----------------------------|-----------------------------------------
Purchase        | LINE_NOT_FOUND              | Line index/id outside the document
----------------|-----------------------------|-----------------------------------------
Repository      | ITEM_NOT_FOUND              | Item id not in the item store
                | PURCHASE_NOT_FOUND          | Purchase id not in the purchase store
"""


class StockKernelError(Exception):
    """
    Base exception for all stock kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "STOCK_KERNEL_ERROR"


# Measurement exceptions


class MeasurementError(StockKernelError):
    """Base exception for measurement model errors."""

    code: str = "MEASUREMENT_ERROR"


class UnknownMeasurementTypeError(MeasurementError):
    """Tracking type value is not one of the five measurement types."""

    code: str = "UNKNOWN_MEASUREMENT_TYPE"

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Unknown measurement type: {value!r}")


class InvalidUnitError(MeasurementError):
    """Unit symbol does not belong to the measurement type."""

    code: str = "INVALID_UNIT"

    def __init__(self, measurement_type: str, unit: str, allowed: tuple[str, ...]):
        self.measurement_type = measurement_type
        self.unit = unit
        self.allowed = allowed
        super().__init__(
            f"Unit {unit!r} is not valid for {measurement_type}; "
            f"expected one of {', '.join(allowed)}"
        )


# Breakdown session exceptions


class BreakdownError(StockKernelError):
    """Base exception for breakdown session misuse."""

    code: str = "BREAKDOWN_ERROR"


class SessionStateError(BreakdownError):
    """Operation is not permitted in the session's current state."""

    code: str = "SESSION_STATE"

    def __init__(self, operation: str, state: str):
        self.operation = operation
        self.state = state
        super().__init__(f"Cannot {operation} while session is {state}")


class RecordNotFoundError(BreakdownError):
    """Derived record id is not part of the session."""

    code: str = "RECORD_NOT_FOUND"

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Derived record not found in session: {record_id}")


class SourceItemRequiredError(BreakdownError):
    """Session has no source item opened."""

    code: str = "SOURCE_ITEM_REQUIRED"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Cannot {operation}: no source item is open")


# Purchase document exceptions


class PurchaseError(StockKernelError):
    """Base exception for purchase document misuse."""

    code: str = "PURCHASE_ERROR"


class LineNotFoundError(PurchaseError):
    """Line reference does not exist in the purchase document."""

    code: str = "LINE_NOT_FOUND"

    def __init__(self, line_id: str):
        self.line_id = line_id
        super().__init__(f"Purchase line not found: {line_id}")


# Repository exceptions


class RepositoryError(StockKernelError):
    """Base exception for collaborator (repository) failures."""

    code: str = "REPOSITORY_ERROR"


class ItemNotFoundError(RepositoryError):
    """Item with given ID was not found."""

    code: str = "ITEM_NOT_FOUND"

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Item not found: {item_id}")


class PurchaseNotFoundError(RepositoryError):
    """Purchase with given ID was not found."""

    code: str = "PURCHASE_NOT_FOUND"

    def __init__(self, purchase_id: str):
        self.purchase_id = purchase_id
        super().__init__(f"Purchase not found: {purchase_id}")
