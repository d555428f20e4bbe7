"""
Typed Exception Hierarchy for the FR kernel.

Every rejected operation raises a subclass of ``FRKernelError``. Each class
carries a ``code`` class attribute (machine-readable, stable) and stores its
context as attributes rather than only in the message string.

    FRKernelError (base)
    |
    +-- ConfigurationError
    |   +-- InvalidParametersError
    |   +-- NoDefaultConfiguredError
    |
    +-- AuthorizationError
    |   +-- NotAuthorizedError
    |
    +-- ListingError
    |   +-- NotListedError
    |   +-- InvalidPriceError
    |
    +-- SettlementError
    |   +-- PriceMismatchError
    |   +-- NoPaymentDueError
    |   +-- PayoutFailedError
    |
    +-- RegistryError
    |   +-- AssetNotFoundError
    |
    +-- IntegrityError
        +-- InvariantViolationError

Error codes:

Category        | Code                   | When Raised
----------------|------------------------|------------------------------------------
Configuration   | INVALID_PARAMETERS     | Bad generation count / percent / ratio
                | NO_DEFAULT_CONFIGURED  | Mint without explicit or default FR info
Authorization   | NOT_AUTHORIZED         | Caller is not owner or approved
Listing         | NOT_LISTED             | Buy against inactive or stale listing
                | INVALID_PRICE          | Listing at a price the policy rejects
Settlement      | PRICE_MISMATCH         | Paid amount differs from quoted price
                | NO_PAYMENT_DUE         | Claim with a zero balance
                | PAYOUT_FAILED          | Payment rail rejected a payout
Registry        | ASSET_NOT_FOUND        | Asset id does not exist in the registry
Integrity       | INVARIANT_VIOLATION    | Internal state broke a structural invariant

All of these are caller-visible, non-retryable rejections. The orchestrator
rolls the whole operation back before the exception leaves it.
"""


class FRKernelError(Exception):
    """Base exception for all FR kernel errors."""

    code: str = "FR_KERNEL_ERROR"


# Configuration


class ConfigurationError(FRKernelError):
    """Base exception for FR parameter and default configuration errors."""

    code: str = "CONFIGURATION_ERROR"


class InvalidParametersError(ConfigurationError):
    """FR parameters fail validation."""

    code: str = "INVALID_PARAMETERS"

    def __init__(self, field: str, value: str, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid FR parameter {field}={value}: {reason}")


class NoDefaultConfiguredError(ConfigurationError):
    """Mint without parameters requested but no default FR info exists."""

    code: str = "NO_DEFAULT_CONFIGURED"

    def __init__(self):
        super().__init__("No default FR info has been set")


# Authorization


class AuthorizationError(FRKernelError):
    """Base exception for caller authorization failures."""

    code: str = "AUTHORIZATION_ERROR"


class NotAuthorizedError(AuthorizationError):
    """Caller is neither owner nor approved for the asset."""

    code: str = "NOT_AUTHORIZED"

    def __init__(self, caller: str, asset_id: int | None, action: str):
        self.caller = caller
        self.asset_id = asset_id
        self.action = action
        super().__init__(
            f"{action} caller {caller} is not owner nor approved for asset {asset_id}"
        )


# Listing


class ListingError(FRKernelError):
    """Base exception for listing errors."""

    code: str = "LISTING_ERROR"


class NotListedError(ListingError):
    """Asset has no active listing (or the listing is stale)."""

    code: str = "NOT_LISTED"

    def __init__(self, asset_id: int):
        self.asset_id = asset_id
        super().__init__(f"Asset {asset_id} is not listed")


class InvalidPriceError(ListingError):
    """Listing price rejected by policy."""

    code: str = "INVALID_PRICE"

    def __init__(self, asset_id: int, price: str):
        self.asset_id = asset_id
        self.price = price
        super().__init__(f"Invalid listing price {price} for asset {asset_id}")


# Settlement


class SettlementError(FRKernelError):
    """Base exception for value movement errors."""

    code: str = "SETTLEMENT_ERROR"


class PriceMismatchError(SettlementError):
    """Paid amount is not equal to the quoted sale price."""

    code: str = "PRICE_MISMATCH"

    def __init__(self, asset_id: int, price: str, paid: str):
        self.asset_id = asset_id
        self.price = price
        self.paid = paid
        super().__init__(
            f"Sale price and paid amount mismatch for asset {asset_id}: "
            f"price={price}, paid={paid}"
        )


class NoPaymentDueError(SettlementError):
    """Claim attempted on an address with zero allotted FR."""

    code: str = "NO_PAYMENT_DUE"

    def __init__(self, owner: str):
        self.owner = owner
        super().__init__(f"No FR payment due for {owner}")


class PayoutFailedError(SettlementError):
    """The payment rail refused or failed a payout."""

    code: str = "PAYOUT_FAILED"

    def __init__(self, recipient: str, amount: str, reason: str):
        self.recipient = recipient
        self.amount = amount
        self.reason = reason
        super().__init__(f"Payout of {amount} to {recipient} failed: {reason}")


# Registry


class RegistryError(FRKernelError):
    """Base exception for asset registry errors."""

    code: str = "REGISTRY_ERROR"


class AssetNotFoundError(RegistryError):
    """Asset id does not exist."""

    code: str = "ASSET_NOT_FOUND"

    def __init__(self, asset_id: int):
        self.asset_id = asset_id
        super().__init__(f"Asset not found: {asset_id}")


# Integrity


class IntegrityError(FRKernelError):
    """Base exception for internal consistency failures."""

    code: str = "INTEGRITY_ERROR"


class InvariantViolationError(IntegrityError):
    """A structural invariant of the royalty state does not hold."""

    code: str = "INVARIANT_VIOLATION"

    def __init__(self, invariant: str, detail: str):
        self.invariant = invariant
        self.detail = detail
        super().__init__(f"Invariant {invariant} violated: {detail}")
