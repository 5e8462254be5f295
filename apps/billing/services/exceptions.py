"""Domain-specific exceptions for billing services."""


class BillingServiceError(Exception):
    """Base exception for billing services."""
    pass


class FolioNotFoundError(BillingServiceError):
    """Raised when a folio does not exist in the caller's hotel."""
    pass


class FolioClosedError(BillingServiceError):
    """Raised when posting to or paying into a closed folio."""
    pass


class OutstandingBalanceError(BillingServiceError):
    """Raised when closing a folio that still has a balance."""
    pass


class InvalidAmountError(BillingServiceError):
    """Raised when a charge or payment amount is not positive."""
    pass


class DuplicatePaymentError(BillingServiceError):
    """Raised when a payment looks like a repeat of a recent one."""

    def __init__(self, message, existing_payment=None):
        super().__init__(message)
        self.existing_payment = existing_payment


class PaymentNotFoundError(BillingServiceError):
    """Raised when a payment does not exist in the caller's hotel."""
    pass


class InvalidPaymentStateError(BillingServiceError):
    """Raised when a payment cannot be refunded from its current status."""
    pass


class ShiftNotFoundError(BillingServiceError):
    """Raised when a shift does not exist in the caller's hotel."""
    pass


class ShiftAlreadyActiveError(BillingServiceError):
    """Raised when a staff member already has an open shift."""
    pass


class ShiftClosedError(BillingServiceError):
    """Raised when closing a shift that is already completed."""
    pass


class ShiftAuthorizationRequiredError(BillingServiceError):
    """Raised when a cash variance needs a manager's sign-off."""
    pass


class NoOpenFolioError(BillingServiceError):
    """Raised when a room has no checked-in guest with an open folio."""
    pass
