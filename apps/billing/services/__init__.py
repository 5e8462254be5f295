"""Services for billing business logic."""

from .exceptions import (
    BillingServiceError,
    FolioNotFoundError,
    FolioClosedError,
    OutstandingBalanceError,
    InvalidAmountError,
    DuplicatePaymentError,
    PaymentNotFoundError,
    InvalidPaymentStateError,
    ShiftNotFoundError,
    ShiftAlreadyActiveError,
    ShiftClosedError,
    ShiftAuthorizationRequiredError,
    NoOpenFolioError,
)
from .tax_calculator import calculate_charge, applicable_rates
from .folio_management import (
    get_folio,
    get_open_folio,
    get_room_open_folio,
    get_or_create_open_folio,
    post_charge,
    recalculate_folio_balance,
    folio_breakdown,
    close_folio,
)
from .payment_processing import (
    get_active_shift,
    find_duplicate_payment,
    record_payment,
    void_payment,
)
from .shift_reconciliation import (
    get_shift,
    start_shift,
    shift_summary,
    close_shift,
    collect_unresolved_items,
)
from .double_tax_repair import scan_double_tax_charges, fix_double_tax_charges

__all__ = [
    # Exceptions
    'BillingServiceError',
    'FolioNotFoundError',
    'FolioClosedError',
    'OutstandingBalanceError',
    'InvalidAmountError',
    'DuplicatePaymentError',
    'PaymentNotFoundError',
    'InvalidPaymentStateError',
    'ShiftNotFoundError',
    'ShiftAlreadyActiveError',
    'ShiftClosedError',
    'ShiftAuthorizationRequiredError',
    'NoOpenFolioError',
    # Services
    'calculate_charge',
    'applicable_rates',
    'get_folio',
    'get_open_folio',
    'get_room_open_folio',
    'get_or_create_open_folio',
    'post_charge',
    'recalculate_folio_balance',
    'folio_breakdown',
    'close_folio',
    'get_active_shift',
    'find_duplicate_payment',
    'record_payment',
    'void_payment',
    'get_shift',
    'start_shift',
    'shift_summary',
    'close_shift',
    'collect_unresolved_items',
    'scan_double_tax_charges',
    'fix_double_tax_charges',
]
