"""Services for QR guest self-service."""

from .exceptions import (
    QRServiceError,
    QRCodeNotFoundError,
    ServiceNotEnabledError,
    ServiceRequestNotFoundError,
    InvalidRequestTransitionError,
    InvalidRequestError,
)
from .qr_codes import (
    generate_qr_token,
    portal_url,
    get_qr_code,
    create_qr_code,
    deactivate_qr_code,
    regenerate_qr_token,
    render_qr_png,
)
from .guest_portal import (
    get_active_qr_code,
    portal_info,
    submit_guest_request,
    get_guest_request,
    add_guest_message,
)
from .request_dashboard import (
    get_request,
    update_request_status,
    assign_request,
    accept_request,
    complete_request,
    cancel_request,
    add_staff_message,
    request_analytics,
)

__all__ = [
    # Exceptions
    'QRServiceError',
    'QRCodeNotFoundError',
    'ServiceNotEnabledError',
    'ServiceRequestNotFoundError',
    'InvalidRequestTransitionError',
    'InvalidRequestError',
    # QR codes
    'generate_qr_token',
    'portal_url',
    'get_qr_code',
    'create_qr_code',
    'deactivate_qr_code',
    'regenerate_qr_token',
    'render_qr_png',
    # Guest portal
    'get_active_qr_code',
    'portal_info',
    'submit_guest_request',
    'get_guest_request',
    'add_guest_message',
    # Staff dashboard
    'get_request',
    'update_request_status',
    'assign_request',
    'accept_request',
    'complete_request',
    'cancel_request',
    'add_staff_message',
    'request_analytics',
]
