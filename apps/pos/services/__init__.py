"""Services for restaurant point of sale."""

from .exceptions import (
    PosServiceError,
    OrderNotFoundError,
    InvalidOrderError,
    MenuItemUnavailableError,
    InvalidOrderTransitionError,
    OrderAlreadyPaidError,
)
from .orders import (
    get_order,
    price_order,
    create_order,
    update_order_status,
    cancel_order,
    order_eta,
)
from .payments import process_payment
from .kitchen import kitchen_tickets, pos_stats

__all__ = [
    # Exceptions
    'PosServiceError',
    'OrderNotFoundError',
    'InvalidOrderError',
    'MenuItemUnavailableError',
    'InvalidOrderTransitionError',
    'OrderAlreadyPaidError',
    # Services
    'get_order',
    'price_order',
    'create_order',
    'update_order_status',
    'cancel_order',
    'order_eta',
    'process_payment',
    'kitchen_tickets',
    'pos_stats',
]
