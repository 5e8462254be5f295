"""Services for housekeeping business logic."""

from .exceptions import (
    HousekeepingServiceError,
    TaskNotFoundError,
    InvalidTaskTransitionError,
    InvalidAssigneeError,
    SupplyNotFoundError,
    InsufficientStockError,
    InvalidQuantityError,
)
from .task_management import (
    get_task,
    create_task,
    assign_task,
    accept_task,
    complete_task,
    delay_task,
    cancel_task,
)
from .supplies import record_supply_usage, low_stock_supplies
from .stats import housekeeping_stats

__all__ = [
    # Exceptions
    'HousekeepingServiceError',
    'TaskNotFoundError',
    'InvalidTaskTransitionError',
    'InvalidAssigneeError',
    'SupplyNotFoundError',
    'InsufficientStockError',
    'InvalidQuantityError',
    # Services
    'get_task',
    'create_task',
    'assign_task',
    'accept_task',
    'complete_task',
    'delay_task',
    'cancel_task',
    'record_supply_usage',
    'low_stock_supplies',
    'housekeeping_stats',
]
