"""Services for maintenance business logic."""

from .exceptions import (
    MaintenanceServiceError,
    WorkOrderNotFoundError,
    InvalidWorkOrderTransitionError,
)
from .work_orders import (
    get_work_order,
    create_work_order,
    accept_work_order,
    complete_work_order,
    escalate_work_order,
    cancel_work_order,
)
from .stats import maintenance_stats

__all__ = [
    # Exceptions
    'MaintenanceServiceError',
    'WorkOrderNotFoundError',
    'InvalidWorkOrderTransitionError',
    # Services
    'get_work_order',
    'create_work_order',
    'accept_work_order',
    'complete_work_order',
    'escalate_work_order',
    'cancel_work_order',
    'maintenance_stats',
]
