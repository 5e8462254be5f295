"""Audit trail writer."""

import logging
from typing import Any, Optional

from apps.audit.models import AuditLog

logger = logging.getLogger(__name__)


def record_audit(
    *,
    tenant,
    action: str,
    resource_type: str,
    resource_id: Any = '',
    actor=None,
    description: str = '',
    metadata: Optional[dict] = None,
) -> AuditLog:
    """
    Append an audit entry.

    Runs inside the caller's transaction so the entry is rolled back together
    with the change it describes. ``actor`` may be None for system jobs.

    Args:
        tenant: Hotel the change belongs to (None for platform actions)
        action: Machine-readable action, e.g. ``guest_checked_in``
        resource_type: Kind of object changed, e.g. ``reservation``
        resource_id: Primary key of the object changed
        actor: User performing the change
        description: Human-readable summary
        metadata: Extra JSON-serialisable context

    Returns:
        Created AuditLog instance
    """
    entry = AuditLog.objects.create(
        tenant=tenant,
        action=action,
        resource_type=resource_type,
        resource_id=str(resource_id) if resource_id else '',
        actor=actor,
        actor_email=actor.email if actor else '',
        actor_role=actor.role if actor else '',
        description=description,
        metadata=metadata or {},
    )
    logger.debug("audit %s %s:%s", action, resource_type, entry.resource_id)
    return entry
