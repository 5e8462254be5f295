"""Services for the audit trail."""

from .audit_trail import record_audit

__all__ = [
    'record_audit',
]
