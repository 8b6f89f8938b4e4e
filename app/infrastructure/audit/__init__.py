"""
Audit logging infrastructure for gift lifecycle events.

Append-only: CREATED and OPENED transitions are recorded and can be listed
per gift or per sender, never changed.
"""

from app.infrastructure.audit.audit_logger import AuditLogger, audit_logger

__all__ = ["AuditLogger", "audit_logger"]
