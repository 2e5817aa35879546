"""Audit logging package."""

from spendvista.audit.logger import AuditLogger, configure_logging

__all__ = ["AuditLogger", "configure_logging"]
