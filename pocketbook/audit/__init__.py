"""Audit logging package."""

from pocketbook.audit.logger import AuditLogger

__all__ = ["AuditLogger"]
