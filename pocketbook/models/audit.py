"""
Audit Models for Pocketbook

Every change to a user's ledger, budget or portfolio is recorded.
This provides:
1. A history of what changed and when
2. Debugging information when an import or export goes wrong
3. A record of sign-ins and failed sign-ins

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_DELETED = "transaction_deleted"
    TRANSACTIONS_IMPORTED = "transactions_imported"
    IMPORT_FAILED = "import_failed"

    # Budget
    BUDGET_UPDATED = "budget_updated"

    # Investments
    INVESTMENT_ADDED = "investment_added"
    INVESTMENT_VALUE_UPDATED = "investment_value_updated"
    INVESTMENT_DELETED = "investment_deleted"

    # Reports
    REPORT_EXPORTED = "report_exported"

    # Accounts
    ACCOUNT_CREATED = "account_created"
    SIGNUP_FAILED = "signup_failed"
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    GUEST_SESSION_STARTED = "guest_session_started"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Whose data this is about ("guest" or an account id)
    scope: Optional[str] = Field(
        default=None,
        description="User scope the event belongs to"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'investment')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "scope": self.scope,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_json_line(self) -> str:
        """Serialize as one line of the JSON-lines audit file."""
        return json.dumps(self.to_log_dict(), default=str)


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_added(tx_id, scope, "expense", "12.50")
        event = AuditEventBuilder.login_failed("someone@example.com")
    """

    @staticmethod
    def transaction_added(
        transaction_id: UUID,
        scope: str,
        transaction_type: str,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            scope=scope,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Transaction added: {transaction_type} of {amount}",
            details={
                "type": transaction_type,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(transaction_id: UUID, scope: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            scope=scope,
            entity_type="transaction",
            entity_id=transaction_id,
            description="Transaction deleted",
            is_user_action=True,
        )

    @staticmethod
    def transactions_imported(
        scope: str,
        filename: str,
        imported: int,
        skipped: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTIONS_IMPORTED,
            scope=scope,
            entity_type="import",
            description=f"Imported {imported} transactions",
            details={
                "filename": filename,
                "imported": imported,
                "skipped_rows": skipped,
            },
            is_user_action=True,
        )

    @staticmethod
    def import_failed(scope: str, filename: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_FAILED,
            severity=AuditSeverity.WARNING,
            scope=scope,
            entity_type="import",
            description="CSV import failed",
            error_message=error_message,
            details={"filename": filename},
            is_user_action=True,
        )

    @staticmethod
    def budget_updated(scope: str, monthly_limit: str, limited_categories: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_UPDATED,
            scope=scope,
            entity_type="budget",
            description="Budget updated",
            details={
                "monthly_limit": monthly_limit,
                "limited_categories": limited_categories,
            },
            is_user_action=True,
        )

    @staticmethod
    def investment_added(investment_id: UUID, scope: str, name: str, amount: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVESTMENT_ADDED,
            scope=scope,
            entity_type="investment",
            entity_id=investment_id,
            description=f"Investment added: {name}",
            details={"name": name, "amount": amount},
            is_user_action=True,
        )

    @staticmethod
    def investment_value_updated(
        investment_id: UUID,
        scope: str,
        old_value: str,
        new_value: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVESTMENT_VALUE_UPDATED,
            scope=scope,
            entity_type="investment",
            entity_id=investment_id,
            description=f"Investment value updated: {old_value} -> {new_value}",
            details={"old_value": old_value, "new_value": new_value},
            is_user_action=True,
        )

    @staticmethod
    def investment_deleted(investment_id: UUID, scope: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVESTMENT_DELETED,
            scope=scope,
            entity_type="investment",
            entity_id=investment_id,
            description="Investment deleted",
            is_user_action=True,
        )

    @staticmethod
    def report_exported(scope: str, transaction_count: int, pages: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_EXPORTED,
            scope=scope,
            entity_type="report",
            description=f"PDF report exported ({pages} pages)",
            details={
                "transaction_count": transaction_count,
                "pages": pages,
            },
            is_user_action=True,
        )

    @staticmethod
    def account_created(account_id: UUID, email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCOUNT_CREATED,
            scope=str(account_id),
            entity_type="account",
            entity_id=account_id,
            description="Account created",
            details={"email": email},
            is_user_action=True,
        )

    @staticmethod
    def signup_failed(email: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SIGNUP_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="account",
            description="Sign-up failed",
            error_message=reason,
            details={"email": email},
            is_user_action=True,
        )

    @staticmethod
    def login_succeeded(account_id: UUID, email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_SUCCEEDED,
            scope=str(account_id),
            entity_type="account",
            entity_id=account_id,
            description="Logged in",
            details={"email": email},
            is_user_action=True,
        )

    @staticmethod
    def login_failed(email: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOGIN_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="account",
            description="Invalid email or password",
            details={"email": email},
            is_user_action=True,
        )

    @staticmethod
    def guest_session_started() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GUEST_SESSION_STARTED,
            scope="guest",
            description="Guest session started",
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        scope: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            scope=scope,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
