"""
Audit Models for POA Rules

Every resolution and validation is logged for audit purposes.
This provides:
1. Traceability of which legal rules were applied to a document
2. Debugging information when a user disputes a requirement
3. A way to tie the financial and healthcare POAs of one session together

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every step in the requirements pipeline has its own event type.
    """
    # Catalog
    CATALOG_LOADED = "catalog_loaded"

    # Resolution
    RESOLUTION_SUCCEEDED = "resolution_succeeded"
    RESOLUTION_FAILED = "resolution_failed"
    HEALTHCARE_RESOLUTION_SUCCEEDED = "healthcare_resolution_succeeded"
    HEALTHCARE_RESOLUTION_FAILED = "healthcare_resolution_failed"

    # Consent validation
    CONSENT_VALIDATION_PASSED = "consent_validation_passed"
    CONSENT_VALIDATION_FAILED = "consent_validation_failed"


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
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
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

    # Context - which jurisdiction and document is this about?
    state: Optional[str] = Field(
        default=None,
        description="Jurisdiction involved"
    )
    poa_type: Optional[str] = Field(
        default=None,
        description="POA type involved, if any"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one form session)"
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
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "state": self.state,
            "poa_type": self.poa_type,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.catalog_loaded(source="default", counts=catalog.counts())
        event = AuditEventBuilder.resolution_failed(
            state="FL",
            poa_type="springing",
            error_kind=error.kind.value,
            error_message=error.message,
            correlation_id=correlation_id,
        )
    """

    @staticmethod
    def catalog_loaded(
        source: str,
        counts: dict[str, int],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATALOG_LOADED,
            description=f"Requirement catalog loaded from {source}",
            details={
                "source": source,
                "counts": counts,
            },
        )

    @staticmethod
    def resolution_succeeded(
        state: str,
        poa_type: str,
        hot_power_ids: list[str],
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RESOLUTION_SUCCEEDED,
            state=state,
            poa_type=poa_type,
            correlation_id=correlation_id,
            description=f"Requirements resolved for {poa_type} POA in {state}",
            details={
                "hot_powers": hot_power_ids,
            },
        )

    @staticmethod
    def resolution_failed(
        state: str,
        poa_type: str,
        error_kind: str,
        error_message: str,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RESOLUTION_FAILED,
            severity=AuditSeverity.WARNING,
            state=state,
            poa_type=poa_type,
            correlation_id=correlation_id,
            description=f"Resolution failed for {poa_type} POA in {state}: {error_kind}",
            error_code=error_kind,
            error_message=error_message,
        )

    @staticmethod
    def healthcare_resolution_succeeded(
        state: str,
        form_name: str,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.HEALTHCARE_RESOLUTION_SUCCEEDED,
            state=state,
            correlation_id=correlation_id,
            description=f"Healthcare POA requirements resolved for {state}",
            details={
                "form_name": form_name,
            },
        )

    @staticmethod
    def healthcare_resolution_failed(
        state: str,
        error_kind: str,
        error_message: str,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.HEALTHCARE_RESOLUTION_FAILED,
            severity=AuditSeverity.WARNING,
            state=state,
            correlation_id=correlation_id,
            description=f"Healthcare POA resolution failed for {state}: {error_kind}",
            error_code=error_kind,
            error_message=error_message,
        )

    @staticmethod
    def consent_validation_passed(
        state: str,
        poa_type: str,
        warnings: list[str],
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONSENT_VALIDATION_PASSED,
            state=state,
            poa_type=poa_type,
            correlation_id=correlation_id,
            description=f"Consent validation passed with {len(warnings)} warnings",
            details={
                "warnings": warnings,
            },
        )

    @staticmethod
    def consent_validation_failed(
        state: str,
        poa_type: str,
        findings: list[dict],
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONSENT_VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            state=state,
            poa_type=poa_type,
            correlation_id=correlation_id,
            description=f"Consent validation failed with {len(findings)} findings",
            details={
                "findings": findings,
            },
        )
