"""
Audit Logger

DESIGN DECISION: Every resolution and validation is logged.
This provides:
1. A record of which rules were applied to which document
2. Debugging capability when a requirement is disputed
3. Correlation of the financial and healthcare POAs of one session

The audit logger:
- Is synchronous, like the rest of the library (no I/O of its own)
- Gracefully handles failures (a broken storage never breaks a resolution)
- Supports correlation IDs to trace related events
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from poa_rules.config import get_settings
from poa_rules.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from poa_rules.models.configuration import DocumentConfiguration
from poa_rules.models.findings import ConsentValidationResult
from poa_rules.models.requirements import HealthcareResolutionResult, ResolutionResult
from poa_rules.services.storage import AuditStorageInterface


LOGGER_NAME = "poa_rules.audit"


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage, if one is configured (for persistence)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
        log_level: Optional[str] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
            log_level: Minimum level for local output.
                    Defaults to the POA_AUDIT_LOG_LEVEL setting.
        """
        self._storage = storage
        level = log_level or get_settings().audit.log_level
        logging.getLogger(LOGGER_NAME).setLevel(level.upper())
        self._logger = structlog.get_logger(LOGGER_NAME)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        # Always log locally
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        # Persist to storage if available
        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_catalog_loaded(
        self,
        source: str,
        counts: dict[str, int],
    ) -> None:
        """Log catalog load."""
        self.log(AuditEventBuilder.catalog_loaded(source=source, counts=counts))

    def log_resolution(
        self,
        configuration: DocumentConfiguration,
        result: ResolutionResult,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log the outcome of a financial POA resolution."""
        if result.success and result.requirements is not None:
            event = AuditEventBuilder.resolution_succeeded(
                state=configuration.state,
                poa_type=configuration.poa_type.value,
                hot_power_ids=result.requirements.hot_power_ids,
                correlation_id=correlation_id,
            )
        else:
            event = AuditEventBuilder.resolution_failed(
                state=configuration.state,
                poa_type=configuration.poa_type.value,
                error_kind=result.error.kind.value if result.error else "unknown",
                error_message=result.error.message if result.error else "",
                correlation_id=correlation_id,
            )
        self.log(event)

    def log_healthcare_resolution(
        self,
        state: str,
        result: HealthcareResolutionResult,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log the outcome of a healthcare POA resolution."""
        if result.success and result.requirements is not None:
            event = AuditEventBuilder.healthcare_resolution_succeeded(
                state=state,
                form_name=result.requirements.form_name,
                correlation_id=correlation_id,
            )
        else:
            event = AuditEventBuilder.healthcare_resolution_failed(
                state=state,
                error_kind=result.error.kind.value if result.error else "unknown",
                error_message=result.error.message if result.error else "",
                correlation_id=correlation_id,
            )
        self.log(event)

    def log_consent_validation(
        self,
        configuration: DocumentConfiguration,
        result: ConsentValidationResult,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log consent validation. Failed means at least one blocking error."""
        if result.can_submit:
            event = AuditEventBuilder.consent_validation_passed(
                state=configuration.state,
                poa_type=configuration.poa_type.value,
                warnings=[w.kind.value for w in result.warnings],
                correlation_id=correlation_id,
            )
        else:
            event = AuditEventBuilder.consent_validation_failed(
                state=configuration.state,
                poa_type=configuration.poa_type.value,
                findings=[f.model_dump(mode="json", by_alias=True) for f in result.findings],
                correlation_id=correlation_id,
            )
        self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a form session. Pass it to every resolution
    made for that session.
    """
    return uuid4()
