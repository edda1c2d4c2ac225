"""
Main Orchestrator for POA Rules

This module ties together all the components and defines the
end-to-end flow used by every entry point (wizard, API validation,
document generation):

    payload -> configuration -> resolve -> validate consent -> submittable?

DESIGN DECISION: All jurisdiction logic is reached through this one flow.
Entry points never keep their own copy of state rules, so they can't drift
apart from the seeded tables.

The orchestrator enforces the boundaries:
- No document is submittable without resolution AND consent validation
- Expected failures come back as values, never as exceptions
- Every step is audited
"""

from typing import Any, Optional
from uuid import UUID

from pydantic import ValidationError

from poa_rules.audit import AuditLogger, create_correlation_id
from poa_rules.catalog import RequirementCatalog, load_default_catalog
from poa_rules.config import get_settings
from poa_rules.errors import ErrorKind, RequirementError
from poa_rules.models.configuration import DocumentConfiguration
from poa_rules.models.findings import ConsentValidationResult
from poa_rules.models.requirements import (
    HealthcareResolutionResult,
    ResolutionResult,
)
from poa_rules.resolution import RequirementResolver
from poa_rules.validation import ConsentValidator


class RequirementsFlow:
    """
    Orchestrates requirement resolution for a POA form session.

    Flow:
    1. Parse → Build a DocumentConfiguration from the submitted payload
    2. Resolve → Derive the state's requirements (may fail as a value)
    3. Validate → Check consents, physician count, recording acknowledgment
    4. Decide → Submittable only if resolution succeeded and no errors remain

    Pass the same correlation_id for every document of one session so the
    financial and healthcare POAs can be traced together.
    """

    def __init__(
        self,
        catalog: Optional[RequirementCatalog] = None,
        resolver: Optional[RequirementResolver] = None,
        validator: Optional[ConsentValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        settings = get_settings()

        if audit_logger is None and settings.audit.enabled:
            audit_logger = AuditLogger()
        self._audit_logger = audit_logger

        if catalog is None and resolver is not None:
            catalog = resolver.catalog
        if catalog is None:
            catalog = load_default_catalog()
            if self._audit_logger:
                self._audit_logger.log_catalog_loaded(
                    source="default",
                    counts=catalog.counts(),
                )

        self._catalog = catalog
        self._resolver = resolver or RequirementResolver(catalog)
        self._validator = validator or ConsentValidator()

    @property
    def catalog(self) -> RequirementCatalog:
        return self._catalog

    def parse_configuration(
        self,
        payload: Any,
    ) -> tuple[Optional[DocumentConfiguration], Optional[RequirementError]]:
        """
        Build a configuration from a submitted JSON payload.

        Returns:
            (configuration, None) on success, (None, error) otherwise.
            Missing fields give IncompleteConfiguration; anything else
            malformed gives InvalidConfiguration.
        """
        if not isinstance(payload, dict):
            return None, RequirementError(
                kind=ErrorKind.INVALID_CONFIGURATION,
                message="The configuration must be a JSON object",
            )

        try:
            return DocumentConfiguration.model_validate(payload), None
        except ValidationError as e:
            errors = e.errors()

        state = payload.get("state")
        state = state.strip().upper() if isinstance(state, str) else None

        missing = [
            ".".join(str(part) for part in err["loc"])
            for err in errors
            if err["type"] == "missing"
        ]
        if missing:
            return None, RequirementError(
                kind=ErrorKind.INCOMPLETE_CONFIGURATION,
                message=f"Missing required fields: {', '.join(missing)}",
                fields=missing,
                state=state,
            )

        invalid = [".".join(str(part) for part in err["loc"]) for err in errors]
        return None, RequirementError(
            kind=ErrorKind.INVALID_CONFIGURATION,
            message=f"Invalid values for: {', '.join(invalid)}",
            fields=invalid,
            state=state,
        )

    def resolve(
        self,
        configuration: DocumentConfiguration,
        correlation_id: Optional[UUID] = None,
    ) -> ResolutionResult:
        """Resolve requirements for a financial POA configuration."""
        correlation_id = correlation_id or create_correlation_id()

        result = self._resolver.resolve(configuration)

        if self._audit_logger:
            self._audit_logger.log_resolution(
                configuration=configuration,
                result=result,
                correlation_id=correlation_id,
            )

        return result

    def resolve_healthcare(
        self,
        state: str,
        correlation_id: Optional[UUID] = None,
    ) -> HealthcareResolutionResult:
        """Resolve execution requirements for the state's healthcare POA form."""
        correlation_id = correlation_id or create_correlation_id()

        result = self._resolver.resolve_healthcare(state)

        if self._audit_logger:
            self._audit_logger.log_healthcare_resolution(
                state=state.strip().upper(),
                result=result,
                correlation_id=correlation_id,
            )

        return result

    def validate(
        self,
        configuration: DocumentConfiguration,
        resolution: ResolutionResult,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[ConsentValidationResult]:
        """
        Validate consents for a successful resolution.

        Returns None if the resolution failed (nothing to validate).
        """
        if not resolution.success or resolution.requirements is None:
            return None

        correlation_id = correlation_id or create_correlation_id()

        result = self._validator.validate(configuration, resolution.requirements)

        if self._audit_logger:
            self._audit_logger.log_consent_validation(
                configuration=configuration,
                result=result,
                correlation_id=correlation_id,
            )

        return result

    def check_submission(
        self,
        configuration: DocumentConfiguration,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[ResolutionResult, Optional[ConsentValidationResult], bool, str]:
        """
        Run the full flow for one document.

        Returns:
            (resolution, validation, can_submit, message)

        If can_submit is False, the message tells the user what to fix.
        """
        correlation_id = correlation_id or create_correlation_id()

        resolution = self.resolve(configuration, correlation_id=correlation_id)
        if not resolution.success:
            return resolution, None, False, f"❌ {resolution.error.message}"

        validation = self.validate(configuration, resolution, correlation_id=correlation_id)
        message = self._validator.get_user_friendly_summary(validation)

        return resolution, validation, validation.can_submit, message

    def check_session(
        self,
        configuration: DocumentConfiguration,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[ResolutionResult, Optional[ConsentValidationResult], HealthcareResolutionResult]:
        """
        Resolve the financial and healthcare POAs of one form session.

        Both documents are resolved under one correlation ID from the same
        catalog, so their requirements stay consistent.
        """
        correlation_id = correlation_id or create_correlation_id()

        resolution, validation, _, _ = self.check_submission(
            configuration,
            correlation_id=correlation_id,
        )
        healthcare = self.resolve_healthcare(configuration.state, correlation_id=correlation_id)

        return resolution, validation, healthcare
