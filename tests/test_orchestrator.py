"""
Tests for the RequirementsFlow orchestrator and its audit trail

Test strategy:
1. The end-to-end flow decides submittability correctly
2. Every step leaves an audit event under the session's correlation ID
3. A broken audit storage never breaks the flow
"""

import pytest

from poa_rules.audit import AuditLogger, create_correlation_id
from poa_rules.errors import ErrorKind
from poa_rules.models.audit import AuditEventBuilder, AuditEventType, AuditSeverity
from poa_rules.models.configuration import DocumentConfiguration
from poa_rules.orchestrator import RequirementsFlow
from poa_rules.services.storage import AuditStorageInterface, StorageError


class FailingStorage(AuditStorageInterface):
    """Storage whose every write fails."""

    def append_event(self, event):
        raise StorageError("audit table unavailable")

    def get_events_by_correlation_id(self, correlation_id):
        return []

    def get_recent_events(self, limit=100):
        return []


@pytest.fixture
def flow(catalog, audit_logger):
    return RequirementsFlow(catalog=catalog, audit_logger=audit_logger)


def event_types(storage, correlation_id):
    return [e.event_type for e in storage.get_events_by_correlation_id(correlation_id)]


class TestParseConfiguration:
    """Tests for turning a posted payload into a configuration."""

    def test_valid_payload(self, flow):
        configuration, error = flow.parse_configuration({
            "state": "tx",
            "poaType": "durable",
            "grantedPowers": {"categoryIds": ["A"]},
        })
        assert error is None
        assert configuration.state == "TX"

    def test_missing_fields(self, flow):
        configuration, error = flow.parse_configuration({"poaType": "durable"})

        assert configuration is None
        assert error.kind == ErrorKind.INCOMPLETE_CONFIGURATION
        assert error.fields == ["state"]

    def test_invalid_values(self, flow):
        configuration, error = flow.parse_configuration({"state": "fl", "poaType": "general"})

        assert configuration is None
        assert error.kind == ErrorKind.INVALID_CONFIGURATION
        assert error.fields == ["poaType"]
        assert error.state == "FL"

    @pytest.mark.parametrize("payload", [["not", "an", "object"], "text", 42, None])
    def test_payload_that_is_not_an_object(self, flow, payload):
        """Test that a non-object payload is an error value, not a crash."""
        configuration, error = flow.parse_configuration(payload)

        assert configuration is None
        assert error.kind == ErrorKind.INVALID_CONFIGURATION
        assert error.state is None


class TestCheckSubmission:
    """Tests for the full single-document flow."""

    def test_submittable_document(self, flow, audit_storage):
        correlation_id = create_correlation_id()
        configuration = DocumentConfiguration(
            state="OH",
            poa_type="durable",
            granted_powers={"category_ids": ["A", "E"]},
        )

        resolution, validation, can_submit, message = flow.check_submission(
            configuration, correlation_id=correlation_id
        )

        assert resolution.success
        assert validation.is_valid
        assert can_submit is True
        assert message.startswith("✅")
        assert event_types(audit_storage, correlation_id) == [
            AuditEventType.RESOLUTION_SUCCEEDED,
            AuditEventType.CONSENT_VALIDATION_PASSED,
        ]

    def test_missing_consent_blocks(self, flow, audit_storage):
        correlation_id = create_correlation_id()
        configuration = DocumentConfiguration(
            state="CA",
            poa_type="durable",
            granted_powers={"category_ids": [8]},
            hot_powers_consent={"gifting": False},
        )

        _, validation, can_submit, message = flow.check_submission(
            configuration, correlation_id=correlation_id
        )

        assert can_submit is False
        assert validation.error_count == 4
        assert message.startswith("❌")

        failed = audit_storage.get_events_by_correlation_id(correlation_id)[-1]
        assert failed.event_type == AuditEventType.CONSENT_VALIDATION_FAILED
        assert failed.severity == AuditSeverity.WARNING
        assert failed.details["findings"][0]["powerId"] == "H1"

    def test_failed_resolution(self, flow, audit_storage):
        correlation_id = create_correlation_id()
        configuration = DocumentConfiguration(
            state="FL",
            poa_type="springing",
            springing_condition="Incapacity",
        )

        resolution, validation, can_submit, message = flow.check_submission(
            configuration, correlation_id=correlation_id
        )

        assert not resolution.success
        assert validation is None
        assert can_submit is False
        assert message.startswith("❌ Springing POAs are not available in FL")

        events = audit_storage.get_events_by_correlation_id(correlation_id)
        assert len(events) == 1
        assert events[0].event_type == AuditEventType.RESOLUTION_FAILED
        assert events[0].error_code == "InvalidConfiguration"

    def test_warning_does_not_block(self, flow, audit_storage):
        correlation_id = create_correlation_id()
        configuration = DocumentConfiguration(
            state="FL",
            poa_type="durable",
            granted_powers={"category_ids": ["A"]},
        )

        _, validation, can_submit, _ = flow.check_submission(
            configuration, correlation_id=correlation_id
        )

        assert can_submit is True
        assert len(validation.warnings) == 1
        passed = audit_storage.get_events_by_correlation_id(correlation_id)[-1]
        assert passed.event_type == AuditEventType.CONSENT_VALIDATION_PASSED
        assert passed.details["warnings"] == ["RecordingAcknowledgmentRequired"]

    def test_validate_skips_failed_resolution(self, flow):
        configuration = DocumentConfiguration(state="ZZ", poa_type="durable")
        resolution = flow.resolve(configuration)
        assert flow.validate(configuration, resolution) is None


class TestSession:
    """Tests for resolving both documents of one session."""

    def test_financial_and_healthcare_share_correlation(self, flow, audit_storage):
        correlation_id = create_correlation_id()
        configuration = DocumentConfiguration(state="FL", poa_type="durable")

        resolution, validation, healthcare = flow.check_session(
            configuration, correlation_id=correlation_id
        )

        assert resolution.success
        assert validation.is_valid
        assert healthcare.requirements.notarization_required is True
        assert event_types(audit_storage, correlation_id) == [
            AuditEventType.RESOLUTION_SUCCEEDED,
            AuditEventType.CONSENT_VALIDATION_PASSED,
            AuditEventType.HEALTHCARE_RESOLUTION_SUCCEEDED,
        ]

    def test_state_without_healthcare_form(self, flow, audit_storage):
        correlation_id = create_correlation_id()
        configuration = DocumentConfiguration(state="OH", poa_type="durable")

        resolution, _, healthcare = flow.check_session(
            configuration, correlation_id=correlation_id
        )

        assert resolution.success
        assert not healthcare.success
        assert healthcare.error.kind == ErrorKind.UNSUPPORTED_JURISDICTION
        last = audit_storage.get_events_by_correlation_id(correlation_id)[-1]
        assert last.event_type == AuditEventType.HEALTHCARE_RESOLUTION_FAILED
        assert last.state == "OH"


class TestAuditing:
    """Tests for audit behavior around the flow."""

    def test_default_catalog_load_is_audited(self, audit_logger, audit_storage):
        flow = RequirementsFlow(audit_logger=audit_logger)

        assert flow.catalog.counts()["power_categories"] == 14
        loaded = audit_storage.events[0]
        assert loaded.event_type == AuditEventType.CATALOG_LOADED
        assert loaded.details["counts"]["sub_powers"] == 52

    def test_failing_storage_does_not_break_flow(self, catalog):
        flow = RequirementsFlow(
            catalog=catalog,
            audit_logger=AuditLogger(storage=FailingStorage(), log_level="DEBUG"),
        )
        configuration = DocumentConfiguration(state="TX", poa_type="durable")

        _, _, can_submit, _ = flow.check_submission(configuration)

        assert can_submit is True

    def test_log_reports_storage_failure(self):
        logger = AuditLogger(storage=FailingStorage(), log_level="DEBUG")
        event = AuditEventBuilder.catalog_loaded(source="memory", counts={})
        assert logger.log(event) is False

    def test_generated_correlation_id(self, flow, audit_storage):
        flow.resolve(DocumentConfiguration(state="TX", poa_type="durable"))
        event = audit_storage.get_recent_events(limit=1)[0]
        assert event.correlation_id is not None

    def test_audit_disabled(self, catalog, monkeypatch):
        monkeypatch.setenv("POA_AUDIT_ENABLED", "false")
        flow = RequirementsFlow(catalog=catalog)

        resolution = flow.resolve(DocumentConfiguration(state="TX", poa_type="durable"))

        assert resolution.success
        assert flow._audit_logger is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
