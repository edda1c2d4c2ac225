"""
Consent Validation

Decides whether a resolved POA configuration can be submitted.

Checks, in order:
1. HOT POWER CONSENT - every hot power needs its explicit consent flag
   (one finding per offending power, so each can be highlighted)
2. PHYSICIAN COUNT - a springing POA must ask for at least the number of
   physicians the state requires
3. RECORDING - mandatory recording must be acknowledged (warning only)

Errors block submission. Warnings are shown but do not block.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the user can correct the configuration.
"""

from poa_rules.errors import ErrorKind
from poa_rules.models.configuration import DocumentConfiguration, POAType
from poa_rules.models.findings import (
    ConsentFinding,
    ConsentValidationResult,
    FindingSeverity,
)
from poa_rules.models.requirements import ResolvedRequirements


class ConsentValidator:
    """
    Validates a configuration against its resolved requirements.

    Pure: no side effects, no catalog access.
    """

    def _check_hot_powers(
        self,
        configuration: DocumentConfiguration,
        requirements: ResolvedRequirements,
    ) -> list[ConsentFinding]:
        findings = []

        for power in requirements.hot_powers:
            if configuration.has_consent(power.consent_key, power.power_id):
                continue

            findings.append(ConsentFinding(
                kind=ErrorKind.MISSING_HOT_POWER_CONSENT,
                severity=FindingSeverity.ERROR,
                power_id=power.power_id,
                field=f"hotPowersConsent.{power.consent_key}",
                message=(
                    f"'{power.sub_power_name}' ({power.power_id}) is a dangerous power "
                    "and needs your separate, explicit consent"
                ),
                suggested_fix=(
                    "Check the consent box for this power, or remove it from the document"
                ),
            ))

        return findings

    def _check_physicians(
        self,
        configuration: DocumentConfiguration,
        requirements: ResolvedRequirements,
    ) -> list[ConsentFinding]:
        springing = requirements.springing
        if configuration.poa_type != POAType.SPRINGING or springing is None:
            return []

        requested = configuration.number_of_physicians_required or 0
        if requested >= springing.required_physicians:
            return []

        return [ConsentFinding(
            kind=ErrorKind.INSUFFICIENT_PHYSICIAN_REQUIREMENT,
            severity=FindingSeverity.ERROR,
            field="numberOfPhysiciansRequired",
            message=(
                f"{requirements.state} requires {springing.required_physicians} "
                f"physician(s) to certify incapacity, but {requested} requested"
            ),
            suggested_fix=(
                f"Require at least {springing.required_physicians} physician(s)"
            ),
        )]

    def _check_recording(
        self,
        configuration: DocumentConfiguration,
        requirements: ResolvedRequirements,
    ) -> list[ConsentFinding]:
        if not requirements.recording.mandatory or configuration.recording_acknowledged:
            return []

        fee = requirements.recording.estimated_fee
        fee_text = f" (estimated fee ${fee:.2f})" if fee is not None else ""
        return [ConsentFinding(
            kind=ErrorKind.RECORDING_ACKNOWLEDGMENT_REQUIRED,
            severity=FindingSeverity.WARNING,
            field="recordingAcknowledged",
            message=(
                f"{requirements.state} requires this POA to be recorded before it is "
                f"used for real estate{fee_text}"
            ),
            suggested_fix=requirements.recording.instructions,
        )]

    def validate(
        self,
        configuration: DocumentConfiguration,
        requirements: ResolvedRequirements,
    ) -> ConsentValidationResult:
        """
        Run every consent check.

        Args:
            configuration: The configuration as submitted
            requirements: Its resolved requirements

        Returns:
            ConsentValidationResult with findings in check order

        Raises:
            ValueError: If the requirements were resolved for another state
        """
        if configuration.state != requirements.state:
            raise ValueError(
                f"Requirements for {requirements.state} can't validate a "
                f"{configuration.state} configuration"
            )

        findings = []
        findings.extend(self._check_hot_powers(configuration, requirements))
        findings.extend(self._check_physicians(configuration, requirements))
        findings.extend(self._check_recording(configuration, requirements))

        return ConsentValidationResult(
            state=requirements.state,
            findings=findings,
        )

    def get_user_friendly_summary(
        self,
        result: ConsentValidationResult,
    ) -> str:
        """
        Generate a user-friendly summary of validation results.

        This is what we show to non-technical users.
        """
        if result.is_valid:
            return "✅ All checks passed! Your document is ready to submit."

        lines = []

        if result.has_errors:
            lines.append("❌ Please fix the following before submitting:")
            for finding in result.errors:
                lines.append(f"   • {finding.message}")
                if finding.suggested_fix:
                    lines.append(f"     💡 {finding.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please note:")
            for finding in result.warnings:
                lines.append(f"   • {finding.message}")
                if finding.suggested_fix:
                    lines.append(f"     💡 {finding.suggested_fix}")

        lines.append("")
        if result.can_submit:
            lines.append("You can still submit, but please read the notes above.")
        else:
            lines.append("Your document can't be submitted until these are fixed.")

        return "\n".join(lines)
