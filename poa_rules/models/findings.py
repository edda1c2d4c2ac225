"""
Consent Validation Findings

Errors block submission of the document. Warnings are shown to the user
but do not block.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from poa_rules.errors import ErrorKind


class FindingSeverity(str, Enum):
    """Severity of a consent finding."""
    ERROR = "error"
    WARNING = "warning"


class ConsentFinding(BaseModel):
    """A single problem found during consent validation."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    kind: ErrorKind = Field(
        ...,
        description="Finding kind from the error taxonomy"
    )
    severity: FindingSeverity
    message: str = Field(
        ...,
        description="Human-readable description of the finding"
    )
    power_id: Optional[str] = Field(
        default=None,
        description="Offending power, for MissingHotPowerConsent"
    )
    field: Optional[str] = Field(
        default=None,
        description="Configuration field the user must change"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ConsentValidationResult(BaseModel):
    """
    Result of consent validation.

    An empty findings list means Valid.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    state: str
    findings: list[ConsentFinding] = Field(default_factory=list)

    @property
    def errors(self) -> list[ConsentFinding]:
        return [f for f in self.findings if f.severity == FindingSeverity.ERROR]

    @property
    def warnings(self) -> list[ConsentFinding]:
        return [f for f in self.findings if f.severity == FindingSeverity.WARNING]

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def is_valid(self) -> bool:
        """No findings at all."""
        return not self.findings

    @property
    def can_submit(self) -> bool:
        """Warnings do not block submission."""
        return not self.has_errors
