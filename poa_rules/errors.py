"""
Error Taxonomy for POA Rules

Every expected failure is a local, deterministic validation outcome.
Nothing here is an infrastructure fault and nothing is retried.

DESIGN DECISION: Inside the library, resolution failures are raised as
exceptions so each step can bail out early. The public entry points
(`RequirementResolver.resolve`, `RequirementsFlow`) convert them to
`RequirementError` values so callers never need try/except for the
expected path. Catalog lookups raise directly.

Load-time problems (`CatalogLoadError`) are startup failures, not user
errors, and always propagate.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ErrorKind(str, Enum):
    """
    Kinds of user-displayable failures.

    The string values are part of the external contract.
    """
    UNSUPPORTED_JURISDICTION = "UnsupportedJurisdiction"
    INVALID_CONFIGURATION = "InvalidConfiguration"
    INCOMPLETE_CONFIGURATION = "IncompleteConfiguration"
    MISSING_HOT_POWER_CONSENT = "MissingHotPowerConsent"
    INSUFFICIENT_PHYSICIAN_REQUIREMENT = "InsufficientPhysicianRequirement"
    RECORDING_ACKNOWLEDGMENT_REQUIRED = "RecordingAcknowledgmentRequired"


class RequirementError(BaseModel):
    """Structured, JSON-serializable failure returned to callers."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    kind: ErrorKind = Field(
        ...,
        description="Failure kind"
    )
    message: str = Field(
        ...,
        description="Human-readable reason, safe to show to the user"
    )
    fields: list[str] = Field(
        default_factory=list,
        description="Configuration fields involved in the failure"
    )
    state: Optional[str] = Field(
        default=None,
        description="Jurisdiction the failure relates to"
    )


class RequirementsError(Exception):
    """Base exception for resolution failures."""

    kind: ErrorKind = ErrorKind.INVALID_CONFIGURATION

    def __init__(
        self,
        message: str,
        fields: Optional[list[str]] = None,
        state: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.fields = list(fields or [])
        self.state = state

    def to_error(self) -> RequirementError:
        """Convert to the value form handed back to callers."""
        return RequirementError(
            kind=self.kind,
            message=self.message,
            fields=self.fields,
            state=self.state,
        )


class UnsupportedJurisdictionError(RequirementsError):
    """No rule row exists for the requested state."""

    kind = ErrorKind.UNSUPPORTED_JURISDICTION

    DEFAULT_TABLE = "execution requirements"

    def __init__(self, state: str, table: str = DEFAULT_TABLE):
        message = f"We do not yet support POA creation for state {state}"
        if table != self.DEFAULT_TABLE:
            message = f"{message}: no {table} are loaded for it"
        super().__init__(
            message,
            fields=["state"],
            state=state,
        )
        self.table = table


class InvalidConfigurationError(RequirementsError):
    """Legally impossible combination of choices."""

    kind = ErrorKind.INVALID_CONFIGURATION


class IncompleteConfigurationError(RequirementsError):
    """Fields required by the chosen POA type are missing."""

    kind = ErrorKind.INCOMPLETE_CONFIGURATION


class CatalogLoadError(Exception):
    """Seed data could not be loaded or violates a table invariant."""

    def __init__(self, table: str, message: str):
        super().__init__(f"{table}: {message}")
        self.table = table
        self.message = message
