"""
Resolved Requirement Models

The concrete checklist the resolver derives for one configuration. The UI
uses it to decide which steps, consent checkboxes and execution blocks to
show; document generation uses it to pick templates and clauses.

DESIGN DECISION: These values carry no timestamps or generated ids.
Resolving the same configuration twice must produce identical output, so
two POAs resolved from the same form session stay consistent.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from poa_rules.errors import RequirementError
from poa_rules.models.catalog import (
    Durability,
    HealthcarePOAStateForm,
    IncapacityDefinition,
    StrictnessLevel,
)
from poa_rules.models.configuration import POAType


class ResolvedModel(BaseModel):
    """Common configuration for resolver output."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# =============================================================================
# ENUMS
# =============================================================================

class ExecutionMode(str, Enum):
    """
    How notarization and witnesses combine.

    NOTARY_OR_WITNESSES is an either/or choice the UI must present.
    INDEPENDENT applies each mandate on its own (either, both or neither).
    """
    NOTARY_OR_WITNESSES = "notary_or_witnesses"
    INDEPENDENT = "independent"


class WitnessExclusion(str, Enum):
    """People who may not serve as a witness."""
    AGENT = "agent"
    SPOUSE = "spouse"
    RELATIVES = "relatives"
    NOTARY = "notary"


class StatutoryFormObligation(str, Enum):
    """Whether the state's statutory template must, may or cannot be used."""
    MANDATORY = "mandatory"
    OPTIONAL = "optional"
    UNAVAILABLE = "unavailable"


# =============================================================================
# REQUIREMENT BLOCKS
# =============================================================================

class ExecutionRequirement(ResolvedModel):
    """Notarization and witness formalities for signing."""

    mode: ExecutionMode
    notarization_required: bool = Field(
        ...,
        description="Notarization mandated on its own (always false in OR mode)"
    )
    notarization_strongly_recommended: bool = False
    witnesses_required: bool = Field(
        ...,
        description="Witnesses mandated on their own (always false in OR mode)"
    )
    number_of_witnesses: int = Field(
        ...,
        ge=0,
        description="Witnesses needed, or offered as the alternative in OR mode"
    )
    minimum_witness_age: int = 18
    witness_exclusions: list[WitnessExclusion] = Field(default_factory=list)
    witness_restrictions_note: Optional[str] = Field(
        default=None,
        description="Advisory free text, not machine-checked"
    )
    allows_remote_notarization: bool = False


class StatutoryFormRequirement(ResolvedModel):
    obligation: StatutoryFormObligation
    uses_statutory_form: bool = Field(
        ...,
        description="Will document generation use the statutory template?"
    )
    citation: Optional[str] = None
    notes: Optional[str] = None


class DurabilityRequirement(ResolvedModel):
    durability_clause_required: bool
    default_durability: Durability
    wording: Optional[str] = None


class AgentFormalities(ResolvedModel):
    requires_agent_signature: bool = False
    requires_agent_notarization: bool = False
    acceptance_wording: Optional[str] = None


class RequiredNotices(ResolvedModel):
    principal_notice: Optional[str] = None
    agent_notice: Optional[str] = None


class SelectedCategory(ResolvedModel):
    """A granted power category and the sub-powers selected in it."""

    category_number: int
    category_letter: str
    category_name: str
    is_dangerous: bool
    sub_power_ids: list[str] = Field(default_factory=list)
    state_note: Optional[str] = Field(
        default=None,
        description="State-specific note for this category, if any"
    )


class HotPower(ResolvedModel):
    """
    A selected power that needs separate, explicit consent.

    Which powers are hot comes from the category/sub-power definitions.
    `stateLabel` only names the power in the state's own vocabulary.
    """

    power_id: str
    category_letter: str
    category_name: str
    sub_power_name: str
    consent_key: str = Field(
        ...,
        description="hotPowersConsent key that grants this power"
    )
    danger_warning: Optional[str] = None
    state_label: Optional[str] = None


class HotPowerPolicy(ResolvedModel):
    """The state's own hot-power rules, for display."""

    state_requires_separate_consent: bool
    state_hot_powers_list: list[str] = Field(default_factory=list)
    gifting_annual_limit: Optional[Decimal] = None


class SpringingRequirement(ResolvedModel):
    condition: str
    requested_physicians: Optional[int] = None
    state_physicians_required: int
    required_physicians: int = Field(
        ...,
        description="max(requested, state minimum)"
    )
    court_determination_allowed: bool = False
    incapacity_definition: IncapacityDefinition


class LimitedRequirement(ResolvedModel):
    specific_purpose: str
    expiration_date: date


class RecordingRequirement(ResolvedModel):
    mandatory: bool
    triggering_categories: list[str] = Field(
        default_factory=list,
        description="Selected real-estate categories that trigger recording"
    )
    instructions: Optional[str] = None
    estimated_fee: Optional[Decimal] = None


class NotaryTemplateReference(ResolvedModel):
    """Which notary block document generation should use."""

    template_state: str = Field(
        ...,
        description="State of the template, or STANDARD when falling back"
    )
    document_type: str
    statutory_citation: Optional[str] = None
    effective_date: date


# =============================================================================
# RESULTS
# =============================================================================

class ResolvedRequirements(ResolvedModel):
    """
    The merged, concrete requirement set for one configuration.

    Recomputed on every configuration change; never persisted here.
    """

    state: str
    state_name: Optional[str] = None
    poa_type: POAType
    categories: list[SelectedCategory] = Field(default_factory=list)
    execution: ExecutionRequirement
    statutory_form: StatutoryFormRequirement
    durability: DurabilityRequirement
    agent: AgentFormalities
    notices: RequiredNotices
    hot_powers: list[HotPower] = Field(default_factory=list)
    hot_power_policy: HotPowerPolicy
    springing: Optional[SpringingRequirement] = None
    limited: Optional[LimitedRequirement] = None
    recording: RecordingRequirement
    notary_template: Optional[NotaryTemplateReference] = None
    strictness_level: StrictnessLevel = Field(
        ...,
        description="Display hint only"
    )
    special_notes: Optional[str] = None

    @property
    def hot_power_ids(self) -> list[str]:
        return [power.power_id for power in self.hot_powers]


class ResolutionResult(ResolvedModel):
    """Outcome of a resolution: requirements on success, error otherwise."""

    success: bool
    requirements: Optional[ResolvedRequirements] = None
    error: Optional[RequirementError] = None


class HealthcareExecutionRequirement(ResolvedModel):
    """Execution formalities for a state's healthcare POA form."""

    state: str
    form_name: str
    mode: ExecutionMode
    notarization_required: bool
    witnesses_required: bool
    number_of_witnesses: int = Field(..., ge=0)
    witness_restrictions_note: Optional[str] = None
    form: HealthcarePOAStateForm


class HealthcareResolutionResult(ResolvedModel):
    success: bool
    requirements: Optional[HealthcareExecutionRequirement] = None
    error: Optional[RequirementError] = None
