"""
Rule Table Models for POA Rules

These models define the strict schemas of the seeded rule tables:
power categories (with sub-powers), per-state execution requirements,
incapacity definitions, healthcare POA forms and notary block templates.

They are designed to:
1. Accept the seed rows exactly as written (camelCase keys)
2. Reject rows that break a table invariant at load time
3. Be immutable once loaded

DESIGN DECISION: Row-level invariants live on the models themselves, so a
bad seed row can never be constructed. Cross-row invariants (one row per
state, one current version per category) live in the catalog, which sees
the whole table.

Older seed files use a few abbreviated keys (`plainLanguageDesc`,
`dangerWarningText`, `powerText`, `notarizationStronglyRec`, ...). They are
renamed before validation so both spellings load.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


def _normalize_keys(data: Any, legacy_keys: dict[str, str]) -> Any:
    """Return a copy of a raw row with legacy keys renamed."""
    if not isinstance(data, dict):
        return data
    row = dict(data)
    for old, new in legacy_keys.items():
        if old in row and new not in row:
            row[new] = row.pop(old)
    return row


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class StrictnessLevel(str, Enum):
    """
    How demanding a state is about execution formalities.

    Display hint only. Never used as input to resolution.
    """
    STANDARD = "standard"
    STRICT = "strict"
    VERY_STRICT = "very_strict"
    EXTREMELY_STRICT = "extremely_strict"


class Durability(str, Enum):
    """Whether a POA survives the principal's incapacity by default."""
    DURABLE = "durable"
    NON_DURABLE = "non-durable"


class DefinitionType(str, Enum):
    """How incapacity is established under a definition."""
    PHYSICIAN_DETERMINATION = "PHYSICIAN_DETERMINATION"
    MULTI_PHYSICIAN = "MULTI_PHYSICIAN"


# Pseudo-states used as fallback keys
STANDARD_KEY = "STANDARD"
STANDARD_UPOAA_KEY = "STANDARD_UPOAA"

FINANCIAL_POA = "FINANCIAL_POA"


class CatalogRow(BaseModel):
    """Common configuration for seeded rule rows."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    LEGACY_KEYS: ClassVar[dict[str, str]] = {}


# =============================================================================
# POWER CATEGORIES
# =============================================================================

class SubPowerDefinition(CatalogRow):
    """
    A single grantable authority inside a power category.

    CRITICAL: A dangerous sub-power always requires separate consent.
    A row that says otherwise fails the catalog load.
    """

    LEGACY_KEYS: ClassVar[dict[str, str]] = {
        "powerText": "subPowerName",
    }

    category_letter: Optional[str] = Field(
        default=None,
        pattern=r"^[A-N]$",
        description="Letter of the owning category (filled in by the category)"
    )
    sub_power_number: int = Field(
        ...,
        ge=1,
        description="Position of the sub-power within its category"
    )
    sub_power_name: str = Field(
        ...,
        min_length=1,
        description="Statutory text of the sub-power"
    )
    description: Optional[str] = None
    is_dangerous: bool = False
    requires_separate_consent: bool = Field(
        ...,
        description="Must the principal consent to this power separately?"
    )
    sort_order: int = Field(
        ...,
        ge=1,
    )
    consent_key: Optional[str] = Field(
        default=None,
        description="hotPowersConsent key that grants this power"
    )
    hot_power_labels: list[str] = Field(
        default_factory=list,
        description="State hotPowersList labels that name this power"
    )

    @model_validator(mode="before")
    @classmethod
    def fill_defaults(cls, data: Any) -> Any:
        """Apply legacy key names and derive the optional seed columns."""
        row = _normalize_keys(data, cls.LEGACY_KEYS)
        if not isinstance(row, dict):
            return row

        sort_order = row.get("sortOrder", row.get("sort_order"))
        if "subPowerNumber" not in row and "sub_power_number" not in row:
            row["subPowerNumber"] = sort_order

        if (
            "requiresSeparateConsent" not in row
            and "requires_separate_consent" not in row
        ):
            row["requiresSeparateConsent"] = bool(
                row.get("isDangerous", row.get("is_dangerous", False))
            )
        return row

    @model_validator(mode="after")
    def dangerous_requires_consent(self) -> "SubPowerDefinition":
        if self.is_dangerous and not self.requires_separate_consent:
            raise ValueError(
                f"Dangerous sub-power {self.power_id} must require separate consent"
            )
        return self

    @property
    def power_id(self) -> str:
        """Identifier used in configurations and findings, e.g. 'H1'."""
        return f"{self.category_letter or '?'}{self.sub_power_number}"

    @property
    def consent_flag(self) -> str:
        """Key looked up in hotPowersConsent for this power."""
        return self.consent_key or self.power_id


class PowerCategoryDefinition(CatalogRow):
    """
    One of the fourteen statutory power categories (A-N).

    Categories are versioned: a new version supersedes the old one through
    `effectiveDate` / `isCurrentVersion` and rows are never deleted.
    """

    LEGACY_KEYS: ClassVar[dict[str, str]] = {
        "plainLanguageDesc": "plainLanguageDescription",
        "dangerWarningText": "dangerWarning",
    }

    category_number: int = Field(
        ...,
        ge=1,
        le=14,
        description="Statutory category number"
    )
    category_letter: str = Field(
        ...,
        pattern=r"^[A-N]$",
        description="Statutory category letter"
    )
    category_name: str = Field(..., min_length=1)
    statutory_definition: str = Field(..., min_length=1)
    plain_language_description: str = Field(..., min_length=1)
    is_dangerous: bool = False
    danger_warning: Optional[str] = Field(
        default=None,
        description="Warning shown to the principal; required for dangerous categories"
    )
    examples: list[str] = Field(default_factory=list)
    state_specific_notes: dict[str, str] = Field(default_factory=dict)
    sort_order: int = Field(..., ge=1)
    effective_date: date
    superseded_date: Optional[date] = None
    is_current_version: bool = True
    sub_powers: list[SubPowerDefinition] = Field(
        ...,
        min_length=1,
        description="Grantable authorities in this category"
    )

    @model_validator(mode="before")
    @classmethod
    def propagate_letter(cls, data: Any) -> Any:
        """Rename legacy keys and hand the category letter to each sub-power."""
        row = _normalize_keys(data, cls.LEGACY_KEYS)
        if not isinstance(row, dict):
            return row

        letter = row.get("categoryLetter", row.get("category_letter"))
        key = "subPowers" if "subPowers" in row else "sub_powers"
        subs = row.get(key)
        if letter and isinstance(subs, list):
            row[key] = [
                {"categoryLetter": letter, **sub} if isinstance(sub, dict) else sub
                for sub in subs
            ]
        return row

    @field_validator("state_specific_notes")
    @classmethod
    def upper_case_states(cls, v: dict[str, str]) -> dict[str, str]:
        return {state.upper(): note for state, note in v.items()}

    @model_validator(mode="after")
    def check_category(self) -> "PowerCategoryDefinition":
        if self.is_dangerous and not self.danger_warning:
            raise ValueError(
                f"Dangerous category {self.category_letter} requires a danger warning"
            )

        numbers = [sub.sub_power_number for sub in self.sub_powers]
        if len(numbers) != len(set(numbers)):
            raise ValueError(
                f"Category {self.category_letter} has duplicate sub-power numbers"
            )
        return self

    @property
    def sub_power_ids(self) -> list[str]:
        return [sub.power_id for sub in self.ordered_sub_powers]

    @property
    def ordered_sub_powers(self) -> list[SubPowerDefinition]:
        return sorted(self.sub_powers, key=lambda sub: (sub.sort_order, sub.sub_power_number))

    def get_sub_power(self, power_id: str) -> Optional[SubPowerDefinition]:
        """Find a sub-power by its id (e.g. 'H1')."""
        power_id = power_id.strip().upper()
        for sub in self.sub_powers:
            if sub.power_id == power_id:
                return sub
        return None


# =============================================================================
# STATE EXECUTION REQUIREMENTS
# =============================================================================

class StateExecutionRequirement(CatalogRow):
    """
    Execution formalities for a financial POA in one state.

    Exactly one row per two-letter state code. There is no generic
    fallback row: an unseeded state is unsupported.
    """

    LEGACY_KEYS: ClassVar[dict[str, str]] = {
        "notarizationStronglyRec": "notarizationStronglyRecommended",
    }

    state: str = Field(
        ...,
        pattern=r"^[A-Z]{2}$",
        description="Two-letter state code"
    )
    state_name: Optional[str] = None

    # Notarization
    notarization_required: bool = False
    notarization_strongly_recommended: bool = False

    # Witnesses
    witnesses_required: bool = False
    number_of_witnesses: int = Field(default=0, ge=0)
    minimum_witness_age: int = Field(default=18, ge=0)
    witnesses_or_notary: bool = Field(
        default=False,
        description="True means notarization is an alternative to witnesses, not additive"
    )

    # Witness eligibility
    agent_cannot_be_witness: bool = False
    notary_cannot_be_witness: bool = False
    spouse_cannot_be_witness: bool = False
    relatives_cannot_be_witness: bool = False
    witness_restrictions: Optional[str] = None

    # Statutory form
    has_statutory_form: bool = False
    statutory_form_required: bool = False
    statutory_form_citation: Optional[str] = None
    statutory_form_notes: Optional[str] = None

    # Durability
    durability_required: bool = True
    durability_wording: Optional[str] = None
    default_durability: Durability = Durability.DURABLE

    # Springing POA
    allows_springing: bool = True
    springing_banned_reason: Optional[str] = None
    number_of_physicians_required: Optional[int] = Field(default=None, ge=1)
    court_determination_allowed: bool = False

    # Agent-side formalities
    requires_agent_signature: bool = False
    requires_agent_notarization: bool = False
    agent_acceptance_wording: Optional[str] = None

    # Notices
    required_principal_notice: Optional[str] = None
    required_agent_notice: Optional[str] = None

    # Recording
    recording_mandatory_for: list[str] = Field(default_factory=list)
    recording_instructions: Optional[str] = None
    estimated_recording_fee: Optional[Decimal] = Field(default=None, ge=0)

    # Hot powers
    hot_powers_require_separate_consent: bool = False
    hot_powers_list: list[str] = Field(default_factory=list)
    gifting_annual_limit: Optional[Decimal] = Field(default=None, ge=0)

    special_notes: Optional[str] = None
    strictness_level: StrictnessLevel = StrictnessLevel.STANDARD
    allows_remote_notarization: bool = False

    @model_validator(mode="before")
    @classmethod
    def rename_legacy(cls, data: Any) -> Any:
        return _normalize_keys(data, cls.LEGACY_KEYS)

    @field_validator("state", mode="before")
    @classmethod
    def upper_state(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v

    @model_validator(mode="after")
    def check_invariants(self) -> "StateExecutionRequirement":
        if self.default_durability == Durability.NON_DURABLE and not self.durability_required:
            raise ValueError(
                f"{self.state}: a non-durable default needs an explicit durability clause"
            )
        if self.witnesses_or_notary and not (
            self.notarization_required or self.witnesses_required
        ):
            raise ValueError(
                f"{self.state}: notary-or-witnesses needs notarization or witnesses"
            )
        if self.statutory_form_required and not self.has_statutory_form:
            raise ValueError(
                f"{self.state}: statutory form required but none exists"
            )
        return self


# =============================================================================
# INCAPACITY DEFINITIONS
# =============================================================================

class IncapacityDefinition(CatalogRow):
    """
    Statutory definition of incapacity used by springing POAs.

    Keyed by state, or by the pseudo-states STANDARD / STANDARD_UPOAA.
    """

    LEGACY_KEYS: ClassVar[dict[str, str]] = {
        "isUPOAAState": "isUpoaaState",
    }

    state: str = Field(..., min_length=2)
    definition_type: DefinitionType
    statutory_text: str = Field(..., min_length=1)
    plain_language: str = Field(..., min_length=1)
    is_upoaa_state: bool = False
    includes_missing: bool = False
    includes_abroad: bool = False
    requires_cognitive_testing: bool = False
    requires_functional_assess: bool = False
    requires_specific_diagnosis: bool = False
    physician_guidance: Optional[str] = None
    example_findings: Optional[str] = None
    special_notes: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def rename_legacy(cls, data: Any) -> Any:
        return _normalize_keys(data, cls.LEGACY_KEYS)

    @field_validator("state", mode="before")
    @classmethod
    def upper_state(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v


# =============================================================================
# HEALTHCARE POA FORMS
# =============================================================================

class HealthcarePOAStateForm(CatalogRow):
    """
    A state's healthcare POA form and its execution requirements.

    May legitimately diverge from the financial row of the same state.
    """

    LEGACY_KEYS: ClassVar[dict[str, str]] = {
        "includesDNR": "includesDnr",
        "includesPOLST": "includesPolst",
    }

    state: str = Field(..., pattern=r"^[A-Z]{2}$")
    state_name: Optional[str] = None
    form_name: str = Field(..., min_length=1)
    pdf_link: Optional[str] = None
    spanish_link: Optional[str] = None
    requires_notary: bool = False
    requires_witnesses: bool = False
    number_of_witnesses: int = Field(default=0, ge=0)
    notary_or_witnesses: bool = False
    witness_restrictions: Optional[str] = None
    includes_dnr: bool = False
    includes_polst: bool = False
    includes_organ_donation: bool = False
    includes_living_will: bool = False
    special_instructions: Optional[str] = None
    common_mistakes: Optional[str] = None
    last_updated: Optional[date] = None

    @model_validator(mode="before")
    @classmethod
    def rename_legacy(cls, data: Any) -> Any:
        return _normalize_keys(data, cls.LEGACY_KEYS)

    @field_validator("state", mode="before")
    @classmethod
    def upper_state(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v

    @model_validator(mode="after")
    def check_alternative(self) -> "HealthcarePOAStateForm":
        if self.notary_or_witnesses and not (self.requires_notary or self.requires_witnesses):
            raise ValueError(
                f"{self.state}: notary-or-witnesses needs a notary or witnesses"
            )
        return self


# =============================================================================
# NOTARY BLOCK TEMPLATES
# =============================================================================

class NotaryBlockTemplate(CatalogRow):
    """
    Notary acknowledgment block for a state and document type.

    States without their own template use the STANDARD pseudo-state.
    """

    state: str = Field(..., min_length=2)
    document_type: str = Field(default=FINANCIAL_POA)
    template_text: str = Field(..., min_length=1)
    statutory_citation: Optional[str] = None
    effective_date: date
    superseded_date: Optional[date] = None
    is_current_version: bool = True
    requires_witnesses: bool = False
    number_of_witnesses: Optional[int] = Field(default=None, ge=0)
    witness_relationship_rules: Optional[str] = None
    requires_notary: bool = True
    notary_can_be_witness: bool = False
    requires_marital_status: bool = False
    requires_commission_number: bool = False
    requires_seal: bool = False
    allows_online_notarization: bool = False
    special_instructions: Optional[str] = None
    common_rejection_reasons: Optional[str] = None

    @field_validator("state", "document_type", mode="before")
    @classmethod
    def upper_key(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v
