"""
Data Models Package

This package contains all Pydantic models used by POA Rules.
Seed rows, caller configurations and resolver output must conform to
these schemas.
"""

from poa_rules.models.catalog import (
    DefinitionType,
    Durability,
    HealthcarePOAStateForm,
    IncapacityDefinition,
    NotaryBlockTemplate,
    PowerCategoryDefinition,
    StateExecutionRequirement,
    StrictnessLevel,
    SubPowerDefinition,
)
from poa_rules.models.configuration import (
    DocumentConfiguration,
    GrantedPowers,
    POAType,
)
from poa_rules.models.requirements import (
    AgentFormalities,
    DurabilityRequirement,
    ExecutionMode,
    ExecutionRequirement,
    HealthcareExecutionRequirement,
    HealthcareResolutionResult,
    HotPower,
    HotPowerPolicy,
    LimitedRequirement,
    NotaryTemplateReference,
    RecordingRequirement,
    RequiredNotices,
    ResolutionResult,
    ResolvedRequirements,
    SelectedCategory,
    SpringingRequirement,
    StatutoryFormObligation,
    StatutoryFormRequirement,
    WitnessExclusion,
)
from poa_rules.models.findings import (
    ConsentFinding,
    ConsentValidationResult,
    FindingSeverity,
)
from poa_rules.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Catalog models
    "DefinitionType",
    "Durability",
    "HealthcarePOAStateForm",
    "IncapacityDefinition",
    "NotaryBlockTemplate",
    "PowerCategoryDefinition",
    "StateExecutionRequirement",
    "StrictnessLevel",
    "SubPowerDefinition",
    # Configuration models
    "DocumentConfiguration",
    "GrantedPowers",
    "POAType",
    # Requirement models
    "AgentFormalities",
    "DurabilityRequirement",
    "ExecutionMode",
    "ExecutionRequirement",
    "HealthcareExecutionRequirement",
    "HealthcareResolutionResult",
    "HotPower",
    "HotPowerPolicy",
    "LimitedRequirement",
    "NotaryTemplateReference",
    "RecordingRequirement",
    "RequiredNotices",
    "ResolutionResult",
    "ResolvedRequirements",
    "SelectedCategory",
    "SpringingRequirement",
    "StatutoryFormObligation",
    "StatutoryFormRequirement",
    "WitnessExclusion",
    # Findings
    "ConsentFinding",
    "ConsentValidationResult",
    "FindingSeverity",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
