"""
Requirement Resolver

Derives the concrete requirement set for one POA configuration from the
catalog rows of its state.

Resolution steps:
1. State rules - unseeded states are unsupported (no generic fallback)
2. Execution mode - "notary OR witnesses" vs independent mandates
3. Witness exclusions - agent, spouse, relatives, notary
4. Statutory form - mandatory, optional or unavailable
5. Powers - selected categories/sub-powers and the hot powers among them
6. Springing - banned states fail; physician count and incapacity definition
7. Limited - purpose and expiration date must be present
8. Recording - mandatory when real estate is granted and the state says so
9. Assembly - notary template, notices, agent formalities

DESIGN DECISION: The category/sub-power definitions are the only authority
on which powers are hot. A state's hotPowersList just labels them. The two
can disagree (CA requires no separate consent at state level, yet gifting
is still hot) and the category flag always wins.

IMPORTANT: Resolution is pure and deterministic. It never mutates the
configuration and performs no I/O, so identical inputs give identical output.
"""

from typing import Optional

import structlog

from poa_rules.catalog import RequirementCatalog
from poa_rules.config import CatalogSettings, get_settings
from poa_rules.errors import (
    IncompleteConfigurationError,
    InvalidConfigurationError,
    RequirementsError,
)
from poa_rules.models.catalog import (
    PowerCategoryDefinition,
    StateExecutionRequirement,
    SubPowerDefinition,
)
from poa_rules.models.configuration import DocumentConfiguration, POAType
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


logger = structlog.get_logger()

REAL_ESTATE_TRANSACTION = "real_estate"

SelectedPowers = list[tuple[PowerCategoryDefinition, list[SubPowerDefinition]]]


class RequirementResolver:
    """
    Resolves DocumentConfigurations against a RequirementCatalog.

    Stateless apart from the injected catalog and settings, so one instance
    can serve any number of callers.
    """

    def __init__(
        self,
        catalog: RequirementCatalog,
        settings: Optional[CatalogSettings] = None,
    ):
        """
        Initialize resolver.

        Args:
            catalog: The loaded rule tables
            settings: Catalog settings (real-estate categories, alternative
                     witness count). Defaults to the environment settings.
        """
        self._catalog = catalog
        settings = settings or get_settings().catalog
        self._real_estate_letters = frozenset(settings.real_estate_letters_list)
        self._alternative_witness_count = settings.alternative_witness_count

    @property
    def catalog(self) -> RequirementCatalog:
        return self._catalog

    def resolve(self, configuration: DocumentConfiguration) -> ResolutionResult:
        """
        Resolve a configuration into its requirement set.

        Expected failures (unsupported state, impossible or incomplete
        configuration) are returned as a structured error, never raised.
        """
        try:
            requirements = self._resolve(configuration)
        except RequirementsError as e:
            logger.debug(
                "resolution_failed",
                state=configuration.state,
                poa_type=configuration.poa_type.value,
                kind=e.kind.value,
            )
            return ResolutionResult(success=False, error=e.to_error())

        return ResolutionResult(success=True, requirements=requirements)

    def _resolve(self, configuration: DocumentConfiguration) -> ResolvedRequirements:
        # Step 1: fatal if the state has no rules
        row = self._catalog.get_state_requirements(configuration.state)

        execution = self._resolve_execution(row)
        statutory_form = self._resolve_statutory_form(row, configuration)
        selected = self._select_powers(configuration)
        hot_powers = self._resolve_hot_powers(row, selected)

        springing = None
        if configuration.poa_type == POAType.SPRINGING:
            springing = self._resolve_springing(row, configuration)

        limited = None
        if configuration.poa_type == POAType.LIMITED:
            limited = self._resolve_limited(configuration)

        recording = self._resolve_recording(row, selected)

        notary_template = None
        if execution.notarization_required or execution.mode == ExecutionMode.NOTARY_OR_WITNESSES:
            notary_template = self._resolve_notary_template(row.state)

        return ResolvedRequirements(
            state=row.state,
            state_name=row.state_name,
            poa_type=configuration.poa_type,
            categories=[
                SelectedCategory(
                    category_number=category.category_number,
                    category_letter=category.category_letter,
                    category_name=category.category_name,
                    is_dangerous=category.is_dangerous,
                    sub_power_ids=[sub.power_id for sub in subs],
                    state_note=category.state_specific_notes.get(row.state),
                )
                for category, subs in selected
            ],
            execution=execution,
            statutory_form=statutory_form,
            durability=DurabilityRequirement(
                durability_clause_required=row.durability_required,
                default_durability=row.default_durability,
                wording=row.durability_wording,
            ),
            agent=AgentFormalities(
                requires_agent_signature=row.requires_agent_signature,
                requires_agent_notarization=row.requires_agent_notarization,
                acceptance_wording=row.agent_acceptance_wording,
            ),
            notices=RequiredNotices(
                principal_notice=row.required_principal_notice,
                agent_notice=row.required_agent_notice,
            ),
            hot_powers=hot_powers,
            hot_power_policy=HotPowerPolicy(
                state_requires_separate_consent=row.hot_powers_require_separate_consent,
                state_hot_powers_list=list(row.hot_powers_list),
                gifting_annual_limit=row.gifting_annual_limit,
            ),
            springing=springing,
            limited=limited,
            recording=recording,
            notary_template=notary_template,
            strictness_level=row.strictness_level,
            special_notes=row.special_notes,
        )

    # =========================================================================
    # STEPS 2-4: EXECUTION FORMALITIES
    # =========================================================================

    def _resolve_execution(self, row: StateExecutionRequirement) -> ExecutionRequirement:
        if row.witnesses_or_notary:
            # Either/or: neither formality is mandated on its own
            mode = ExecutionMode.NOTARY_OR_WITNESSES
            notarization_required = False
            witnesses_required = False
            witness_count = row.number_of_witnesses or self._alternative_witness_count
        else:
            mode = ExecutionMode.INDEPENDENT
            notarization_required = row.notarization_required
            witnesses_required = row.witnesses_required
            witness_count = row.number_of_witnesses if row.witnesses_required else 0

        exclusions = [
            exclusion
            for exclusion, excluded in (
                (WitnessExclusion.AGENT, row.agent_cannot_be_witness),
                (WitnessExclusion.SPOUSE, row.spouse_cannot_be_witness),
                (WitnessExclusion.RELATIVES, row.relatives_cannot_be_witness),
                (WitnessExclusion.NOTARY, row.notary_cannot_be_witness),
            )
            if excluded
        ]

        return ExecutionRequirement(
            mode=mode,
            notarization_required=notarization_required,
            notarization_strongly_recommended=row.notarization_strongly_recommended,
            witnesses_required=witnesses_required,
            number_of_witnesses=witness_count,
            minimum_witness_age=row.minimum_witness_age,
            witness_exclusions=exclusions,
            witness_restrictions_note=row.witness_restrictions,
            allows_remote_notarization=row.allows_remote_notarization,
        )

    def _resolve_statutory_form(
        self,
        row: StateExecutionRequirement,
        configuration: DocumentConfiguration,
    ) -> StatutoryFormRequirement:
        if row.has_statutory_form and row.statutory_form_required:
            if not configuration.use_statutory_form:
                citation = row.statutory_form_citation or "the state statutory form"
                raise InvalidConfigurationError(
                    f"{row.state} requires its statutory form ({citation}); "
                    "a custom-drafted POA will not be accepted",
                    fields=["useStatutoryForm"],
                    state=row.state,
                )
            obligation = StatutoryFormObligation.MANDATORY
            uses_form = True
        elif row.has_statutory_form:
            obligation = StatutoryFormObligation.OPTIONAL
            uses_form = configuration.use_statutory_form
        else:
            obligation = StatutoryFormObligation.UNAVAILABLE
            uses_form = False

        return StatutoryFormRequirement(
            obligation=obligation,
            uses_statutory_form=uses_form,
            citation=row.statutory_form_citation,
            notes=row.statutory_form_notes,
        )

    # =========================================================================
    # STEP 5: POWERS
    # =========================================================================

    def _select_powers(self, configuration: DocumentConfiguration) -> SelectedPowers:
        """Map the granted powers onto catalog definitions, in sortOrder."""
        granted = configuration.granted_powers

        categories: dict[int, PowerCategoryDefinition] = {}
        unknown = []
        for identifier in granted.category_ids:
            category = self._catalog.get_power_category(identifier)
            if category is None:
                unknown.append(identifier)
            else:
                categories[category.category_number] = category

        if unknown:
            raise InvalidConfigurationError(
                f"Unknown power categories: {', '.join(unknown)}",
                fields=["grantedPowers.categoryIds"],
                state=configuration.state,
            )

        ordered = sorted(categories.values(), key=lambda c: (c.sort_order, c.category_number))

        if granted.grant_all_sub_powers:
            return [(category, category.ordered_sub_powers) for category in ordered]

        requested = set(granted.sub_power_ids)
        available = {sub.power_id for category in ordered for sub in category.sub_powers}
        stray = sorted(requested - available)
        if stray:
            raise InvalidConfigurationError(
                f"Sub-powers not in the selected categories: {', '.join(stray)}",
                fields=["grantedPowers.subPowerIds"],
                state=configuration.state,
            )

        selected = [
            (category, [sub for sub in category.ordered_sub_powers if sub.power_id in requested])
            for category in ordered
        ]

        empty = [category.category_letter for category, subs in selected if not subs]
        if empty:
            raise IncompleteConfigurationError(
                f"Select at least one sub-power in categories: {', '.join(empty)}",
                fields=["grantedPowers.subPowerIds"],
                state=configuration.state,
            )

        return selected

    def _resolve_hot_powers(
        self,
        row: StateExecutionRequirement,
        selected: SelectedPowers,
    ) -> list[HotPower]:
        state_labels = set(row.hot_powers_list)
        hot_powers = []

        for category, subs in selected:
            for sub in subs:
                if not sub.requires_separate_consent:
                    continue
                label = next(
                    (lbl for lbl in sub.hot_power_labels if lbl in state_labels),
                    None,
                )
                hot_powers.append(HotPower(
                    power_id=sub.power_id,
                    category_letter=category.category_letter,
                    category_name=category.category_name,
                    sub_power_name=sub.sub_power_name,
                    consent_key=sub.consent_flag,
                    danger_warning=category.danger_warning,
                    state_label=label,
                ))

        return hot_powers

    # =========================================================================
    # STEPS 6-7: POA TYPE PARAMETERS
    # =========================================================================

    def _resolve_springing(
        self,
        row: StateExecutionRequirement,
        configuration: DocumentConfiguration,
    ) -> SpringingRequirement:
        if not row.allows_springing:
            reason = row.springing_banned_reason or "state law does not allow them"
            raise InvalidConfigurationError(
                f"Springing POAs are not available in {row.state}: {reason}",
                fields=["poaType"],
                state=row.state,
            )

        if not configuration.springing_condition:
            raise IncompleteConfigurationError(
                "A springing POA needs the condition that makes it effective",
                fields=["springingCondition"],
                state=row.state,
            )

        state_minimum = row.number_of_physicians_required or 1
        requested = configuration.number_of_physicians_required

        return SpringingRequirement(
            condition=configuration.springing_condition,
            requested_physicians=requested,
            state_physicians_required=state_minimum,
            required_physicians=max(requested or 0, state_minimum),
            court_determination_allowed=row.court_determination_allowed,
            incapacity_definition=self._catalog.get_incapacity_definition(row.state),
        )

    def _resolve_limited(self, configuration: DocumentConfiguration) -> LimitedRequirement:
        missing = []
        if not configuration.specific_purpose:
            missing.append("specificPurpose")
        if configuration.expiration_date is None:
            missing.append("expirationDate")

        if missing:
            raise IncompleteConfigurationError(
                f"A limited POA needs: {', '.join(missing)}",
                fields=missing,
                state=configuration.state,
            )

        return LimitedRequirement(
            specific_purpose=configuration.specific_purpose,
            expiration_date=configuration.expiration_date,
        )

    # =========================================================================
    # STEPS 8-9: RECORDING AND NOTARY BLOCK
    # =========================================================================

    def _resolve_recording(
        self,
        row: StateExecutionRequirement,
        selected: SelectedPowers,
    ) -> RecordingRequirement:
        real_estate = [
            category.category_letter
            for category, _ in selected
            if category.category_letter in self._real_estate_letters
        ]
        mandatory = bool(real_estate) and REAL_ESTATE_TRANSACTION in row.recording_mandatory_for

        return RecordingRequirement(
            mandatory=mandatory,
            triggering_categories=real_estate,
            instructions=row.recording_instructions,
            estimated_fee=row.estimated_recording_fee,
        )

    def _resolve_notary_template(self, state: str) -> Optional[NotaryTemplateReference]:
        template = self._catalog.get_notary_template(state)
        if template is None:
            return None
        return NotaryTemplateReference(
            template_state=template.state,
            document_type=template.document_type,
            statutory_citation=template.statutory_citation,
            effective_date=template.effective_date,
        )

    # =========================================================================
    # HEALTHCARE POA
    # =========================================================================

    def resolve_healthcare(self, state: str) -> HealthcareResolutionResult:
        """
        Resolve execution requirements for a state's healthcare POA form.

        Uses the healthcare form row, which can differ from the financial
        row of the same state.
        """
        try:
            form = self._catalog.get_healthcare_form(state)
        except RequirementsError as e:
            return HealthcareResolutionResult(success=False, error=e.to_error())

        if form.notary_or_witnesses:
            mode = ExecutionMode.NOTARY_OR_WITNESSES
            notarization_required = False
            witnesses_required = False
            witness_count = form.number_of_witnesses or self._alternative_witness_count
        else:
            mode = ExecutionMode.INDEPENDENT
            notarization_required = form.requires_notary
            witnesses_required = form.requires_witnesses
            witness_count = form.number_of_witnesses if form.requires_witnesses else 0

        return HealthcareResolutionResult(
            success=True,
            requirements=HealthcareExecutionRequirement(
                state=form.state,
                form_name=form.form_name,
                mode=mode,
                notarization_required=notarization_required,
                witnesses_required=witnesses_required,
                number_of_witnesses=witness_count,
                witness_restrictions_note=form.witness_restrictions,
                form=form,
            ),
        )
