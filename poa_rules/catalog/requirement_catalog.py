"""
Requirement Catalog

Holds the rule tables and answers lookups by natural key:
- power categories by letter or number (current versions only)
- execution requirements by state (no fallback)
- incapacity definitions by state (exact -> STANDARD_UPOAA -> STANDARD)
- healthcare POA forms by state (no fallback)
- notary templates by state and document type (exact -> STANDARD)

DESIGN DECISION: The catalog is an explicitly constructed object, not
module-level state. Callers build one at startup and inject it wherever it
is needed, so tests can substitute a fixture catalog.

IMPORTANT: The catalog is read-only once constructed. It may be shared by
any number of concurrent resolutions without locking.
"""

from collections import defaultdict
from typing import Iterable, Optional, Type, TypeVar, Union

import structlog
from pydantic import BaseModel, ValidationError

from poa_rules.config import CatalogSettings, get_settings
from poa_rules.errors import CatalogLoadError, UnsupportedJurisdictionError
from poa_rules.models.catalog import (
    FINANCIAL_POA,
    STANDARD_KEY,
    STANDARD_UPOAA_KEY,
    HealthcarePOAStateForm,
    IncapacityDefinition,
    NotaryBlockTemplate,
    PowerCategoryDefinition,
    StateExecutionRequirement,
    StrictnessLevel,
)
from poa_rules.services.catalog_source import (
    CatalogSourceError,
    CatalogSourceInterface,
    JsonFileCatalogSource,
)


logger = structlog.get_logger()

RowModel = TypeVar("RowModel", bound=BaseModel)

PSEUDO_STATES = {STANDARD_KEY, STANDARD_UPOAA_KEY}


def _parse_rows(table: str, rows: list[dict], model: Type[RowModel]) -> list[RowModel]:
    """Validate raw rows, naming the table and row on failure."""
    parsed = []
    for index, row in enumerate(rows):
        try:
            parsed.append(model.model_validate(row))
        except ValidationError as e:
            key = row.get("state") or row.get("categoryLetter") or index
            raise CatalogLoadError(table, f"row {key}: {e}") from e
    return parsed


def _index_unique(table: str, rows: Iterable, key_fn) -> dict:
    index = {}
    for row in rows:
        key = key_fn(row)
        if key in index:
            raise CatalogLoadError(table, f"duplicate row for {key}")
        index[key] = row
    return index


class RequirementCatalog:
    """
    Indexed, immutable view over the rule tables.

    Build with `RequirementCatalog.from_source(...)` or
    `load_default_catalog()`. The constructor takes already-parsed rows
    and checks the cross-row invariants.
    """

    def __init__(
        self,
        power_categories: Iterable[PowerCategoryDefinition] = (),
        state_requirements: Iterable[StateExecutionRequirement] = (),
        incapacity_definitions: Iterable[IncapacityDefinition] = (),
        healthcare_forms: Iterable[HealthcarePOAStateForm] = (),
        notary_templates: Iterable[NotaryBlockTemplate] = (),
        upoaa_states: Optional[Iterable[str]] = None,
    ):
        """
        Initialize the catalog.

        Args:
            upoaa_states: States known to follow the UPOAA.
                         Defaults to the POA_CATALOG_UPOAA_STATES setting.
                         States whose seeded incapacity row is flagged
                         isUPOAAState are always added.

        Raises:
            CatalogLoadError: If a cross-row invariant is violated
        """
        self._all_categories = tuple(power_categories)
        self._categories = self._index_current_categories(self._all_categories)

        self._states = _index_unique(
            "state_requirements", state_requirements, lambda r: r.state
        )
        self._incapacity = _index_unique(
            "incapacity_definitions", incapacity_definitions, lambda r: r.state
        )
        if self._incapacity and STANDARD_KEY not in self._incapacity:
            raise CatalogLoadError(
                "incapacity_definitions",
                f"a {STANDARD_KEY} definition is required as the final fallback",
            )

        self._healthcare = _index_unique(
            "healthcare_forms", healthcare_forms, lambda r: r.state
        )
        self._notary = _index_unique(
            "notary_templates",
            (t for t in notary_templates if t.is_current_version),
            lambda r: (r.state, r.document_type),
        )

        if upoaa_states is None:
            upoaa_states = get_settings().catalog.upoaa_states_list
        seeded_upoaa = {
            row.state
            for row in self._incapacity.values()
            if row.is_upoaa_state and row.state not in PSEUDO_STATES
        }
        self._upoaa_states = frozenset(s.upper() for s in upoaa_states) | seeded_upoaa

    @staticmethod
    def _index_current_categories(
        categories: tuple[PowerCategoryDefinition, ...],
    ) -> dict[int, PowerCategoryDefinition]:
        """Index current category versions; at most one per category number."""
        current = {}
        for category in categories:
            if not category.is_current_version:
                continue
            if category.category_number in current:
                raise CatalogLoadError(
                    "power_categories",
                    f"more than one current version of category {category.category_number}",
                )
            current[category.category_number] = category

        letters = [c.category_letter for c in current.values()]
        if len(letters) != len(set(letters)):
            raise CatalogLoadError("power_categories", "duplicate category letters")
        return current

    # =========================================================================
    # CONSTRUCTION
    # =========================================================================

    @classmethod
    def from_source(
        cls,
        source: CatalogSourceInterface,
        upoaa_states: Optional[Iterable[str]] = None,
    ) -> "RequirementCatalog":
        """
        Load, validate and index every table from a source.

        Raises:
            CatalogLoadError: If a table can't be read or a row is invalid
        """
        try:
            catalog = cls(
                power_categories=_parse_rows(
                    "power_categories",
                    source.load_power_categories(),
                    PowerCategoryDefinition,
                ),
                state_requirements=_parse_rows(
                    "state_requirements",
                    source.load_state_requirements(),
                    StateExecutionRequirement,
                ),
                incapacity_definitions=_parse_rows(
                    "incapacity_definitions",
                    source.load_incapacity_definitions(),
                    IncapacityDefinition,
                ),
                healthcare_forms=_parse_rows(
                    "healthcare_forms",
                    source.load_healthcare_forms(),
                    HealthcarePOAStateForm,
                ),
                notary_templates=_parse_rows(
                    "notary_templates",
                    source.load_notary_templates(),
                    NotaryBlockTemplate,
                ),
                upoaa_states=upoaa_states,
            )
        except CatalogSourceError as e:
            raise CatalogLoadError(e.table, e.message) from e

        logger.info("catalog_loaded", source=source.describe(), **catalog.counts())
        return catalog

    # =========================================================================
    # POWER CATEGORIES
    # =========================================================================

    def get_power_categories(self) -> list[PowerCategoryDefinition]:
        """Current category versions, ordered by sortOrder."""
        return sorted(
            self._categories.values(),
            key=lambda c: (c.sort_order, c.category_number),
        )

    def get_power_category(
        self,
        identifier: Union[str, int],
    ) -> Optional[PowerCategoryDefinition]:
        """
        Find a current category by letter ('H'), number (8) or numeric string ('8').

        Returns None if no current category matches.
        """
        if isinstance(identifier, int):
            return self._categories.get(identifier)

        key = str(identifier).strip().upper()
        if key.isdigit():
            return self._categories.get(int(key))
        for category in self._categories.values():
            if category.category_letter == key:
                return category
        return None

    def get_category_versions(self, category_number: int) -> list[PowerCategoryDefinition]:
        """Every loaded version of a category, oldest first."""
        return sorted(
            (c for c in self._all_categories if c.category_number == category_number),
            key=lambda c: c.effective_date,
        )

    # =========================================================================
    # JURISDICTION TABLES
    # =========================================================================

    def get_state_requirements(self, state: str) -> StateExecutionRequirement:
        """
        Financial POA execution requirements for a state.

        Raises:
            UnsupportedJurisdictionError: If the state has no row
        """
        code = state.strip().upper()
        row = self._states.get(code)
        if row is None:
            raise UnsupportedJurisdictionError(code)
        return row

    def is_upoaa_state(self, state: str) -> bool:
        return state.strip().upper() in self._upoaa_states

    def get_incapacity_definition(self, state: str) -> IncapacityDefinition:
        """
        Incapacity definition for a state.

        Fallback order: exact state -> STANDARD_UPOAA (UPOAA states only)
        -> STANDARD.

        Raises:
            UnsupportedJurisdictionError: If no incapacity rows were loaded
        """
        code = state.strip().upper()

        row = self._incapacity.get(code)
        if row is not None:
            return row

        if self.is_upoaa_state(code) and STANDARD_UPOAA_KEY in self._incapacity:
            return self._incapacity[STANDARD_UPOAA_KEY]

        if STANDARD_KEY in self._incapacity:
            return self._incapacity[STANDARD_KEY]

        raise UnsupportedJurisdictionError(code, table="incapacity definitions")

    def get_healthcare_form(self, state: str) -> HealthcarePOAStateForm:
        """
        Healthcare POA form for a state.

        Raises:
            UnsupportedJurisdictionError: If the state has no form row
        """
        code = state.strip().upper()
        row = self._healthcare.get(code)
        if row is None:
            raise UnsupportedJurisdictionError(code, table="healthcare forms")
        return row

    def get_notary_template(
        self,
        state: str,
        document_type: str = FINANCIAL_POA,
    ) -> Optional[NotaryBlockTemplate]:
        """Current notary template for a state, else the STANDARD one, else None."""
        code = state.strip().upper()
        doc_type = document_type.strip().upper()
        return self._notary.get((code, doc_type)) or self._notary.get((STANDARD_KEY, doc_type))

    # =========================================================================
    # REPORTING
    # =========================================================================

    def supported_states(self) -> list[str]:
        """States with financial POA execution requirements, sorted."""
        return sorted(self._states)

    def healthcare_states(self) -> list[str]:
        return sorted(self._healthcare)

    def counts(self) -> dict[str, int]:
        """Row counts per table."""
        return {
            "power_categories": len(self._categories),
            "sub_powers": sum(len(c.sub_powers) for c in self._categories.values()),
            "state_requirements": len(self._states),
            "incapacity_definitions": len(self._incapacity),
            "healthcare_forms": len(self._healthcare),
            "notary_templates": len(self._notary),
        }

    def summary(self) -> dict:
        """
        Overview of the loaded rules.

        Useful as a startup check that the seed tables are what we expect.
        """
        categories = self.get_power_categories()
        dangerous_subs = [
            sub.power_id
            for category in categories
            for sub in category.ordered_sub_powers
            if sub.is_dangerous
        ]

        by_strictness = defaultdict(list)
        for code in self.supported_states():
            by_strictness[self._states[code].strictness_level.value].append(code)

        return {
            "counts": self.counts(),
            "dangerous_categories": [c.category_letter for c in categories if c.is_dangerous],
            "dangerous_sub_powers": dangerous_subs,
            "strict_states": (
                by_strictness[StrictnessLevel.VERY_STRICT.value]
                + by_strictness[StrictnessLevel.EXTREMELY_STRICT.value]
            ),
            "states_by_strictness": dict(by_strictness),
            "springing_banned": [
                code for code in self.supported_states()
                if not self._states[code].allows_springing
            ],
            "upoaa_states": sorted(self._upoaa_states),
        }


def load_default_catalog(
    settings: Optional[CatalogSettings] = None,
) -> RequirementCatalog:
    """
    Load the catalog from the configured data directory.

    Uses POA_CATALOG_DATA_DIR if set, otherwise the bundled seed tables.
    """
    settings = settings or get_settings().catalog
    source = JsonFileCatalogSource(settings.data_dir)
    return RequirementCatalog.from_source(source, upoaa_states=settings.upoaa_states_list)
