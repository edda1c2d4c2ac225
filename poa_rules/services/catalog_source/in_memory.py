"""
In-Memory Catalog Source

Holds rule rows in memory. Used for fixture catalogs in tests and for
callers that already have the rows at hand.
"""

from copy import deepcopy
from typing import Optional

from poa_rules.services.catalog_source.interface import CatalogSourceInterface


class InMemoryCatalogSource(CatalogSourceInterface):
    """Catalog source over lists of raw row dicts."""

    def __init__(
        self,
        power_categories: Optional[list[dict]] = None,
        state_requirements: Optional[list[dict]] = None,
        incapacity_definitions: Optional[list[dict]] = None,
        healthcare_forms: Optional[list[dict]] = None,
        notary_templates: Optional[list[dict]] = None,
    ):
        self._tables = {
            "power_categories": power_categories or [],
            "state_requirements": state_requirements or [],
            "incapacity_definitions": incapacity_definitions or [],
            "healthcare_forms": healthcare_forms or [],
            "notary_templates": notary_templates or [],
        }

    def _rows(self, table: str) -> list[dict]:
        # Copies, so callers can't reach into a loaded catalog
        return deepcopy(self._tables[table])

    def load_power_categories(self) -> list[dict]:
        return self._rows("power_categories")

    def load_state_requirements(self) -> list[dict]:
        return self._rows("state_requirements")

    def load_incapacity_definitions(self) -> list[dict]:
        return self._rows("incapacity_definitions")

    def load_healthcare_forms(self) -> list[dict]:
        return self._rows("healthcare_forms")

    def load_notary_templates(self) -> list[dict]:
        return self._rows("notary_templates")

    def describe(self) -> str:
        return "memory"
