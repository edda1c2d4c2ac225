"""Rule catalog package."""

from poa_rules.catalog.requirement_catalog import (
    RequirementCatalog,
    load_default_catalog,
)

__all__ = ["RequirementCatalog", "load_default_catalog"]
