"""Catalog source services."""

from poa_rules.services.catalog_source.interface import (
    CatalogSourceError,
    CatalogSourceInterface,
)
from poa_rules.services.catalog_source.json_files import (
    BUNDLED_DATA_DIR,
    JsonFileCatalogSource,
)
from poa_rules.services.catalog_source.in_memory import InMemoryCatalogSource

__all__ = [
    "BUNDLED_DATA_DIR",
    "CatalogSourceError",
    "CatalogSourceInterface",
    "InMemoryCatalogSource",
    "JsonFileCatalogSource",
]
