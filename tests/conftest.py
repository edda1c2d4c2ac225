"""
Shared fixtures for POA Rules tests.

Two kinds of catalog are used:
1. The bundled seed tables (real rules, for end-to-end behavior)
2. Small in-memory fixture tables (for fallback chains and load errors)
"""

import pytest

from poa_rules.audit import AuditLogger
from poa_rules.catalog import RequirementCatalog
from poa_rules.config import CatalogSettings
from poa_rules.config.settings import DEFAULT_UPOAA_STATES
from poa_rules.resolution import RequirementResolver
from poa_rules.services.catalog_source import (
    InMemoryCatalogSource,
    JsonFileCatalogSource,
)
from poa_rules.services.storage import InMemoryAuditStorage

from factories import make_category, make_incapacity, make_state


UPOAA_STATES = DEFAULT_UPOAA_STATES.split(",")


@pytest.fixture(scope="session")
def catalog_settings():
    return CatalogSettings(
        upoaa_states=DEFAULT_UPOAA_STATES,
        real_estate_category_letters="A",
        alternative_witness_count=2,
    )


@pytest.fixture(scope="session")
def catalog():
    """The bundled seed tables."""
    return RequirementCatalog.from_source(
        JsonFileCatalogSource(),
        upoaa_states=UPOAA_STATES,
    )


@pytest.fixture
def resolver(catalog, catalog_settings):
    return RequirementResolver(catalog, settings=catalog_settings)


@pytest.fixture
def fixture_catalog():
    """Tiny catalog for fallback tests: WA is UPOAA, VT is not, neither has a row."""
    source = InMemoryCatalogSource(
        power_categories=[make_category()],
        state_requirements=[make_state("WA"), make_state("VT")],
        incapacity_definitions=[
            make_incapacity("CA", definitionType="MULTI_PHYSICIAN"),
            make_incapacity("STANDARD_UPOAA", upoaa=True),
            make_incapacity("STANDARD"),
        ],
    )
    return RequirementCatalog.from_source(source, upoaa_states=["WA"])


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(storage=audit_storage, log_level="DEBUG")
