"""
Tests for the RequirementCatalog

Test strategy:
1. The bundled seed tables load and match what the product depends on
2. Cross-row invariants fail the load, naming the table
3. Lookups fall back exactly as documented, and only where documented
"""

import json
import shutil

import pytest

from poa_rules.catalog import RequirementCatalog, load_default_catalog
from poa_rules.config import CatalogSettings
from poa_rules.errors import CatalogLoadError, ErrorKind, UnsupportedJurisdictionError
from poa_rules.models.catalog import (
    STANDARD_KEY,
    STANDARD_UPOAA_KEY,
    DefinitionType,
    Durability,
)
from poa_rules.services.catalog_source import (
    InMemoryCatalogSource,
    JsonFileCatalogSource,
)
from poa_rules.services.catalog_source.json_files import BUNDLED_DATA_DIR

from factories import make_category, make_incapacity, make_state


def notary_row(state="STANDARD", **overrides):
    row = {
        "state": state,
        "documentType": "FINANCIAL_POA",
        "templateText": "State of ____ County of ____",
        "effectiveDate": "2024-01-01",
        "isCurrentVersion": True,
    }
    row.update(overrides)
    return row


class TestBundledSeedTables:
    """The seed tables shipped with the package."""

    def test_table_counts(self, catalog):
        """Test the size of every seeded table."""
        assert catalog.counts() == {
            "power_categories": 14,
            "sub_powers": 52,
            "state_requirements": 10,
            "incapacity_definitions": 6,
            "healthcare_forms": 7,
            "notary_templates": 5,
        }

    def test_categories_are_ordered_a_to_n(self, catalog):
        letters = [c.category_letter for c in catalog.get_power_categories()]
        assert letters == list("ABCDEFGHIJKLMN")

    def test_every_dangerous_sub_power_requires_consent(self, catalog):
        """Test that no seeded dangerous sub-power skips separate consent."""
        for category in catalog.get_power_categories():
            for sub in category.sub_powers:
                if sub.is_dangerous:
                    assert sub.requires_separate_consent, sub.power_id

    def test_dangerous_powers(self, catalog):
        summary = catalog.summary()
        assert summary["dangerous_categories"] == ["F", "H", "L"]
        assert summary["dangerous_sub_powers"] == [
            "F1", "F2", "F4", "H1", "H2", "H3", "H4", "L2", "L3",
        ]

    def test_dangerous_categories_carry_warnings(self, catalog):
        for category in catalog.get_power_categories():
            if category.is_dangerous:
                assert category.danger_warning

    def test_or_mode_rows_have_a_formality(self, catalog):
        """Test that every notary-or-witnesses row offers at least one formality."""
        for code in catalog.supported_states():
            row = catalog.get_state_requirements(code)
            if row.witnesses_or_notary:
                assert row.notarization_required or row.witnesses_required

    def test_florida_requires_both_formalities(self, catalog):
        """Test that Florida needs notarization AND witnesses, not either."""
        row = catalog.get_state_requirements("FL")
        assert row.notarization_required is True
        assert row.witnesses_required is True
        assert row.number_of_witnesses == 2
        assert row.witnesses_or_notary is False
        assert row.allows_springing is False

    def test_california_defaults_to_non_durable(self, catalog):
        row = catalog.get_state_requirements("CA")
        assert row.default_durability == Durability.NON_DURABLE
        assert row.durability_required is True

    def test_summary(self, catalog):
        summary = catalog.summary()
        assert summary["springing_banned"] == ["FL"]
        assert summary["strict_states"] == ["FL", "NY"]
        assert summary["states_by_strictness"]["extremely_strict"] == ["NY"]
        assert "PA" in summary["upoaa_states"]

    def test_supported_states(self, catalog):
        assert catalog.supported_states() == [
            "AZ", "CA", "FL", "GA", "IL", "NC", "NY", "OH", "PA", "TX",
        ]
        assert catalog.healthcare_states() == ["CA", "FL", "GA", "IL", "NY", "PA", "TX"]


class TestCategoryLookups:
    """Tests for power category lookups."""

    @pytest.mark.parametrize("identifier", ["H", "h", 8, "8", " H "])
    def test_lookup_by_letter_or_number(self, catalog, identifier):
        category = catalog.get_power_category(identifier)
        assert category.category_letter == "H"
        assert category.category_number == 8

    @pytest.mark.parametrize("identifier", ["Z", 15, "0", ""])
    def test_unknown_category(self, catalog, identifier):
        assert catalog.get_power_category(identifier) is None

    def test_consent_keys_on_hot_sub_powers(self, catalog):
        estate = catalog.get_power_category("H")
        assert estate.get_sub_power("H1").consent_flag == "gifting"
        assert estate.get_sub_power("H4").consent_flag == "H4"

    def test_state_specific_note(self, catalog):
        real_property = catalog.get_power_category("A")
        assert "Homestead" in real_property.state_specific_notes["FL"]

    def test_superseded_version_is_kept_but_not_current(self):
        """Test that an old category version stays in the history only."""
        old = make_category(
            "A", 1,
            categoryName="Real Property (2019)",
            effectiveDate="2019-01-01",
            supersededDate="2024-01-01",
            isCurrentVersion=False,
        )
        new = make_category("A", 1, categoryName="Real Property")
        catalog = RequirementCatalog.from_source(
            InMemoryCatalogSource(power_categories=[new, old]),
            upoaa_states=[],
        )

        assert catalog.get_power_category("A").category_name == "Real Property"
        versions = catalog.get_category_versions(1)
        assert [v.category_name for v in versions] == ["Real Property (2019)", "Real Property"]
        assert catalog.counts()["power_categories"] == 1


class TestStateLookups:
    """Tests for per-state lookups."""

    def test_lookup_is_case_insensitive(self, catalog):
        assert catalog.get_state_requirements(" tx ").state == "TX"

    def test_unseeded_state_is_unsupported(self, catalog):
        """Test that there is no generic fallback for execution rules."""
        with pytest.raises(UnsupportedJurisdictionError) as exc_info:
            catalog.get_state_requirements("ZZ")

        error = exc_info.value.to_error()
        assert error.kind == ErrorKind.UNSUPPORTED_JURISDICTION
        assert error.message == "We do not yet support POA creation for state ZZ"

    def test_healthcare_form_lookup(self, catalog):
        assert catalog.get_healthcare_form("ny").form_name == "Health Care Proxy"

    def test_healthcare_form_has_no_fallback(self, catalog):
        with pytest.raises(UnsupportedJurisdictionError, match="state OH: no healthcare forms") as exc_info:
            catalog.get_healthcare_form("OH")
        assert exc_info.value.table == "healthcare forms"

    def test_notary_template_exact(self, catalog):
        template = catalog.get_notary_template("FL")
        assert template.state == "FL"
        assert template.statutory_citation == "Fla. Stat. §117.05"

    def test_notary_template_falls_back_to_standard(self, catalog):
        assert catalog.get_notary_template("OH").state == STANDARD_KEY

    def test_notary_template_unknown_document_type(self, catalog):
        assert catalog.get_notary_template("FL", "HEALTHCARE_POA") is None


class TestIncapacityFallback:
    """Tests for the exact -> STANDARD_UPOAA -> STANDARD chain."""

    def test_exact_state(self, fixture_catalog):
        definition = fixture_catalog.get_incapacity_definition("ca")
        assert definition.state == "CA"
        assert definition.definition_type == DefinitionType.MULTI_PHYSICIAN

    def test_upoaa_state_without_row(self, fixture_catalog):
        """Test that a UPOAA state with no row gets the UPOAA standard."""
        assert fixture_catalog.get_incapacity_definition("WA").state == STANDARD_UPOAA_KEY

    def test_other_state_without_row(self, fixture_catalog):
        assert fixture_catalog.get_incapacity_definition("VT").state == STANDARD_KEY

    def test_seeded_upoaa_state_uses_own_row(self, catalog):
        definition = catalog.get_incapacity_definition("PA")
        assert definition.state == "PA"
        assert definition.is_upoaa_state is True

    def test_upoaa_flag_on_seed_row_counts(self):
        """Test that a state flagged isUPOAAState is UPOAA even if not configured."""
        catalog = RequirementCatalog.from_source(
            InMemoryCatalogSource(incapacity_definitions=[
                make_incapacity("OR", upoaa=True),
                make_incapacity(STANDARD_UPOAA_KEY, upoaa=True),
                make_incapacity(STANDARD_KEY),
            ]),
            upoaa_states=[],
        )
        assert catalog.is_upoaa_state("OR")
        assert not catalog.is_upoaa_state(STANDARD_UPOAA_KEY)

    def test_no_definitions_loaded(self):
        """Test that the error names the missing table, not just the state."""
        catalog = RequirementCatalog(upoaa_states=[])
        with pytest.raises(UnsupportedJurisdictionError, match="no incapacity definitions are loaded"):
            catalog.get_incapacity_definition("TX")


class TestCatalogLoadErrors:
    """Bad seed data must fail the load, never a later lookup."""

    def test_duplicate_state_row(self):
        source = InMemoryCatalogSource(state_requirements=[make_state("WA"), make_state("wa")])
        with pytest.raises(CatalogLoadError, match="duplicate row for WA") as exc_info:
            RequirementCatalog.from_source(source, upoaa_states=[])
        assert exc_info.value.table == "state_requirements"

    def test_two_current_category_versions(self):
        source = InMemoryCatalogSource(power_categories=[
            make_category("A", 1),
            make_category("A", 1, effectiveDate="2025-01-01"),
        ])
        with pytest.raises(CatalogLoadError, match="more than one current version"):
            RequirementCatalog.from_source(source, upoaa_states=[])

    def test_duplicate_category_letters(self):
        source = InMemoryCatalogSource(power_categories=[
            make_category("A", 1),
            make_category("A", 2),
        ])
        with pytest.raises(CatalogLoadError, match="duplicate category letters"):
            RequirementCatalog.from_source(source, upoaa_states=[])

    def test_standard_incapacity_definition_required(self):
        source = InMemoryCatalogSource(incapacity_definitions=[make_incapacity("CA")])
        with pytest.raises(CatalogLoadError, match="STANDARD definition is required"):
            RequirementCatalog.from_source(source, upoaa_states=[])

    def test_dangerous_sub_power_without_consent(self):
        """Test that a seed row opting a dangerous power out of consent fails the load."""
        row = make_category("F", 6, dangerous=True, sub_powers=[{
            "powerText": "Operate business",
            "isDangerous": True,
            "requiresSeparateConsent": False,
            "sortOrder": 1,
        }])
        source = InMemoryCatalogSource(power_categories=[row])
        with pytest.raises(CatalogLoadError, match="must require separate consent") as exc_info:
            RequirementCatalog.from_source(source, upoaa_states=[])
        assert exc_info.value.table == "power_categories"

    def test_dangerous_category_without_warning(self):
        row = make_category("H", 8, dangerous=True, dangerWarningText=None)
        source = InMemoryCatalogSource(power_categories=[row])
        with pytest.raises(CatalogLoadError, match="requires a danger warning"):
            RequirementCatalog.from_source(source, upoaa_states=[])

    def test_or_mode_without_formality(self):
        row = make_state(notarizationRequired=False, witnessesOrNotary=True)
        source = InMemoryCatalogSource(state_requirements=[row])
        with pytest.raises(CatalogLoadError, match="notary-or-witnesses"):
            RequirementCatalog.from_source(source, upoaa_states=[])

    def test_two_current_notary_templates(self):
        source = InMemoryCatalogSource(notary_templates=[notary_row(), notary_row()])
        with pytest.raises(CatalogLoadError, match="duplicate row"):
            RequirementCatalog.from_source(source, upoaa_states=[])

    def test_superseded_notary_template_ignored(self):
        source = InMemoryCatalogSource(notary_templates=[
            notary_row(effectiveDate="2020-01-01", isCurrentVersion=False),
            notary_row(),
        ])
        catalog = RequirementCatalog.from_source(source, upoaa_states=[])
        assert catalog.get_notary_template("OH").effective_date.year == 2024


class TestJsonFileSource:
    """Tests for loading the tables from a directory of JSON files."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogLoadError, match="file not found") as exc_info:
            RequirementCatalog.from_source(JsonFileCatalogSource(tmp_path), upoaa_states=[])
        assert exc_info.value.table == "power_categories"

    def test_invalid_json(self, tmp_path):
        data_dir = tmp_path / "data"
        shutil.copytree(BUNDLED_DATA_DIR, data_dir)
        (data_dir / "state_requirements.json").write_text("[{", encoding="utf-8")

        with pytest.raises(CatalogLoadError, match="invalid JSON") as exc_info:
            RequirementCatalog.from_source(JsonFileCatalogSource(data_dir), upoaa_states=[])
        assert exc_info.value.table == "state_requirements"

    def test_table_must_be_a_list(self, tmp_path):
        data_dir = tmp_path / "data"
        shutil.copytree(BUNDLED_DATA_DIR, data_dir)
        (data_dir / "notary_templates.json").write_text(
            json.dumps({"state": "FL"}), encoding="utf-8"
        )

        with pytest.raises(CatalogLoadError, match="list of objects"):
            RequirementCatalog.from_source(JsonFileCatalogSource(data_dir), upoaa_states=[])

    def test_load_default_catalog_from_configured_dir(self, tmp_path):
        """Test POA_CATALOG_DATA_DIR style configuration."""
        data_dir = tmp_path / "data"
        shutil.copytree(BUNDLED_DATA_DIR, data_dir)

        settings = CatalogSettings(data_dir=str(data_dir), upoaa_states="WA")
        catalog = load_default_catalog(settings)

        assert catalog.counts()["state_requirements"] == 10
        assert catalog.is_upoaa_state("WA")
        assert catalog.is_upoaa_state("PA")
        assert not catalog.is_upoaa_state("TX")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
