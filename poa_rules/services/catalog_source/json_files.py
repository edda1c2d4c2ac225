"""
JSON File Catalog Source

Reads the rule tables from a directory of JSON files, one file per table.
The package ships a copy of the seed tables in `poa_rules/data`.
"""

import json
from pathlib import Path
from typing import Optional, Union

import structlog

from poa_rules.services.catalog_source.interface import (
    CatalogSourceError,
    CatalogSourceInterface,
)


logger = structlog.get_logger()

BUNDLED_DATA_DIR = Path(__file__).resolve().parent.parent.parent / "data"

# Table name -> file name
TABLE_FILES = {
    "power_categories": "power_categories.json",
    "state_requirements": "state_requirements.json",
    "incapacity_definitions": "incapacity_definitions.json",
    "healthcare_forms": "healthcare_state_forms.json",
    "notary_templates": "notary_templates.json",
}


class JsonFileCatalogSource(CatalogSourceInterface):
    """
    Catalog source backed by JSON files.

    Every file must contain a JSON array of row objects.
    """

    def __init__(self, data_dir: Optional[Union[str, Path]] = None):
        """
        Initialize the source.

        Args:
            data_dir: Directory containing the table files.
                     If None, the bundled seed tables are used.
        """
        self._data_dir = Path(data_dir) if data_dir else BUNDLED_DATA_DIR

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _read_table(self, table: str) -> list[dict]:
        path = self._data_dir / TABLE_FILES[table]

        try:
            with path.open(encoding="utf-8") as f:
                rows = json.load(f)
        except FileNotFoundError as e:
            raise CatalogSourceError(table, f"file not found: {path}") from e
        except json.JSONDecodeError as e:
            raise CatalogSourceError(table, f"invalid JSON in {path}: {e}") from e

        if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
            raise CatalogSourceError(table, f"{path} must contain a list of objects")

        logger.debug("catalog_table_read", table=table, path=str(path), rows=len(rows))
        return rows

    def load_power_categories(self) -> list[dict]:
        return self._read_table("power_categories")

    def load_state_requirements(self) -> list[dict]:
        return self._read_table("state_requirements")

    def load_incapacity_definitions(self) -> list[dict]:
        return self._read_table("incapacity_definitions")

    def load_healthcare_forms(self) -> list[dict]:
        return self._read_table("healthcare_forms")

    def load_notary_templates(self) -> list[dict]:
        return self._read_table("notary_templates")

    def describe(self) -> str:
        return f"json:{self._data_dir}"
