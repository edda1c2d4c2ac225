"""
Abstract Catalog Source Interface

DESIGN DECISION: The catalog never reads files or databases itself.
It is built from a source that hands over raw seed rows. This allows us to:
1. Ship the rule tables as bundled JSON files
2. Use small fixture tables in tests
3. Later read the same rows from a database without touching the catalog

Rows are returned as plain dicts with the seed's own camelCase keys.
Schema checks happen in the catalog, not in the source.
"""

from abc import ABC, abstractmethod


class CatalogSourceInterface(ABC):
    """
    Abstract interface for loading the rule tables.

    Any source (bundled files, database, fixtures) must implement these
    methods. Each returns the rows of one table.
    """

    @abstractmethod
    def load_power_categories(self) -> list[dict]:
        """
        Load power category rows (with nested sub-powers).

        Raises:
            CatalogSourceError: If the table cannot be read
        """
        pass

    @abstractmethod
    def load_state_requirements(self) -> list[dict]:
        """Load per-state financial POA execution requirement rows."""
        pass

    @abstractmethod
    def load_incapacity_definitions(self) -> list[dict]:
        """Load incapacity definition rows, including STANDARD pseudo-states."""
        pass

    @abstractmethod
    def load_healthcare_forms(self) -> list[dict]:
        """Load healthcare POA state form rows."""
        pass

    @abstractmethod
    def load_notary_templates(self) -> list[dict]:
        """Load notary block template rows."""
        pass

    def describe(self) -> str:
        """Short description of the source for logs."""
        return type(self).__name__


class CatalogSourceError(Exception):
    """A rule table could not be read from its source."""

    def __init__(self, table: str, message: str):
        super().__init__(f"{table}: {message}")
        self.table = table
        self.message = message
