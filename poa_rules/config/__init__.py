"""Configuration package."""

from poa_rules.config.settings import (
    AuditSettings,
    CatalogSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AuditSettings",
    "CatalogSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
