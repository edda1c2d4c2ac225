"""Consent validation package."""

from poa_rules.validation.consent_validator import ConsentValidator

__all__ = ["ConsentValidator"]
