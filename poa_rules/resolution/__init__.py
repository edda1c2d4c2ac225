"""Requirement resolution package."""

from poa_rules.resolution.resolver import RequirementResolver

__all__ = ["RequirementResolver"]
