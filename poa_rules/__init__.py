"""
POA Rules - Jurisdictional Requirements Resolver

Decides, for a (state, POA type, selected powers) combination, which
execution formalities, consent checkboxes and document-generation
constraints a Power-of-Attorney document legally needs.

Main entry points:
- RequirementCatalog: the read-only rule tables
- RequirementResolver: configuration -> ResolvedRequirements
- ConsentValidator: ResolvedRequirements -> submittable or not
- RequirementsFlow: all of the above, audited
"""

__version__ = "1.0.0"
