"""
Services Package

Adapters at the edges of the library:
- catalog_source: where the rule tables come from
- storage: where audit events are persisted
"""
