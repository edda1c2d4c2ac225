"""Audit storage services."""

from poa_rules.services.storage.interface import (
    AuditStorageInterface,
    StorageError,
)
from poa_rules.services.storage.in_memory import InMemoryAuditStorage

__all__ = [
    "AuditStorageInterface",
    "InMemoryAuditStorage",
    "StorageError",
]
