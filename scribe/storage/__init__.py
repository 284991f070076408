"""
Storage collaborators: identities and the posts they own.
"""

from scribe.storage.base import (
    CredentialStore,
    ResourceStore,
    StorageError,
    StorageProvider,
    UniqueViolationError,
)
from scribe.storage.local import create_local_storage

__all__ = [
    "CredentialStore",
    "ResourceStore",
    "StorageError",
    "StorageProvider",
    "UniqueViolationError",
    "create_local_storage",
]
