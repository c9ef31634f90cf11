"""
Object-store gateways used to park the encrypted seed.

Every backend implements the same two calls (`put`, `get`) so the
orchestrator can run against S3, GCS, a local directory or a test fake.
"""

from .object_store import (
    ObjectNotFoundError,
    ObjectStoreGateway,
    StorageError,
    build_object_store,
)

__all__ = ["ObjectStoreGateway", "StorageError", "ObjectNotFoundError", "build_object_store"]
