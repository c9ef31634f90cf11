"""
seed-vault: generate a random seed, seal it with a managed KMS key, park the
ciphertext in an object store and verify both round trips.

Packages:
- common: seed generation, settings, logging, KMS gateways, error taxonomy
- storage: object-store gateways (S3, GCS, local directory)
- roundtrip: the orchestrator, its result models and the CLI / Lambda entry points
"""

__version__ = "0.1.0"
