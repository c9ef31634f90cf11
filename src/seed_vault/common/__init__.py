"""
Shared building blocks for seed-vault.

Modules:
- errors: exception taxonomy shared by gateways and the orchestrator
- seed: CSPRNG-backed seed generation
- settings: environment-driven configuration and per-gateway config objects
- logging: structlog setup used by the CLI and Lambda entry points
- kms: key-management gateways (AWS KMS, GCP Cloud KMS, local Fernet)
"""

__all__ = [
    "errors",
    "seed",
    "settings",
    "logging",
    "kms",
]
