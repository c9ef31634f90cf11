from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from seed_vault.roundtrip.models import IntegrityCheck


class SeedVaultError(Exception):
    """Base error for seed-vault."""


class UsageError(SeedVaultError):
    """The program was invoked with the wrong arguments."""


class ConfigurationError(SeedVaultError, RuntimeError):
    """Environment configuration is missing or invalid."""


class RemoteCallError(SeedVaultError):
    """
    A call to the key-management or object-storage service failed.

    `stage` is filled in by the orchestrator with the last stage the run
    completed before the failing call, so operators can tell how far it got.
    """

    def __init__(self, message: str, *, stage: Optional[str] = None) -> None:
        super().__init__(message)
        self.stage = stage


class IntegrityError(SeedVaultError):
    """A verification gate found different bytes than it expected."""

    def __init__(self, check: "IntegrityCheck") -> None:
        super().__init__(f"Integrity check failed at {check.describe()}")
        self.check = check
        self.stage = check.stage.value


__all__ = [
    "SeedVaultError",
    "UsageError",
    "ConfigurationError",
    "RemoteCallError",
    "IntegrityError",
]
