from __future__ import annotations

import hashlib
import hmac
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Stage(str, Enum):
    """Milestones of one run, in the only order they can occur."""

    START = "start"
    SEED_GENERATED = "seed_generated"
    ENCRYPTED = "encrypted"
    DECRYPTED_AND_VERIFIED = "decrypted_and_verified"
    UPLOADED = "uploaded"
    DOWNLOADED = "downloaded"
    VERIFIED_ROUND_TRIP = "verified_round_trip"
    DONE = "done"
    ABORTED = "aborted"


class IntegrityCheck(BaseModel):
    """
    Tagged outcome of one verification gate.

    Fields
    - stage: the gate this check guards (DECRYPTED_AND_VERIFIED or VERIFIED_ROUND_TRIP).
    - ok: True when both byte strings are identical.
    - expected_length / actual_length: sizes of the compared values.
    - expected_sha256 / actual_sha256: hex digests, only filled in for
      non-secret values (the ciphertext). Left as None for the seed.
    """

    stage: Stage
    ok: bool
    expected_length: int
    actual_length: int
    expected_sha256: Optional[str] = None
    actual_sha256: Optional[str] = None

    def describe(self) -> str:
        if self.ok:
            return f"{self.stage.value}: match ({self.actual_length} bytes)"
        detail = f"expected {self.expected_length} bytes, got {self.actual_length}"
        if self.expected_sha256 and self.actual_sha256:
            detail += f" (sha256 {self.expected_sha256[:12]} != {self.actual_sha256[:12]})"
        return f"{self.stage.value}: mismatch, {detail}"


def check_equal(stage: Stage, expected: bytes, actual: bytes, *, with_digests: bool = False) -> IntegrityCheck:
    """Compare two byte strings in constant time and report the outcome."""
    check = IntegrityCheck(
        stage=stage,
        ok=hmac.compare_digest(expected, actual),
        expected_length=len(expected),
        actual_length=len(actual),
    )
    if with_digests:
        check.expected_sha256 = hashlib.sha256(expected).hexdigest()
        check.actual_sha256 = hashlib.sha256(actual).hexdigest()
    return check


class RoundTripReport(BaseModel):
    """Summary of a completed run. Contains no secret material."""

    key_name: str
    bucket_name: str
    object_name: str
    kms_provider: str
    store_provider: str
    seed_length: int
    ciphertext_length: int
    stage: Stage = Field(default=Stage.DONE)
    checks: list[IntegrityCheck] = Field(default_factory=list)
