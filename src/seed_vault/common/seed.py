from __future__ import annotations

import secrets


SEED_LENGTH = 32


def generate_seed(length: int = SEED_LENGTH) -> bytes:
    """Return `length` bytes from the OS CSPRNG.

    There is no fallback source: if the OS cannot provide entropy the error
    propagates and the run aborts.
    """
    if length <= 0:
        raise ValueError("length must be > 0")
    return secrets.token_bytes(length)
