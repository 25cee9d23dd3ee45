"""Salt and nonce generation backed by a cryptographically secure source.

The source is a small object wrapping a ``reader(size) -> bytes`` callable
(``os.urandom`` by default) so it can be injected into the components that
need randomness. It holds no mutable state and is safe to share across
threads.
"""
import os
from typing import Callable, Optional

from vaultkit.core.exceptions import RandomnessError

SALT_LEN = 32
NONCE_LEN = 24


class RandomSource:
    def __init__(self, reader: Callable[[int], bytes] = os.urandom):
        self._reader = reader

    def read(self, size: int) -> bytes:
        """Return exactly ``size`` random bytes or raise RandomnessError."""
        try:
            data = self._reader(size)
        except (OSError, NotImplementedError) as exc:
            raise RandomnessError("entropy source unavailable") from exc
        if data is None or len(data) != size:
            raise RandomnessError(f"entropy source returned a short read ({size} bytes requested)")
        return bytes(data)

    def salt(self) -> bytes:
        return self.read(SALT_LEN)

    def nonce(self) -> bytes:
        return self.read(NONCE_LEN)


default_source = RandomSource()


def generate_salt(source: Optional[RandomSource] = None) -> bytes:
    """Return a fresh 32-byte salt."""
    return (source or default_source).salt()


def generate_nonce(source: Optional[RandomSource] = None) -> bytes:
    """Return a fresh 24-byte secretbox nonce."""
    return (source or default_source).nonce()
