"""Scrypt cost parameters and password-based envelopes.

Encoded config layout (24 bytes, little-endian)::

    N (8) || R (8) || P (8)

Password envelope layout::

    salt (32) || nonce (24) || ciphertext || tag (16)

The key is re-derived from the salt on decryption, so the same config must be
used on both sides. A wrong password is reported exactly like a tampered
envelope (AuthenticationFailed).
"""
from __future__ import annotations

import logging
import struct
import time
from dataclasses import dataclass, field
from typing import Dict, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from vaultkit.core.exceptions import DerivationError, MalformedConfig, TooShort
from . import secretbox
from .entropy import SALT_LEN, RandomSource, default_source, generate_salt
from .secretmem import SecretKey, wipe

logger = logging.getLogger(__name__)

KEY_LEN = 32
CONFIG_LEN = 24
_CONFIG_FORMAT = "<QQQ"
_UINT64_MAX = (1 << 64) - 1

Password = Union[str, bytes, bytearray]


def _password_bytes(password: Password) -> bytes:
    if isinstance(password, str):
        return password.encode("utf-8")
    return bytes(password)


@dataclass(frozen=True)
class ScryptConfig:
    # CPU/memory cost parameter, a power of two
    n: int
    # block size parameter
    r: int
    # parallelisation parameter
    p: int
    rng: RandomSource = field(default=default_source, compare=False, repr=False)

    def __post_init__(self):
        # each parameter must fit its unsigned 64-bit slot in the encoding
        for name in ("n", "r", "p"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= _UINT64_MAX:
                raise MalformedConfig(f"scrypt parameter {name.upper()}={value!r} is not an unsigned 64-bit integer")

    def __str__(self) -> str:
        return f"N={self.n} R={self.r} P={self.p} ({self.memory_required_mb()}MB required)"

    # ------------------------------------------------------------------
    # Wire format
    # ------------------------------------------------------------------

    def encode(self) -> bytes:
        return struct.pack(_CONFIG_FORMAT, self.n, self.r, self.p)

    @classmethod
    def decode(cls, data: bytes, rng: RandomSource = default_source) -> "ScryptConfig":
        if len(data) != CONFIG_LEN:
            raise MalformedConfig(f"wrong scrypt config length: {len(data)} != {CONFIG_LEN}")
        n, r, p = struct.unpack(_CONFIG_FORMAT, bytes(data))
        return cls(n=n, r=r, p=p, rng=rng)

    @classmethod
    def preset(cls, name: str) -> "ScryptConfig":
        """Return one of the named cost presets (case-insensitive)."""
        try:
            return PRESETS[name.strip().lower()]
        except KeyError:
            raise MalformedConfig(
                f"Unknown scrypt preset {name!r}; expected one of {', '.join(PRESETS)}"
            ) from None

    # ------------------------------------------------------------------
    # Cost estimates
    # ------------------------------------------------------------------

    def memory_required_mb(self) -> int:
        """Rough memory estimate for one derivation; a hint, not a guarantee."""
        return (self.n * self.r * 128) // 1024 // 1024

    def time_required_ms(self) -> int:
        """Run one real derivation and return how long it took in milliseconds."""
        start = time.perf_counter()
        salt = generate_salt(self.rng)
        self.derive(salt, "selftest").wipe()
        return int((time.perf_counter() - start) * 1000)

    # ------------------------------------------------------------------
    # Key derivation
    # ------------------------------------------------------------------

    def derive(self, salt: bytes, password: Password) -> SecretKey:
        """
        Derive a 32-byte key from ``password`` and ``salt``.

        The library's output is copied into a :class:`SecretKey` and the
        intermediate buffer is zeroed. Rejected parameters (for example an N
        that is not a power of two) raise DerivationError.
        """
        if self.n <= 0 or self.r <= 0 or self.p <= 0:
            raise DerivationError(f"scrypt parameters must be positive: {self!r}")

        try:
            kdf = Scrypt(salt=bytes(salt), length=KEY_LEN, n=self.n, r=self.r, p=self.p)
            raw = bytearray(kdf.derive(_password_bytes(password)))
        except (ValueError, TypeError, OverflowError, MemoryError, UnsupportedAlgorithm) as exc:
            raise DerivationError(f"scrypt rejected parameters N={self.n} R={self.r} P={self.p}") from exc

        try:
            if len(raw) != KEY_LEN:
                raise DerivationError("derived key has wrong length")
            return SecretKey(raw)
        finally:
            wipe(raw)

    # ------------------------------------------------------------------
    # Password envelopes
    # ------------------------------------------------------------------

    def encrypt(self, password: Password, data: bytes) -> bytes:
        """Encrypt ``data`` under a key derived from ``password`` and a fresh salt."""
        salt = generate_salt(self.rng)
        start = time.perf_counter()
        with self.derive(salt, password) as key:
            logger.debug("derived envelope key (%s) in %.0fms", self, (time.perf_counter() - start) * 1000)
            return salt + secretbox.encrypt(key, data, rng=self.rng)

    def decrypt(self, password: Password, data: bytes) -> bytes:
        """Decrypt a ``salt || envelope`` blob produced by :meth:`encrypt`."""
        minimum = SALT_LEN + secretbox.OVERHEAD
        if len(data) < minimum:
            raise TooShort(f"Password envelope too short: {len(data)} < {minimum} bytes")

        salt, envelope = data[:SALT_LEN], data[SALT_LEN:]
        with self.derive(salt, password) as key:
            return secretbox.decrypt(key, envelope)


# Presets, all R=8 P=1. Timings measured on a desktop i7.
# 32MB RAM, well under a second.
REALTIME = ScryptConfig(n=1 << 15, r=8, p=1)
# 128MB RAM, about a second.
LOW = ScryptConfig(n=1 << 17, r=8, p=1)
# 256MB RAM, less than 5 seconds.
MID = ScryptConfig(n=1 << 18, r=8, p=1)
# 512MB RAM, less than 5 seconds.
HIGH = ScryptConfig(n=1 << 19, r=8, p=1)
# 1GB RAM, about 5 seconds.
PARANOID = ScryptConfig(n=1 << 20, r=8, p=1)

PRESETS: Dict[str, ScryptConfig] = {
    "realtime": REALTIME,
    "low": LOW,
    "mid": MID,
    "high": HIGH,
    "paranoid": PARANOID,
}
