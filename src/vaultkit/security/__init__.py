"""Security helpers: password envelopes, secretbox envelopes and signing for VaultKit.

This package provides:
- scrypt cost configs and salt-prefixed password envelopes
- nonce-prefixed XSalsa20-Poly1305 envelopes over raw keys
- self-signed OpenPGP identities with detached signatures
"""

from .entropy import RandomSource, generate_salt, generate_nonce, SALT_LEN, NONCE_LEN
from .secretmem import SecretKey
from .secretbox import encrypt, decrypt, KEY_LEN, OVERHEAD
from .scrypt import (
    ScryptConfig,
    REALTIME,
    LOW,
    MID,
    HIGH,
    PARANOID,
    PRESETS,
)
from .signing import Identity, PublicKey, PGPPolicy, PGP_POLICY

__all__ = [
    "RandomSource",
    "generate_salt",
    "generate_nonce",
    "SALT_LEN",
    "NONCE_LEN",
    "SecretKey",
    "encrypt",
    "decrypt",
    "KEY_LEN",
    "OVERHEAD",
    "ScryptConfig",
    "REALTIME",
    "LOW",
    "MID",
    "HIGH",
    "PARANOID",
    "PRESETS",
    "Identity",
    "PublicKey",
    "PGPPolicy",
    "PGP_POLICY",
]
