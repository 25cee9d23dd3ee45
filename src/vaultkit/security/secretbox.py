"""Nonce-prefixed authenticated encryption over a raw 32-byte key.

Envelope layout::

    nonce (24 bytes) || ciphertext || Poly1305 tag (16 bytes)

The cipher is XSalsa20-Poly1305 from PyNaCl's :class:`nacl.secret.SecretBox`.
Nonces are random per call and travel in cleartext.
"""
from __future__ import annotations

from typing import Optional, Union

from nacl.exceptions import CryptoError
from nacl.secret import SecretBox

from vaultkit.core.exceptions import AuthenticationFailed, TooShort
from .entropy import NONCE_LEN, RandomSource, generate_nonce
from .secretmem import SecretKey

KEY_LEN = SecretBox.KEY_SIZE
MAC_LEN = SecretBox.MACBYTES
OVERHEAD = NONCE_LEN + MAC_LEN

KeyLike = Union[SecretKey, bytes, bytearray]


def _key_bytes(key: KeyLike) -> bytes:
    raw = bytes(key)
    if len(raw) != KEY_LEN:
        raise ValueError(f"Key must be {KEY_LEN} bytes, got {len(raw)}")
    return raw


def encrypt(key: KeyLike, data: bytes, rng: Optional[RandomSource] = None) -> bytes:
    """
    Seal ``data`` under ``key`` and return ``nonce || ciphertext``.

    Raises RandomnessError if no nonce can be drawn.
    """
    nonce = generate_nonce(rng)
    box = SecretBox(_key_bytes(key))
    return bytes(box.encrypt(bytes(data), nonce))


def decrypt(key: KeyLike, data: bytes) -> bytes:
    """
    Open an envelope produced by :func:`encrypt`.

    A tampered envelope, a wrong key and a corrupted nonce all raise
    AuthenticationFailed; nothing is returned on failure.
    """
    if len(data) < OVERHEAD:
        raise TooShort(f"Envelope too short: {len(data)} < {OVERHEAD} bytes")

    nonce, ct = bytes(data[:NONCE_LEN]), bytes(data[NONCE_LEN:])
    box = SecretBox(_key_bytes(key))
    try:
        return box.decrypt(ct, nonce)
    except CryptoError as exc:
        raise AuthenticationFailed("decryption failed") from exc
