"""
Unit tests for nonce-prefixed secretbox envelopes.
"""

import os
import pytest
from vaultkit.core.exceptions import AuthenticationFailed, RandomnessError, TooShort
from vaultkit.security import secretbox
from vaultkit.security.entropy import RandomSource, NONCE_LEN
from vaultkit.security.secretmem import SecretKey


TEST_SECRET = bytes([
    170, 122, 87, 46, 32, 152, 236, 67, 199, 193, 53, 73, 208, 63, 68, 64,
    15, 95, 106, 70, 171, 226, 53, 86, 80, 97, 73, 75, 22, 187, 253, 114,
])


# ==============================================================================
# Tests: Round Trip
# ==============================================================================

def test_encrypt_decrypt_roundtrip():
    """Random 256-byte message under a random key comes back unchanged."""
    key = os.urandom(32)
    message = os.urandom(256)
    env = secretbox.encrypt(key, message)
    assert secretbox.decrypt(key, env) == message


def test_envelope_layout():
    """Envelope is nonce (24) + ciphertext + tag (16)."""
    msg = b"hello world"
    env = secretbox.encrypt(TEST_SECRET, msg)
    assert len(env) == NONCE_LEN + len(msg) + 16
    assert secretbox.OVERHEAD == 40


def test_empty_plaintext():
    """An empty message still carries nonce and tag."""
    env = secretbox.encrypt(TEST_SECRET, b"")
    assert len(env) == secretbox.OVERHEAD
    assert secretbox.decrypt(TEST_SECRET, env) == b""


def test_secret_key_accepted():
    """SecretKey and bytearray keys behave like raw bytes."""
    env = secretbox.encrypt(SecretKey(TEST_SECRET), b"data")
    assert secretbox.decrypt(bytearray(TEST_SECRET), env) == b"data"


def test_fresh_nonce_per_call():
    """Same key and plaintext never yield the same envelope."""
    a = secretbox.encrypt(TEST_SECRET, b"same")
    b = secretbox.encrypt(TEST_SECRET, b"same")
    assert a[:NONCE_LEN] != b[:NONCE_LEN]
    assert a != b


def test_injected_rng_supplies_nonce():
    """The nonce comes from the injected random source."""
    rng = RandomSource(lambda size: b"\x09" * size)
    env = secretbox.encrypt(TEST_SECRET, b"data", rng=rng)
    assert env[:NONCE_LEN] == b"\x09" * NONCE_LEN


# ==============================================================================
# Tests: Failure Paths
# ==============================================================================

def test_decrypt_too_short():
    """Anything shorter than nonce + tag is rejected before opening."""
    with pytest.raises(TooShort):
        secretbox.decrypt(TEST_SECRET, b"\x00" * 39)


def test_decrypt_wrong_key():
    """Opening under another key fails authentication."""
    env = secretbox.encrypt(TEST_SECRET, b"data")
    with pytest.raises(AuthenticationFailed):
        secretbox.decrypt(b"\x01" * 32, env)


def test_every_bit_flip_detected():
    """Flipping any bit in the nonce, ciphertext or tag breaks authentication."""
    env = secretbox.encrypt(TEST_SECRET, b"attack at dawn")
    for i in range(len(env)):
        for bit in range(8):
            tampered = bytearray(env)
            tampered[i] ^= 1 << bit
            with pytest.raises(AuthenticationFailed):
                secretbox.decrypt(TEST_SECRET, bytes(tampered))


def test_truncated_envelope_fails():
    """Dropping the last tag byte fails authentication."""
    env = secretbox.encrypt(TEST_SECRET, b"attack at dawn")
    with pytest.raises(AuthenticationFailed):
        secretbox.decrypt(TEST_SECRET, env[:-1])


def test_wrong_key_length():
    """Keys must be exactly 32 bytes."""
    with pytest.raises(ValueError, match="Key must be 32 bytes"):
        secretbox.encrypt(b"short", b"data")


def test_nonce_failure_propagates():
    """No envelope is produced when the nonce cannot be drawn."""
    rng = RandomSource(lambda size: b"")
    with pytest.raises(RandomnessError):
        secretbox.encrypt(TEST_SECRET, b"data", rng=rng)
