"""
Unit tests for scrubbed key buffers.
"""

from vaultkit.security.secretmem import SecretKey, wipe


def test_wipe_zeroes_buffer():
    """wipe() overwrites every byte in place."""
    buf = bytearray(b"secret")
    wipe(buf)
    assert buf == bytearray(6)


def test_context_manager_wipes_on_exit():
    """Leaving the with block overwrites the key with zeros."""
    key = SecretKey(b"\xaa" * 32)
    with key as k:
        assert bytes(k) == b"\xaa" * 32
        assert not k.wiped
    assert key.wiped
    assert bytes(key) == bytes(32)
    assert len(key) == 32


def test_context_manager_wipes_on_error():
    """The key is wiped even when the block raises."""
    key = SecretKey(b"\x01" * 32)
    try:
        with key:
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    assert key.wiped


def test_key_copies_input():
    """The key owns its own copy; wiping it leaves the source untouched."""
    source = bytearray(b"\x05" * 32)
    key = SecretKey(source)
    key.wipe()
    assert source == bytearray(b"\x05" * 32)


def test_equality_and_repr():
    """Keys compare by content and never show it in repr."""
    key = SecretKey(b"\x02" * 32)
    assert key == b"\x02" * 32
    assert key == SecretKey(b"\x02" * 32)
    assert key != b"\x03" * 32
    assert "\\x02" not in repr(key)
    assert "32 bytes" in repr(key)
