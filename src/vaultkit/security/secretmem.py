"""Scrubbed buffers for key material.

A :class:`SecretKey` owns a private ``bytearray`` that is overwritten with
zeros when the key is wiped, when a ``with`` block using it exits, or when the
object is garbage collected::

    with config.derive(salt, password) as key:
        box = secretbox.encrypt(key, data)

Python cannot guarantee that no other copy of the bytes exists (the libraries
consuming the key take immutable ``bytes``), so this bounds the lifetime of
the copies we own.
"""
from __future__ import annotations

import hmac
from typing import Union


def wipe(buf: bytearray) -> None:
    """Overwrite a mutable buffer with zeros in place."""
    buf[:] = bytes(len(buf))


class SecretKey:
    __slots__ = ("_buf",)

    def __init__(self, data: Union[bytes, bytearray, memoryview]):
        self._buf = bytearray(data)

    def __enter__(self) -> "SecretKey":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    def __del__(self):
        buf = getattr(self, "_buf", None)
        if buf is not None:
            wipe(buf)

    def __len__(self) -> int:
        return len(self._buf)

    def __bytes__(self) -> bytes:
        return bytes(self._buf)

    def __eq__(self, other) -> bool:
        if isinstance(other, SecretKey):
            other = other._buf
        if not isinstance(other, (bytes, bytearray)):
            return NotImplemented
        return hmac.compare_digest(bytes(self._buf), bytes(other))

    __hash__ = None

    def __repr__(self) -> str:
        return f"SecretKey(<{len(self._buf)} bytes>)"

    @property
    def wiped(self) -> bool:
        return not any(self._buf)

    def wipe(self) -> None:
        wipe(self._buf)
