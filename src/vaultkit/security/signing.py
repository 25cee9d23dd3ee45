"""Self-signed OpenPGP identities and verify-only public keys.

An :class:`Identity` owns one RSA key pair and exactly one self-certified user
id. It signs byte streams with armored detached signatures; a
:class:`PublicKey` exported from it verifies them without private material.

The OpenPGP packet and armor handling is delegated to ``pgpy``. The only
format discriminator checked here is the armor block type
(``PUBLIC KEY BLOCK``, ``SIGNATURE``, ``MESSAGE``).
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import BinaryIO, FrozenSet, Optional, Union

import pgpy
from pgpy.constants import (
    CompressionAlgorithm,
    HashAlgorithm,
    KeyFlags,
    PubKeyAlgorithm,
    PacketTag,
    SymmetricKeyAlgorithm,
)
from pgpy.errors import PGPError
from pgpy.packet.types import Opaque, Packet, Primary, Sub
from pgpy.types import Armorable

from vaultkit.core.exceptions import (
    DecryptionFailed,
    EncryptionFailed,
    MalformedIdentity,
    MalformedMessage,
    MalformedPublicKey,
    MalformedSignature,
    MultipleIdentitiesUnsupported,
    SigningError,
    VerificationFailed,
)

logger = logging.getLogger(__name__)

PUBLIC_KEY_TYPE = "PUBLIC KEY BLOCK"
SIGNATURE_TYPE = "SIGNATURE"
MESSAGE_TYPE = "MESSAGE"

Stream = Union[BinaryIO, bytes, bytearray]


@dataclass(frozen=True)
class PGPPolicy:
    key_algorithm: PubKeyAlgorithm = PubKeyAlgorithm.RSAEncryptOrSign
    key_size: int = 4096
    hash: HashAlgorithm = HashAlgorithm.SHA256
    cipher: SymmetricKeyAlgorithm = SymmetricKeyAlgorithm.AES256
    compression: CompressionAlgorithm = CompressionAlgorithm.ZIP
    usage: FrozenSet[KeyFlags] = field(
        default_factory=lambda: frozenset(
            {KeyFlags.Sign, KeyFlags.Certify, KeyFlags.EncryptCommunications, KeyFlags.EncryptStorage}
        )
    )


PGP_POLICY = PGPPolicy()


def _read_stream(stream: Stream) -> bytes:
    if isinstance(stream, (bytes, bytearray, memoryview)):
        return bytes(stream)
    return stream.read()


def _unarmor(data: Union[bytes, str], expected: str, error: type) -> dict:
    """Decode armor and check its declared block type."""
    try:
        unarmored = Armorable.ascii_unarmor(data)
    except (ValueError, TypeError, PGPError) as exc:
        raise error("invalid armor") from exc
    if unarmored["magic"] != expected:
        raise error(f"Expected block type {expected!r}, got {unarmored['magic']!r}")
    return unarmored


def decode_signature(signature: Union[bytes, str]) -> pgpy.PGPSignature:
    """Parse an armored detached signature holding exactly one signature packet."""
    body = _unarmor(signature, SIGNATURE_TYPE, MalformedSignature)["body"]
    try:
        pkt = Packet(body)
    except Exception as exc:
        raise MalformedSignature("Invalid signature packet") from exc
    if pkt.header.tag != PacketTag.Signature or isinstance(pkt, Opaque):
        raise MalformedSignature(f"Expected a signature packet, got {pkt.__class__.__name__}")
    # Packet() consumes what it parsed; anything left is a second packet
    if body:
        raise MalformedSignature("Expected exactly one signature packet")
    return pgpy.PGPSignature() | pkt


def _count_primary_keys(data: Union[bytes, str], error: type) -> int:
    """
    Count the primary key packets in an armored (or binary) key ring.

    Packets are walked one by one rather than through ``PGPKey.from_blob``,
    which folds repeated copies of the same key into one entry.
    """
    try:
        body = Armorable.ascii_unarmor(data)["body"]
    except (ValueError, TypeError, PGPError) as exc:
        raise error("invalid armor") from exc

    count = 0
    while body:
        remaining = len(body)
        try:
            pkt = Packet(body)
        except Exception as exc:
            raise error("Invalid key material") from exc
        if len(body) >= remaining:
            raise error("Invalid key material")
        if isinstance(pkt, Primary) and not isinstance(pkt, Sub):
            count += 1
    return count


def _load_key(data: Union[bytes, str], error: type) -> pgpy.PGPKey:
    """Parse a key ring already known to hold a single primary key."""
    try:
        key, _ = pgpy.PGPKey.from_blob(data)
    except Exception as exc:
        raise error("Invalid key material") from exc
    if not key.is_primary:
        raise error("Key ring does not start with a primary key")
    return key


def _verify(key: pgpy.PGPKey, stream: Stream, signature: Union[bytes, str]) -> None:
    sig = decode_signature(signature)
    data = _read_stream(stream)
    try:
        verified = key.verify(data, sig)
    except PGPError as exc:
        raise VerificationFailed(str(exc)) from exc
    if not verified:
        raise VerificationFailed("signature does not match")


def _encrypt(key: pgpy.PGPKey, stream: Stream, policy: PGPPolicy) -> bytes:
    message = pgpy.PGPMessage.new(_read_stream(stream), compression=policy.compression)
    try:
        encrypted = key.encrypt(message, cipher=policy.cipher)
    except PGPError as exc:
        raise EncryptionFailed(str(exc)) from exc
    return str(encrypted).encode("ascii")


def _public_half(key: pgpy.PGPKey) -> pgpy.PGPKey:
    # pgpy only builds a public sibling for private keys
    return key if key.is_public else key.pubkey


def _user_id(key: pgpy.PGPKey) -> Optional[str]:
    for uid in key.userids:
        parts = [uid.name]
        if uid.comment:
            parts.append(f"({uid.comment})")
        if uid.email:
            parts.append(f"<{uid.email}>")
        return " ".join(parts)
    return None


class Identity:
    """
    One key pair plus one self-signed ``name (comment) <email>`` user id.

    Use :meth:`create` to generate a new identity or :meth:`load` to read an
    exported private key. Key generation is deliberately expensive.
    """

    def __init__(self, key: pgpy.PGPKey, policy: PGPPolicy = PGP_POLICY):
        self._key = key
        self.policy = policy

    @classmethod
    def create(cls, name: str, comment: str, email: str, policy: PGPPolicy = PGP_POLICY) -> "Identity":
        start = time.perf_counter()
        try:
            key = pgpy.PGPKey.new(policy.key_algorithm, policy.key_size)
            uid = pgpy.PGPUID.new(name, comment=comment, email=email)
            # add_uid self-signs the user id (positive certification)
            key.add_uid(
                uid,
                usage=set(policy.usage),
                hashes=[policy.hash],
                ciphers=[policy.cipher],
                compression=[policy.compression],
                primary=True,
            )
        except (PGPError, ValueError, TypeError) as exc:
            raise SigningError(f"could not create identity: {exc}") from exc
        logger.debug(
            "generated %d-bit identity %s in %.0fms",
            policy.key_size, key.fingerprint, (time.perf_counter() - start) * 1000,
        )
        return cls(key, policy)

    @classmethod
    def load(cls, data: Union[bytes, str], policy: PGPPolicy = PGP_POLICY) -> "Identity":
        """Load an identity from an armored (or binary) private key ring."""
        count = _count_primary_keys(data, MalformedIdentity)
        if count != 1:
            raise MultipleIdentitiesUnsupported(
                f"only key rings with a single identity are supported (found {count})"
            )
        key = _load_key(data, MalformedIdentity)
        logger.debug("loaded identity %s", key.fingerprint)
        return cls(key, policy)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def pgp(self) -> pgpy.PGPKey:
        return self._key

    @property
    def fingerprint(self) -> str:
        return str(self._key.fingerprint)

    @property
    def user_id(self) -> Optional[str]:
        return _user_id(self._key)

    def public_key(self) -> "PublicKey":
        return PublicKey(_public_half(self._key), self.policy)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def serialize_private(self) -> bytes:
        if self._key.is_public:
            raise SigningError("identity holds no private key material")
        return str(self._key).encode("ascii")

    def serialize_public(self) -> bytes:
        return str(_public_half(self._key)).encode("ascii")

    # ------------------------------------------------------------------
    # Signatures
    # ------------------------------------------------------------------

    def sign(self, stream: Stream) -> bytes:
        """Return an armored detached signature over the whole stream."""
        if self._key.is_public:
            raise SigningError("identity holds no private key material")
        data = _read_stream(stream)
        try:
            sig = self._key.sign(data, hash=self.policy.hash)
        except PGPError as exc:
            raise SigningError(f"signing failed: {exc}") from exc
        return str(sig).encode("ascii")

    def verify(self, stream: Stream, signature: Union[bytes, str]) -> None:
        _verify(_public_half(self._key), stream, signature)

    # ------------------------------------------------------------------
    # Encryption
    # ------------------------------------------------------------------

    def encrypt(self, stream: Stream) -> bytes:
        """Encrypt the stream to this identity; only :meth:`decrypt` can open it."""
        return _encrypt(_public_half(self._key), stream, self.policy)

    def decrypt(self, data: Union[bytes, str]) -> bytes:
        _unarmor(data, MESSAGE_TYPE, MalformedMessage)
        try:
            message = pgpy.PGPMessage.from_blob(data)
        except Exception as exc:
            raise MalformedMessage("Invalid message") from exc
        if not message.is_encrypted:
            raise MalformedMessage("message is not encrypted")
        if self._key.is_public:
            raise DecryptionFailed("identity holds no private key material")
        try:
            plain = self._key.decrypt(message)
        except (PGPError, ValueError) as exc:
            raise DecryptionFailed(str(exc)) from exc
        contents = plain.message
        if isinstance(contents, str):
            return contents.encode("utf-8")
        return bytes(contents)


class PublicKey:
    """Verify-only counterpart of an :class:`Identity`."""

    def __init__(self, key: pgpy.PGPKey, policy: PGPPolicy = PGP_POLICY):
        self._key = key
        self.policy = policy

    @classmethod
    def load(cls, data: Union[bytes, str], policy: PGPPolicy = PGP_POLICY) -> "PublicKey":
        _unarmor(data, PUBLIC_KEY_TYPE, MalformedPublicKey)
        count = _count_primary_keys(data, MalformedPublicKey)
        if count != 1:
            raise MalformedPublicKey(f"Expected exactly one public key, found {count}")
        key = _load_key(data, MalformedPublicKey)
        if not key.is_public:
            raise MalformedPublicKey("Invalid public key")
        return cls(key, policy)

    @property
    def fingerprint(self) -> str:
        return str(self._key.fingerprint)

    @property
    def user_id(self) -> Optional[str]:
        return _user_id(self._key)

    def serialize(self) -> bytes:
        return str(self._key).encode("ascii")

    def verify(self, stream: Stream, signature: Union[bytes, str]) -> None:
        _verify(self._key, stream, signature)

    def encrypt(self, stream: Stream) -> bytes:
        return _encrypt(self._key, stream, self.policy)
