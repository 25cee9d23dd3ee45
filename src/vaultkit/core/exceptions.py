"""
Exceptions for VaultKit
Every failure in the security package derives from VaultKitError so callers
have a single general error catcher
"""


class VaultKitError(Exception):
    # general container for errors
    pass


class RandomnessError(VaultKitError):
    # raised when the entropy source cannot supply the requested bytes
    pass


class MalformedInputError(VaultKitError, ValueError):
    # raised on wrong length or wrong declared type of caller input
    pass


class MalformedConfig(MalformedInputError):
    # raised when an encoded scrypt config is not 24 bytes (or unknown preset)
    pass


class MalformedPublicKey(MalformedInputError):
    # raised when a block is not a single public key
    pass


class MalformedSignature(MalformedInputError):
    # raised when a block is not a single signature packet
    pass


class MalformedIdentity(MalformedInputError):
    # raised when a key ring cannot be parsed at all
    pass


class MalformedMessage(MalformedInputError):
    # raised when an encrypted message block cannot be parsed
    pass


class TooShort(VaultKitError):
    # raised when an envelope is shorter than its minimum structural length
    pass


class AuthenticationFailed(VaultKitError):
    # raised on tamper, wrong key or wrong password (not distinguished)
    pass


class DerivationError(VaultKitError):
    # raised when scrypt rejects its parameters or returns a bad key
    pass


class MultipleIdentitiesUnsupported(VaultKitError):
    # raised when a key ring holds zero or more than one entity
    pass


class SigningError(VaultKitError):
    # raised when key generation or signing fails in the pgp library
    pass


class VerificationFailed(VaultKitError):
    # raised when a signature does not match the stream or key
    pass


class DecryptionFailed(VaultKitError):
    # raised when a pgp message cannot be decrypted with the identity
    pass


class EncryptionFailed(VaultKitError):
    # raised when a pgp message cannot be encrypted to a key
    pass
