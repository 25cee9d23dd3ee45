"""Shared fixtures; RSA key generation is slow so identities are built once."""

import pytest

from vaultkit.security.signing import Identity


@pytest.fixture(scope="session")
def identity():
    return Identity.create("name", "comment", "name@example.org")


@pytest.fixture(scope="session")
def other_identity():
    return Identity.create("other", "second key", "other@example.org")
