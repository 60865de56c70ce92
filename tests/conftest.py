"""
Pytest Configuration and Fixtures
"""

import hashlib
import os
import sys
import pytest

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(__file__)), 'src'))

from identity import Keystore  # noqa: E402


# Canonical scalar (top byte below the group order's 0x10) followed by a nonce seed.
KNOWN_SR25519_PRIVATE_KEY = bytes([0x11] * 31 + [0x01]) + bytes(range(32))

# Substrate development account //Alice: mini secret seed and sr25519 public key.
ALICE_SEED = bytes.fromhex("e5be9a5092b81bca64be81d212e7f2f9eba183bb7a90954f7b76361f6edb5c0a")
ALICE_PUBLIC_KEY = bytes.fromhex("d43593c715fdd31c61141abd04a99fd6822c8558854ccde39a5684e7a56da27d")


@pytest.fixture
def seed():
    """Fixed 32-byte keystore seed."""
    return bytes(range(32))


@pytest.fixture
def keystore(seed):
    """Fresh keystore built from the fixed seed."""
    return Keystore(seed)


@pytest.fixture
def known_private_key():
    """A well-formed, publicly known Sr25519 private key."""
    return KNOWN_SR25519_PRIVATE_KEY


@pytest.fixture
def clean_env():
    """Remove KEYSTORE_SEED for the duration of a test."""
    previous = os.environ.pop("KEYSTORE_SEED", None)
    yield
    if previous is not None:
        os.environ["KEYSTORE_SEED"] = previous


@pytest.fixture
def alice_private_key():
    """//Alice expanded into the 64-byte secret key layout (scalar || nonce)."""
    digest = hashlib.sha512(ALICE_SEED).digest()
    key = bytearray(digest[:32])
    key[0] &= 248
    key[31] &= 63
    key[31] |= 64
    scalar = int.from_bytes(key, "little") >> 3
    return scalar.to_bytes(32, "little") + digest[32:]


@pytest.fixture
def alice_seed():
    """//Alice mini secret seed."""
    return ALICE_SEED


@pytest.fixture
def alice_public_key():
    """//Alice sr25519 public key as published by the Substrate tooling."""
    return ALICE_PUBLIC_KEY
