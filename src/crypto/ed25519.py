"""
Ed25519 Signing Keys

Thin wrapper over the cryptography library. The private key object is kept
inside the wrapper; only the public key and signatures leave it.
"""

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519

SEED_LENGTH = 32
PUBLIC_KEY_LENGTH = 32
SIGNATURE_LENGTH = 64


class Ed25519SigningKey:
    """An Ed25519 private key, built from a 32-byte seed."""

    def __init__(self, private_key: ed25519.Ed25519PrivateKey):
        self._private_key = private_key
        self._public_key = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )

    @classmethod
    def from_seed(cls, seed: bytes) -> "Ed25519SigningKey":
        if len(seed) != SEED_LENGTH:
            raise ValueError(f"Ed25519 seed must be {SEED_LENGTH} bytes, got {len(seed)}")
        return cls(ed25519.Ed25519PrivateKey.from_private_bytes(bytes(seed)))

    @property
    def public_key(self) -> bytes:
        return self._public_key

    def sign(self, data: bytes) -> bytes:
        # Ed25519 signatures are deterministic for a given key and message.
        return self._private_key.sign(bytes(data))

    def __repr__(self) -> str:
        return f"Ed25519SigningKey(public_key={self._public_key.hex()})"


def verify(public_key: bytes, data: bytes, signature: bytes) -> bool:
    """Check an Ed25519 signature. Malformed keys or signatures verify as False."""
    try:
        ed25519.Ed25519PublicKey.from_public_bytes(bytes(public_key)).verify(
            bytes(signature), bytes(data)
        )
        return True
    except (InvalidSignature, ValueError):
        return False
