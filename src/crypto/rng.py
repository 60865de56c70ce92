"""
Deterministic ChaCha20 PRNG

The keystore derives all of its randomness (index hash key, fresh private
keys) from a single generator seeded once at construction.
"""

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms

SEED_LENGTH = 32


class ChaCha20Rng:
    """
    Cryptographically secure generator over the ChaCha20 keystream.

    The seed is used as the cipher key with an all-zero nonce, so the same
    seed always produces the same stream. Bytes handed out are never handed
    out again.
    """

    def __init__(self, seed: bytes):
        if len(seed) != SEED_LENGTH:
            raise ValueError(f"PRNG seed must be {SEED_LENGTH} bytes, got {len(seed)}")

        cipher = Cipher(algorithms.ChaCha20(bytes(seed), b"\x00" * 16), mode=None)
        self._stream = cipher.encryptor()
        self._consumed = 0

    @property
    def consumed(self) -> int:
        """Number of keystream bytes drawn so far."""
        return self._consumed

    def fill_bytes(self, length: int) -> bytes:
        if length < 0:
            raise ValueError("length must be non-negative")
        self._consumed += length
        return self._stream.update(b"\x00" * length)

    def __repr__(self) -> str:
        return f"ChaCha20Rng(consumed={self._consumed})"
