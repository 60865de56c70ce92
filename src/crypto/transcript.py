"""
Merlin Transcripts

A transcript is an ordered, labeled record of the public inputs to a proof.
Challenges are derived from everything appended so far, so the order and
labels of appended values are part of what gets signed.

Compatible with Merlin v1.0.
"""

import secrets
import struct
from typing import Callable, Optional

from .strobe import Strobe128

MERLIN_PROTOCOL_LABEL = b"Merlin v1.0"


def _encode_len(length: int) -> bytes:
    if length >= 1 << 32:
        raise ValueError("transcript values are limited to 2**32 - 1 bytes")
    return struct.pack("<I", length)


class Transcript:
    """A Merlin transcript."""

    def __init__(self, label: bytes):
        self._strobe = Strobe128(MERLIN_PROTOCOL_LABEL)
        self.append_message(b"dom-sep", label)

    def append_message(self, label: bytes, message: bytes) -> None:
        self._strobe.meta_ad(label, False)
        self._strobe.meta_ad(_encode_len(len(message)), True)
        self._strobe.ad(bytes(message), False)

    def append_u64(self, label: bytes, value: int) -> None:
        """Append a 64-bit unsigned integer, encoded little-endian."""
        if not 0 <= value < 1 << 64:
            raise ValueError(f"value out of u64 range: {value}")
        self.append_message(label, struct.pack("<Q", value))

    def challenge_bytes(self, label: bytes, length: int) -> bytes:
        self._strobe.meta_ad(label, False)
        self._strobe.meta_ad(_encode_len(length), True)
        return self._strobe.prf(length, False)

    def clone(self) -> "Transcript":
        other = Transcript.__new__(Transcript)
        other._strobe = self._strobe.clone()
        return other

    def build_rng(self) -> "TranscriptRngBuilder":
        """
        Start building an RNG bound to the current transcript state.

        The transcript itself is not modified.
        """
        return TranscriptRngBuilder(self._strobe.clone())


class TranscriptRngBuilder:
    """Rekeys a forked transcript with secret witness data."""

    def __init__(self, strobe: Strobe128):
        self._strobe = strobe

    def rekey_with_witness_bytes(self, label: bytes, witness: bytes) -> "TranscriptRngBuilder":
        self._strobe.meta_ad(label, False)
        self._strobe.meta_ad(_encode_len(len(witness)), True)
        self._strobe.key(bytes(witness), False)
        return self

    def finalize(self, entropy: Optional[Callable[[int], bytes]] = None) -> "TranscriptRng":
        """
        Mix in 32 bytes from `entropy` (defaults to the OS CSPRNG) and
        return the RNG.
        """
        source = entropy or secrets.token_bytes
        random_bytes = source(32)
        self._strobe.meta_ad(b"rng", False)
        self._strobe.key(random_bytes, False)
        return TranscriptRng(self._strobe)


class TranscriptRng:
    def __init__(self, strobe: Strobe128):
        self._strobe = strobe

    def fill_bytes(self, length: int) -> bytes:
        self._strobe.meta_ad(_encode_len(length), False)
        return self._strobe.prf(length, False)
