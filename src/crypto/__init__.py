"""
Cryptographic Primitives for the Keystore

Supports:
- Ed25519 - Classical signatures (cryptography library)
- Sr25519 - Schnorrkel signatures and VRF over ristretto255 (libsodium via rbcl)
- Merlin transcripts over STROBE-128
- ChaCha20 PRNG for deterministic key generation
"""

from .ed25519 import Ed25519SigningKey
from .rng import ChaCha20Rng
from .sr25519 import Keypair, SecretKey, VrfInOut, VrfProof, signing_context
from .transcript import Transcript

__all__ = [
    "Ed25519SigningKey",
    "ChaCha20Rng",
    "Keypair",
    "SecretKey",
    "VrfInOut",
    "VrfProof",
    "signing_context",
    "Transcript",
]
