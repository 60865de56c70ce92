"""
In-Memory Keystore

Holds key pairs grouped by namespace. Callers get signing capabilities
only: no method returns private key material.

The PRNG and the key index live behind a single asyncio lock, since key
generation advances the former and mutates the latter in one step.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Tuple, Union

import structlog

from crypto import sr25519
from crypto.ed25519 import Ed25519SigningKey
from crypto.rng import ChaCha20Rng
from crypto.transcript import Transcript

from .errors import InvalidKeyMaterial, UnknownPublicKey, WrongKeyAlgorithm
from .index import HASH_KEY_LENGTH, KeyIndex
from .namespace import KeyNamespace

logger = structlog.get_logger()

# Signing context of every Sr25519 signature produced by `Keystore.sign`.
SR25519_SIGNING_CONTEXT = b"substrate"

INDEX_CAPACITY = 32

TranscriptValue = Union[bytes, int]
TranscriptItem = Tuple[bytes, TranscriptValue]


class KeyAlgorithm(Enum):
    """Algorithm family of a stored key."""
    ED25519 = "Ed25519"
    SR25519 = "Sr25519"


@dataclass(frozen=True)
class PrivateKey:
    """
    A key held in memory.

    `key` is an Ed25519SigningKey for ED25519 entries and an sr25519.Keypair
    for SR25519 entries.
    """
    algorithm: KeyAlgorithm
    key: Union[Ed25519SigningKey, sr25519.Keypair]

    def __repr__(self) -> str:
        return f"PrivateKey(algorithm={self.algorithm.value}, public_key={self.public_key.hex()})"

    @property
    def public_key(self) -> bytes:
        if self.algorithm == KeyAlgorithm.ED25519:
            return self.key.public_key
        return self.key.public


@dataclass(frozen=True)
class VrfSignature:
    """Result of a VRF signing operation. Only the proof is kept."""
    proof: bytes


class _Guarded:
    """State that must only be touched while holding the keystore lock."""

    def __init__(self, gen_rng: ChaCha20Rng, keys: KeyIndex):
        self.gen_rng = gen_rng
        self.keys = keys


class Keystore:
    """
    Collection of key pairs.

    This class doesn't give access to the content of private keys, only to
    signing capabilities.
    """

    def __init__(self, randomness_seed: bytes):
        """
        Initialize a new keystore.

        `randomness_seed` must be 32 bytes of secret entropy. It seeds the
        generator used both for new private keys and for keying the index
        hash, so it must not be predictable.
        """
        gen_rng = ChaCha20Rng(randomness_seed)
        keys = KeyIndex(gen_rng.fill_bytes(HASH_KEY_LENGTH), capacity=INDEX_CAPACITY)

        self._guarded = _Guarded(gen_rng, keys)
        self._lock = asyncio.Lock()

    def insert_sr25519_memory(
        self,
        namespaces: Iterable[KeyNamespace],
        private_key: bytes,
    ) -> bytes:
        """
        Insert an Sr25519 private key under each of the given namespaces.

        Returns the corresponding public key.

        Meant for publicly-known keys (test or genesis keys) during setup,
        before the keystore is shared between tasks; it does not take the
        lock. Use `generate_sr25519` for keys that must stay private.

        Raises InvalidKeyMaterial if the bytes are not a valid Sr25519
        private key. Never call this with any sort of user input.
        """
        try:
            secret = sr25519.SecretKey.from_bytes(bytes(private_key))
        except sr25519.InvalidSecretKey as e:
            logger.critical("invalid_hardcoded_key", algorithm=KeyAlgorithm.SR25519.value, error=str(e))
            raise InvalidKeyMaterial(f"Invalid Sr25519 private key: {e}") from e

        keypair = secret.to_keypair()
        public_key = keypair.public

        for namespace in namespaces:
            self._guarded.keys.insert(
                namespace,
                public_key,
                PrivateKey(KeyAlgorithm.SR25519, sr25519.Keypair(secret, public_key)),
            )
            logger.info(
                "key_inserted",
                namespace=namespace.name,
                algorithm=KeyAlgorithm.SR25519.value,
                public_key=public_key.hex(),
            )

        return public_key

    async def generate_ed25519(self, namespace: KeyNamespace) -> bytes:
        """
        Generate a new Ed25519 key and insert it in the keystore.

        Returns the corresponding public key.
        """
        async with self._lock:
            guarded = self._guarded
            private_key = Ed25519SigningKey.from_seed(guarded.gen_rng.fill_bytes(32))
            public_key = private_key.public_key
            guarded.keys.insert(namespace, public_key, PrivateKey(KeyAlgorithm.ED25519, private_key))

        logger.info(
            "key_generated",
            namespace=namespace.name,
            algorithm=KeyAlgorithm.ED25519.value,
            public_key=public_key.hex(),
        )
        return public_key

    async def generate_sr25519(self, namespace: KeyNamespace) -> bytes:
        """
        Generate a new Sr25519 key and insert it in the keystore.

        Returns the corresponding public key.
        """
        async with self._lock:
            guarded = self._guarded
            keypair = sr25519.Keypair.generate_with(guarded.gen_rng)
            public_key = keypair.public
            guarded.keys.insert(namespace, public_key, PrivateKey(KeyAlgorithm.SR25519, keypair))

        logger.info(
            "key_generated",
            namespace=namespace.name,
            algorithm=KeyAlgorithm.SR25519.value,
            public_key=public_key.hex(),
        )
        return public_key

    async def keys(self) -> List[Tuple[KeyNamespace, bytes]]:
        """
        Return the list of all keys known to this keystore.

        Keep in mind that this is racy: keys can be added in parallel, and
        the snapshot may be stale by the time it is looked at.
        """
        async with self._lock:
            return self._guarded.keys.keys()

    async def sign(self, namespace: KeyNamespace, public_key: bytes, payload: bytes) -> bytes:
        """
        Sign `payload` with the private key associated to `public_key`.

        Returns a 64-byte signature. Raises UnknownPublicKey if no such key
        is registered under `namespace`.
        """
        async with self._lock:
            key = self._guarded.keys.get(namespace, public_key)
            if key is None:
                raise UnknownPublicKey(namespace, public_key)

            if key.algorithm == KeyAlgorithm.ED25519:
                return key.key.sign(payload)
            elif key.algorithm == KeyAlgorithm.SR25519:
                return key.key.sign_simple(SR25519_SIGNING_CONTEXT, bytes(payload))
            else:
                raise ValueError(f"Unknown algorithm: {key.algorithm}")

    async def sign_vrf(
        self,
        namespace: KeyNamespace,
        public_key: bytes,
        label: bytes,
        transcript_items: Iterable[TranscriptItem],
    ) -> VrfSignature:
        """
        Produce a VRF signature over a transcript.

        The transcript starts from `label`, then each `(field_label, value)`
        item is appended in the order given: bytes values as messages,
        integers as little-endian u64. Only Sr25519 keys support this.

        Raises UnknownPublicKey if no such key is registered under
        `namespace`, and WrongKeyAlgorithm for Ed25519 keys.
        """
        async with self._lock:
            key = self._guarded.keys.get(namespace, public_key)
            if key is None:
                raise UnknownPublicKey(namespace, public_key)

            if key.algorithm == KeyAlgorithm.ED25519:
                raise WrongKeyAlgorithm(key.algorithm.value, "VRF signing")
            elif key.algorithm == KeyAlgorithm.SR25519:
                transcript = _build_transcript(label, transcript_items)
                # TODO: return the VRF pre-output alongside the proof once
                # consumers need it.
                _in_out, proof = key.key.vrf_sign(transcript)
                return VrfSignature(proof=proof.to_bytes())
            else:
                raise ValueError(f"Unknown algorithm: {key.algorithm}")

    def __repr__(self) -> str:
        return f"Keystore(keys={len(self._guarded.keys)})"


def _build_transcript(label: bytes, items: Iterable[TranscriptItem]) -> Transcript:
    transcript = Transcript(label)
    for field_label, value in items:
        if isinstance(value, (bytes, bytearray, memoryview)):
            transcript.append_message(field_label, bytes(value))
        elif isinstance(value, int) and not isinstance(value, bool):
            transcript.append_u64(field_label, value)
        else:
            raise TypeError(
                f"transcript value for {field_label!r} must be bytes or int, got {type(value).__name__}"
            )
    return transcript
