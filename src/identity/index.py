"""
Keyed Key Index

Maps (namespace, public key) to a private key entry. Public keys can be
chosen by an attacker, so bucket placement uses a BLAKE2b hash keyed with
secret bytes instead of the interpreter's hash.
"""

import hashlib
from typing import Dict, Generic, List, Optional, Tuple, TypeVar

from .namespace import KeyNamespace

HASH_KEY_LENGTH = 16
PUBLIC_KEY_LENGTH = 32

V = TypeVar("V")


class _IndexKey:
    __slots__ = ("namespace", "public_key", "_hash")

    def __init__(self, namespace: KeyNamespace, public_key: bytes, hash_key: bytes):
        self.namespace = namespace
        self.public_key = public_key
        digest = hashlib.blake2b(
            namespace.key_type_id + public_key,
            digest_size=8,
            key=hash_key,
        ).digest()
        self._hash = int.from_bytes(digest, "little", signed=True)

    def __hash__(self) -> int:
        return self._hash

    def __eq__(self, other) -> bool:
        if not isinstance(other, _IndexKey):
            return NotImplemented
        return self.namespace is other.namespace and self.public_key == other.public_key


class KeyIndex(Generic[V]):
    """Dictionary keyed by (namespace, public key) with a secret hash key."""

    def __init__(self, hash_key: bytes, capacity: int = 32):
        if len(hash_key) != HASH_KEY_LENGTH:
            raise ValueError(f"hash key must be {HASH_KEY_LENGTH} bytes")
        self._hash_key = bytes(hash_key)
        # Python dicts cannot be pre-sized; kept as a hint only.
        self.capacity = capacity
        self._entries: Dict[_IndexKey, V] = {}

    def _key(self, namespace: KeyNamespace, public_key: bytes) -> _IndexKey:
        if not isinstance(namespace, KeyNamespace):
            raise TypeError(f"expected KeyNamespace, got {type(namespace).__name__}")
        if len(public_key) != PUBLIC_KEY_LENGTH:
            raise ValueError(f"public key must be {PUBLIC_KEY_LENGTH} bytes, got {len(public_key)}")
        return _IndexKey(namespace, bytes(public_key), self._hash_key)

    def insert(self, namespace: KeyNamespace, public_key: bytes, entry: V) -> None:
        self._entries[self._key(namespace, public_key)] = entry

    def get(self, namespace: KeyNamespace, public_key: bytes) -> Optional[V]:
        return self._entries.get(self._key(namespace, public_key))

    def keys(self) -> List[Tuple[KeyNamespace, bytes]]:
        return [(k.namespace, k.public_key) for k in self._entries]

    def __contains__(self, item: Tuple[KeyNamespace, bytes]) -> bool:
        namespace, public_key = item
        return self._key(namespace, public_key) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"KeyIndex(entries={len(self._entries)})"
