"""
Identity - in-memory keystore for consensus keys

Keys are grouped by namespace and only ever used through signing
operations; private key material never leaves the keystore.
"""

from .errors import (
    InvalidKeyMaterial,
    KeystoreError,
    SignError,
    SignVrfError,
    UnknownPublicKey,
    WrongKeyAlgorithm,
)
from .keystore import KeyAlgorithm, Keystore, SR25519_SIGNING_CONTEXT, VrfSignature
from .namespace import KeyNamespace

__all__ = [
    "InvalidKeyMaterial",
    "KeystoreError",
    "SignError",
    "SignVrfError",
    "UnknownPublicKey",
    "WrongKeyAlgorithm",
    "KeyAlgorithm",
    "Keystore",
    "SR25519_SIGNING_CONTEXT",
    "VrfSignature",
    "KeyNamespace",
]
