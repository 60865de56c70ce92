"""
Keystore Errors

Recoverable lookup and dispatch failures derive from KeystoreError and are
returned to the caller as-is. InvalidKeyMaterial is a programmer error and
is kept outside that hierarchy so a handler for signing failures never
swallows it.
"""


class KeystoreError(Exception):
    """Base class for recoverable keystore errors."""


class SignError(KeystoreError):
    """Signing a payload failed."""


class SignVrfError(KeystoreError):
    """Producing a VRF signature failed."""


class UnknownPublicKey(SignError, SignVrfError):
    """No key is registered for the requested (namespace, public key) pair."""

    def __init__(self, namespace, public_key: bytes):
        self.namespace = namespace
        self.public_key = bytes(public_key)
        super().__init__(f"Unknown public key {self.public_key.hex()} in namespace {namespace.name}")


class WrongKeyAlgorithm(SignVrfError):
    """The key exists but its algorithm cannot perform the requested operation."""

    def __init__(self, algorithm: str, operation: str):
        self.algorithm = algorithm
        self.operation = operation
        super().__init__(f"{algorithm} keys do not support {operation}")


class InvalidKeyMaterial(RuntimeError):
    """
    Hard-coded private key bytes failed to decode.

    Raised only by the setup-time insertion path, which must never see
    untrusted input.
    """
