"""
Sr25519 (Schnorrkel) Signatures and VRF

Schnorr signatures and a verifiable random function over the ristretto255
group, with every challenge derived from a Merlin transcript.

Group operations go through libsodium's ristretto255 functions (rbcl);
scalar arithmetic is done on Python ints modulo the group order.

Encodings:
- Secret key: 32-byte canonical scalar || 32-byte signing nonce seed
- Public key: 32-byte compressed ristretto point
- Signature:  R (32) || s (32), with the high bit of s set
- VRF proof:  c (32) || s (32)
"""

import hashlib
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Tuple

import rbcl

from .rng import ChaCha20Rng
from .transcript import Transcript

# Order of the ristretto255 group.
GROUP_ORDER = 2**252 + 27742317777372353535851937790883648493

MINI_SECRET_KEY_LENGTH = 32
SECRET_KEY_LENGTH = 64
PUBLIC_KEY_LENGTH = 32
SIGNATURE_LENGTH = 64
VRF_PROOF_LENGTH = 64
VRF_OUTPUT_LENGTH = 32

Entropy = Callable[[int], bytes]


class InvalidSecretKey(ValueError):
    """Bytes that do not decode into a Schnorrkel secret key."""


def _scalar_to_bytes(scalar: int) -> bytes:
    return (scalar % GROUP_ORDER).to_bytes(32, "little")


def _scalar_from_wide(data: bytes) -> int:
    return int.from_bytes(data, "little") % GROUP_ORDER


def _mul_base(scalar: int) -> bytes:
    return rbcl.crypto_scalarmult_ristretto255_base(_scalar_to_bytes(scalar))


def _mul(scalar: int, point: bytes) -> bytes:
    return rbcl.crypto_scalarmult_ristretto255(_scalar_to_bytes(scalar), point)


def _challenge_scalar(transcript: Transcript, label: bytes) -> int:
    return _scalar_from_wide(transcript.challenge_bytes(label, 64))


def _witness_scalar(
    transcript: Transcript,
    label: bytes,
    nonce_seeds: Iterable[bytes],
    entropy: Optional[Entropy] = None,
) -> int:
    builder = transcript.build_rng()
    for seed in nonce_seeds:
        builder = builder.rekey_with_witness_bytes(label, seed)
    return _scalar_from_wide(builder.finalize(entropy).fill_bytes(64))


class SigningContext:
    """Domain-separation context; every message is signed under one."""

    def __init__(self, context: bytes):
        self._transcript = Transcript(b"SigningContext")
        self._transcript.append_message(b"", context)

    def bytes(self, message: bytes) -> Transcript:
        transcript = self._transcript.clone()
        transcript.append_message(b"sign-bytes", message)
        return transcript


def signing_context(context: bytes) -> SigningContext:
    return SigningContext(context)


class SecretKey:
    """A Schnorrkel secret key: scalar plus nonce seed."""

    def __init__(self, key: int, nonce: bytes):
        self._key = key % GROUP_ORDER
        self._nonce = bytes(nonce)

    @classmethod
    def from_bytes(cls, data: bytes) -> "SecretKey":
        """
        Decode 64 bytes of secret key material.

        Raises InvalidSecretKey if the length is wrong or the scalar half is
        not canonical.
        """
        if len(data) != SECRET_KEY_LENGTH:
            raise InvalidSecretKey(
                f"secret key must be {SECRET_KEY_LENGTH} bytes, got {len(data)}"
            )
        key = int.from_bytes(data[:32], "little")
        if key >= GROUP_ORDER:
            raise InvalidSecretKey("secret scalar is not canonical")
        if key == 0:
            raise InvalidSecretKey("secret scalar is zero")
        return cls(key, data[32:])

    @classmethod
    def from_mini_secret(cls, mini_secret: bytes) -> "SecretKey":
        """
        Expand a 32-byte mini secret key the way Ed25519 expands its seeds.

        This is the expansion Substrate uses for seeds and dev accounts.
        """
        if len(mini_secret) != MINI_SECRET_KEY_LENGTH:
            raise InvalidSecretKey(
                f"mini secret key must be {MINI_SECRET_KEY_LENGTH} bytes, got {len(mini_secret)}"
            )
        digest = hashlib.sha512(bytes(mini_secret)).digest()
        key = bytearray(digest[:32])
        key[0] &= 248
        key[31] &= 63
        key[31] |= 64
        # Divide the clamped scalar by the cofactor.
        return cls(int.from_bytes(key, "little") >> 3, digest[32:])

    @classmethod
    def generate_with(cls, rng: ChaCha20Rng) -> "SecretKey":
        key = _scalar_from_wide(rng.fill_bytes(64))
        nonce = rng.fill_bytes(32)
        return cls(key, nonce)

    def to_keypair(self) -> "Keypair":
        return Keypair(self, _mul_base(self._key))

    def __repr__(self) -> str:
        return "SecretKey(<redacted>)"


@dataclass(frozen=True)
class VrfInOut:
    """VRF input point and the corresponding pre-output (input * secret)."""
    input: bytes
    output: bytes

    def make_bytes(self, context: bytes, length: int = VRF_OUTPUT_LENGTH) -> bytes:
        """Derive pseudorandom bytes from the VRF input/output pair."""
        transcript = Transcript(b"VRFResult")
        transcript.append_message(b"", context)
        transcript.append_message(b"vrf-in", self.input)
        transcript.append_message(b"vrf-out", self.output)
        return transcript.challenge_bytes(b"", length)


@dataclass(frozen=True)
class VrfProof:
    """Non-interactive DLEQ proof that the output matches the public key."""
    c: int
    s: int

    def to_bytes(self) -> bytes:
        return _scalar_to_bytes(self.c) + _scalar_to_bytes(self.s)

    @classmethod
    def from_bytes(cls, data: bytes) -> "VrfProof":
        if len(data) != VRF_PROOF_LENGTH:
            raise ValueError(f"VRF proof must be {VRF_PROOF_LENGTH} bytes, got {len(data)}")
        c = int.from_bytes(data[:32], "little")
        s = int.from_bytes(data[32:], "little")
        if c >= GROUP_ORDER or s >= GROUP_ORDER:
            raise ValueError("VRF proof scalars are not canonical")
        return cls(c, s)


def _vrf_hash(public: bytes, transcript: Transcript) -> bytes:
    transcript.append_message(b"vrf-nm-pk", public)
    return rbcl.crypto_core_ristretto255_from_hash(
        transcript.challenge_bytes(b"VRFHash", 64)
    )


class Keypair:
    """A secret key together with its public key."""

    def __init__(self, secret: SecretKey, public: bytes):
        self._secret = secret
        self.public = public

    @classmethod
    def generate_with(cls, rng: ChaCha20Rng) -> "Keypair":
        return SecretKey.generate_with(rng).to_keypair()

    def sign(self, transcript: Transcript, entropy: Optional[Entropy] = None) -> bytes:
        """
        Sign the given transcript.

        The witness scalar mixes the nonce seed with fresh entropy, so two
        signatures over the same message differ.
        """
        transcript.append_message(b"proto-name", b"Schnorr-sig")
        transcript.append_message(b"sign:pk", self.public)

        r = _witness_scalar(transcript, b"signing", [self._secret._nonce], entropy)
        big_r = _mul_base(r)
        transcript.append_message(b"sign:R", big_r)

        k = _challenge_scalar(transcript, b"sign:c")
        s = bytearray(_scalar_to_bytes(k * self._secret._key + r))
        s[31] |= 0x80
        return big_r + bytes(s)

    def sign_simple(self, context: bytes, message: bytes, entropy: Optional[Entropy] = None) -> bytes:
        return self.sign(signing_context(context).bytes(message), entropy)

    def vrf_create_hash(self, transcript: Transcript) -> VrfInOut:
        input_point = _vrf_hash(self.public, transcript)
        return VrfInOut(input=input_point, output=_mul(self._secret._key, input_point))

    def vrf_sign(
        self,
        transcript: Transcript,
        extra: Optional[Transcript] = None,
        entropy: Optional[Entropy] = None,
    ) -> Tuple[VrfInOut, VrfProof]:
        """
        Evaluate the VRF on `transcript` and prove the result.

        `extra` carries additional data bound into the proof only.
        """
        inout = self.vrf_create_hash(transcript)
        proof = self._dleq_prove(extra if extra is not None else Transcript(b"VRF"), inout, entropy)
        return inout, proof

    def _dleq_prove(self, transcript: Transcript, inout: VrfInOut, entropy: Optional[Entropy]) -> VrfProof:
        transcript.append_message(b"proto-name", b"DLEQProof")
        transcript.append_message(b"vrf:h", inout.input)

        r = _witness_scalar(transcript, b"proving\x00", [self._secret._nonce], entropy)
        transcript.append_message(b"vrf:R=g^r", _mul_base(r))
        transcript.append_message(b"vrf:h^r", _mul(r, inout.input))

        transcript.append_message(b"vrf:pk", self.public)
        transcript.append_message(b"vrf:h^sk", inout.output)

        c = _challenge_scalar(transcript, b"prove")
        s = (r - c * self._secret._key) % GROUP_ORDER
        return VrfProof(c=c, s=s)

    def __repr__(self) -> str:
        return f"Keypair(public={self.public.hex()})"


def _is_valid_point(point: bytes) -> bool:
    return len(point) == 32 and rbcl.crypto_core_ristretto255_is_valid_point(bytes(point))


def verify(public: bytes, transcript: Transcript, signature: bytes) -> bool:
    """Check a signature over a transcript."""
    public = bytes(public)
    if len(signature) != SIGNATURE_LENGTH or not _is_valid_point(public):
        return False
    if not signature[63] & 0x80:
        return False

    big_r = bytes(signature[:32])
    s_bytes = bytearray(signature[32:])
    s_bytes[31] &= 0x7F
    s = int.from_bytes(s_bytes, "little")
    if s >= GROUP_ORDER or not _is_valid_point(big_r):
        return False

    transcript.append_message(b"proto-name", b"Schnorr-sig")
    transcript.append_message(b"sign:pk", public)
    transcript.append_message(b"sign:R", big_r)
    k = _challenge_scalar(transcript, b"sign:c")

    try:
        # R == s*B - k*A
        expected = rbcl.crypto_core_ristretto255_sub(_mul_base(s), _mul(k, public))
    except (RuntimeError, ValueError, TypeError):
        return False
    return expected == big_r


def verify_simple(public: bytes, context: bytes, message: bytes, signature: bytes) -> bool:
    return verify(public, signing_context(context).bytes(message), signature)


def vrf_verify(
    public: bytes,
    transcript: Transcript,
    output: bytes,
    proof: bytes,
    extra: Optional[Transcript] = None,
) -> bool:
    """Check that `output` is the VRF pre-output of `transcript` under `public`."""
    public, output = bytes(public), bytes(output)
    if not _is_valid_point(public) or not _is_valid_point(output):
        return False
    try:
        parsed = VrfProof.from_bytes(proof)
    except ValueError:
        return False

    input_point = _vrf_hash(public, transcript)

    t = extra if extra is not None else Transcript(b"VRF")
    t.append_message(b"proto-name", b"DLEQProof")
    t.append_message(b"vrf:h", input_point)

    try:
        # R = c*A + s*B, Hr = c*output + s*input
        big_r = rbcl.crypto_core_ristretto255_add(_mul(parsed.c, public), _mul_base(parsed.s))
        h_r = rbcl.crypto_core_ristretto255_add(_mul(parsed.c, output), _mul(parsed.s, input_point))
    except (RuntimeError, ValueError, TypeError):
        return False

    t.append_message(b"vrf:R=g^r", big_r)
    t.append_message(b"vrf:h^r", h_r)
    t.append_message(b"vrf:pk", public)
    t.append_message(b"vrf:h^sk", output)

    return _challenge_scalar(t, b"prove") == parsed.c
