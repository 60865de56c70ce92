"""
STROBE-128 duplex construction

Minimal STROBE v1.0.2 (128-bit security level) as used by Merlin
transcripts: only the AD, meta-AD, PRF and KEY operations are supported.
"""

import struct

STROBE_R = 166

FLAG_I = 1
FLAG_A = 1 << 1
FLAG_C = 1 << 2
FLAG_T = 1 << 3
FLAG_M = 1 << 4
FLAG_K = 1 << 5

_MASK64 = (1 << 64) - 1

_ROUND_CONSTANTS = (
    0x0000000000000001, 0x0000000000008082, 0x800000000000808A, 0x8000000080008000,
    0x000000000000808B, 0x0000000080000001, 0x8000000080008081, 0x8000000000008009,
    0x000000000000008A, 0x0000000000000088, 0x0000000080008009, 0x000000008000000A,
    0x000000008000808B, 0x800000000000008B, 0x8000000000008089, 0x8000000000008003,
    0x8000000000008002, 0x8000000000000080, 0x000000000000800A, 0x800000008000000A,
    0x8000000080008081, 0x8000000000008080, 0x0000000080000001, 0x8000000080008008,
)

# Rotation offset of lane (x, y), indexed by x + 5 * y.
_ROTATIONS = (
    0, 1, 62, 28, 27,
    36, 44, 6, 55, 20,
    3, 10, 43, 25, 39,
    41, 45, 15, 21, 8,
    18, 2, 61, 56, 14,
)


def _rotl64(value: int, shift: int) -> int:
    return ((value << shift) | (value >> (64 - shift))) & _MASK64


def keccak_f1600(state: bytearray) -> None:
    """Apply the Keccak-f[1600] permutation to a 200-byte state in place."""
    lanes = list(struct.unpack("<25Q", state))

    for rc in _ROUND_CONSTANTS:
        # theta
        c = [lanes[x] ^ lanes[x + 5] ^ lanes[x + 10] ^ lanes[x + 15] ^ lanes[x + 20] for x in range(5)]
        d = [c[(x - 1) % 5] ^ _rotl64(c[(x + 1) % 5], 1) for x in range(5)]
        lanes = [lanes[i] ^ d[i % 5] for i in range(25)]

        # rho and pi
        b = [0] * 25
        for x in range(5):
            for y in range(5):
                b[y + 5 * ((2 * x + 3 * y) % 5)] = _rotl64(lanes[x + 5 * y], _ROTATIONS[x + 5 * y])

        # chi
        lanes = [
            b[i] ^ (~b[(i + 1) % 5 + 5 * (i // 5)] & b[(i + 2) % 5 + 5 * (i // 5)])
            for i in range(25)
        ]

        # iota
        lanes[0] ^= rc

    state[:] = struct.pack("<25Q", *lanes)


class Strobe128:
    """STROBE-128 state. Not thread-safe; callers clone before forking."""

    def __init__(self, protocol_label: bytes):
        state = bytearray(200)
        state[0:6] = bytes([1, STROBE_R + 2, 1, 0, 1, 96])
        state[6:18] = b"STROBEv1.0.2"
        keccak_f1600(state)

        self._state = state
        self._pos = 0
        self._pos_begin = 0
        self._cur_flags = 0

        self.meta_ad(protocol_label, False)

    def clone(self) -> "Strobe128":
        other = Strobe128.__new__(Strobe128)
        other._state = bytearray(self._state)
        other._pos = self._pos
        other._pos_begin = self._pos_begin
        other._cur_flags = self._cur_flags
        return other

    def meta_ad(self, data: bytes, more: bool) -> None:
        self._begin_op(FLAG_M | FLAG_A, more)
        self._absorb(data)

    def ad(self, data: bytes, more: bool) -> None:
        self._begin_op(FLAG_A, more)
        self._absorb(data)

    def prf(self, length: int, more: bool) -> bytes:
        self._begin_op(FLAG_I | FLAG_A | FLAG_C, more)
        return self._squeeze(length)

    def key(self, data: bytes, more: bool) -> None:
        self._begin_op(FLAG_A | FLAG_C, more)
        self._overwrite(data)

    def _run_f(self) -> None:
        self._state[self._pos] ^= self._pos_begin
        self._state[self._pos + 1] ^= 0x04
        self._state[STROBE_R + 1] ^= 0x80
        keccak_f1600(self._state)
        self._pos = 0
        self._pos_begin = 0

    def _absorb(self, data: bytes) -> None:
        for byte in data:
            self._state[self._pos] ^= byte
            self._pos += 1
            if self._pos == STROBE_R:
                self._run_f()

    def _overwrite(self, data: bytes) -> None:
        for byte in data:
            self._state[self._pos] = byte
            self._pos += 1
            if self._pos == STROBE_R:
                self._run_f()

    def _squeeze(self, length: int) -> bytes:
        out = bytearray(length)
        for i in range(length):
            out[i] = self._state[self._pos]
            self._state[self._pos] = 0
            self._pos += 1
            if self._pos == STROBE_R:
                self._run_f()
        return bytes(out)

    def _begin_op(self, flags: int, more: bool) -> None:
        if more:
            if self._cur_flags != flags:
                raise RuntimeError(
                    f"continued op with changed flags: {self._cur_flags:#x} -> {flags:#x}"
                )
            return

        if flags & FLAG_T:
            raise RuntimeError("transport operations are not supported")

        old_begin = self._pos_begin
        self._pos_begin = self._pos + 1
        self._cur_flags = flags

        self._absorb(bytes([old_begin, flags]))

        # Cipher and key operations start on a fresh block.
        force_f = (flags & (FLAG_C | FLAG_K)) != 0
        if force_f and self._pos != 0:
            self._run_f()
