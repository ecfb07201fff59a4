from typing import Iterable

from .types import Fld
from .circuit import GateAPI, Bit, Bin


# Keccak-256 parameters, all lengths in bytes unless noted otherwise

LANE = 64  # bits per lane
ROUNDS = 24
RATE = 136  # 1088 bits, 17 lanes
OUTPUT_LEN = 32
PREIMAGE_LEN = 64


State = list[Bin]


ROUND_CONSTANTS = (
    0x0000000000000001, 0x0000000000008082, 0x800000000000808A, 0x8000000080008000,
    0x000000000000808B, 0x0000000080000001, 0x8000000080008081, 0x8000000000008009,
    0x000000000000008A, 0x0000000000000088, 0x0000000080008009, 0x000000008000000A,
    0x000000008000808B, 0x800000000000008B, 0x8000000000008089, 0x8000000000008003,
    0x8000000000008002, 0x8000000000000080, 0x000000000000800A, 0x800000008000000A,
    0x8000000080008081, 0x8000000000008080, 0x0000000080000001, 0x8000000080008008,
)

# RC_BITS[r][j] is bit j (least significant first) of the r-th round constant
RC_BITS = tuple(tuple(rc >> j & 0x01 for j in range(LANE)) for rc in ROUND_CONSTANTS)

# ROTATION_OFFSETS[x][y] is the rho offset of lane (x, y)
ROTATION_OFFSETS = (
    (0, 36, 3, 41, 18),
    (1, 44, 10, 45, 2),
    (62, 6, 43, 15, 61),
    (28, 55, 25, 21, 56),
    (27, 20, 39, 8, 14),
)

# (source, destination, offset) of every lane under rho and pi, lane (x, y) lives at index 5x + y and is
# moved to B[y, 2x + 3y]
RHO_PI = tuple((5 * x + y, 5 * y + (2 * x + 3 * y) % 5, ROTATION_OFFSETS[x][y]) for x in range(5) for y in range(5))


# conversion between bytes and bit lists, bits are always least significant first within each byte


def to_bits(data: bytes) -> list[Fld]:
    return [byte >> j & 0x01 for byte in data for j in range(8)]


def from_bits(xBin: Iterable[Bit]) -> bytes:
    # Only constant bits can be packed, for example, the result of keccak256 over a constant preimage.
    xBin = list(xBin)
    if len(xBin) % 8:
        raise ValueError("bit length {} is not a whole number of bytes".format(len(xBin)))
    if not all(isinstance(xBit, Fld) for xBit in xBin):
        raise TypeError("only constant bits can be converted to bytes")
    return bytes(sum((xBin[i + j] & 0x01) << j for j in range(8)) for i in range(0, len(xBin), 8))


# gate primitives on bit sequences, each element costs at most one gate


def bitxor(api: GateAPI, xBin: Bin, yBin: Bin) -> Bin:
    if len(xBin) != len(yBin):
        raise ValueError("mismatched bit lengths {} and {}".format(len(xBin), len(yBin)))
    return [api.ADD(xBit, yBit) for xBit, yBit in zip(xBin, yBin)]


def bitand(api: GateAPI, xBin: Bin, yBin: Bin) -> Bin:
    if len(xBin) != len(yBin):
        raise ValueError("mismatched bit lengths {} and {}".format(len(xBin), len(yBin)))
    return [api.MUL(xBit, yBit) for xBit, yBit in zip(xBin, yBin)]


def bitnot(api: GateAPI, xBin: Bin) -> Bin:
    return [api.SUB(0x01, xBit) for xBit in xBin]


def rotate_left(xBin: Bin, rLen: int) -> Bin:
    # rotate_left(x, k)[i] = x[(i - k) mod 64], this only reorders references to existing bits and never
    # produces a gate.
    if len(xBin) != LANE:
        raise ValueError("expected a lane of {} bits, got {}".format(LANE, len(xBin)))
    rLen = LANE - (rLen & (LANE - 1))
    return xBin[rLen:] + xBin[:rLen]


# sponge construction


def zero_state() -> State:
    return [[0x00] * LANE for _ in range(25)]


def check_state(state: State) -> None:
    if len(state) != 25 or any(len(lane) != LANE for lane in state):
        raise ValueError("a state must consist of 25 lanes of {} bits".format(LANE))


def pad(pBin: Bin) -> State:
    # Apply the pad10*1 rule to a 512-bit preimage: the 72 padding bytes start with 0x01 and end with
    # 0x80, giving exactly one 1088-bit block, which is returned as 17 lanes.
    if len(pBin) != PREIMAGE_LEN * 8:
        raise ValueError("unsupported preimage length: {} bits, only {} bits are supported".format(len(pBin), PREIMAGE_LEN * 8))
    padding = bytearray(RATE - PREIMAGE_LEN)
    padding[0] |= 0x01
    padding[-1] |= 0x80
    mBin = list(pBin) + to_bits(padding)
    return [mBin[i * LANE : (i + 1) * LANE] for i in range(RATE * 8 // LANE)]


def absorb(api: GateAPI, state: State, block: State) -> State:
    # XOR the block into the rate lanes, the state is indexed by 5x + y while the block is indexed by
    # x + 5y, lanes outside the block are left as they are.
    check_state(state)
    state = list(state)
    for y in range(5):
        for x in range(5):
            if x + 5 * y < len(block):
                state[5 * x + y] = bitxor(api, state[5 * x + y], block[x + 5 * y])
    return state


def squeeze(state: State, rate: int = RATE, output_len: int = OUTPUT_LEN) -> Bin:
    # Read output_len bytes from the rate lanes, walking y in the outer loop and x in the inner loop. Only
    # whole lanes of a single squeeze are supported.
    check_state(state)
    if rate % (LANE // 8) or not 0 < rate < 25 * LANE // 8:
        raise ValueError("unsupported rate: {} bytes".format(rate))
    if output_len % (LANE // 8) or not 0 < output_len <= rate:
        raise ValueError("unsupported output length: {} bytes".format(output_len))
    oBin: Bin = []
    b = 0
    for y in range(5):
        for x in range(5):
            if x + 5 * y < rate // (LANE // 8) and b < output_len:
                oBin.extend(state[5 * x + y])
                b += LANE // 8
    return oBin


# the Keccak-f[1600] round steps, each of them returns a new state


def theta(api: GateAPI, a: State) -> State:
    # The column parity leaves out row 0, which is added back by da[x] instead. The result is the same as
    # theta_canonical, at the price of 4800 rather than 3200 additions per round.
    c = [bitxor(api, bitxor(api, a[5 * x + 1], a[5 * x + 2]), bitxor(api, a[5 * x + 3], a[5 * x + 4])) for x in range(5)]
    d = [bitxor(api, c[(x + 4) % 5], rotate_left(c[(x + 1) % 5], 1)) for x in range(5)]
    da = [bitxor(api, a[(x + 4) % 5 * 5], rotate_left(a[(x + 1) % 5 * 5], 1)) for x in range(5)]
    return [bitxor(api, bitxor(api, da[i // 5], a[i]), d[i // 5]) for i in range(25)]


def theta_canonical(api: GateAPI, a: State) -> State:
    c = [bitxor(api, bitxor(api, bitxor(api, a[5 * x], a[5 * x + 1]), bitxor(api, a[5 * x + 2], a[5 * x + 3])), a[5 * x + 4]) for x in range(5)]
    d = [bitxor(api, c[(x + 4) % 5], rotate_left(c[(x + 1) % 5], 1)) for x in range(5)]
    return [bitxor(api, a[i], d[i // 5]) for i in range(25)]


def rho_pi(a: State) -> State:
    b: State = [[]] * 25
    for src, dst, off in RHO_PI:
        b[dst] = rotate_left(a[src], off)
    return b


def chi(api: GateAPI, b: State) -> State:
    # the only nonlinear step, A[x, y] = B[x, y] ^ (~B[x + 1, y] & B[x + 2, y])
    return [bitxor(api, b[i], bitand(api, bitnot(api, b[(i + 5) % 25]), b[(i + 10) % 25])) for i in range(25)]


def iota(api: GateAPI, a: State, r: int) -> State:
    # The round constant is public, so its set bits flip lane 0 by subtracting from 1 and its clear bits
    # cost nothing.
    a = list(a)
    a[0] = [api.SUB(0x01, aBit) if rBit else aBit for aBit, rBit in zip(a[0], RC_BITS[r])]
    return a


def keccak_round(api: GateAPI, a: State, r: int) -> State:
    return iota(api, chi(api, rho_pi(theta(api, a))), r)


def keccak_f(api: GateAPI, a: State) -> State:
    check_state(a)
    for r in range(ROUNDS):
        a = keccak_round(api, a, r)
    return a


# Keccak-256 of a single 64-byte block


def keccak256(api: GateAPI, pBin: Bin) -> Bin:
    return squeeze(keccak_f(api, absorb(api, zero_state(), pad(pBin))))


def assert_digest(api: GateAPI, oBin: Bin, eBin: Bin, *, msg="digest mismatch") -> None:
    # A wrong expected value does not raise here, it leaves constraints that no witness can satisfy.
    if len(oBin) != len(eBin):
        raise ValueError("mismatched bit lengths {} and {}".format(len(oBin), len(eBin)))
    for j, (oBit, eBit) in enumerate(zip(oBin, eBin)):
        api.ASSERT_EQ(oBit, eBit, msg="{} at bit {}".format(msg, j))
