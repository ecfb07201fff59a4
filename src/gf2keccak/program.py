import random
from typing import Sequence

from Crypto.Hash import keccak

from .types import Args
from .circuit import Circuit, Bin
from .keccak import PREIMAGE_LEN, OUTPUT_LEN, keccak256, assert_digest, to_bits


NHASHES = 8  # independent hash instances in one circuit
CHECK_BITS = OUTPUT_LEN * 8  # digest bits asserted against the public expected value


def build(circuit: Circuit, n_hashes: int = NHASHES) -> list[Bin]:
    # Build n_hashes independent Keccak-256 instances. Instance k reads its preimage from the private
    # parameters P[k][0..511] and its expected digest from the public parameters Out[k][0..255], the
    # computed digests are returned for inspection.
    if n_hashes < 1:
        raise ValueError("at least one hash instance is required")
    oLst = []
    for k in range(n_hashes):
        pBin = circuit.PARAMS("P[{}]".format(k), PREIMAGE_LEN * 8)
        eBin = circuit.PARAMS("Out[{}]".format(k), CHECK_BITS, public=True)
        oBin = keccak256(circuit, pBin)
        assert_digest(circuit, oBin[:CHECK_BITS], eBin, msg="digest mismatch in instance {}".format(k))
        oLst.append(oBin)
    return oLst


def count_instances(stmts: dict[int, str]) -> int:
    # the number of hash instances in a circuit built by build, read back from its public entry names
    return sum(1 for name in stmts.values() if name.startswith("Out[") and name.endswith("][0]"))


def reference(message: bytes) -> bytes:
    # the reference Keccak-256 (original Keccak padding, as used by Ethereum)
    return keccak.new(digest_bits=256, data=message).digest()


def random_messages(n: int, seed: int | None = None) -> list[bytes]:
    rng = random.Random(seed)
    return [rng.randbytes(PREIMAGE_LEN) for _ in range(n)]


def assign(messages: Sequence[bytes], digests: Sequence[bytes] | None = None) -> Args:
    # Turn the preimages and their expected digests into the named arguments of the circuit built by
    # build, the expected digests default to the reference Keccak-256 of the preimages.
    if digests is not None and len(digests) != len(messages):
        raise ValueError("got {} messages but {} digests".format(len(messages), len(digests)))
    args: Args = {}
    for k, message in enumerate(messages):
        if len(message) != PREIMAGE_LEN:
            raise ValueError("unsupported preimage length: {} bytes, only {} bytes are supported".format(len(message), PREIMAGE_LEN))
        digest = reference(message) if digests is None else digests[k]
        if len(digest) * 8 < CHECK_BITS:
            raise ValueError("expected digest of instance {} is too short".format(k))
        for i, pBit in enumerate(to_bits(message)):
            args["P[{}][{}]".format(k, i)] = pBit
        for j, eBit in enumerate(to_bits(digest)[:CHECK_BITS]):
            args["Out[{}][{}]".format(k, j)] = eBit
    return args
