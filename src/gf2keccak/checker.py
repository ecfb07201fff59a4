import multiprocessing
from dataclasses import dataclass
from typing import Iterable

from .types import ρ, Fld, Gate, Witness


THREADS = None  # automatically set to the number of CPU cores


@dataclass
class Result:
    passed: bool
    failures: list[str]  # messages of the constraints the witness violates
    values: list[tuple[str, Fld]]  # the public entries of the witness


def check_length(wire_count: int, witness: Witness) -> None:
    if len(witness.vec) != wire_count:
        raise ValueError("witness has {} entries, circuit expects {}".format(len(witness.vec), wire_count))


def check(
    wire_count: int,
    stmts: dict[int, str],
    gates: list[Gate],
    witness: Witness,
) -> Result:
    # Evaluate every constraint x * y = z under the witness. A violated constraint is reported in the
    # result rather than raised, since this is how a wrong preimage or digest is rejected, but a witness
    # built for another circuit is an error.
    check_length(wire_count, witness)
    failures = []
    for aM, bM, cM, msg in gates:
        aw = witness.apply(aM)
        bw = witness.apply(bM)
        cw = witness.apply(cM)
        if aw * bw % ρ != cw:
            failures.append(msg)
    return Result(
        passed=not failures,
        failures=failures,
        values=[(name, witness.vec[m]) for m, name in stmts.items()],
    )


# checking of many witnesses against the same constraints, spread over worker processes


_wire_count: int = 0
_stmts: dict[int, str] = {}
_gates: list[Gate] = []


def initializer(wire_count: int, stmts: dict[int, str], gates: list[Gate]) -> None:
    global _wire_count, _stmts, _gates
    _wire_count = wire_count
    _stmts = stmts
    _gates = gates


def worker(vec: list[Fld]) -> Result:
    return check(_wire_count, _stmts, _gates, Witness.loads(vec))


def check_many(
    wire_count: int,
    stmts: dict[int, str],
    gates: list[Gate],
    witnesses: Iterable[Witness],
) -> list[Result]:
    # The results are in the same order as the witnesses, and each of them is exactly what check would
    # return for that witness alone. The lengths are checked before any worker starts.
    witnesses = list(witnesses)
    for witness in witnesses:
        check_length(wire_count, witness)
    with multiprocessing.Pool(THREADS, initializer, (wire_count, dict(stmts), gates)) as pool:
        return pool.map(worker, [witness.vec for witness in witnesses])
